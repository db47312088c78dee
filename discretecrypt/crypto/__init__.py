"""Core cryptographic primitives.

Modules in this package intentionally provide *thin* wrappers around vetted
implementations from :pypi:`cryptography` plus Python's native integers.

The protocol building blocks that depend on :mod:`discretecrypt.config`
(:mod:`~discretecrypt.crypto.kdf`, :mod:`~discretecrypt.crypto.group` and
:mod:`~discretecrypt.crypto.envelope`) are imported from their own modules.
"""

from __future__ import annotations

from .cipher import aes_ctr
from .errors import (
    CryptoError,
    DecryptionError,
    EmptyInputKeyError,
    IncorrectKeyError,
    InputKeyError,
    InvalidArgumentError,
    KdfError,
    MissingKeyError,
    NoInputKeyError,
    SignatureNotVerifiedError,
)
from .hashes import hmac_sha256, hmac_sha256_verify, sha256_digest
from .numeric import (
    bytes_to_int,
    hex_to_int,
    int_to_bytes,
    int_to_hex,
    mod_inverse,
    mod_pow,
    to_int,
)
from .random import random_bytes, random_hex
from .serialization import (
    decode_message,
    encode_message,
    hex_to_bytes,
    normalize_password,
    normalize_salt,
)

__all__ = [
    "CryptoError",
    "DecryptionError",
    "EmptyInputKeyError",
    "IncorrectKeyError",
    "InputKeyError",
    "InvalidArgumentError",
    "KdfError",
    "MissingKeyError",
    "NoInputKeyError",
    "SignatureNotVerifiedError",
    "aes_ctr",
    "bytes_to_int",
    "decode_message",
    "encode_message",
    "hex_to_bytes",
    "hex_to_int",
    "hmac_sha256",
    "hmac_sha256_verify",
    "int_to_bytes",
    "int_to_hex",
    "mod_inverse",
    "mod_pow",
    "normalize_password",
    "normalize_salt",
    "random_bytes",
    "random_hex",
    "sha256_digest",
    "to_int",
]
