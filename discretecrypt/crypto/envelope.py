"""Encrypt-then-authenticate envelope construction.

A random 32-byte session key encrypts the payload with AES-256-CTR. The
HMAC-SHA256 of the plaintext under the session key is the authentication tag;
it is also the scrypt salt used to stretch the base secret into a wrapping key,
and its first 16 bytes are the CTR nonce for both encryptions. The wrapped
session key travels next to the payload.

The same construction serves Diffie-Hellman exchanges (base secret = shared
value) and password-based symmetric encryption (base secret = password).
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Mapping

from ..config import KdfConfig
from .cipher import IV_LENGTH, aes_ctr
from .errors import DecryptionError, InvalidArgumentError
from .hashes import hmac_sha256, hmac_sha256_verify
from .kdf import scrypt
from .random import random_bytes

SESSION_KEY_LENGTH = 32
WRAPPING_KEY_LENGTH = 32
TAG_LENGTH = 32

_LOWER_HEX = re.compile(r"(?:[0-9a-f]{2})*")


@dataclass(frozen=True, slots=True)
class Envelope:
    """A sealed message.

    Args:
        payload: Hex of the AES-CTR encrypted plaintext.
        key: Hex of the wrapped session key.
        hmac: Hex HMAC-SHA256 tag (64 chars).
        public: Hex public key of the sender; only set for DH exchanges.
    """

    payload: str
    key: str
    hmac: str
    public: str | None = None

    def to_dict(self) -> dict[str, str]:
        out = {"payload": self.payload, "key": self.key, "hmac": self.hmac}
        if self.public is not None:
            out["public"] = self.public
        return out

    @classmethod
    def from_dict(cls, blob: Mapping[str, Any]) -> "Envelope":
        if not isinstance(blob, Mapping):
            raise InvalidArgumentError("envelope must be a mapping")
        try:
            public = blob.get("public")
            return cls(
                payload=str(blob["payload"]),
                key=str(blob["key"]),
                hmac=str(blob["hmac"]),
                public=None if public in (None, "") else str(public),
            )
        except KeyError as e:
            raise InvalidArgumentError(f"envelope is missing field {e.args[0]!r}") from e

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_json(cls, text: str) -> "Envelope":
        return cls.from_dict(json.loads(text))

    @classmethod
    def coerce(cls, value: "Envelope | Mapping[str, Any] | str") -> "Envelope":
        """Accept an :class:`Envelope`, a mapping or a JSON string."""

        if isinstance(value, Envelope):
            return value
        if isinstance(value, str):
            return cls.from_json(value)
        return cls.from_dict(value)


def _nonce(tag: bytes) -> bytes:
    return tag[:IV_LENGTH]


def _field(text: str) -> bytes:
    # Envelope fields are always lowercase hex of whole bytes.
    if not isinstance(text, str) or not _LOWER_HEX.fullmatch(text):
        raise DecryptionError("malformed envelope")
    return bytes.fromhex(text)


async def seal(
    base_secret: bytes,
    plaintext: bytes,
    kdf_config: KdfConfig,
    *,
    public: str | None = None,
) -> Envelope:
    """Encrypt and authenticate ``plaintext`` under ``base_secret``.

    Args:
        base_secret: DH shared value bytes or password bytes.
        plaintext: Serialized message.
        kdf_config: Scrypt cost parameters; the output length is fixed to 32.
        public: Sender public key (hex) to embed.

    Returns:
        :class:`Envelope`.
    """

    session_key = random_bytes(SESSION_KEY_LENGTH)
    tag = hmac_sha256(session_key, plaintext)

    wrapping_key = await scrypt(base_secret, tag, kdf_config, length=WRAPPING_KEY_LENGTH)
    nonce = _nonce(tag)

    wrapped = aes_ctr(wrapping_key, nonce, session_key)
    payload = aes_ctr(session_key, nonce, plaintext)

    return Envelope(payload=payload.hex(), key=wrapped.hex(), hmac=tag.hex(), public=public)


async def unseal(base_secret: bytes, envelope: Envelope, kdf_config: KdfConfig) -> bytes:
    """Decrypt and authenticate an envelope produced by :func:`seal`.

    Raises:
        DecryptionError: If any field is malformed or the tag does not match.
    """

    tag = _field(envelope.hmac)
    wrapped = _field(envelope.key)
    payload = _field(envelope.payload)

    if len(tag) != TAG_LENGTH or len(wrapped) != SESSION_KEY_LENGTH:
        raise DecryptionError("malformed envelope")

    wrapping_key = await scrypt(base_secret, tag, kdf_config, length=WRAPPING_KEY_LENGTH)
    nonce = _nonce(tag)

    session_key = aes_ctr(wrapping_key, nonce, wrapped)
    plaintext = aes_ctr(session_key, nonce, payload)

    if not hmac_sha256_verify(session_key, plaintext, tag):
        raise DecryptionError("decryption failed")
    return plaintext
