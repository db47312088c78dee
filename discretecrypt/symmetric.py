"""Password-based symmetric encryption.

Uses the same envelope construction as the DH transport with the input key as
the base secret. Envelopes produced here carry no ``public`` field.
"""

from __future__ import annotations

from typing import Any, Mapping

from .config import Config, KdfConfig
from .crypto.envelope import Envelope, seal, unseal
from .crypto.errors import EmptyInputKeyError, NoInputKeyError
from .crypto.serialization import PasswordInput, decode_message, encode_message, normalize_password


def _input_key(key: PasswordInput | None) -> bytes:
    if key is None:
        raise NoInputKeyError("no input key provided")
    key_bytes = normalize_password(key)
    if not key_bytes:
        raise EmptyInputKeyError("input key empty")
    return key_bytes


def _resolve_kdf(kdf_config: KdfConfig | None) -> KdfConfig:
    return kdf_config or Config.from_environment().kdf_config()


async def encrypt(
    key: PasswordInput | None,
    message: Any,
    kdf_config: KdfConfig | None = None,
    *,
    raw: bool = False,
) -> Envelope:
    """Encrypt ``message`` under a password or raw key.

    Args:
        key: Input key. ``str`` is NFKC-normalized.
        message: JSON-serializable value, or ``bytes`` when ``raw``.
        kdf_config: Scrypt parameters; defaults to the configured preset.
        raw: Skip JSON serialization.

    Raises:
        NoInputKeyError: If ``key`` is ``None``.
        EmptyInputKeyError: If ``key`` is empty.
    """

    key_bytes = _input_key(key)
    return await seal(key_bytes, encode_message(message, raw=raw), _resolve_kdf(kdf_config))


async def decrypt(
    key: PasswordInput | None,
    envelope: Envelope | Mapping[str, Any] | str,
    kdf_config: KdfConfig | None = None,
    *,
    raw: bool = False,
) -> Any:
    """Decrypt an envelope produced by :func:`encrypt`.

    Raises:
        NoInputKeyError: If ``key`` is ``None``.
        EmptyInputKeyError: If ``key`` is empty.
        DecryptionError: If the key is wrong or the envelope was modified.
    """

    key_bytes = _input_key(key)
    plaintext = await unseal(key_bytes, Envelope.coerce(envelope), _resolve_kdf(kdf_config))
    return decode_message(plaintext, raw=raw)
