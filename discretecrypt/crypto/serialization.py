"""Serialization helpers.

Everything that crosses the API boundary as ``str`` / ``bytes`` / ``int`` is
normalized here once, so the protocol code below only ever sees ``bytes``.
"""

from __future__ import annotations

import json
import re
import unicodedata
from typing import Any, Union

from .errors import InvalidArgumentError

PasswordInput = Union[str, bytes, bytearray, int]
SaltInput = Union[str, bytes, bytearray]

_HEX = re.compile(r"[0-9a-fA-F]*")


def hex_to_bytes(text: str) -> bytes:
    """Decode hex. A trailing odd nibble is ignored."""

    if not isinstance(text, str) or not _HEX.fullmatch(text):
        raise InvalidArgumentError(f"invalid hex string: {text!r}")
    return bytes.fromhex(text[: len(text) - len(text) % 2])


def nfkc_bytes(text: str) -> bytes:
    """NFKC-normalize ``text`` and encode it as UTF-8."""

    return unicodedata.normalize("NFKC", text).encode("utf-8")


def normalize_password(password: PasswordInput | None) -> bytes | None:
    """Resolve a password input to bytes.

    Numbers are stringified, strings are NFKC-normalized, bytes pass through.
    ``None`` stays ``None`` so callers can decide how to treat absence.
    """

    if password is None:
        return None
    if isinstance(password, bool):
        raise InvalidArgumentError("password must be str, bytes or a number")
    if isinstance(password, (int, float)):
        password = str(password)
    if isinstance(password, str):
        return nfkc_bytes(password)
    if isinstance(password, (bytes, bytearray)):
        return bytes(password)
    raise InvalidArgumentError("password must be str, bytes or a number")


def normalize_salt(salt: SaltInput) -> bytes:
    """Salts are raw bytes or hex strings."""

    if isinstance(salt, (bytes, bytearray)):
        return bytes(salt)
    if isinstance(salt, str):
        return hex_to_bytes(salt)
    raise InvalidArgumentError("salt must be bytes or a hex string")


def encode_message(message: Any, *, raw: bool = False) -> bytes:
    """Serialize an application payload.

    Args:
        message: Any JSON-serializable value, or ``bytes`` when ``raw``.
        raw: Bypass JSON and use ``message`` as-is.

    Returns:
        Canonical UTF-8 JSON (compact separators, non-ASCII kept) or the raw
        bytes.
    """

    if raw:
        if not isinstance(message, (bytes, bytearray)):
            raise InvalidArgumentError("raw messages must be bytes")
        return bytes(message)
    try:
        return json.dumps(message, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError("message is not JSON-serializable") from e


def decode_message(data: bytes, *, raw: bool = False) -> Any:
    """Inverse of :func:`encode_message`."""

    if raw:
        return data
    return json.loads(data.decode("utf-8"))
