"""Digest and MAC primitives."""

from __future__ import annotations

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac


def sha256_digest(*parts: bytes) -> bytes:
    """SHA-256 over the concatenation of ``parts``."""

    h = hashes.Hash(hashes.SHA256())
    for part in parts:
        h.update(part)
    return h.finalize()


def hmac_sha256(key: bytes, data: bytes) -> bytes:
    """Compute HMAC-SHA256 of ``data`` under ``key`` (32 bytes)."""

    h = hmac.HMAC(key, hashes.SHA256())
    h.update(data)
    return h.finalize()


def hmac_sha256_verify(key: bytes, data: bytes, tag: bytes) -> bool:
    """Constant-time check of an HMAC-SHA256 tag."""

    h = hmac.HMAC(key, hashes.SHA256())
    h.update(data)
    try:
        h.verify(tag)
    except InvalidSignature:
        return False
    return True
