"""Scrypt key derivation service.

Two interchangeable backends produce identical output:

- ``cryptography`` (OpenSSL-backed :class:`Scrypt`), used by default;
- ``hashlib`` (:func:`hashlib.scrypt`), used when the first is unavailable in
  the linked OpenSSL or when ``DISCRETECRYPT_FORCE_PORTABLE_KDF`` is set.

Derivation is CPU and memory bound, so the public coroutine runs it in a
worker thread.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
from enum import Enum

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from ..config import KdfConfig, portable_kdf_forced
from .errors import KdfError
from .serialization import SaltInput, nfkc_bytes, normalize_salt

logger = logging.getLogger(__name__)


class KdfBackend(Enum):
    ACCELERATED = "cryptography"
    PORTABLE = "hashlib"


def _derive_accelerated(key: bytes, salt: bytes, config: KdfConfig, length: int) -> bytes:
    kdf = Scrypt(salt=salt, length=length, n=config.n, r=config.r, p=config.p)
    return kdf.derive(key)


def _derive_portable(key: bytes, salt: bytes, config: KdfConfig, length: int) -> bytes:
    # OpenSSL refuses to run unless maxmem covers B (p*128*r) and V (128*r*(N+2)).
    maxmem = 128 * config.r * (config.n + config.p + 2) + (1 << 20)
    return hashlib.scrypt(
        key,
        salt=salt,
        n=config.n,
        r=config.r,
        p=config.p,
        maxmem=maxmem,
        dklen=length,
    )


def scrypt_sync(
    key: str | bytes,
    salt: SaltInput,
    config: KdfConfig | None = None,
    *,
    length: int | None = None,
    force_portable: bool | None = None,
) -> bytes:
    """Derive key material synchronously.

    Args:
        key: Password. ``str`` is NFKC-normalized and UTF-8 encoded.
        salt: Raw bytes or a hex string.
        config: Scrypt parameters. Defaults to :meth:`KdfConfig.default`.
        length: Output length, overriding ``config.length``.
        force_portable: Skip the accelerated backend. ``None`` defers to the
            environment configuration.

    Returns:
        ``length`` derived bytes.

    Raises:
        KdfError: If the length is not a positive integer or the backend
            rejects the parameters.
    """

    config = config or KdfConfig.default()
    length = config.length if length is None else length
    if isinstance(length, bool) or not isinstance(length, int) or length <= 0:
        raise KdfError("length is not a positive integer")

    key_bytes = nfkc_bytes(key) if isinstance(key, str) else bytes(key)
    salt_bytes = normalize_salt(salt)

    if force_portable is None:
        force_portable = portable_kdf_forced()

    if not force_portable:
        try:
            return _derive_accelerated(key_bytes, salt_bytes, config, length)
        except UnsupportedAlgorithm:
            logger.warning("accelerated scrypt unavailable, falling back to %s", KdfBackend.PORTABLE.value)
        except (TypeError, ValueError) as e:
            raise KdfError(f"scrypt rejected its parameters: {e}") from e

    logger.debug("deriving with %s backend", KdfBackend.PORTABLE.value)
    try:
        return _derive_portable(key_bytes, salt_bytes, config, length)
    except (TypeError, ValueError, MemoryError) as e:
        raise KdfError(f"scrypt rejected its parameters: {e}") from e


async def scrypt(
    key: str | bytes,
    salt: SaltInput,
    config: KdfConfig | None = None,
    *,
    length: int | None = None,
    force_portable: bool | None = None,
) -> bytes:
    """Async wrapper around :func:`scrypt_sync`; runs in a worker thread."""

    return await asyncio.to_thread(
        scrypt_sync,
        key,
        salt,
        config,
        length=length,
        force_portable=force_portable,
    )
