"""AES-CTR stream cipher wrapper.

The key size selects the AES variant (16, 24 or 32 bytes); the IV is the full
16-byte initial counter block.
"""

from __future__ import annotations

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

IV_LENGTH = 16


def aes_ctr(key: bytes, iv: bytes, data: bytes) -> bytes:
    """Apply the AES-CTR keystream for ``(key, iv)`` to ``data``.

    CTR mode is symmetric, so this both encrypts and decrypts.
    """

    if len(key) not in (16, 24, 32):
        raise ValueError("AES key must be 16, 24 or 32 bytes")
    if len(iv) != IV_LENGTH:
        raise ValueError("AES-CTR iv must be 16 bytes")

    ctx = Cipher(algorithms.AES(key), modes.CTR(iv)).encryptor()
    return ctx.update(data) + ctx.finalize()
