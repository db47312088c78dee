"""Shared exceptions for :mod:`discretecrypt`.

The library raises a small set of domain-specific exceptions so callers never
have to catch backend-specific errors from :pypi:`cryptography` or
:mod:`hashlib`.
"""

from __future__ import annotations


class CryptoError(Exception):
    """Base error for cryptographic operations."""


class InvalidArgumentError(CryptoError, ValueError):
    """Raised for out-of-range or malformed inputs."""


class MissingKeyError(CryptoError):
    """Raised when a public or private key is required but absent."""


class IncorrectKeyError(CryptoError):
    """Raised when a password does not reproduce the stored public key."""


class InputKeyError(CryptoError):
    """Base error for symmetric input-key problems."""


class NoInputKeyError(InputKeyError):
    """Raised when no input key was provided."""


class EmptyInputKeyError(InputKeyError):
    """Raised when the input key is empty after normalization."""


class DecryptionError(CryptoError):
    """Raised when envelope authentication fails or decryption is impossible."""


class SignatureNotVerifiedError(CryptoError):
    """Raised when a signature is incomplete or does not match its data."""


class KdfError(CryptoError):
    """Raised when the key-derivation function rejects its inputs."""
