"""Diffie-Hellman exchange transport.

Sealed messages between two :class:`~discretecrypt.contact.Contact` objects
use the DH shared value as the base secret of the envelope construction in
:mod:`discretecrypt.crypto.envelope`. Shared values are memoized per ordered
pair of public keys in an :class:`ExchangeCache`.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping, Optional, Tuple

from .crypto.envelope import Envelope, seal, unseal
from .crypto.errors import MissingKeyError
from .crypto.numeric import hex_to_int, int_to_hex, mod_pow
from .crypto.serialization import decode_message, encode_message, hex_to_bytes

if TYPE_CHECKING:
    from .contact import Contact

logger = logging.getLogger(__name__)

CacheKey = Tuple[str, str]


class ExchangeCache:
    """Memoized DH shared values, keyed by ``(public_a, public_b)`` decimals.

    Entries are never evicted except by :meth:`clear`. Lookup-or-insert runs
    under a lock so a pair is computed at most once.
    """

    def __init__(self) -> None:
        self._entries: Dict[CacheKey, str] = {}
        self._lock = threading.Lock()

    def get(self, key: CacheKey) -> Optional[str]:
        with self._lock:
            return self._entries.get(key)

    def put_if_absent(self, key: CacheKey, value: str) -> str:
        """Store ``value`` unless ``key`` is present; return the stored value."""
        with self._lock:
            return self._entries.setdefault(key, value)

    def get_or_compute(self, key: CacheKey, compute: Callable[[], str]) -> str:
        with self._lock:
            value = self._entries.get(key)
            if value is None:
                logger.debug("exchange cache miss")
                value = compute()
                self._entries[key] = value
            return value

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries


class Transport:
    """
    Sends and opens DH-sealed envelopes.

    A transport owns its :class:`ExchangeCache`; construct one per application
    context, or use the module-level default via :func:`exchange` and
    :func:`open`.
    """

    def __init__(self, cache: Optional[ExchangeCache] = None) -> None:
        self.cache = cache if cache is not None else ExchangeCache()

    def shared_secret(self, this: "Contact", other_public: int, key: CacheKey) -> str:
        """
        Return the DH shared value ``other_public ** this.private`` as hex.

        Args:
            this: Contact holding the private key.
            other_public: Counterparty public key.
            key: Cache key; call sites pass their own ordering.

        Returns:
            Lowercase hex of the shared value.

        Raises:
            MissingKeyError: If ``this`` has no private key.
        """
        private = this.private_key()
        prime = this.group.prime
        return self.cache.get_or_compute(
            key, lambda: int_to_hex(mod_pow(other_public, private, prime))
        )

    async def exchange(
        self,
        sender: "Contact",
        receiver: "Contact",
        message: Any,
        *,
        raw: bool = False,
    ) -> Envelope:
        """
        Seal ``message`` from ``sender`` to ``receiver``.

        The receiver's KDF parameters are used and the envelope carries the
        sender's public key in hex.
        """
        sender_public = sender.public_key()
        receiver_public = receiver.public_key()
        key = (str(sender_public), str(receiver_public))

        shared = self.shared_secret(sender, receiver_public, key)
        plaintext = encode_message(message, raw=raw)
        return await seal(
            _base_secret(shared),
            plaintext,
            receiver.kdf,
            public=int_to_hex(sender_public),
        )

    async def open(
        self,
        receiver: "Contact",
        envelope: Envelope | Mapping[str, Any] | str,
        *,
        raw: bool = False,
    ) -> Any:
        """
        Open an envelope addressed to ``receiver``.

        Raises:
            MissingKeyError: If the envelope has no sender public key or the
                receiver has no private key.
            DecryptionError: If authentication fails.
        """
        envelope = Envelope.coerce(envelope)
        if envelope.public is None:
            raise MissingKeyError("envelope has no sender public key")

        sender_public = hex_to_int(envelope.public)
        key = (str(sender_public), str(receiver.public_key()))

        shared = self.shared_secret(receiver, sender_public, key)
        plaintext = await unseal(_base_secret(shared), envelope, receiver.kdf)
        return decode_message(plaintext, raw=raw)


def _base_secret(shared_hex: str) -> bytes:
    return hex_to_bytes(shared_hex)


default_transport = Transport()


async def exchange(sender: "Contact", receiver: "Contact", message: Any, *, raw: bool = False) -> Envelope:
    return await default_transport.exchange(sender, receiver, message, raw=raw)


async def open(
    receiver: "Contact",
    envelope: Envelope | Mapping[str, Any] | str,
    *,
    raw: bool = False,
) -> Any:
    return await default_transport.open(receiver, envelope, raw=raw)


def clear_cache() -> None:
    """Drop every memoized shared value in the default transport."""
    default_transport.cache.clear()
