"""Schnorr-style signatures with deterministic nonces.

The nonce ``k`` is stretched out of the signed data with scrypt, keyed by the
private key, so signing never depends on fresh entropy and never reuses a
nonce across different messages. The output is longer than the private key
plus a hash so that ``k`` carries no modular bias.

``s = k - x*e`` is kept as a plain, possibly negative, integer; verification
handles the negative exponent through a modular inverse.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Mapping, Optional

from .config import SIGNATURE_KDF
from .crypto.errors import InvalidArgumentError, SignatureNotVerifiedError
from .crypto.hashes import sha256_digest
from .crypto.kdf import scrypt
from .crypto.numeric import bytes_to_int, hex_to_int, int_to_bytes, int_to_hex, mod_pow
from .crypto.serialization import encode_message

if TYPE_CHECKING:
    from .contact import Contact

HASH_LENGTH = 32


@dataclass(frozen=True, slots=True)
class Signature:
    """A signature over JSON-serializable data.

    Args:
        s: Hex of ``k - x*e``; may start with ``-``.
        e: Hex of the challenge hash.
        data: The signed value, when bundled.
    """

    s: str
    e: str
    data: Any = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"s": self.s, "e": self.e}
        if self.data is not None:
            out["data"] = self.data
        return out

    @classmethod
    def from_dict(cls, blob: Mapping[str, Any]) -> "Signature":
        s, e = blob.get("s"), blob.get("e")
        if not s or not e:
            raise SignatureNotVerifiedError("signature is missing s or e")
        return cls(s=str(s), e=str(e), data=blob.get("data"))

    @classmethod
    def coerce(cls, value: "Signature | Mapping[str, Any]") -> "Signature":
        if isinstance(value, Signature):
            return value
        return cls.from_dict(value)


def _challenge(r: int, message: bytes) -> int:
    return bytes_to_int(sha256_digest(int_to_bytes(r), message))


def nonce_length(private: int) -> int:
    """Bytes of scrypt output needed for an unbiased nonce."""

    return (private.bit_length() + 7) // 8 + HASH_LENGTH + 1


async def sign(contact: "Contact", data: Any, bundle: bool = False) -> Signature:
    """Sign ``data`` with ``contact``'s private key.

    Args:
        contact: Signer; must hold a private key.
        data: JSON-serializable value.
        bundle: Embed ``data`` in the returned signature.

    Returns:
        :class:`Signature`.

    Raises:
        MissingKeyError: If the contact has no private key.
    """

    x = contact.private_key()
    params = contact.group
    d = encode_message(data)

    k_bytes = await scrypt(d, int_to_hex(x), SIGNATURE_KDF, length=nonce_length(x))
    k = bytes_to_int(k_bytes)

    r = mod_pow(params.gen, k, params.prime)
    e = _challenge(r, d)
    s = k - x * e

    return Signature(s=int_to_hex(s), e=int_to_hex(e), data=data if bundle else None)


def verify(
    contact: "Contact",
    signed: Signature | Mapping[str, Any],
    source: Optional[Any] = None,
) -> Any:
    """Verify a signature made by ``contact``.

    Args:
        contact: Claimed signer; only the public key is needed.
        signed: Signature or its dict form.
        source: The signed data when it was not bundled; overrides
            ``signed.data``.

    Returns:
        The verified data.

    Raises:
        SignatureNotVerifiedError: If ``s``/``e`` are missing or malformed,
            or the challenge does not match.
    """

    sig = Signature.coerce(signed)
    if not sig.s or not sig.e:
        raise SignatureNotVerifiedError("signature is missing s or e")

    payload = source if source is not None else sig.data
    d = encode_message(payload)

    y = contact.public_key()
    params = contact.group
    try:
        s = hex_to_int(sig.s)
        e = hex_to_int(sig.e)
        gs = mod_pow(params.gen, s, params.prime, allow_negative=True)
        ye = mod_pow(y, e, params.prime, allow_negative=True)
    except InvalidArgumentError as ex:
        raise SignatureNotVerifiedError("malformed signature") from ex

    r = (gs * ye) % params.prime
    if _challenge(r, d) != e:
        raise SignatureNotVerifiedError("signature not verified")
    return payload
