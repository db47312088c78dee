"""Big-integer helpers.

Python's native ``int`` is the only numeric backend. Inputs arriving from
serialized records (decimal strings) are normalized once through
:func:`to_int`.
"""

from __future__ import annotations

from typing import Union

from .errors import InvalidArgumentError

IntLike = Union[int, str]


def to_int(value: IntLike) -> int:
    """Normalize an ``int`` or decimal string to ``int``."""

    if isinstance(value, bool):
        raise InvalidArgumentError("booleans are not integers")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value, 10)
        except ValueError as e:
            raise InvalidArgumentError(f"not a decimal integer: {value!r}") from e
    raise InvalidArgumentError(f"unsupported integer type: {type(value).__name__}")


def mod_inverse(value: IntLike, modulus: IntLike) -> int:
    """Return the multiplicative inverse of ``value`` modulo ``modulus``."""

    v, m = to_int(value), to_int(modulus)
    if m <= 0:
        raise InvalidArgumentError("modulus must be positive")
    try:
        return pow(v, -1, m)
    except ValueError as e:
        raise InvalidArgumentError("value is not invertible modulo modulus") from e


def mod_pow(
    base: IntLike,
    exponent: IntLike,
    modulus: IntLike,
    *,
    allow_negative: bool = False,
) -> int:
    """Compute ``base ** exponent % modulus``.

    Args:
        base: Base value.
        exponent: Exponent. Must be non-negative unless ``allow_negative``.
        modulus: Positive modulus.
        allow_negative: Accept negative exponents by inverting
            ``base ** -exponent`` modulo ``modulus``.

    Returns:
        The reduced power.

    Raises:
        InvalidArgumentError: If the modulus is not positive, the exponent is
            negative without ``allow_negative``, or the power is not
            invertible.
    """

    b, e, m = to_int(base), to_int(exponent), to_int(modulus)
    if m <= 0:
        raise InvalidArgumentError("modulus must be positive")
    if e < 0:
        if not allow_negative:
            raise InvalidArgumentError("exponent must be non-negative")
        return mod_inverse(pow(b, -e, m), m)
    return pow(b, e, m)


def int_to_bytes(value: int) -> bytes:
    """Big-endian, minimal-length encoding of a non-negative integer.

    Zero encodes as a single ``0x00`` byte.
    """

    if value < 0:
        raise InvalidArgumentError("cannot encode a negative integer as bytes")
    return value.to_bytes(max(1, (value.bit_length() + 7) // 8), "big")


def bytes_to_int(data: bytes) -> int:
    return int.from_bytes(data, "big")


def int_to_hex(value: int) -> str:
    """Lowercase, unpadded hex. Negative values carry a leading ``-``."""

    return format(value, "x")


def hex_to_int(text: str) -> int:
    try:
        return int(text, 16)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(f"not a hex integer: {text!r}") from e
