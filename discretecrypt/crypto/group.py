"""Pohlig-Hellman small-factor decomposition of ``prime - 1``.

The default group uses a *nearly-safe* prime: ``prime - 1`` is a product of
primes below a small bound times one large prime cofactor. Stripping the small
factors yields the order of the large subgroup and lets callers build a
generator for it.
"""

from __future__ import annotations

from functools import lru_cache

from ..config import DEFAULT_BOUND, GroupParams
from .errors import InvalidArgumentError
from .numeric import IntLike, mod_pow, to_int


@lru_cache(maxsize=32)
def _decompose(prime: int, bound: int) -> tuple[int, int]:
    n = prime - 1
    factors = 1
    for i in range(2, bound + 1):
        while n % i == 0:
            n //= i
            factors *= i
    return n, factors


def decompose(prime: IntLike, bound: int = DEFAULT_BOUND) -> tuple[int, int]:
    """Split ``prime - 1`` into ``(cofactor, small_factor_product)``.

    Args:
        prime: The group prime.
        bound: Largest trial divisor (inclusive).

    Returns:
        ``(cofactor, factors)`` with ``cofactor * factors == prime - 1`` and no
        divisor of ``cofactor`` in ``2..bound``.

    Raises:
        InvalidArgumentError: If ``bound`` is not a positive integer or
            ``prime`` is less than 2.
    """

    if isinstance(bound, bool) or not isinstance(bound, int) or bound <= 0:
        raise InvalidArgumentError("bound must be a positive integer")
    p = to_int(prime)
    if p < 2:
        raise InvalidArgumentError("prime must be at least 2")
    return _decompose(p, bound)


def subgroup_generator(params: GroupParams, bound: int = DEFAULT_BOUND) -> int:
    """Generator of the large-prime-order subgroup of ``params``."""

    _, factors = decompose(params.prime, bound)
    return mod_pow(params.gen, factors, params.prime)


def subgroup_order(params: GroupParams, bound: int = DEFAULT_BOUND) -> int:
    cofactor, _ = decompose(params.prime, bound)
    return cofactor
