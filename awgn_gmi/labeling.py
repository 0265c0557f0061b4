# awgn_gmi/labeling.py
"""
Bit cosets of a 2^m-point labeled constellation.

The coset (k, b) is the set of M/2 symbol indices whose label bit k equals b.
insert_zero() enumerates it without building a bit matrix:

    {insert_zero(i, k, m) | (b << k) : i in [0, M/2)}  ==  coset (k, b)
"""
from __future__ import annotations
import numpy as np

__all__ = ["insert_zero", "coset_indices"]


def _check_bit(k: int, m: int) -> None:
    if m < 1:
        raise ValueError(f"Bit width m must be >= 1, got {m}")
    if not 0 <= k < m:
        raise ValueError(f"Bit position k={k} outside [0, {m})")


def insert_zero(i: int, k: int, m: int) -> int:
    """
    Spread the m-1 bits of i over an m-bit word, leaving a 0 at position k.

    Bits of i below k stay in place; bits at or above k move up by one.
    Example: insert_zero(0b11, 1, 3) == 0b101.
    """
    i, k, m = int(i), int(k), int(m)
    _check_bit(k, m)
    if not 0 <= i < (1 << (m - 1)):
        raise ValueError(f"Index i={i} outside [0, {1 << (m - 1)})")
    left = (i << 1) & (((1 << (m - k)) - 1) << (k + 1))
    right = i & ((1 << k) - 1)
    return left | right


def coset_indices(k: int, b: int, m: int) -> np.ndarray:
    """Indices (ascending) of the M/2 symbols whose label bit k equals b."""
    k, m = int(k), int(m)
    _check_bit(k, m)
    if b not in (0, 1):
        raise ValueError(f"Bit value must be 0 or 1, got {b}")
    half = 1 << (m - 1)
    return np.fromiter((insert_zero(i, k, m) | (b << k) for i in range(half)),
                       dtype=np.int64, count=half)
