#!/usr/bin/env python3
"""
Seeded pseudo-random stream for procedural rendering.

Every generator owns exactly one Mulberry32 stream per call. The mixing step
uses only 32-bit multiply, XOR and shifts, so a given seed produces the same
float sequence on every platform. String seeds are folded with 32-bit FNV-1a
over UTF-16 code units before the stream is created.

Draw consumption of the helpers is fixed:
- pick(seq)            1 draw
- chance(p)            1 draw
- int_in_range(lo, hi) 1 draw
- uniform(lo, hi)      1 draw
- signed(amount)       1 draw
- batch(n)             n draws
"""

import math
import secrets
from numbers import Number
from typing import Any, Optional, Sequence, Tuple, TypeVar

import numpy as np

T = TypeVar("T")

MASK32 = 0xFFFFFFFF
TWO_POW_32 = 4294967296
INCREMENT = 0x6D2B79F5

FNV_OFFSET_BASIS = 2166136261
FNV_PRIME = 16777619


def _imul(a: int, b: int) -> int:
    return (a * b) & MASK32


def hash_string_to_seed(text: str) -> int:
    """
    Fold a string into a 32-bit seed with FNV-1a.

    Each UTF-16 code unit is XORed into the accumulator before the multiply,
    so the hash is order-sensitive and matches hashing the same string in a
    UTF-16 based runtime.
    """
    h = FNV_OFFSET_BASIS
    data = text.encode("utf-16-le", "surrogatepass")
    for i in range(0, len(data), 2):
        h ^= data[i] | (data[i + 1] << 8)
        h = _imul(h, FNV_PRIME)
    return h & MASK32


def ephemeral_seed() -> int:
    """Fresh non-deterministic seed for calls that did not supply one."""
    return secrets.randbits(32)


def _number_to_seed(value: float) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value & MASK32
    if not math.isfinite(value):
        return None
    return int(math.trunc(value)) & MASK32


def resolve_seed(value: Any) -> Tuple[int, bool]:
    """
    Canonicalize a caller seed to uint32.

    Args:
        value: int, float, numeric text, free text, or None

    Returns:
        (seed, ephemeral) where ephemeral is True when a fresh seed had to be
        substituted because the caller gave none (or gave garbage).
    """
    if value is None or isinstance(value, bool):
        return ephemeral_seed(), True

    if isinstance(value, Number):
        seed = _number_to_seed(value)
        if seed is None:
            return ephemeral_seed(), True
        return seed, False

    text = str(value).strip()
    if not text:
        return ephemeral_seed(), True

    try:
        seed = _number_to_seed(float(text))
    except ValueError:
        seed = None
    if seed is not None:
        return seed, False

    return hash_string_to_seed(text), False


class Mulberry32:
    """Deterministic float stream in [0, 1) from a 32-bit seed."""

    __slots__ = ("seed", "_state", "draws")

    def __init__(self, seed: int):
        self.seed = seed & MASK32
        self._state = self.seed
        self.draws = 0

    def next(self) -> float:
        a = (self._state + INCREMENT) & MASK32
        self._state = a
        t = _imul(a ^ (a >> 15), 1 | a)
        t = ((t + _imul(t ^ (t >> 7), 61 | t)) & MASK32) ^ t
        self.draws += 1
        return ((t ^ (t >> 14)) & MASK32) / TWO_POW_32

    __call__ = next

    def pick(self, seq: Sequence[T]) -> T:
        return seq[int(self.next() * len(seq))]

    def chance(self, p: float) -> bool:
        return self.next() < p

    def int_in_range(self, lo: int, hi: int) -> int:
        """Inclusive integer in [lo, hi]."""
        return int(math.floor(self.next() * (hi - lo + 1))) + lo

    def uniform(self, lo: float, hi: float) -> float:
        return lo + self.next() * (hi - lo)

    def signed(self, amount: float) -> float:
        return self.next() * amount * 2 - amount

    def batch(self, n: int) -> np.ndarray:
        """
        The next n draws as a float64 array, identical to n calls of next().

        The state only ever advances by a constant, so draw i depends on
        seed + i * increment alone and the whole run can be mixed at once.
        """
        if n <= 0:
            return np.empty(0, dtype=np.float64)
        steps = np.arange(1, n + 1, dtype=np.uint64)
        a = ((self._state + steps * INCREMENT) & MASK32).astype(np.uint32)
        t = (a ^ (a >> 15)) * (a | 1)
        t = (t + (t ^ (t >> 7)) * (t | 61)) ^ t
        out = (t ^ (t >> 14)).astype(np.float64) / TWO_POW_32
        self._state = (self._state + n * INCREMENT) & MASK32
        self.draws += n
        return out

    def int_batch(self, n: int, lo: int, hi: int) -> np.ndarray:
        """n inclusive integers in [lo, hi], one draw each."""
        return np.floor(self.batch(n) * (hi - lo + 1)).astype(np.int64) + lo
