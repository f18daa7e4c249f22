"""Seedable pseudo-random stream for reproducible fallback variants.

The generator is mulberry32: a 32-bit state advanced by a constant and mixed
with two multiply-xor-shift rounds per draw. It is fast and small, and it is
not cryptographic. Every arithmetic step is masked to 32 bits so the stream is
bit-identical across processes and platforms.
"""

from __future__ import annotations

import math
import threading
from collections.abc import Callable, Iterator

_MASK32 = 0xFFFFFFFF
_INCREMENT = 0x6D2B79F5
_TWO_POW_32 = 4294967296.0

Rng = Callable[[], float]


def _imul(a: int, b: int) -> int:
    """Low 32 bits of a * b."""
    return (a * b) & _MASK32


def mulberry32(seed: int) -> Rng:
    """Return a callable producing the float stream in [0, 1) for ``seed``.

    Negative and oversized seeds are reduced to their unsigned 32-bit value.
    """
    state = int(seed) & _MASK32

    def next_float() -> float:
        nonlocal state
        state = (state + _INCREMENT) & _MASK32
        t = state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & _MASK32
        t &= _MASK32
        return ((t ^ (t >> 14)) & _MASK32) / _TWO_POW_32

    return next_float


def rng_stream(seed: int) -> Iterator[float]:
    """Infinite lazy iterator over the same sequence as ``mulberry32(seed)``."""
    rng = mulberry32(seed)
    while True:
        yield rng()


def randint(rng: Rng, lo: int, hi: int) -> int:
    """Uniform integer in [lo, hi] (inclusive) using one draw."""
    if hi < lo:
        lo, hi = hi, lo
    return lo + math.floor(rng() * (hi - lo + 1))


def jitter(rng: Rng, spread: int) -> int:
    """Uniform integer offset in [-spread, spread]."""
    return randint(rng, -spread, spread)


class SeedCursor:
    """Round-robin cursor over the seed pool 1..pool_size.

    Consecutive fallback calls get visibly different variants without true
    randomness. Owned by the request-handling context; the lock keeps the
    advance atomic when several handlers share one cursor.
    """

    def __init__(self, pool_size: int = 100, start: int = 0) -> None:
        if pool_size < 1:
            raise ValueError("pool_size must be >= 1")
        self.pool_size = pool_size
        self._index = start % pool_size
        self._lock = threading.Lock()

    def next_seed(self) -> int:
        with self._lock:
            seed = self._index + 1
            self._index = (self._index + 1) % self.pool_size
        return seed

    def peek(self) -> int:
        """The seed the next call will return, without advancing."""
        with self._lock:
            return self._index + 1
