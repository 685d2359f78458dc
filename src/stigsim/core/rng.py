"""
Counter-based random numbers keyed by cell identity and tick.

Every draw is a pure function of (seed, domain, tick, cell, species, ordinal),
hashed with the splitmix64 finaliser. There is no generator state to advance,
so the value an agent receives does not depend on which other cells were
processed first, or on how many threads processed them.
"""

from __future__ import annotations

import numpy as np


_U64 = np.uint64
_GOLDEN = _U64(0x9E3779B97F4A7C15)
_MIX_1 = _U64(0xBF58476D1CE4E5B9)
_MIX_2 = _U64(0x94D049BB133111EB)
_MASK64 = (1 << 64) - 1
_INV_2_53 = 1.0 / float(1 << 53)

# Independent stream families
PLACEMENT = 1
MOVE = 2


def splitmix64(x: np.ndarray) -> np.ndarray:
    """splitmix64 finaliser over a uint64 array (wraps modulo 2**64)."""
    z = np.asarray(x, dtype=_U64) + _GOLDEN
    z = (z ^ (z >> _U64(30))) * _MIX_1
    z = (z ^ (z >> _U64(27))) * _MIX_2
    return z ^ (z >> _U64(31))


def _as_u64(value) -> np.ndarray:
    """Reinterpret integers (possibly negative) as uint64 keys."""
    arr = np.asarray(value)
    if arr.dtype == _U64:
        return arr
    return arr.astype(np.int64).view(_U64) if arr.dtype.kind == "i" else arr.astype(_U64)


class CounterRng:
    """
    Stateless, seedable generator for reproducible per-cell streams.

    Not cryptographically strong; meant for weighted categorical sampling.
    """

    def __init__(self, seed: int):
        self.seed = int(seed)
        with np.errstate(over="ignore"):
            self._key = splitmix64(np.array([self.seed & _MASK64], dtype=_U64))[0]

    def bits(self, domain, tick, cell, species=0, ordinal=0) -> np.ndarray:
        """
        Raw 64-bit hash of a key. Array arguments broadcast together.
        """
        parts = np.broadcast_arrays(
            *(_as_u64(np.atleast_1d(p)) for p in (domain, tick, cell, species, ordinal))
        )
        with np.errstate(over="ignore"):
            h = np.full(parts[0].shape, self._key, dtype=_U64)
            for part in parts:
                h = splitmix64(h ^ part)
        return h

    def uniform(self, domain, tick, cell, species=0, ordinal=0) -> np.ndarray:
        """Floats in [0, 1) with 53 bits of resolution."""
        h = self.bits(domain, tick, cell, species, ordinal)
        return (h >> _U64(11)).astype(np.float64) * _INV_2_53

    def integers(self, high: int, domain, tick, cell, species=0, ordinal=0) -> np.ndarray:
        """Integers in [0, high)."""
        if high < 1:
            raise ValueError(f"high must be >= 1, got {high}")
        u = self.uniform(domain, tick, cell, species, ordinal)
        return np.minimum((u * high).astype(np.int64), high - 1)

    def stream(
        self,
        cell: int,
        tick: int,
        species: int = 0,
        size: int = 1,
        domain: int = MOVE,
    ) -> np.ndarray:
        """First `size` uniform draws of one cell's stream at one tick."""
        return self.uniform(domain, tick, cell, species, np.arange(size, dtype=np.int64))

    def __repr__(self) -> str:
        return f"CounterRng(seed={self.seed})"
