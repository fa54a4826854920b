"""32-bit Mersenne Twister (MT19937) seeded from a single integer."""

from __future__ import annotations

_N = 624
_M = 397
_UPPER_MASK = 0x80000000
_LOWER_MASK = 0x7FFFFFFF
_MATRIX_A = 0x9908B0DF
_MASK32 = 0xFFFFFFFF


class MersenneTwister:
    """MT19937 generator; iterating yields an endless stream of 32-bit integers."""

    def __init__(self, seed: int) -> None:
        mt = [seed & _MASK32]
        for i in range(1, _N):
            prev = mt[-1]
            mt.append((0x6C078965 * (prev ^ (prev >> 30)) + i) & _MASK32)
        self._mt = mt
        self._index = _N

    def _twist(self) -> None:
        mt = self._mt
        for i in range(_N):
            y = (mt[i] & _UPPER_MASK) | (mt[(i + 1) % _N] & _LOWER_MASK)
            value = mt[(i + _M) % _N] ^ (y >> 1)
            if y & 1:
                value ^= _MATRIX_A
            mt[i] = value
        self._index = 0

    def next_int(self) -> int:
        """Return the next 32-bit output."""
        if self._index >= _N:
            self._twist()
        y = self._mt[self._index]
        self._index += 1
        y ^= y >> 11
        y ^= (y << 7) & 0x9D2C5680
        y ^= (y << 15) & 0xEFC60000
        y ^= y >> 18
        return y & _MASK32

    def __iter__(self) -> "MersenneTwister":
        return self

    def __next__(self) -> int:
        return self.next_int()