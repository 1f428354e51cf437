"""A compact fixed-size array of bits."""

from __future__ import annotations


class BitArray:
    """Fixed number of bits, all initially clear."""

    __slots__ = ("_n", "_data")

    def __init__(self, n: int) -> None:
        if n < 0:
            raise ValueError("bit array size must be non-negative")
        self._n = n
        self._data = bytearray(n // 8 + 1)

    def __len__(self) -> int:
        return self._n

    def _check(self, i: int) -> None:
        if not 0 <= i < self._n:
            raise IndexError(f"bit index {i} out of range for {self._n} bits")

    def set(self, i: int) -> None:
        """Set bit ``i`` to 1."""
        self._check(i)
        self._data[i >> 3] |= 1 << (i & 7)

    def clear(self, i: int) -> None:
        """Set bit ``i`` to 0."""
        self._check(i)
        self._data[i >> 3] &= 0xFF - (1 << (i & 7))

    def test(self, i: int) -> bool:
        """Return whether bit ``i`` is set."""
        self._check(i)
        return bool(self._data[i >> 3] & (1 << (i & 7)))

    def clear_all(self) -> None:
        """Clear every bit."""
        self._data[:] = bytes(len(self._data))

    def __contains__(self, i: int) -> bool:
        return 0 <= i < self._n and self.test(i)