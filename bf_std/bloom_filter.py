"""Minimal Bloom filter implementation using double hashing.

Uses two independent hash families (MurmurHash3 via mmh3 and xxHash64)
combined with the Kirsch-Mitzenmacher optimization to derive k hash functions.
Items are raw ``bytes``; callers encode text before inserting.
"""
from __future__ import annotations

import math
from typing import Iterable, Iterator

import mmh3
import xxhash


_LN2 = math.log(2)


class BloomFilter:
    """Simple Bloom filter backed by a bytearray bitset."""

    def __init__(self, size: int, num_hashes: int, *, seed1: int = 0, seed2: int = 0) -> None:
        """Initialize a Bloom filter.

        Args:
            size: Number of bits in the filter.
            num_hashes: Number of hash functions to use.
            seed1: Seed for MurmurHash3 (default 0).
            seed2: Seed for xxHash64 (default 0).

        Raises:
            ValueError: If size or num_hashes is not positive.
        """
        if size <= 0:
            raise ValueError("size must be positive")
        if num_hashes <= 0:
            raise ValueError("num_hashes must be positive")

        self.size = size
        self.num_hashes = num_hashes
        self.seed1 = seed1
        self.seed2 = seed2
        self._bit_array = bytearray((size + 7) // 8)

    @classmethod
    def optimal(cls, capacity: int, fp_rate: float, **kwargs) -> "BloomFilter":
        """Size a filter for ``capacity`` items at target false positive rate ``fp_rate``.

        Uses m = -n ln(p) / (ln 2)^2 bits and k = (m / n) ln 2 hash functions.

        Raises:
            ValueError: If capacity is not positive or fp_rate is outside (0, 1).
        """
        size, num_hashes = optimal_parameters(capacity, fp_rate)
        return cls(size, num_hashes, **kwargs)

    def add(self, item: bytes) -> None:
        """Insert ``item`` into the filter."""
        for bit_index in self._hashes(item):
            byte_index = bit_index >> 3
            mask = 1 << (bit_index & 7)
            self._bit_array[byte_index] |= mask

    def update(self, items: Iterable[bytes]) -> None:
        """Insert all ``items`` into the filter."""
        for item in items:
            self.add(item)

    def __contains__(self, item: bytes) -> bool:
        """Check if ``item`` is in the filter."""
        for bit_index in self._hashes(item):
            byte_index = bit_index >> 3
            mask = 1 << (bit_index & 7)
            if not (self._bit_array[byte_index] & mask):
                return False
        return True

    def _hashes(self, item: bytes) -> Iterator[int]:
        """Generate hash positions using Kirsch-Mitzenmacher double hashing."""
        h1 = mmh3.hash(item, self.seed1, signed=False)
        h2 = xxhash.xxh64(item, seed=self.seed2).intdigest() % self.size

        # Ensure h2 != 0 to avoid infinite loop in arithmetic progression
        if h2 == 0:
            h2 = 1

        for i in range(self.num_hashes):
            yield (h1 + i * h2) % self.size

    @property
    def bit_array(self) -> bytearray:
        """Expose the underlying bit array for inspection."""
        return self._bit_array

    @property
    def nbytes(self) -> int:
        """Bytes held by the bitset."""
        return len(self._bit_array)


def optimal_parameters(capacity: int, fp_rate: float) -> tuple[int, int]:
    """Return ``(size_bits, num_hashes)`` for a target capacity and error rate."""
    if capacity <= 0:
        raise ValueError("capacity must be positive")
    if not 0.0 < fp_rate < 1.0:
        raise ValueError("fp_rate must be in (0, 1)")

    size = max(1, math.ceil(-capacity * math.log(fp_rate) / (_LN2 * _LN2)))
    num_hashes = max(1, round(size / capacity * _LN2))
    return size, num_hashes
