"""Cuckoo filter with selectable table layout.

Partial-key cuckoo hashing: each item is reduced to a short fingerprint that
lives in one of two candidate buckets. Because the alternate bucket is derived
from the current bucket and the fingerprint alone, entries can be relocated
without access to the original item.

Key design choices:
* **Single hash** via xxHash64. The upper half of the digest picks the primary
  bucket, the lower bits become the fingerprint (zero is reserved for "empty").
* **Power-of-two bucket array** so the alternate index is ``i ^ h(fp)`` under a
  mask, which is its own inverse.
* **Two table layouts.** ``single`` stores one fingerprint per array slot
  (8, 16 or 32 bit wide), ``packed`` stores fingerprints bit-packed at their
  exact width in a ``bytearray``.
* **Seeded relocation.** Victims are picked with a private ``random.Random``
  so two filters built from the same items are identical.
* **Victim stash.** When relocation gives up, the homeless fingerprint is kept
  in a one-entry stash and ``insert`` reports failure. A full stash means the
  filter is saturated and every later insert is refused.
"""
from __future__ import annotations

import math
import random
from array import array
from typing import Iterable, Optional, Tuple

import xxhash


LAYOUTS = ("single", "packed")

_MASK32 = (1 << 32) - 1
_ALT_MULTIPLIER = 0x5BD1E995


def _next_power_of_two(value: int) -> int:
    if value <= 1:
        return 1
    return 1 << (value - 1).bit_length()


class _SingleTable:
    """One machine-sized array slot per fingerprint."""

    __slots__ = ("_slots",)

    def __init__(self, num_slots: int, fingerprint_bits: int) -> None:
        if fingerprint_bits <= 8:
            typecode = "B"
        elif fingerprint_bits <= 16:
            typecode = "H"
        else:
            typecode = "I"
        itemsize = array(typecode).itemsize
        self._slots = array(typecode, bytes(itemsize * num_slots))

    def get(self, slot: int) -> int:
        return self._slots[slot]

    def set(self, slot: int, fingerprint: int) -> None:
        self._slots[slot] = fingerprint

    @property
    def nbytes(self) -> int:
        return len(self._slots) * self._slots.itemsize


class _PackedTable:
    """Fingerprints bit-packed at exact width.

    Reads and writes go through a 5-byte little-endian window, enough for a
    32-bit fingerprint at any bit offset.
    """

    __slots__ = ("_data", "_bits", "_mask")

    _WINDOW = 5

    def __init__(self, num_slots: int, fingerprint_bits: int) -> None:
        self._bits = fingerprint_bits
        self._mask = (1 << fingerprint_bits) - 1
        total_bytes = (num_slots * fingerprint_bits + 7) // 8
        self._data = bytearray(total_bytes + self._WINDOW)

    def get(self, slot: int) -> int:
        bit = slot * self._bits
        start = bit >> 3
        window = int.from_bytes(self._data[start:start + self._WINDOW], "little")
        return (window >> (bit & 7)) & self._mask

    def set(self, slot: int, fingerprint: int) -> None:
        bit = slot * self._bits
        start = bit >> 3
        shift = bit & 7
        window = int.from_bytes(self._data[start:start + self._WINDOW], "little")
        window = (window & ~(self._mask << shift)) | (fingerprint << shift)
        self._data[start:start + self._WINDOW] = window.to_bytes(self._WINDOW, "little")

    @property
    def nbytes(self) -> int:
        return len(self._data)


class CuckooFilter:
    """Cuckoo filter over ``bytes`` items."""

    def __init__(
        self,
        capacity: int,
        *,
        bucket_size: int = 4,
        fingerprint_bits: int = 16,
        layout: str = "single",
        max_kicks: int = 500,
        seed: int = 0,
    ) -> None:
        """Initialize an empty filter.

        Args:
            capacity: Expected number of items. Rounded up to a power-of-two
                number of buckets.
            bucket_size: Fingerprint slots per bucket.
            fingerprint_bits: Fingerprint width, 1 to 32 bits.
            layout: ``"single"`` or ``"packed"``.
            max_kicks: Relocations attempted before an insert gives up.
            seed: Seed for hashing and victim selection.

        Raises:
            ValueError: If any sizing parameter is out of range.
        """
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        if bucket_size <= 0:
            raise ValueError("bucket_size must be positive")
        if not 1 <= fingerprint_bits <= 32:
            raise ValueError("fingerprint_bits must be between 1 and 32")
        if layout not in LAYOUTS:
            raise ValueError(f"layout must be one of {LAYOUTS}, got {layout!r}")
        if max_kicks < 0:
            raise ValueError("max_kicks must not be negative")

        self.capacity = capacity
        self.bucket_size = bucket_size
        self.fingerprint_bits = fingerprint_bits
        self.layout = layout
        self.max_kicks = max_kicks
        self.seed = seed
        self.num_buckets = _next_power_of_two(-(-capacity // bucket_size))
        self.count = 0

        self._bucket_mask = self.num_buckets - 1
        self._fingerprint_mask = (1 << fingerprint_bits) - 1
        self._rng = random.Random(seed)
        self._victim: Optional[Tuple[int, int]] = None

        num_slots = self.num_buckets * bucket_size
        if layout == "packed":
            self._table = _PackedTable(num_slots, fingerprint_bits)
        else:
            self._table = _SingleTable(num_slots, fingerprint_bits)

    @classmethod
    def for_error_rate(cls, capacity: int, fp_rate: float, **kwargs) -> "CuckooFilter":
        """Build a filter whose fingerprint width targets ``fp_rate``."""
        bucket_size = kwargs.get("bucket_size", 4)
        bits = cls.fingerprint_bits_for(fp_rate, bucket_size)
        return cls(capacity, fingerprint_bits=bits, **kwargs)

    @staticmethod
    def fingerprint_bits_for(fp_rate: float, bucket_size: int = 4) -> int:
        """Smallest fingerprint width with an upper bound of ``fp_rate``: ceil(log2(2b / e))."""
        if not 0.0 < fp_rate < 1.0:
            raise ValueError("fp_rate must be in (0, 1)")
        bits = math.ceil(math.log2(2 * bucket_size / fp_rate))
        return max(1, min(32, bits))

    def insert(self, item: bytes) -> bool:
        """Insert ``item``. Returns False once the filter is saturated."""
        if self._victim is not None:
            return False

        index, fingerprint = self._index_and_fingerprint(item)
        alt_index = self._alt_index(index, fingerprint)
        if self._place(index, fingerprint) or self._place(alt_index, fingerprint):
            self.count += 1
            return True

        index = self._rng.choice((index, alt_index))
        for _ in range(self.max_kicks):
            slot = index * self.bucket_size + self._rng.randrange(self.bucket_size)
            evicted = self._table.get(slot)
            self._table.set(slot, fingerprint)
            fingerprint = evicted
            index = self._alt_index(index, fingerprint)
            if self._place(index, fingerprint):
                self.count += 1
                return True

        self._victim = (index, fingerprint)
        self.count += 1
        return False

    def update(self, items: Iterable[bytes]) -> int:
        """Insert all ``items``; return how many inserts were refused."""
        return sum(1 for item in items if not self.insert(item))

    def contains(self, item: bytes) -> bool:
        """Return True if ``item`` may be present. Never modifies the table."""
        index, fingerprint = self._index_and_fingerprint(item)
        alt_index = self._alt_index(index, fingerprint)
        if self._victim is not None:
            victim_index, victim_fingerprint = self._victim
            if victim_fingerprint == fingerprint and victim_index in (index, alt_index):
                return True
        return self._holds(index, fingerprint) or self._holds(alt_index, fingerprint)

    __contains__ = contains

    def __len__(self) -> int:
        return self.count

    @property
    def saturated(self) -> bool:
        return self._victim is not None

    @property
    def nbytes(self) -> int:
        """Bytes held by the fingerprint table."""
        return self._table.nbytes

    def _index_and_fingerprint(self, item: bytes) -> Tuple[int, int]:
        digest = xxhash.xxh64(item, seed=self.seed).intdigest()
        fingerprint = digest & self._fingerprint_mask
        if fingerprint == 0:
            fingerprint = 1  # zero marks an empty slot
        return (digest >> 32) & self._bucket_mask, fingerprint

    def _alt_index(self, index: int, fingerprint: int) -> int:
        return (index ^ ((fingerprint * _ALT_MULTIPLIER) & _MASK32)) & self._bucket_mask

    def _place(self, index: int, fingerprint: int) -> bool:
        base = index * self.bucket_size
        for slot in range(base, base + self.bucket_size):
            if self._table.get(slot) == 0:
                self._table.set(slot, fingerprint)
                return True
        return False

    def _holds(self, index: int, fingerprint: int) -> bool:
        base = index * self.bucket_size
        for slot in range(base, base + self.bucket_size):
            if self._table.get(slot) == fingerprint:
                return True
        return False
