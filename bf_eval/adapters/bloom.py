"""Bloom filter adapters. Bloom filters never refuse an insert."""

from __future__ import annotations

from bf_eval.adapters.base import FilterAdapter, FilterConfig
from bf_light.lightweight_bloom_filter import LightweightBloomFilter
from bf_std.bloom_filter import BloomFilter


def _reject_layout(config: FilterConfig) -> None:
    # single bit array, nothing to choose
    if config.layout is not None:
        raise ValueError(f"Bloom filters have no table layouts, got layout={config.layout!r}")


class StandardBloomAdapter(FilterAdapter):
    """Double-hashing Bloom filter (mmh3 + xxHash64)."""

    def __init__(self, config: FilterConfig):
        _reject_layout(config)
        self.filter = BloomFilter.optimal(config.capacity, config.fp_rate)

    def insert(self, item: bytes) -> bool:
        self.filter.add(item)
        return True

    def contains(self, item: bytes) -> bool:
        return item in self.filter


class LightweightBloomAdapter(FilterAdapter):
    """Blocked single-hash Bloom filter."""

    def __init__(self, config: FilterConfig):
        _reject_layout(config)
        self.filter = LightweightBloomFilter.optimal(config.capacity, config.fp_rate)

    def insert(self, item: bytes) -> bool:
        self.filter.add(item)
        return True

    def contains(self, item: bytes) -> bool:
        return item in self.filter
