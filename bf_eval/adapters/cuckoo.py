"""Cuckoo filter adapter.

``fp_rate`` is translated into a fingerprint width, ``layout`` selects the
table layout (``single`` when unset). Saturation shows up as ``insert``
returning False.
"""

from __future__ import annotations

from bf_cuckoo.cuckoo_filter import CuckooFilter
from bf_eval.adapters.base import FilterAdapter, FilterConfig


class CuckooAdapter(FilterAdapter):
    def __init__(self, config: FilterConfig, bucket_size: int = 4):
        self.filter = CuckooFilter.for_error_rate(
            config.capacity,
            config.fp_rate,
            bucket_size=bucket_size,
            layout=config.layout or "single",
        )

    def insert(self, item: bytes) -> bool:
        return self.filter.insert(item)

    def contains(self, item: bytes) -> bool:
        return self.filter.contains(item)
