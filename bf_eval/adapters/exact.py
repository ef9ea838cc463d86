"""Exact set adapter: zero false positives, for sanity checks."""

from __future__ import annotations

from bf_eval.adapters.base import FilterAdapter, FilterConfig


class ExactSetAdapter(FilterAdapter):
    """Baseline that remembers every item. Should report fp=0."""

    def __init__(self, config: FilterConfig):
        self._items: set = set()

    def insert(self, item: bytes) -> bool:
        self._items.add(item)
        return True

    def contains(self, item: bytes) -> bool:
        return item in self._items
