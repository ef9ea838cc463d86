"""Heap allocation probe built on tracemalloc.

Each :meth:`MemoryProbe.sample` first forces a full garbage collection so
unreachable objects from earlier runs do not bias the delta, then reads the
size of live traced blocks. Only blocks allocated while tracing is active are
counted, so tracing must be started before the first sample.
"""
from __future__ import annotations

import gc
import logging
import tracemalloc


logger = logging.getLogger(__name__)


class MemoryProbe:
    """Samples live traced heap bytes.

    Usable as a context manager; tracing is stopped on exit only if this
    probe started it.
    """

    def __init__(self) -> None:
        self._started_tracing = False

    def start(self) -> None:
        if not tracemalloc.is_tracing():
            tracemalloc.start()
            self._started_tracing = True
            logger.debug("Memory tracing started")

    def stop(self) -> None:
        if self._started_tracing:
            tracemalloc.stop()
            self._started_tracing = False
            logger.debug("Memory tracing stopped")

    @property
    def active(self) -> bool:
        return tracemalloc.is_tracing()

    def sample(self) -> int:
        """Collect garbage, then return currently allocated traced bytes."""
        if not tracemalloc.is_tracing():
            raise RuntimeError("MemoryProbe.sample() called before start()")
        gc.collect()
        current, _peak = tracemalloc.get_traced_memory()
        return current

    def __enter__(self) -> "MemoryProbe":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
