"""Steady-state insert and lookup latency at fixed working-set sizes.

Independent of the false positive evaluation. For every working-set size
``n`` and backend the runner measures:

* ``insert``: inserting ``known[:n]`` into a freshly built backend
* ``contains_true``: querying ``known[:n]`` after populating with it
* ``contains_false``: querying ``unknown[:n]``
* ``contains_mixed``: querying ``mixed[:n]`` (seeded known/unknown mix)

Backend construction and population are never inside a timed window. Each
measurement repeats passes until at least ``min_ops`` operations were timed.
Numbers are for comparing backends at the same ``n``, not absolute targets.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterable, List, Sequence

from bf_eval.adapters.base import BackendSpec
from bf_eval.corpus import LookupSets
from bf_eval.errors import BackendConstructionError


logger = logging.getLogger(__name__)

DEFAULT_SIZES = (500, 5_000, 50_000)
LOOKUP_OPERATIONS = ("contains_true", "contains_false", "contains_mixed")
OPERATIONS = ("insert",) + LOOKUP_OPERATIONS


@dataclass(frozen=True)
class ThroughputResult:
    """Timed operations for one backend, size and operation."""

    backend: str
    size: int
    operation: str
    ops: int
    seconds: float

    @property
    def ns_per_op(self) -> float:
        if self.ops == 0:
            return float("nan")
        return self.seconds * 1e9 / self.ops

    @property
    def ops_per_sec(self) -> float:
        if self.seconds <= 0:
            return float("inf")
        return self.ops / self.seconds


class ThroughputRunner:
    """Runs the insert / lookup measurements over shared lookup sets."""

    def __init__(
        self,
        lookup_sets: LookupSets,
        sizes: Sequence[int] = DEFAULT_SIZES,
        min_ops: int = 100_000,
        clock: Callable[[], float] = time.perf_counter,
    ):
        for n in sizes:
            if n <= 0:
                raise ValueError(f"working-set size must be positive, got {n}")
            if n > lookup_sets.max_words:
                raise ValueError(f"Num words too large: {n} > {lookup_sets.max_words}")
        if min_ops <= 0:
            raise ValueError("min_ops must be positive")

        self.lookup_sets = lookup_sets
        self.sizes = tuple(sizes)
        self.min_ops = min_ops
        self.clock = clock

    def measure_insert(self, spec: BackendSpec, n: int) -> ThroughputResult:
        items = self.lookup_sets.known[:n]
        ops = 0
        elapsed = 0.0
        while ops < self.min_ops:
            adapter = spec.build(n)
            start = self.clock()
            for item in items:
                adapter.insert(item)
            elapsed += self.clock() - start
            ops += n
        return ThroughputResult(spec.name, n, "insert", ops, elapsed)

    def measure_lookup(self, spec: BackendSpec, n: int, operation: str) -> ThroughputResult:
        probe = self.lookup_sets.probe(operation)[:n]
        adapter = spec.build(n)
        for item in self.lookup_sets.known[:n]:
            adapter.insert(item)

        contains = adapter.contains
        ops = 0
        start = self.clock()
        while ops < self.min_ops:
            for item in probe:
                contains(item)
            ops += n
        elapsed = self.clock() - start
        return ThroughputResult(spec.name, n, operation, ops, elapsed)

    def run(self, spec: BackendSpec) -> List[ThroughputResult]:
        """Every size and operation for one backend."""
        results = []
        for n in self.sizes:
            logger.debug("%s: measuring size=%d", spec.name, n)
            results.append(self.measure_insert(spec, n))
            for operation in LOOKUP_OPERATIONS:
                results.append(self.measure_lookup(spec, n, operation))
        return results

    def run_all(self, specs: Iterable[BackendSpec]) -> List[ThroughputResult]:
        """Run every backend in turn; construction failures skip that backend."""
        results = []
        for spec in specs:
            try:
                backend_results = self.run(spec)
            except BackendConstructionError as e:
                logger.warning("Skipping %s: %s", spec.name, e)
                continue
            logger.info("%s: %d measurements", spec.name, len(backend_results))
            results.extend(backend_results)
        return results
