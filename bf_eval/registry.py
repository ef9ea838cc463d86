"""Registry of named backend variants.

One parameterized evaluation protocol runs against every entry here instead of
one hand-written driver per backend. Names are stable: they appear in reports
and in configuration files.
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from bf_eval.adapters.base import AdapterFactory, BackendSpec
from bf_eval.adapters.bloom import LightweightBloomAdapter, StandardBloomAdapter
from bf_eval.adapters.cuckoo import CuckooAdapter
from bf_eval.adapters.exact import ExactSetAdapter


class AdapterRegistry:
    """Ordered mapping of backend name to :class:`BackendSpec`."""

    def __init__(self, specs: Iterable[BackendSpec] = ()):
        self._specs: Dict[str, BackendSpec] = {}
        for spec in specs:
            self.register(spec)

    def register(self, spec: BackendSpec) -> None:
        if spec.name in self._specs:
            raise ValueError(f"Backend already registered: {spec.name}")
        self._specs[spec.name] = spec

    def add(
        self,
        name: str,
        factory: AdapterFactory,
        fp_rate: float = 0.0001,
        layout: Optional[str] = None,
        capacity: Optional[int] = None,
        description: str = "",
    ) -> BackendSpec:
        spec = BackendSpec(name, factory, fp_rate=fp_rate, layout=layout, capacity=capacity, description=description)
        self.register(spec)
        return spec

    def get(self, name: str) -> BackendSpec:
        try:
            return self._specs[name]
        except KeyError:
            raise KeyError(f"Unknown backend: {name}. Choose: {', '.join(self._specs)}") from None

    def names(self) -> List[str]:
        return list(self._specs)

    def specs(self) -> List[BackendSpec]:
        return list(self._specs.values())

    def with_overrides(
        self,
        name: str,
        fp_rate: Optional[float] = None,
        capacity: Optional[int] = None,
        layout: Optional[str] = None,
    ) -> BackendSpec:
        return self.get(name).with_overrides(fp_rate=fp_rate, capacity=capacity, layout=layout)

    def __contains__(self, name: str) -> bool:
        return name in self._specs

    def __len__(self) -> int:
        return len(self._specs)


def default_registry() -> AdapterRegistry:
    """Every bundled backend variant."""
    registry = AdapterRegistry()
    registry.add("bf_std", StandardBloomAdapter, fp_rate=0.0001, description="double-hashing Bloom filter")
    registry.add("bf_light", LightweightBloomAdapter, fp_rate=0.002, description="blocked Bloom filter")
    # fingerprint widths: 0.0002 -> 16 bit, 0.04 -> 8 bit, 0.001 -> 13 bit
    registry.add("cuckoo", CuckooAdapter, fp_rate=0.0002, layout="single", description="cuckoo filter")
    registry.add("cuckoo/low", CuckooAdapter, fp_rate=0.04, layout="single", description="cuckoo filter, short fingerprints")
    registry.add("cuckoo/packed", CuckooAdapter, fp_rate=0.001, layout="packed", description="cuckoo filter, bit-packed table")
    registry.add("exact_set", ExactSetAdapter, description="exact set baseline")
    return registry
