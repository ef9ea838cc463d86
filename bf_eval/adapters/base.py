"""FilterAdapter: uniform interface over heterogeneous AMQ filter backends.

The harness only ever calls :meth:`FilterAdapter.insert` and
:meth:`FilterAdapter.contains`. Everything backend specific (constructor
arguments, hashing, table layout) stays inside the adapter's factory.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Callable, Optional

from bf_eval.errors import BackendConstructionError


@dataclass(frozen=True)
class FilterConfig:
    """Construction-time parameters handed to a backend factory."""

    capacity: int
    fp_rate: float = 0.0001
    layout: Optional[str] = None

    def __post_init__(self) -> None:
        if isinstance(self.capacity, bool) or not isinstance(self.capacity, int) or self.capacity <= 0:
            raise ValueError(f"capacity must be a positive integer, got {self.capacity!r}")
        if not 0.0 < self.fp_rate < 1.0:
            raise ValueError(f"fp_rate must be in (0, 1), got {self.fp_rate!r}")


class FilterAdapter(ABC):
    """One constructed backend instance behind insert / contains.

    Adapters are created per run, own their backend exclusively and are not
    safe for concurrent use.
    """

    name: str = "adapter"

    @abstractmethod
    def insert(self, item: bytes) -> bool:
        """Record ``item`` as a member. Returns False if the backend refused it."""
        ...

    @abstractmethod
    def contains(self, item: bytes) -> bool:
        """Membership query. Must not modify backend state."""
        ...


AdapterFactory = Callable[[FilterConfig], FilterAdapter]

_CONSTRUCTION_ERRORS = (ValueError, TypeError, OverflowError, MemoryError)


@dataclass(frozen=True)
class BackendSpec:
    """A named backend variant: factory plus its default sizing knobs."""

    name: str
    factory: AdapterFactory
    fp_rate: float = 0.0001
    layout: Optional[str] = None
    capacity: Optional[int] = None
    description: str = ""

    def config_for(self, required_capacity: int) -> FilterConfig:
        """Resolve the constructor config for a run needing ``required_capacity`` slots.

        An explicit per-backend capacity wins; otherwise the required
        capacity is passed through unchanged.
        """
        capacity = self.capacity if self.capacity is not None else required_capacity
        return FilterConfig(capacity=capacity, fp_rate=self.fp_rate, layout=self.layout)

    def build(self, required_capacity: int) -> FilterAdapter:
        """Construct a fresh adapter.

        Raises:
            BackendConstructionError: If the sizing is invalid or the backend
                refuses it.
        """
        try:
            adapter = self.factory(self.config_for(required_capacity))
        except _CONSTRUCTION_ERRORS as e:
            raise BackendConstructionError(self.name, str(e) or type(e).__name__) from e
        adapter.name = self.name
        return adapter

    def with_overrides(
        self,
        fp_rate: Optional[float] = None,
        capacity: Optional[int] = None,
        layout: Optional[str] = None,
    ) -> "BackendSpec":
        changes = {}
        if fp_rate is not None:
            changes["fp_rate"] = fp_rate
        if capacity is not None:
            changes["capacity"] = capacity
        if layout is not None:
            changes["layout"] = layout
        return replace(self, **changes)
