"""Tests for the adapter registry and backend specs."""

from __future__ import annotations

import pytest

from bf_eval.adapters.base import BackendSpec, FilterConfig
from bf_eval.adapters.bloom import LightweightBloomAdapter, StandardBloomAdapter
from bf_eval.adapters.cuckoo import CuckooAdapter
from bf_eval.adapters.exact import ExactSetAdapter
from bf_eval.errors import BackendConstructionError
from bf_eval.registry import AdapterRegistry, default_registry


def test_default_names():
    assert default_registry().names() == [
        "bf_std",
        "bf_light",
        "cuckoo",
        "cuckoo/low",
        "cuckoo/packed",
        "exact_set",
    ]


def test_every_default_backend_builds_and_answers():
    for spec in default_registry().specs():
        adapter = spec.build(100)
        assert adapter.name == spec.name
        assert adapter.insert(b"alpha") is True
        assert adapter.contains(b"alpha") is True


def test_cuckoo_variants_pick_fingerprint_width_and_layout():
    registry = default_registry()
    assert registry.get("cuckoo").build(100).filter.fingerprint_bits == 16
    assert registry.get("cuckoo/low").build(100).filter.fingerprint_bits == 8
    packed = registry.get("cuckoo/packed").build(100).filter
    assert packed.fingerprint_bits == 13
    assert packed.layout == "packed"


def test_unknown_backend():
    with pytest.raises(KeyError, match="Choose"):
        default_registry().get("quotient")


def test_duplicate_registration():
    registry = AdapterRegistry([BackendSpec("a", ExactSetAdapter)])
    with pytest.raises(ValueError):
        registry.add("a", ExactSetAdapter)


def test_config_for_uses_hint_or_required_capacity():
    spec = BackendSpec("x", ExactSetAdapter, fp_rate=0.01)
    assert spec.config_for(500) == FilterConfig(capacity=500, fp_rate=0.01)
    assert spec.with_overrides(capacity=7).config_for(500).capacity == 7


def test_invalid_capacity_is_construction_error():
    spec = BackendSpec("x", ExactSetAdapter)
    with pytest.raises(BackendConstructionError) as excinfo:
        spec.build(0)
    assert excinfo.value.backend == "x"


def test_backend_rejection_is_construction_error():
    spec = BackendSpec("cuckoo/bad", CuckooAdapter, fp_rate=0.01, layout="sparse")
    with pytest.raises(BackendConstructionError, match="layout"):
        spec.build(100)


@pytest.mark.parametrize("adapter", [StandardBloomAdapter, LightweightBloomAdapter])
def test_bloom_backends_reject_a_layout(adapter):
    spec = BackendSpec("bloom", adapter, fp_rate=0.01, layout="packed")
    with pytest.raises(BackendConstructionError, match="layout"):
        spec.build(100)


def test_layout_override_on_bloom_is_reported_per_backend():
    spec = default_registry().with_overrides("bf_std", layout="packed")
    with pytest.raises(BackendConstructionError) as excinfo:
        spec.build(100)
    assert excinfo.value.backend == "bf_std"
