"""
Configuration for evaluation and throughput runs.

Configuration can come from a YAML file, from a plain dict, or from defaults.
Every value is validated when the config is built; anything invalid or
unrecognized raises :class:`ConfigError`.

Example::

    word_list_path: /usr/share/dict/words
    word_list_format: lines      # or csv (tokenized_text column)
    multipliers: [250]
    skip_modulus: 200
    member_check: per_word
    backends:
      - name: bf_std
        fp_rate: 0.0001
      - name: cuckoo/packed
        capacity: 60000000
    throughput:
      sizes: [500, 5000, 50000]
      seed: 0
      max_words: 50000
      min_ops: 100000
"""

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from bf_eval.adapters.base import BackendSpec
from bf_eval.corpus import (
    DEFAULT_MULTIPLIER,
    DEFAULT_SKIP_MODULUS,
    DEFAULT_WORD_LIST,
    WORD_LIST_FORMATS,
    MemberCheck,
)
from bf_eval.errors import ConfigError
from bf_eval.registry import AdapterRegistry
from bf_eval.throughput import DEFAULT_SIZES


def _positive_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"{name} must be a positive integer, got {value!r}")
    return value


def _check_keys(data: Dict[str, Any], allowed: set, section: str) -> None:
    unknown = set(data) - allowed
    if unknown:
        raise ConfigError(f"Unknown {section} option(s): {', '.join(sorted(unknown))}")


@dataclass
class BackendConfig:
    """Per-backend overrides of the registry defaults."""

    name: str
    fp_rate: Optional[float] = None
    capacity: Optional[int] = None
    layout: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name:
            raise ConfigError(f"backend name must be a non-empty string, got {self.name!r}")
        if self.fp_rate is not None:
            if isinstance(self.fp_rate, bool) or not isinstance(self.fp_rate, (int, float)) or not 0.0 < self.fp_rate < 1.0:
                raise ConfigError(f"{self.name}: fp_rate must be in (0, 1), got {self.fp_rate!r}")
            self.fp_rate = float(self.fp_rate)
        if self.capacity is not None:
            _positive_int(self.capacity, f"{self.name}: capacity")

    @classmethod
    def from_dict(cls, data: Union[str, Dict[str, Any]]) -> "BackendConfig":
        if isinstance(data, str):
            return cls(name=data)
        if not isinstance(data, dict):
            raise ConfigError(f"backend entry must be a name or a mapping, got {data!r}")
        _check_keys(data, {"name", "fp_rate", "capacity", "layout"}, "backend")
        if "name" not in data:
            raise ConfigError("backend entry is missing 'name'")
        return cls(**data)


@dataclass
class ThroughputConfig:
    """Working-set sizes and lookup-set construction for throughput runs."""

    sizes: List[int] = field(default_factory=lambda: list(DEFAULT_SIZES))
    seed: int = 0
    max_words: int = 50_000
    min_ops: int = 100_000

    def __post_init__(self):
        if not isinstance(self.sizes, (list, tuple)) or not self.sizes:
            raise ConfigError(f"throughput.sizes must be a non-empty list, got {self.sizes!r}")
        self.sizes = list(self.sizes)
        for size in self.sizes:
            _positive_int(size, "throughput.sizes entry")
        _positive_int(self.max_words, "throughput.max_words")
        _positive_int(self.min_ops, "throughput.min_ops")
        if isinstance(self.seed, bool) or not isinstance(self.seed, int):
            raise ConfigError(f"throughput.seed must be an integer, got {self.seed!r}")
        if max(self.sizes) > self.max_words:
            raise ConfigError(f"throughput size {max(self.sizes)} exceeds max_words {self.max_words}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ThroughputConfig":
        _check_keys(data, {"sizes", "seed", "max_words", "min_ops"}, "throughput")
        return cls(**data)


@dataclass
class EvaluationConfig:
    """Complete configuration for a comparison run."""

    word_list_path: Path = DEFAULT_WORD_LIST
    word_list_format: str = "lines"
    multipliers: List[int] = field(default_factory=lambda: [DEFAULT_MULTIPLIER])
    skip_modulus: int = DEFAULT_SKIP_MODULUS
    member_check: MemberCheck = MemberCheck.PER_WORD
    backends: List[BackendConfig] = field(default_factory=list)
    throughput: ThroughputConfig = field(default_factory=ThroughputConfig)

    def __post_init__(self):
        self.word_list_path = Path(self.word_list_path)
        if self.word_list_format not in WORD_LIST_FORMATS:
            raise ConfigError(
                f"word_list_format must be one of {', '.join(WORD_LIST_FORMATS)}, got {self.word_list_format!r}"
            )
        if not isinstance(self.multipliers, (list, tuple)) or not self.multipliers:
            raise ConfigError(f"multipliers must be a non-empty list, got {self.multipliers!r}")
        self.multipliers = list(self.multipliers)
        for multiplier in self.multipliers:
            _positive_int(multiplier, "multiplier")
        _positive_int(self.skip_modulus, "skip_modulus")
        try:
            self.member_check = MemberCheck(self.member_check)
        except ValueError:
            choices = ", ".join(m.value for m in MemberCheck)
            raise ConfigError(f"member_check must be one of {choices}, got {self.member_check!r}") from None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "EvaluationConfig":
        data = dict(data or {})
        _check_keys(
            data,
            {
                "word_list_path",
                "word_list_format",
                "multiplier",
                "multipliers",
                "skip_modulus",
                "member_check",
                "backends",
                "throughput",
            },
            "config",
        )
        if "multiplier" in data:
            if "multipliers" in data:
                raise ConfigError("Use either 'multiplier' or 'multipliers', not both")
            data["multipliers"] = [data.pop("multiplier")]
        if "backends" in data:
            data["backends"] = [BackendConfig.from_dict(b) for b in data["backends"] or []]
        if "throughput" in data:
            data["throughput"] = ThroughputConfig.from_dict(data["throughput"] or {})
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["word_list_path"] = str(self.word_list_path)
        data["member_check"] = self.member_check.value
        return data

    def resolve_backends(self, registry: AdapterRegistry) -> List[BackendSpec]:
        """Registry specs with per-backend overrides applied.

        Raises:
            ConfigError: If a configured backend is not registered.
        """
        if not self.backends:
            return registry.specs()
        specs = []
        for backend in self.backends:
            if backend.name not in registry:
                raise ConfigError(f"Unknown backend: {backend.name}. Choose: {', '.join(registry.names())}")
            specs.append(
                registry.with_overrides(
                    backend.name,
                    fp_rate=backend.fp_rate,
                    capacity=backend.capacity,
                    layout=backend.layout,
                )
            )
        return specs


def load_config(path: Union[str, Path]) -> EvaluationConfig:
    """Load an :class:`EvaluationConfig` from a YAML file."""
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if data is not None and not isinstance(data, dict):
        raise ConfigError(f"{path}: top level must be a mapping")
    return EvaluationConfig.from_dict(data)
