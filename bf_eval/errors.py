"""Error taxonomy for the evaluation harness.

Corpus-level errors abort a whole batch. Backend-level errors are isolated to
the backend that raised them. A refused insertion is not an error at all; it is
counted in ``ClassificationCounts.insert_failed``.
"""
from __future__ import annotations


class AmqEvalError(Exception):
    """Base class for harness errors."""


class InsufficientCorpus(AmqEvalError):
    """The word list is too small for the requested partition."""

    def __init__(self, required: int, available: int, reason: str = "") -> None:
        self.required = required
        self.available = available
        message = f"need at least {required} words, got {available}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class BackendConstructionError(AmqEvalError):
    """A backend rejected its sizing parameters."""

    def __init__(self, backend: str, message: str) -> None:
        self.backend = backend
        super().__init__(f"{backend}: {message}")


class UndefinedRate(AmqEvalError, ZeroDivisionError):
    """A rate was requested over zero samples."""


class ConfigError(AmqEvalError, ValueError):
    """Invalid or unknown configuration value."""
