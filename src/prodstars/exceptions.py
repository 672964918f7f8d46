"""Exception hierarchy for scorecard evaluation."""

from __future__ import annotations


class ProdStarsError(Exception):
    """Base class for all evaluation errors."""


class ConfigurationError(ProdStarsError, ValueError):
    """Raised before scheduling when the scorecard cannot be evaluated as written.

    Covers unknown operators, eval methods and domain filters, invalid regular
    expressions and out-of-range weights. A run that raises this is never
    partially scored.
    """


class DocumentLoadError(ProdStarsError):
    """Raised when an input file cannot be read or validated."""

    def __init__(self, path: str, errors: list[str]):
        super().__init__(f"Failed to load {path}")
        self.path = path
        self.errors = errors

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Failed to load {self.path}: {self.errors}"
