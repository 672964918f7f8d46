"""Pass/fail gate against the minimum rating."""

from __future__ import annotations

from .results import GateResult, Rating


def effective_minimum(
    *,
    fail_under: float | None = None,
    org_minimum: float | None = None,
    document_minimum: float | None = None,
) -> float:
    """Pick the first threshold set: CLI, then deployer overrides, then document."""
    for candidate in (fail_under, org_minimum, document_minimum):
        if candidate is not None:
            return float(candidate)
    return 0.0


def evaluate_gate(rating: Rating, minimum_rating: float) -> GateResult:
    return GateResult(minimum_rating=minimum_rating, passed=rating.stars >= minimum_rating)
