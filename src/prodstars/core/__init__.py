"""Core check evaluation and scoring components."""

from __future__ import annotations

# NOTE: keep imports explicit for export clarity.
from .dispatcher import EvalDispatcher, HandlerRegistry
from .engine import EvaluationEngine
from .gate import effective_minimum, evaluate_gate
from .handlers import EvalHandler, EvalRequest, HandlerResult
from .labels import get_badge_color, get_rating_label
from .results import (
    CheckOutcome,
    CheckResult,
    CheckSummary,
    DomainRating,
    EvaluationResult,
    GateResult,
    Rating,
    TopRisk,
)
from .risks import RiskRanker
from .scheduler import ConcurrencyScheduler
from .scoring import SEVERITY_MULTIPLIERS, ScoringEngine
from .weights import ResolvedCheck, WeightResolver

__all__ = [
    "CheckOutcome",
    "CheckResult",
    "CheckSummary",
    "ConcurrencyScheduler",
    "DomainRating",
    "EvalDispatcher",
    "EvalHandler",
    "EvalRequest",
    "EvaluationEngine",
    "EvaluationResult",
    "GateResult",
    "HandlerRegistry",
    "HandlerResult",
    "Rating",
    "ResolvedCheck",
    "RiskRanker",
    "SEVERITY_MULTIPLIERS",
    "ScoringEngine",
    "TopRisk",
    "WeightResolver",
    "effective_minimum",
    "evaluate_gate",
    "get_badge_color",
    "get_rating_label",
]
