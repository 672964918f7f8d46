"""Result structures produced by an evaluation run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from ..schemas.document import Severity
from .labels import MAX_STARS, RatingLabel

CheckStatus = Literal["pass", "fail", "skip", "error"]


@dataclass(frozen=True, slots=True)
class CheckOutcome:
    """Raw outcome of running one check. Details are already redacted."""

    status: CheckStatus
    details: str = ""


@dataclass(slots=True)
class CheckResult:
    id: str
    name: str
    domain: str
    severity: Severity
    status: CheckStatus
    resolved_weight: float
    points_earned: float
    points_possible: float
    details: str = ""


@dataclass(slots=True)
class DomainRating:
    id: str
    name: str
    stars: float
    label: RatingLabel
    passed: int
    failed: int
    points_earned: float
    points_possible: float


@dataclass(slots=True)
class Rating:
    stars: float
    stars_uncapped: float
    label: RatingLabel
    capped: bool = False
    cap_reason: str | None = None
    max_stars: float = MAX_STARS


@dataclass(slots=True)
class CheckSummary:
    total_checks: int = 0
    passed: int = 0
    failed: int = 0
    skipped: int = 0
    errors: int = 0
    info: int = 0


@dataclass(slots=True)
class TopRisk:
    id: str
    name: str
    severity: Severity
    domain: str
    risk_impact: float
    remediation_summary: str | None = None
    remediation_commands: list[str] = field(default_factory=list)


@dataclass(slots=True)
class GateResult:
    minimum_rating: float
    passed: bool


@dataclass(slots=True)
class EvaluationResult:
    """Complete payload consumed by renderers and exit-code logic."""

    schema: str
    product: str
    version: str
    evaluated_at: str
    rating: Rating
    summary: CheckSummary
    domains: list[DomainRating]
    top_risks: list[TopRisk]
    checks: list[CheckResult]
    gate: GateResult
    timed_out: bool = False
