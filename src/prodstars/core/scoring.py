"""Conversion of check outcomes into points, domain ratings and stars."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from types import MappingProxyType
from typing import Iterable, Mapping, Sequence

import structlog

from ..schemas import Domain
from .labels import MAX_STARS, get_rating_label
from .results import CheckOutcome, CheckResult, CheckSummary, DomainRating, Rating
from .weights import ResolvedCheck

SEVERITY_MULTIPLIERS = MappingProxyType(
    {
        "critical": 3.0,
        "high": 2.0,
        "medium": 1.0,
        "low": 0.5,
        "info": 0.0,
    }
)

# Lower ranks first.
SEVERITY_RANK = MappingProxyType(
    {
        "critical": 0,
        "high": 1,
        "medium": 2,
        "low": 3,
        "info": 4,
    }
)

CRITICAL_CAP_MAX_RATING = 1.5
CRITICAL_CAP_RULE = "critical_check_failed"


def _to_decimal(value: float | Decimal) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(repr(float(value)))


def round_stars(value: float | Decimal) -> float:
    """Round to one decimal place, halves away from zero."""
    return float(_to_decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def stars_for(earned: float, possible: float) -> float:
    """Return 5 * earned / possible, rounded; zero possible points rate 5.0.

    The division happens in ``Decimal`` so exact halves such as 59/100 -> 2.95
    are not lost to binary floating point before rounding.
    """
    if possible <= 0:
        return MAX_STARS
    stars = _to_decimal(earned) * _to_decimal(MAX_STARS) / _to_decimal(possible)
    return round_stars(min(max(stars, Decimal(0)), _to_decimal(MAX_STARS)))


@dataclass(slots=True)
class ScoreCard:
    checks: list[CheckResult]
    domains: list[DomainRating]
    rating: Rating
    summary: CheckSummary


class ScoringEngine:
    """Pure aggregation over a fully collected set of outcomes."""

    def __init__(
        self,
        *,
        severity_multipliers: Mapping[str, float] | None = None,
        critical_cap: float = CRITICAL_CAP_MAX_RATING,
    ) -> None:
        self._multipliers = severity_multipliers or SEVERITY_MULTIPLIERS
        self._critical_cap = critical_cap
        self._logger = structlog.get_logger(__name__)

    def score_check(self, resolved: ResolvedCheck, outcome: CheckOutcome) -> CheckResult:
        check = resolved.check
        base = resolved.weight * self._multipliers[resolved.severity] * resolved.domain_weight

        if resolved.skip or (outcome.status == "skip" and check.skip_score is None):
            earned = possible = 0.0
        else:
            possible = check.pass_score * base
            if outcome.status == "pass":
                earned = possible
            elif outcome.status == "skip":
                earned = (check.skip_score or 0.0) * base
            else:
                # fail and error score the same
                earned = check.fail_score * base

        return CheckResult(
            id=check.id,
            name=check.name,
            domain=resolved.domain_id,
            severity=resolved.severity,
            status=outcome.status,
            resolved_weight=resolved.weight,
            points_earned=earned,
            points_possible=possible,
            details=outcome.details,
        )

    def score(
        self,
        resolved_checks: Sequence[ResolvedCheck],
        outcomes: Mapping[str, CheckOutcome],
        *,
        domains: Iterable[Domain] = (),
    ) -> ScoreCard:
        """Score every resolved check; ``domains`` adds domains with no checks left."""
        results = [self.score_check(resolved, outcomes[resolved.id]) for resolved in resolved_checks]

        domain_names: dict[str, str] = {domain.id: domain.name for domain in domains}
        for resolved in resolved_checks:
            domain_names.setdefault(resolved.domain_id, resolved.domain_name)

        domain_ratings = [
            self._rate_domain(domain_id, name, [r for r in results if r.domain == domain_id])
            for domain_id, name in domain_names.items()
        ]

        rating = self._rate_overall(results)
        summary = self._summarize(results)
        return ScoreCard(checks=results, domains=domain_ratings, rating=rating, summary=summary)

    def _rate_domain(self, domain_id: str, name: str, results: list[CheckResult]) -> DomainRating:
        earned = sum(r.points_earned for r in results)
        possible = sum(r.points_possible for r in results)
        stars = stars_for(earned, possible)
        return DomainRating(
            id=domain_id,
            name=name,
            stars=stars,
            label=get_rating_label(stars),
            passed=sum(1 for r in results if r.status == "pass"),
            failed=sum(1 for r in results if r.status in ("fail", "error")),
            points_earned=earned,
            points_possible=possible,
        )

    def _rate_overall(self, results: list[CheckResult]) -> Rating:
        earned = sum(r.points_earned for r in results)
        possible = sum(r.points_possible for r in results)
        uncapped = stars_for(earned, possible)

        critical_failures = [
            r.id
            for r in results
            if r.severity == "critical" and r.status in ("fail", "error")
        ]

        stars = uncapped
        capped = False
        cap_reason = None
        if critical_failures:
            stars = min(uncapped, self._critical_cap)
            capped = stars < uncapped
            if capped:
                cap_reason = (
                    f"{CRITICAL_CAP_RULE}: critical check(s) {', '.join(critical_failures)} "
                    f"failed; rating capped at {self._critical_cap}"
                )
                self._logger.info(
                    "rating.capped",
                    stars_uncapped=uncapped,
                    stars=stars,
                    check_ids=critical_failures,
                )

        return Rating(
            stars=stars,
            stars_uncapped=uncapped,
            label=get_rating_label(stars),
            capped=capped,
            cap_reason=cap_reason,
        )

    @staticmethod
    def _summarize(results: list[CheckResult]) -> CheckSummary:
        summary = CheckSummary(total_checks=len(results))
        for result in results:
            if result.status == "pass":
                summary.passed += 1
            elif result.status == "fail":
                summary.failed += 1
            elif result.status == "skip":
                summary.skipped += 1
            else:
                summary.errors += 1
            if result.severity == "info":
                summary.info += 1
        return summary
