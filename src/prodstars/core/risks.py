"""Ranking of failing checks by the points they cost."""

from __future__ import annotations

from typing import Mapping, Sequence

from ..schemas import Check
from .results import CheckResult, TopRisk
from .scoring import SEVERITY_RANK

TOP_RISK_LIMIT = 5


class RiskRanker:
    """Order failing checks by risk impact, then severity, then id."""

    def __init__(self, *, limit: int = TOP_RISK_LIMIT) -> None:
        self._limit = limit

    def rank(
        self,
        results: Sequence[CheckResult],
        checks: Mapping[str, Check],
    ) -> list[TopRisk]:
        failing = [r for r in results if r.status in ("fail", "error")]
        failing.sort(
            key=lambda r: (
                -(r.points_possible - r.points_earned),
                SEVERITY_RANK[r.severity],
                r.id,
            )
        )
        return [self._to_risk(r, checks.get(r.id)) for r in failing[: self._limit]]

    @staticmethod
    def _to_risk(result: CheckResult, check: Check | None) -> TopRisk:
        remediation = check.remediation if check else None
        return TopRisk(
            id=result.id,
            name=result.name,
            severity=result.severity,
            domain=result.domain,
            risk_impact=result.points_possible - result.points_earned,
            remediation_summary=remediation.summary if remediation else None,
            remediation_commands=list(remediation.commands) if remediation else [],
        )
