"""Resolution of per-check weights, severities and skip flags."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal

import structlog

from ..exceptions import ConfigurationError
from ..schemas import (
    Check,
    CheckOverride,
    CommunityWeightsFile,
    Domain,
    OverridesFile,
    ProdStarsDocument,
    Severity,
)

WeightSource = Literal["override", "community", "developer"]

MIN_WEIGHT = 1.0
MAX_WEIGHT = 10.0


@dataclass(frozen=True, slots=True)
class ResolvedCheck:
    """Frozen per-run view of a check. Built before any eval runs."""

    check: Check
    domain_id: str
    domain_name: str
    domain_weight: float
    weight: float
    weight_source: WeightSource
    severity: Severity
    skip: bool = False
    skip_reason: str | None = None

    @property
    def id(self) -> str:
        return self.check.id


def _validate_weight(value: float, *, label: str, check_id: str) -> float:
    weight = float(value)
    if not math.isfinite(weight) or not MIN_WEIGHT <= weight <= MAX_WEIGHT:
        raise ConfigurationError(
            f"{label} weight for check {check_id!r} must be within 1-10, got {value!r}"
        )
    return weight


class WeightResolver:
    """Combine developer, community and deployer inputs into one weight."""

    def __init__(self) -> None:
        self._logger = structlog.get_logger(__name__)

    def resolve(
        self,
        check: Check,
        domain: Domain,
        *,
        override: CheckOverride | None = None,
        community_weight: float | None = None,
        domain_weight: float | None = None,
    ) -> ResolvedCheck:
        effective_domain_weight = domain.weight if domain_weight is None else float(domain_weight)
        if not math.isfinite(effective_domain_weight) or effective_domain_weight <= 0:
            raise ConfigurationError(
                f"Domain weight for {domain.id!r} must be positive, got {effective_domain_weight!r}"
            )

        weight: float
        source: WeightSource
        if override is not None and override.weight is not None:
            weight = _validate_weight(override.weight, label="Override", check_id=check.id)
            source = "override"
        elif community_weight is not None:
            weight = _validate_weight(community_weight, label="Community", check_id=check.id)
            source = "community"
        elif check.weight.community is not None:
            weight = _validate_weight(check.weight.community, label="Community", check_id=check.id)
            source = "community"
        else:
            weight = _validate_weight(check.weight.developer, label="Developer", check_id=check.id)
            source = "developer"

        severity: Severity = check.severity
        if override is not None and override.severity is not None:
            severity = override.severity

        skip = bool(override is not None and override.skip)
        skip_reason = None
        if skip:
            skip_reason = (override.skip_reason if override else None) or "Skipped by deployer override"

        return ResolvedCheck(
            check=check,
            domain_id=domain.id,
            domain_name=domain.name,
            domain_weight=effective_domain_weight,
            weight=weight,
            weight_source=source,
            severity=severity,
            skip=skip,
            skip_reason=skip_reason,
        )

    def resolve_document(
        self,
        document: ProdStarsDocument,
        *,
        overrides: OverridesFile | None = None,
        community: CommunityWeightsFile | None = None,
    ) -> list[ResolvedCheck]:
        """Resolve every check in document order."""
        check_overrides = overrides.check_overrides if overrides else {}
        domain_overrides = overrides.domain_overrides if overrides else {}
        community_weights = community.weights if community else {}

        known_ids = {check.id for _, check in document.iter_checks()}
        unknown = sorted(set(check_overrides) - known_ids)
        if unknown:
            self._logger.warning("overrides.unknown_checks", check_ids=unknown)

        resolved: list[ResolvedCheck] = []
        for domain in document.domains:
            domain_override = domain_overrides.get(domain.id)
            domain_weight = domain_override.weight if domain_override else None
            for check in domain.checks:
                resolved.append(
                    self.resolve(
                        check,
                        domain,
                        override=check_overrides.get(check.id),
                        community_weight=community_weights.get(check.id),
                        domain_weight=domain_weight,
                    )
                )
        return resolved
