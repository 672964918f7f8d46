"""Deployer override and community weight documents."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .document import Severity


class CheckOverride(BaseModel):
    """Per-check adjustments set by whoever deploys the product."""

    weight: float | None = Field(default=None, ge=1, le=10)
    skip: bool = False
    skip_reason: str | None = None
    severity: Severity | None = None

    model_config = ConfigDict(extra="forbid")


class DomainOverride(BaseModel):
    """Per-domain weight multiplier override."""

    weight: float | None = Field(default=None, gt=0)

    model_config = ConfigDict(extra="forbid")


class OverridesFile(BaseModel):
    """Deployer overrides, usually ``.prodstars/overrides.yaml``."""

    schema_: str = Field(default="prodstars-overrides/v1.0", alias="schema")
    minimum_rating: float | None = Field(default=None, ge=0, le=5)
    check_overrides: dict[str, CheckOverride] = Field(default_factory=dict)
    domain_overrides: dict[str, DomainOverride] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class CommunityWeightsFile(BaseModel):
    """Community consensus weights keyed by check id."""

    schema_: str = Field(default="prodstars-community/v1.0", alias="schema")
    source: str | None = None
    fetched: str | None = None
    sample_size: int | None = Field(default=None, ge=0)
    weights: dict[str, float] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    @field_validator("fetched", mode="before")
    @classmethod
    def _stringify_timestamp(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        return value.isoformat() if hasattr(value, "isoformat") else str(value)
