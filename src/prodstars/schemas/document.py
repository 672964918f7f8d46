"""Pydantic models for a parsed ProdStars scorecard document."""

from __future__ import annotations

import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Severity = Literal["critical", "high", "medium", "low", "info"]

STANDARD_DOMAIN_IDS: tuple[str, ...] = (
    "environment",
    "authentication",
    "dependencies",
    "configuration",
    "data",
    "operations",
)

_CUSTOM_DOMAIN_RE = re.compile(r"^x-[a-z0-9]+-[a-z0-9][a-z0-9-]*$")


class EvalDefinition(BaseModel):
    """How a check is evaluated."""

    method: str
    target: str | None = None
    operator: str | None = None
    value: str | None = None
    timeout: float | None = Field(default=None, gt=0)

    model_config = ConfigDict(extra="forbid")

    @field_validator("target", "value", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        # YAML happily yields ints and bools for unquoted scalars.
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)


class Remediation(BaseModel):
    """Remediation guidance attached to a check."""

    summary: str
    commands: list[str] = Field(default_factory=list)
    docs_url: str | None = None

    model_config = ConfigDict(extra="forbid")


class CheckWeight(BaseModel):
    """Developer and community weights."""

    developer: float = Field(ge=1, le=10)
    community: float | None = Field(default=None, ge=1, le=10)

    model_config = ConfigDict(extra="forbid")


class Check(BaseModel):
    """A single testable assertion about the deployment environment."""

    id: str
    name: str
    description: str | None = None
    severity: Severity
    weight: CheckWeight
    tags: list[str] = Field(default_factory=list)
    eval: EvalDefinition
    pass_score: float = Field(ge=0, le=10)
    fail_score: float = Field(default=0.0, ge=0, le=10)
    skip_score: float | None = Field(default=None, ge=0, le=10)
    remediation: Remediation | None = None
    cwe: str | None = None
    references: list[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


class Domain(BaseModel):
    """A weighted grouping of related checks."""

    id: str
    name: str
    description: str | None = None
    weight: float = Field(default=1.0, gt=0)
    checks: list[Check] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @field_validator("id")
    @classmethod
    def _validate_id(cls, value: str) -> str:
        if value in STANDARD_DOMAIN_IDS or _CUSTOM_DOMAIN_RE.match(value):
            return value
        raise ValueError(
            f"domain id {value!r} must be one of {', '.join(STANDARD_DOMAIN_IDS)} "
            "or follow x-<org>-<name>"
        )


class ComposeEntry(BaseModel):
    """Reference to another scorecard whose checks are inherited."""

    source: str
    prefix: str
    weight: float | None = None
    domains: list[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


class WebhookConfig(BaseModel):
    """Webhook endpoint notified after evaluation."""

    url: str
    events: list[str] = Field(default_factory=list)
    auth: str | None = None

    model_config = ConfigDict(extra="forbid")


class ProdStarsDocument(BaseModel):
    """Complete scorecard document."""

    schema_: str = Field(alias="schema")
    product: str
    version: str
    maintainer: str | None = None
    license: str | None = None
    updated: str | None = None
    minimum_rating: float = Field(default=0.0, ge=0, le=5)
    tags: list[str] = Field(default_factory=list)
    domains: list[Domain] = Field(default_factory=list)
    compose: list[ComposeEntry] = Field(default_factory=list)
    webhooks: list[WebhookConfig] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    @field_validator("updated", "version", mode="before")
    @classmethod
    def _stringify_dates(cls, value: Any) -> Any:
        # Unquoted ISO dates and numeric versions arrive as date/float objects.
        if value is None or isinstance(value, str):
            return value
        return value.isoformat() if hasattr(value, "isoformat") else str(value)

    @model_validator(mode="after")
    def _unique_ids(self) -> "ProdStarsDocument":
        seen_domains: set[str] = set()
        seen_checks: set[str] = set()
        for domain in self.domains:
            if domain.id in seen_domains:
                raise ValueError(f"duplicate domain id {domain.id!r}")
            seen_domains.add(domain.id)
            for check in domain.checks:
                if check.id in seen_checks:
                    raise ValueError(f"duplicate check id {check.id!r}")
                seen_checks.add(check.id)
        return self

    def iter_checks(self):
        """Yield ``(domain, check)`` pairs in document order."""
        for domain in self.domains:
            for check in domain.checks:
                yield domain, check
