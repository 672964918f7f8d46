"""Pydantic schema definitions for scorecard inputs and run options."""

from __future__ import annotations

from .config import AppConfig, EvalOptions, load_config
from .document import (
    STANDARD_DOMAIN_IDS,
    Check,
    CheckWeight,
    Domain,
    EvalDefinition,
    ProdStarsDocument,
    Remediation,
    Severity,
)
from .overrides import CheckOverride, CommunityWeightsFile, DomainOverride, OverridesFile

__all__ = [
    "AppConfig",
    "Check",
    "CheckOverride",
    "CheckWeight",
    "CommunityWeightsFile",
    "Domain",
    "DomainOverride",
    "EvalDefinition",
    "EvalOptions",
    "OverridesFile",
    "ProdStarsDocument",
    "Remediation",
    "STANDARD_DOMAIN_IDS",
    "Severity",
    "load_config",
]
