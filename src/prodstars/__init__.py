"""ProdStars deployment readiness evaluation engine."""

from __future__ import annotations

__version__ = "1.0.0"

SCHEMA_VERSION = "prodstars/v1.0"

__all__ = ["SCHEMA_VERSION", "__version__"]
