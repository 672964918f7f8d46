"""Logging utilities for the evaluation engine."""

from __future__ import annotations

import logging
import sys

import structlog


def configure_logging(level: str = "INFO", *, quiet: bool = False) -> None:
    """Configure structlog to emit JSON lines on stderr.

    stdout stays reserved for evaluation output. ``quiet`` raises the floor to
    WARNING regardless of ``level``.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    if quiet:
        log_level = max(log_level, logging.WARNING)

    logging.basicConfig(level=log_level, format="%(message)s", stream=sys.stderr)

    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
