"""Star rating labels and badge colors."""

from __future__ import annotations

from typing import Literal

RatingLabel = Literal[
    "Exceptional",
    "Strong",
    "Solid",
    "Acceptable",
    "Needs Work",
    "Poor",
    "Critical Issues",
    "Failing",
    "Not Ready",
]
BadgeColor = Literal["brightgreen", "yellow", "orange", "red"]

MAX_STARS = 5.0

# (inclusive lower bound, label), best first.
RATING_THRESHOLDS: tuple[tuple[float, RatingLabel], ...] = (
    (4.5, "Exceptional"),
    (4.0, "Strong"),
    (3.5, "Solid"),
    (3.0, "Acceptable"),
    (2.5, "Needs Work"),
    (2.0, "Poor"),
    (1.5, "Critical Issues"),
    (1.0, "Failing"),
    (0.0, "Not Ready"),
)

BADGE_COLOR_THRESHOLDS: tuple[tuple[float, BadgeColor], ...] = (
    (4.0, "brightgreen"),
    (3.0, "yellow"),
    (2.0, "orange"),
    (0.0, "red"),
)

ALL_RATING_LABELS: tuple[RatingLabel, ...] = tuple(label for _, label in RATING_THRESHOLDS)


def _check_range(stars: float) -> None:
    if not 0.0 <= stars <= MAX_STARS:
        raise ValueError(f"Star rating must be between 0.0 and 5.0, got {stars}")


def get_rating_label(stars: float) -> RatingLabel:
    """Return the label for ``stars``; raises ``ValueError`` outside [0, 5]."""
    _check_range(stars)
    for minimum, label in RATING_THRESHOLDS:
        if stars >= minimum:
            return label
    raise AssertionError("unreachable: thresholds start at 0.0")


def get_badge_color(stars: float) -> BadgeColor:
    _check_range(stars)
    for minimum, color in BADGE_COLOR_THRESHOLDS:
        if stars >= minimum:
            return color
    raise AssertionError("unreachable: thresholds start at 0.0")
