"""Comparison operators used by eval handlers to judge observed values.

Every operator takes the observed value (``None`` when nothing was observed)
and the expected value from the check definition, both as strings.
"""

from __future__ import annotations

import math
import re
from functools import lru_cache
from types import MappingProxyType
from typing import Callable

from ..exceptions import ConfigurationError

OperatorFn = Callable[[str | None, str | None], bool]

OPERATOR_ALIASES = MappingProxyType(
    {
        "equals": "eq",
        "==": "eq",
        "not_equals": "neq",
        "!=": "neq",
        ">": "gt",
        ">=": "gte",
        "<": "lt",
        "<=": "lte",
        "includes": "contains",
        "excludes": "not_contains",
        "regex": "matches",
        "not_regex": "not_matches",
    }
)


def eq(actual: str | None, expected: str | None) -> bool:
    if actual is None:
        return False
    return actual == (expected or "")


def neq(actual: str | None, expected: str | None) -> bool:
    if actual is None:
        return True
    return actual != (expected or "")


_DECIMAL_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")


def _to_number(value: str | None) -> float | None:
    if value is None:
        return None
    text = value.strip()
    if not _DECIMAL_RE.match(text):
        return None
    number = float(text)
    return number if math.isfinite(number) else None


def _operands(actual: str | None, expected: str | None) -> tuple[float, float] | None:
    left = _to_number(actual)
    right = _to_number(expected)
    if left is None or right is None:
        return None
    return left, right


def gt(actual: str | None, expected: str | None) -> bool:
    pair = _operands(actual, expected)
    return pair is not None and pair[0] > pair[1]


def gte(actual: str | None, expected: str | None) -> bool:
    pair = _operands(actual, expected)
    return pair is not None and pair[0] >= pair[1]


def lt(actual: str | None, expected: str | None) -> bool:
    pair = _operands(actual, expected)
    return pair is not None and pair[0] < pair[1]


def lte(actual: str | None, expected: str | None) -> bool:
    pair = _operands(actual, expected)
    return pair is not None and pair[0] <= pair[1]


def contains(actual: str | None, expected: str | None) -> bool:
    if actual is None:
        return False
    return (expected or "") in actual


def not_contains(actual: str | None, expected: str | None) -> bool:
    return not contains(actual, expected)


@lru_cache(maxsize=256)
def compile_pattern(pattern: str) -> re.Pattern[str]:
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise ConfigurationError(f"Invalid regular expression {pattern!r}: {exc}") from exc


def matches(actual: str | None, expected: str | None) -> bool:
    pattern = compile_pattern(expected or "")
    if actual is None:
        return False
    return pattern.search(actual) is not None


def not_matches(actual: str | None, expected: str | None) -> bool:
    pattern = compile_pattern(expected or "")
    if actual is None:
        return True
    return pattern.search(actual) is None


def exists(actual: str | None, expected: str | None = None) -> bool:
    return actual is not None and actual != ""


def not_exists(actual: str | None, expected: str | None = None) -> bool:
    return not exists(actual)


OPERATORS: "MappingProxyType[str, OperatorFn]" = MappingProxyType(
    {
        "eq": eq,
        "neq": neq,
        "gt": gt,
        "gte": gte,
        "lt": lt,
        "lte": lte,
        "contains": contains,
        "not_contains": not_contains,
        "matches": matches,
        "not_matches": not_matches,
        "exists": exists,
        "not_exists": not_exists,
    }
)


def resolve_operator(name: str) -> str:
    """Return the canonical operator name for ``name`` or an alias of it."""
    canonical = OPERATOR_ALIASES.get(name, name)
    if canonical not in OPERATORS:
        raise ConfigurationError(f"Unknown operator: {name!r}")
    return canonical


def evaluate_operator(operator: str, actual: str | None, expected: str | None) -> bool:
    return OPERATORS[resolve_operator(operator)](actual, expected)


__all__ = [
    "OPERATORS",
    "OPERATOR_ALIASES",
    "compile_pattern",
    "contains",
    "eq",
    "evaluate_operator",
    "exists",
    "gt",
    "gte",
    "lt",
    "lte",
    "matches",
    "neq",
    "not_contains",
    "not_exists",
    "not_matches",
    "resolve_operator",
]
