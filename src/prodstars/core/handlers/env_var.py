"""Environment variable checks."""

from __future__ import annotations

import os
from typing import Mapping

from ..operators import evaluate_operator
from .base import EvalRequest, HandlerResult, require_target


class EnvVarHandler:
    """Compare an environment variable against the expected value.

    Values are never echoed into details since they are often credentials.
    """

    method = "env_var"

    def __init__(self, *, environ: Mapping[str, str] | None = None) -> None:
        self._environ = environ if environ is not None else os.environ

    async def run(self, request: EvalRequest) -> HandlerResult:
        name = require_target(request)
        actual = self._environ.get(name)
        operator = request.operator or "exists"
        passed = evaluate_operator(operator, actual, request.value)

        state = "is set" if actual not in (None, "") else "is not set"
        if operator in ("exists", "not_exists"):
            details = f"{name} {state}"
        else:
            verdict = "satisfies" if passed else "does not satisfy"
            details = f"{name} {state}; value {verdict} {operator} {request.value!r}"
        return HandlerResult(passed=passed, details=details)
