"""Manually attested checks."""

from __future__ import annotations

from .base import EvalRequest, HandlerResult


class ManualHandler:
    """Skip unless the operator has recorded an answer for the check."""

    method = "manual"

    async def run(self, request: EvalRequest) -> HandlerResult:
        if request.recorded_answer is None:
            return HandlerResult.skip("Manual check awaiting confirmation")
        if request.recorded_answer:
            return HandlerResult(passed=True, details="Confirmed manually")
        return HandlerResult(passed=False, details="Rejected manually")
