"""Bounded-parallel execution of checks under a global deadline."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Sequence

import structlog

from .redaction import redact
from .results import CheckOutcome
from .weights import ResolvedCheck

DEFAULT_PARALLEL = 4
DEFAULT_RUN_TIMEOUT = 300.0

RUN_TIMED_OUT_DETAIL = "Run timed out before the check completed"

Evaluate = Callable[[ResolvedCheck], Awaitable[CheckOutcome]]


@dataclass(slots=True)
class ScheduleResult:
    """Outcome per check id plus the ids cut off by the global deadline."""

    outcomes: dict[str, CheckOutcome]
    timed_out: list[str] = field(default_factory=list)


class ConcurrencyScheduler:
    """Run checks on a bounded pool, collecting outcomes as they finish."""

    def __init__(
        self,
        *,
        parallel: int | None = None,
        timeout: float | None = None,
    ) -> None:
        parallel = parallel or DEFAULT_PARALLEL
        timeout = timeout or DEFAULT_RUN_TIMEOUT
        if parallel < 1:
            raise ValueError("parallel must be at least 1")
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self._parallel = parallel
        self._timeout = timeout
        self._logger = structlog.get_logger(__name__)

    async def run(
        self,
        checks: Sequence[ResolvedCheck],
        evaluate: Evaluate,
        *,
        parallel: int | None = None,
        timeout: float | None = None,
    ) -> ScheduleResult:
        limit = parallel or self._parallel
        deadline = timeout or self._timeout
        if not checks:
            return ScheduleResult(outcomes={})

        semaphore = asyncio.Semaphore(limit)
        completed: dict[str, CheckOutcome] = {}

        async def worker(check: ResolvedCheck) -> None:
            async with semaphore:
                outcome = await evaluate(check)
            completed.setdefault(check.id, outcome)

        tasks = [
            asyncio.create_task(worker(check), name=f"check:{check.id}")
            for check in checks
        ]
        _, pending = await asyncio.wait(tasks, timeout=deadline)

        # No await between the deadline and this snapshot, so nothing can land late.
        outcomes = dict(completed)
        timed_out: list[str] = []
        for task, check in zip(tasks, checks):
            if check.id in outcomes:
                continue
            if task in pending:
                task.cancel()
                timed_out.append(check.id)
                outcomes[check.id] = CheckOutcome(status="error", details=RUN_TIMED_OUT_DETAIL)
                continue
            if task.cancelled():
                outcomes[check.id] = CheckOutcome(status="error", details="Check was cancelled")
                continue
            exc = task.exception()
            outcomes[check.id] = CheckOutcome(
                status="error",
                details=redact(f"{type(exc).__name__}: {exc}") if exc else "Check produced no outcome",
            )

        if timed_out:
            self._logger.warning(
                "run.timed_out",
                timeout=deadline,
                unresolved=len(timed_out),
                check_ids=timed_out,
            )
        return ScheduleResult(outcomes=outcomes, timed_out=timed_out)
