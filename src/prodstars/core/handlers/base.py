"""Contract shared by all eval method handlers."""

from __future__ import annotations

import asyncio
import threading
from dataclasses import dataclass
from typing import Any, Callable, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class EvalRequest:
    """Everything a handler needs to evaluate one check."""

    check_id: str
    method: str
    target: str | None
    operator: str | None
    value: str | None
    timeout: float
    recorded_answer: bool | None = None


@dataclass(frozen=True, slots=True)
class HandlerResult:
    passed: bool
    skipped: bool = False
    details: str = ""

    @classmethod
    def skip(cls, details: str) -> "HandlerResult":
        return cls(passed=False, skipped=True, details=details)


@runtime_checkable
class EvalHandler(Protocol):
    """Eval method contract.

    Implementations observe the live system for one check and judge the
    observation with the check's operator. Raising marks the check as an
    evaluation error; the dispatcher owns timeouts and redaction.
    """

    method: str

    async def run(self, request: EvalRequest) -> HandlerResult:
        """Evaluate ``request`` and return its outcome."""


def require_target(request: EvalRequest) -> str:
    if not request.target:
        raise ValueError(f"{request.method} check {request.check_id!r} requires a target")
    return request.target


def _settle(future: asyncio.Future, result: Any, error: BaseException | None) -> None:
    if future.done():
        return
    if error is not None:
        future.set_exception(error)
    else:
        future.set_result(result)


async def run_blocking(func: Callable[..., T], *args: Any) -> T:
    """Run ``func`` on a daemon thread and await its result.

    Unlike ``asyncio.to_thread`` the thread is never joined: a check abandoned
    at the run deadline cannot hold up loop shutdown or interpreter exit.
    """
    loop = asyncio.get_running_loop()
    future: asyncio.Future = loop.create_future()

    def target() -> None:
        try:
            result, error = func(*args), None
        except BaseException as exc:  # noqa: BLE001 - handed to the awaiting task
            result, error = None, exc
        try:
            loop.call_soon_threadsafe(_settle, future, result, error)
        except RuntimeError:
            # Loop already closed; the run finished without this result.
            pass

    name = getattr(func, "__name__", "call")
    threading.Thread(target=target, name=f"prodstars-{name}", daemon=True).start()
    return await future
