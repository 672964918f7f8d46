"""Dispatch of a single check to its eval method handler."""

from __future__ import annotations

import asyncio
from typing import Iterable, List

import structlog

from ..exceptions import ConfigurationError
from .handlers import EXTENDED_METHODS, EvalHandler, EvalRequest
from .operators import compile_pattern, resolve_operator
from .redaction import redact
from .results import CheckOutcome
from .weights import ResolvedCheck

DEFAULT_CHECK_TIMEOUT = 30.0


def _error_outcome(exc: BaseException) -> CheckOutcome:
    return CheckOutcome(status="error", details=redact(f"{type(exc).__name__}: {exc}"))


class HandlerRegistry:
    """Registry mapping eval method names to handlers."""

    def __init__(self, handlers: Iterable[EvalHandler]):
        self._handlers: dict[str, EvalHandler] = {}
        for handler in handlers:
            self.register(handler)

    def register(self, handler: EvalHandler) -> None:
        self._handlers[handler.method] = handler

    def get(self, method: str) -> EvalHandler:
        try:
            return self._handlers[method]
        except KeyError as exc:
            if method in EXTENDED_METHODS:
                raise ConfigurationError(
                    f"Eval method {method!r} is not supported by this installation"
                ) from exc
            raise ConfigurationError(f"Unknown eval method: {method!r}") from exc

    def methods(self) -> List[str]:
        return list(self._handlers.keys())

    def __contains__(self, method: object) -> bool:
        return method in self._handlers


class EvalDispatcher:
    """Run one check's handler under its timeout and normalize the outcome."""

    def __init__(
        self,
        registry: HandlerRegistry,
        *,
        default_timeout: float | None = None,
    ) -> None:
        self._registry = registry
        self._default_timeout = default_timeout or DEFAULT_CHECK_TIMEOUT
        self._logger = structlog.get_logger(__name__)

    def validate(self, resolved: ResolvedCheck) -> None:
        """Raise ``ConfigurationError`` if the check can never be dispatched."""
        definition = resolved.check.eval
        self._registry.get(definition.method)
        if definition.operator is None:
            return
        operator = resolve_operator(definition.operator)
        if operator in ("matches", "not_matches"):
            compile_pattern(definition.value or "")

    def timeout_for(self, resolved: ResolvedCheck) -> float:
        definition = resolved.check.eval
        if definition.timeout is not None:
            return float(definition.timeout)
        handler = self._registry.get(definition.method)
        return float(getattr(handler, "default_timeout", self._default_timeout))

    def build_request(
        self,
        resolved: ResolvedCheck,
        *,
        recorded_answer: bool | None = None,
    ) -> EvalRequest:
        definition = resolved.check.eval
        return EvalRequest(
            check_id=resolved.id,
            method=definition.method,
            target=definition.target,
            operator=resolve_operator(definition.operator) if definition.operator else None,
            value=definition.value,
            timeout=self.timeout_for(resolved),
            recorded_answer=recorded_answer,
        )

    async def dispatch(
        self,
        resolved: ResolvedCheck,
        *,
        recorded_answer: bool | None = None,
    ) -> CheckOutcome:
        handler = self._registry.get(resolved.check.eval.method)
        request = self.build_request(resolved, recorded_answer=recorded_answer)

        deadline = asyncio.timeout(request.timeout)
        try:
            async with deadline:
                result = await handler.run(request)
        except TimeoutError as exc:
            if deadline.expired():
                outcome = CheckOutcome(
                    status="error",
                    details=f"Check timed out after {request.timeout:g}s",
                )
            else:
                # raised by the handler itself, e.g. a socket timeout
                outcome = _error_outcome(exc)
        except Exception as exc:  # noqa: BLE001 - contained to this check
            outcome = _error_outcome(exc)
        else:
            if result.skipped:
                status = "skip"
            else:
                status = "pass" if result.passed else "fail"
            outcome = CheckOutcome(status=status, details=redact(result.details))

        self._logger.debug(
            "check.completed",
            check_id=resolved.id,
            method=request.method,
            status=outcome.status,
            details=outcome.details,
        )
        return outcome
