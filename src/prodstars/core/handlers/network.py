"""TCP port and HTTP status checks."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from urllib import error, request as urllib_request

from ..operators import evaluate_operator
from .base import EvalRequest, HandlerResult, require_target, run_blocking


def split_host_port(target: str) -> tuple[str, int]:
    host, sep, port = target.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise ValueError(f"port_open target must be host:port, got {target!r}")
    return host.strip("[]"), int(port)


class PortOpenHandler:
    """Pass when a TCP connection to ``host:port`` succeeds."""

    method = "port_open"

    async def run(self, request: EvalRequest) -> HandlerResult:
        host, port = split_host_port(require_target(request))
        try:
            _, writer = await asyncio.open_connection(host, port)
        except OSError as exc:
            actual = None
            state = f"closed ({exc.strerror or exc})"
        else:
            writer.close()
            await writer.wait_closed()
            actual = "open"
            state = "open"
        operator = request.operator or "exists"
        passed = evaluate_operator(operator, actual, request.value)
        return HandlerResult(passed=passed, details=f"{host}:{port} is {state}")


@dataclass
class HttpConfig:
    """Configuration for HTTP status checks."""

    http_method: str = "GET"
    user_agent: str = "prodstars"


class HttpStatusHandler:
    """Compare the HTTP status code of ``target`` with the expected value.

    Unreachable hosts raise and are therefore recorded as evaluation errors.
    """

    method = "http_status"

    def __init__(self, *, config: HttpConfig | None = None) -> None:
        self._config = config or HttpConfig()

    async def run(self, request: EvalRequest) -> HandlerResult:
        url = require_target(request)
        status = await run_blocking(self._fetch_status, url, request.timeout)
        operator = request.operator or "eq"
        expected = request.value if request.value is not None else "200"
        passed = evaluate_operator(operator, str(status), expected)
        return HandlerResult(
            passed=passed,
            details=f"{url} returned {status} (expected {operator} {expected})",
        )

    def _fetch_status(self, url: str, timeout: float) -> int:
        req = urllib_request.Request(
            url,
            method=self._config.http_method,
            headers={"User-Agent": self._config.user_agent},
        )
        try:
            with urllib_request.urlopen(req, timeout=timeout) as resp:
                return resp.status
        except error.HTTPError as exc:
            return exc.code
