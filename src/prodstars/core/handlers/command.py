"""Shell command and custom script checks."""

from __future__ import annotations

import asyncio
from contextlib import suppress
from dataclasses import dataclass
from pathlib import Path

from ..operators import evaluate_operator
from .base import EvalRequest, HandlerResult, require_target


@dataclass
class CommandConfig:
    """Configuration for command execution."""

    cwd: Path | None = None
    max_output_chars: int = 2_000


@dataclass(slots=True)
class CommandOutput:
    exit_code: int | None
    stdout: str
    stderr: str


async def run_shell(command: str, *, cwd: Path | None = None) -> CommandOutput:
    """Run ``command`` through the shell, killing it if the caller is cancelled."""
    process = await asyncio.create_subprocess_shell(
        command,
        cwd=cwd,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        stdout, stderr = await process.communicate()
    except asyncio.CancelledError:
        with suppress(ProcessLookupError):
            process.kill()
        await process.wait()
        raise
    return CommandOutput(
        exit_code=process.returncode,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )


def _tail(text: str, limit: int) -> str:
    text = text.strip()
    return text if len(text) <= limit else "..." + text[-limit:]


class CommandHandler:
    """Run a command and judge its stdout, or its exit code when no operator is set."""

    method = "command"

    def __init__(self, *, config: CommandConfig | None = None) -> None:
        self._config = config or CommandConfig()

    async def run(self, request: EvalRequest) -> HandlerResult:
        output = await run_shell(require_target(request), cwd=self._config.cwd)
        observed = output.stdout.strip()

        if request.operator:
            passed = evaluate_operator(request.operator, observed, request.value)
            details = f"exit {output.exit_code}; output {_tail(observed, self._config.max_output_chars)!r}"
        else:
            passed = output.exit_code == 0
            details = f"exit {output.exit_code}"
            if not passed and output.stderr.strip():
                details += f": {_tail(output.stderr, self._config.max_output_chars)}"
        return HandlerResult(passed=passed, details=details)


class CustomHandler(CommandHandler):
    """Run a project-supplied script; exit code 0 passes."""

    method = "custom"
    default_timeout = 30.0

    async def run(self, request: EvalRequest) -> HandlerResult:
        output = await run_shell(require_target(request), cwd=self._config.cwd)
        passed = output.exit_code == 0
        stream = output.stdout if passed else (output.stderr or output.stdout)
        details = f"exit {output.exit_code}"
        if stream.strip():
            details += f": {_tail(stream, self._config.max_output_chars)}"
        return HandlerResult(passed=passed, details=details)
