"""File presence and content checks."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..operators import evaluate_operator
from .base import EvalRequest, HandlerResult, require_target, run_blocking


@dataclass
class FileConfig:
    """Shared configuration for file-based handlers."""

    base_path: Path | None = None
    max_bytes: int = 1_000_000

    def __post_init__(self) -> None:
        if self.base_path is not None:
            self.base_path = Path(self.base_path)


def _resolve(config: FileConfig, target: str) -> Path:
    path = Path(target).expanduser()
    if config.base_path is not None and not path.is_absolute():
        path = config.base_path / path
    return path


class FileExistsHandler:
    method = "file_exists"

    def __init__(self, *, config: FileConfig | None = None) -> None:
        self._config = config or FileConfig()

    async def run(self, request: EvalRequest) -> HandlerResult:
        path = _resolve(self._config, require_target(request))
        present = await run_blocking(path.exists)
        actual = str(path) if present else None
        operator = request.operator or "exists"
        passed = evaluate_operator(operator, actual, request.value)
        details = f"{path} {'exists' if present else 'does not exist'}"
        return HandlerResult(passed=passed, details=details)


class FileContainsHandler:
    method = "file_contains"

    def __init__(self, *, config: FileConfig | None = None) -> None:
        self._config = config or FileConfig()

    async def run(self, request: EvalRequest) -> HandlerResult:
        path = _resolve(self._config, require_target(request))
        content = await run_blocking(self._read, path)
        operator = request.operator or "contains"
        passed = evaluate_operator(operator, content, request.value)
        if content is None:
            return HandlerResult(passed=passed, details=f"{path} not found")
        verdict = "matched" if passed else "did not match"
        return HandlerResult(
            passed=passed,
            details=f"{path} {verdict} {operator} {request.value!r}",
        )

    def _read(self, path: Path) -> str | None:
        if not path.is_file():
            return None
        with path.open("r", encoding="utf-8", errors="replace") as handle:
            return handle.read(self._config.max_bytes)
