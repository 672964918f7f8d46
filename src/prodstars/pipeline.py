"""Evaluation pipeline assembly: input loading, engine run and output."""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any, TypeVar

import structlog
import yaml
from pydantic import BaseModel, ValidationError

from . import SCHEMA_VERSION, __version__
from .config import ConfigManager
from .core import EvaluationEngine, EvaluationResult
from .exceptions import DocumentLoadError
from .schemas import CommunityWeightsFile, EvalOptions, OverridesFile, ProdStarsDocument

ModelT = TypeVar("ModelT", bound=BaseModel)

_FRONTMATTER_FENCE = "---"


def _validation_messages(exc: ValidationError) -> list[str]:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "<root>"
        messages.append(f"{location}: {error['msg']}")
    return messages


def _validate(model: type[ModelT], data: Any, path: Path) -> ModelT:
    if not isinstance(data, dict):
        raise DocumentLoadError(str(path), ["document must be a mapping"])
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise DocumentLoadError(str(path), _validation_messages(exc)) from exc


def split_frontmatter(text: str) -> tuple[str | None, str]:
    """Split ``---`` fenced YAML frontmatter from a Markdown body."""
    lines = text.splitlines()
    if not lines or lines[0].strip() != _FRONTMATTER_FENCE:
        return None, text
    for idx in range(1, len(lines)):
        if lines[idx].strip() == _FRONTMATTER_FENCE:
            return "\n".join(lines[1:idx]), "\n".join(lines[idx + 1 :])
    return None, text


class DocumentLoader:
    """Load a scorecard from PRODSTARS.md frontmatter or a YAML/JSON file."""

    def __init__(self) -> None:
        self._logger = structlog.get_logger(__name__)

    def load(self, path: Path) -> ProdStarsDocument:
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise DocumentLoadError(str(path), [str(exc)]) from exc

        frontmatter, _ = split_frontmatter(text)
        if frontmatter is None and path.suffix.lower() == ".md":
            raise DocumentLoadError(str(path), ["missing YAML frontmatter"])
        try:
            data = yaml.safe_load(frontmatter if frontmatter is not None else text)
        except yaml.YAMLError as exc:
            raise DocumentLoadError(str(path), [f"invalid YAML ({exc})"]) from exc
        document = _validate(ProdStarsDocument, data, path)
        if document.schema_ != SCHEMA_VERSION:
            self._logger.warning(
                "document.schema_mismatch",
                path=str(path),
                schema=document.schema_,
                expected=SCHEMA_VERSION,
            )
        return document


class SettingsLoader:
    """Load deployer overrides and community weights."""

    def __init__(self, manager: ConfigManager | None = None):
        self._manager = manager or ConfigManager()

    def load_overrides(self, path: Path | None = None) -> OverridesFile | None:
        return self._load(OverridesFile, path, "overrides")

    def load_community(self, path: Path | None = None) -> CommunityWeightsFile | None:
        return self._load(CommunityWeightsFile, path, "community")

    def _load(self, model: type[ModelT], path: Path | None, name: str) -> ModelT | None:
        if path is None:
            if not self._manager.exists(name):
                return None
            path = self._manager.path_for(name)
        try:
            with path.open("r", encoding="utf-8") as handle:
                data = yaml.safe_load(handle) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise DocumentLoadError(str(path), [str(exc)]) from exc
        return _validate(model, data, path)


def serialize_result(result: EvaluationResult, *, include_info: bool = True) -> dict[str, Any]:
    """Return a JSON-ready dict; ``include_info=False`` drops info checks from ``checks``."""
    payload = asdict(result)
    if not include_info:
        payload["checks"] = [check for check in payload["checks"] if check["severity"] != "info"]
    return payload


class OutputWriter:
    """Persist evaluation results."""

    def write(self, path: Path, payload: dict) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2),
            encoding="utf-8",
        )


class AuditLogger:
    """Append-only audit logger writing JSON lines."""

    def __init__(self, path: Path):
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def append(self, record: dict) -> None:
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record, ensure_ascii=False))
            handle.write("\n")


class EvaluationPipeline:
    """End-to-end orchestrator from files on disk to a written result."""

    def __init__(
        self,
        *,
        engine: EvaluationEngine,
        document_loader: DocumentLoader | None = None,
        settings_loader: SettingsLoader | None = None,
        writer: OutputWriter | None = None,
    ) -> None:
        self._engine = engine
        self._documents = document_loader or DocumentLoader()
        self._settings = settings_loader or SettingsLoader()
        self._writer = writer or OutputWriter()
        self._logger = structlog.get_logger(__name__)

    def run(
        self,
        *,
        document_path: Path,
        options: EvalOptions | None = None,
        overrides_path: Path | None = None,
        community_path: Path | None = None,
        output_path: Path | None = None,
        audit_logger: AuditLogger | None = None,
    ) -> EvaluationResult:
        options = options or EvalOptions()
        document = self._documents.load(document_path)
        overrides = self._settings.load_overrides(overrides_path)
        community = self._settings.load_community(community_path)

        result = self._engine.evaluate(
            document,
            options=options,
            overrides=overrides,
            community=community,
        )

        if output_path is not None:
            payload = serialize_result(result, include_info=options.include_info)
            payload["metadata"] = {
                "document": str(document_path),
                "app_version": __version__,
            }
            self._writer.write(output_path, payload)

        if audit_logger:
            audit_logger.append(
                {
                    "product": result.product,
                    "version": result.version,
                    "evaluated_at": result.evaluated_at,
                    "stars": result.rating.stars,
                    "stars_uncapped": result.rating.stars_uncapped,
                    "capped": result.rating.capped,
                    "gate": asdict(result.gate),
                    "summary": asdict(result.summary),
                    "timed_out": result.timed_out,
                    "app_version": __version__,
                }
            )

        self._logger.info(
            "pipeline.completed",
            document=str(document_path),
            output=str(output_path) if output_path else None,
            stars=result.rating.stars,
            gate_passed=result.gate.passed,
        )
        return result
