"""Pydantic configuration schemas for YAML config and evaluation options."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

OutputFormat = Literal["terminal", "json", "markdown", "sarif", "badge"]


class EngineConfig(BaseModel):
    parallel: int | None = Field(default=None, ge=1)
    timeout: float | None = Field(default=None, gt=0)
    default_check_timeout: float | None = Field(default=None, gt=0)

    model_config = ConfigDict(extra="forbid")


class HandlerConfig(BaseModel):
    command: dict[str, Any] | None = None
    custom: dict[str, Any] | None = None
    files: dict[str, Any] | None = None
    http_status: dict[str, Any] | None = None

    model_config = ConfigDict(extra="forbid")


class AppConfig(BaseModel):
    engine: EngineConfig = Field(default_factory=EngineConfig)
    handlers: HandlerConfig = Field(default_factory=HandlerConfig)

    def to_settings(self) -> dict[str, Any]:
        settings: dict[str, Any] = {}
        engine_settings = self.engine.model_dump(exclude_none=True)
        if engine_settings:
            settings["engine"] = engine_settings
        handler_settings = self.handlers.model_dump(exclude_none=True)
        if handler_settings:
            settings["handlers"] = handler_settings
        return settings


def load_config(raw: Any) -> AppConfig:
    if not isinstance(raw, dict):
        raise ValidationError.from_exception_data(
            "AppConfig",
            [{"type": "dict_type", "loc": ("config",), "input": raw}],
        )
    return AppConfig.model_validate(raw)


class EvalOptions(BaseModel):
    """Options for a single evaluation run.

    ``format``, ``include_info``, ``verbose`` and ``quiet`` only affect
    reporting; the engine ignores them. ``timeout`` and ``parallel`` fall back
    to the scheduler configuration (300 seconds, 4 workers) when unset.
    """

    format: OutputFormat = "terminal"
    fail_under: float | None = Field(default=None, ge=0, le=5)
    skip_manual: bool = False
    include_info: bool = False
    domains: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("domains", "domain"),
    )
    timeout: float | None = Field(default=None, gt=0)
    parallel: int | None = Field(default=None, ge=1)
    verbose: bool = False
    quiet: bool = False
    manual_answers: dict[str, bool] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    @field_validator("domains", mode="before")
    @classmethod
    def _coerce_domains(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value
