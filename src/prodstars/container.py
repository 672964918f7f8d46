"""Dependency injection container for the evaluation engine."""

from __future__ import annotations

from dependency_injector import containers, providers

from .core import (
    ConcurrencyScheduler,
    EvalDispatcher,
    EvaluationEngine,
    HandlerRegistry,
    RiskRanker,
    ScoringEngine,
    WeightResolver,
)
from .core.handlers import (
    CommandConfig,
    CommandHandler,
    CustomHandler,
    EnvVarHandler,
    FileConfig,
    FileContainsHandler,
    FileExistsHandler,
    HttpConfig,
    HttpStatusHandler,
    ManualHandler,
    PortOpenHandler,
)
from .pipeline import EvaluationPipeline


class EvaluationContainer(containers.DeclarativeContainer):
    """Dependency-injector container definition."""

    config = providers.Configuration()

    env_var_handler = providers.Singleton(EnvVarHandler)
    command_handler = providers.Singleton(CommandHandler)
    custom_handler = providers.Singleton(CustomHandler)
    file_exists_handler = providers.Singleton(FileExistsHandler)
    file_contains_handler = providers.Singleton(FileContainsHandler)
    port_open_handler = providers.Singleton(PortOpenHandler)
    http_status_handler = providers.Singleton(HttpStatusHandler)
    manual_handler = providers.Singleton(ManualHandler)

    handlers = providers.List(
        env_var_handler,
        command_handler,
        custom_handler,
        file_exists_handler,
        file_contains_handler,
        port_open_handler,
        http_status_handler,
        manual_handler,
    )

    handler_registry = providers.Singleton(HandlerRegistry, handlers=handlers)

    dispatcher = providers.Singleton(
        EvalDispatcher,
        registry=handler_registry,
        default_timeout=config.default_check_timeout,
    )

    scheduler = providers.Singleton(
        ConcurrencyScheduler,
        parallel=config.parallel,
        timeout=config.timeout,
    )

    engine = providers.Singleton(
        EvaluationEngine,
        dispatcher=dispatcher,
        scheduler=scheduler,
        resolver=providers.Singleton(WeightResolver),
        scoring=providers.Singleton(ScoringEngine),
        ranker=providers.Singleton(RiskRanker),
    )

    pipeline = providers.Factory(EvaluationPipeline, engine=engine)


def create_container(*, settings: dict | None = None) -> EvaluationContainer:
    """Instantiate container with optional overrides."""

    container = EvaluationContainer()

    if not settings:
        return container

    engine_settings = settings.get("engine", {}) if isinstance(settings, dict) else {}
    if engine_settings:
        container.config.override(engine_settings)

    handler_settings = settings.get("handlers", {}) if isinstance(settings, dict) else {}

    if "command" in handler_settings:
        command_config = CommandConfig(**handler_settings["command"])
        container.command_handler.override(
            providers.Singleton(CommandHandler, config=command_config)
        )

    if "custom" in handler_settings:
        custom_config = CommandConfig(**handler_settings["custom"])
        container.custom_handler.override(
            providers.Singleton(CustomHandler, config=custom_config)
        )

    if "files" in handler_settings:
        file_config = FileConfig(**handler_settings["files"])
        container.file_exists_handler.override(
            providers.Singleton(FileExistsHandler, config=file_config)
        )
        container.file_contains_handler.override(
            providers.Singleton(FileContainsHandler, config=file_config)
        )

    if "http_status" in handler_settings:
        http_config = HttpConfig(**handler_settings["http_status"])
        container.http_status_handler.override(
            providers.Singleton(HttpStatusHandler, config=http_config)
        )

    return container
