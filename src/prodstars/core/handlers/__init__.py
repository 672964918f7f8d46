"""Eval method handler implementations."""

from .base import EvalHandler, EvalRequest, HandlerResult, run_blocking
from .command import CommandConfig, CommandHandler, CustomHandler
from .env_var import EnvVarHandler
from .files import FileConfig, FileContainsHandler, FileExistsHandler
from .manual import ManualHandler
from .network import HttpConfig, HttpStatusHandler, PortOpenHandler

EXTENDED_METHODS: tuple[str, ...] = (
    "semver",
    "api_call",
    "dns_resolve",
    "cert_expiry",
    "container_image",
    "registry_check",
)


def default_handlers() -> list[EvalHandler]:
    """Return one instance of every built-in handler."""
    return [
        EnvVarHandler(),
        CommandHandler(),
        CustomHandler(),
        FileExistsHandler(),
        FileContainsHandler(),
        PortOpenHandler(),
        HttpStatusHandler(),
        ManualHandler(),
    ]


__all__ = [
    "CommandConfig",
    "CommandHandler",
    "CustomHandler",
    "EXTENDED_METHODS",
    "EnvVarHandler",
    "EvalHandler",
    "EvalRequest",
    "FileConfig",
    "FileContainsHandler",
    "FileExistsHandler",
    "HandlerResult",
    "HttpConfig",
    "HttpStatusHandler",
    "ManualHandler",
    "PortOpenHandler",
    "default_handlers",
    "run_blocking",
]
