from __future__ import annotations

import asyncio
import sys
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.error import URLError

import pytest

from prodstars.core.handlers import (
    CommandConfig,
    CommandHandler,
    CustomHandler,
    EnvVarHandler,
    EvalHandler,
    EvalRequest,
    FileConfig,
    FileContainsHandler,
    FileExistsHandler,
    HttpConfig,
    HttpStatusHandler,
    ManualHandler,
    PortOpenHandler,
    default_handlers,
    run_blocking,
)
from prodstars.core.handlers.network import split_host_port


def build_request(method: str, target: str | None, operator: str | None = None, value: str | None = None, **kwargs) -> EvalRequest:
    return EvalRequest(
        check_id="chk-001",
        method=method,
        target=target,
        operator=operator,
        value=value,
        timeout=kwargs.pop("timeout", 5.0),
        **kwargs,
    )


def run(handler, request):
    return asyncio.run(handler.run(request))


def test_default_handlers_satisfy_protocol():
    handlers = default_handlers()
    assert all(isinstance(handler, EvalHandler) for handler in handlers)
    assert sorted(handler.method for handler in handlers) == [
        "command",
        "custom",
        "env_var",
        "file_contains",
        "file_exists",
        "http_status",
        "manual",
        "port_open",
    ]


def test_env_var_exists_without_leaking_value():
    handler = EnvVarHandler(environ={"DATABASE_URL": "postgres://admin:hunter2@db/app"})

    present = run(handler, build_request("env_var", "DATABASE_URL"))
    missing = run(handler, build_request("env_var", "REDIS_URL"))

    assert present.passed is True
    assert "hunter2" not in present.details
    assert missing.passed is False
    assert missing.details == "REDIS_URL is not set"


def test_env_var_compares_with_operator():
    handler = EnvVarHandler(environ={"NODE_ENV": "production", "WORKERS": "8"})

    assert run(handler, build_request("env_var", "NODE_ENV", "eq", "production")).passed is True
    assert run(handler, build_request("env_var", "WORKERS", "gte", "4")).passed is True
    result = run(handler, build_request("env_var", "NODE_ENV", "neq", "production"))
    assert result.passed is False
    assert "production" in result.details


def test_env_var_requires_target():
    with pytest.raises(ValueError):
        run(EnvVarHandler(environ={}), build_request("env_var", None))


def test_file_exists_relative_to_base_path(tmp_path):
    (tmp_path / "Dockerfile").write_text("FROM python:3.12\n", encoding="utf-8")
    handler = FileExistsHandler(config=FileConfig(base_path=tmp_path))

    assert run(handler, build_request("file_exists", "Dockerfile")).passed is True
    assert run(handler, build_request("file_exists", "Procfile")).passed is False
    assert run(handler, build_request("file_exists", "Procfile", "not_exists")).passed is True


def test_file_contains(tmp_path):
    config_file = tmp_path / "app.ini"
    config_file.write_text("[server]\ndebug = false\nworkers = 4\n", encoding="utf-8")
    handler = FileContainsHandler(config=FileConfig(base_path=tmp_path))

    assert run(handler, build_request("file_contains", "app.ini", value="debug = false")).passed is True
    assert run(handler, build_request("file_contains", "app.ini", "matches", r"workers\s*=\s*\d+")).passed is True
    assert run(handler, build_request("file_contains", "app.ini", "not_contains", "debug = true")).passed is True

    missing = run(handler, build_request("file_contains", "absent.ini", value="x"))
    assert missing.passed is False
    assert missing.details.endswith("not found")


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX shell commands")
def test_command_uses_exit_code_without_operator():
    handler = CommandHandler()

    ok = run(handler, build_request("command", "true"))
    failed = run(handler, build_request("command", "echo broken >&2; exit 3"))

    assert ok.passed is True
    assert failed.passed is False
    assert failed.details == "exit 3: broken"


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX shell commands")
def test_command_compares_stripped_stdout(tmp_path):
    (tmp_path / "marker").write_text("", encoding="utf-8")
    handler = CommandHandler(config=CommandConfig(cwd=tmp_path))

    assert run(handler, build_request("command", "echo hello", "eq", "hello")).passed is True
    assert run(handler, build_request("command", "ls", "contains", "marker")).passed is True
    assert run(handler, build_request("command", "echo 17", "lt", "10")).passed is False


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX shell commands")
def test_command_output_is_truncated():
    handler = CommandHandler(config=CommandConfig(max_output_chars=5))

    result = run(handler, build_request("command", "echo abcdefghij", "eq", "x"))

    assert result.details == "exit 0; output '...fghij'"


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX shell commands")
def test_custom_script_reports_stderr_on_failure():
    handler = CustomHandler()

    assert handler.default_timeout == 30.0
    result = run(handler, build_request("custom", "echo checking; echo missing migration >&2; exit 1"))
    assert result.passed is False
    assert result.details == "exit 1: missing migration"
    assert run(handler, build_request("custom", "echo fine")).details == "exit 0: fine"


def test_manual_handler():
    handler = ManualHandler()

    pending = run(handler, build_request("manual", None))
    confirmed = run(handler, build_request("manual", None, recorded_answer=True))
    rejected = run(handler, build_request("manual", None, recorded_answer=False))

    assert pending.skipped is True
    assert (confirmed.passed, confirmed.skipped) == (True, False)
    assert (rejected.passed, rejected.skipped) == (False, False)


def test_port_open_against_local_server():
    async def scenario():
        server = await asyncio.start_server(lambda reader, writer: writer.close(), "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        try:
            open_result = await PortOpenHandler().run(build_request("port_open", f"127.0.0.1:{port}"))
        finally:
            server.close()
            await server.wait_closed()
        closed_result = await PortOpenHandler().run(build_request("port_open", f"127.0.0.1:{port}"))
        return open_result, closed_result

    open_result, closed_result = asyncio.run(scenario())

    assert open_result.passed is True
    assert open_result.details.endswith("is open")
    assert closed_result.passed is False


@pytest.mark.parametrize(
    ("target", "expected"),
    [
        ("localhost:5432", ("localhost", 5432)),
        ("[::1]:8080", ("::1", 8080)),
    ],
)
def test_split_host_port(target, expected):
    assert split_host_port(target) == expected


@pytest.mark.parametrize("target", ["localhost", ":80", "db:http"])
def test_split_host_port_rejects_bad_targets(target):
    with pytest.raises(ValueError):
        split_host_port(target)


class StatusRequestHandler(BaseHTTPRequestHandler):
    routes = {"/health": 200, "/down": 503, "/moved": 404}
    seen_agents: list[str] = []

    def _respond(self) -> None:
        self.seen_agents.append(self.headers.get("User-Agent", ""))
        self.send_response(self.routes.get(self.path, 404))
        self.send_header("Content-Length", "0")
        self.end_headers()

    do_GET = _respond
    do_HEAD = _respond

    def log_message(self, format, *args):  # noqa: A002
        pass


@pytest.fixture
def status_server():
    server = ThreadingHTTPServer(("127.0.0.1", 0), StatusRequestHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    StatusRequestHandler.seen_agents = []
    yield f"http://127.0.0.1:{server.server_address[1]}"
    server.shutdown()
    server.server_close()


def test_http_status_defaults_to_200(status_server):
    handler = HttpStatusHandler()

    healthy = run(handler, build_request("http_status", f"{status_server}/health"))
    down = run(handler, build_request("http_status", f"{status_server}/down"))

    assert healthy.passed is True
    assert healthy.details.endswith("returned 200 (expected eq 200)")
    assert down.passed is False
    assert "returned 503" in down.details
    assert StatusRequestHandler.seen_agents == ["prodstars", "prodstars"]


def test_http_status_error_codes_compare_with_operator(status_server):
    handler = HttpStatusHandler(config=HttpConfig(http_method="HEAD", user_agent="deploy-bot"))

    assert run(handler, build_request("http_status", f"{status_server}/down", "eq", "503")).passed is True
    assert run(handler, build_request("http_status", f"{status_server}/moved", "gte", "400")).passed is True
    assert StatusRequestHandler.seen_agents == ["deploy-bot", "deploy-bot"]


def test_http_status_unreachable_host_raises():
    async def closed_port() -> int:
        server = await asyncio.start_server(lambda reader, writer: writer.close(), "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        server.close()
        await server.wait_closed()
        return port

    port = asyncio.run(closed_port())

    with pytest.raises(URLError):
        run(HttpStatusHandler(), build_request("http_status", f"http://127.0.0.1:{port}/health", timeout=2.0))


def test_run_blocking_returns_result_and_propagates_errors():
    def explode() -> None:
        raise OSError("stale file handle")

    assert asyncio.run(run_blocking(sum, [1, 2, 3])) == 6
    with pytest.raises(OSError, match="stale file handle"):
        asyncio.run(run_blocking(explode))
