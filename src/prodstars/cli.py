"""Typer CLI entrypoint for scorecard evaluation."""

from __future__ import annotations

import json
from enum import IntEnum
from pathlib import Path
from typing import Any, List, Optional

import typer
import yaml
from pydantic import ValidationError

from .container import create_container
from .core import EvaluationResult, get_badge_color, get_rating_label
from .exceptions import ConfigurationError, DocumentLoadError
from .logging import configure_logging
from .pipeline import AuditLogger, serialize_result
from .schemas import EvalOptions, load_config

app = typer.Typer(help="Deployment readiness scorecard evaluation.")


class ExitCode(IntEnum):
    SUCCESS = 0
    CHECKS_FAILED = 1
    INVALID_INPUT = 2
    EVALUATION_ERROR = 3


_SUPPORTED_FORMATS = ("terminal", "json", "badge")


def exit_code_for(result: EvaluationResult) -> ExitCode:
    if result.timed_out:
        return ExitCode.EVALUATION_ERROR
    if not result.gate.passed:
        return ExitCode.CHECKS_FAILED
    return ExitCode.SUCCESS


def _load_settings(config: Path | None) -> dict[str, Any]:
    if not config:
        return {}
    with config.open("r", encoding="utf-8") as handle:
        loaded = yaml.safe_load(handle) or {}
    try:
        return load_config(loaded).to_settings()
    except ValidationError as exc:
        raise typer.BadParameter(f"Invalid config file: {exc}", param_hint="config") from exc


def _render_terminal(result: EvaluationResult, *, verbose: bool, include_info: bool) -> None:
    rating = result.rating
    typer.echo(
        f"{result.product} {result.version}: {rating.stars:.1f}/{rating.max_stars:.1f} "
        f"stars ({rating.label})"
    )
    if rating.capped:
        typer.echo(f"  capped from {rating.stars_uncapped:.1f}: {rating.cap_reason}")
    for domain in result.domains:
        typer.echo(f"  {domain.id:<24} {domain.stars:.1f}  {domain.label}")
    for check in result.checks:
        if check.severity == "info" and not include_info:
            continue
        if check.status == "pass" and not verbose:
            continue
        typer.echo(f"  [{check.status.upper():<5}] {check.id} {check.name}: {check.details}")
    for risk in result.top_risks:
        line = f"  risk {risk.id} (-{risk.risk_impact:g} pts)"
        if risk.remediation_summary:
            line += f": {risk.remediation_summary}"
        typer.echo(line)
    verdict = "passed" if result.gate.passed else "failed"
    typer.echo(f"Gate {verdict} (minimum {result.gate.minimum_rating:.1f})")


@app.command("eval")
def evaluate(
    file: Path = typer.Option(
        Path("PRODSTARS.md"), "--file", "-f", dir_okay=False, help="Scorecard path."
    ),
    output: Optional[Path] = typer.Option(None, dir_okay=False, help="Write JSON result to this path."),
    output_format: str = typer.Option("terminal", "--format", help="terminal, json or badge."),
    override: Optional[Path] = typer.Option(None, dir_okay=False, help="Deployer overrides YAML."),
    community: Optional[Path] = typer.Option(None, dir_okay=False, help="Community weights YAML."),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    fail_under: Optional[float] = typer.Option(None, help="Minimum rating; overrides the document."),
    skip_manual: bool = typer.Option(False, help="Skip all manual checks."),
    include_info: bool = typer.Option(False, help="Include info-level checks in output."),
    domain: Optional[List[str]] = typer.Option(None, help="Evaluate only these domains."),
    timeout: Optional[float] = typer.Option(None, help="Global timeout in seconds."),
    parallel: Optional[int] = typer.Option(None, help="Max concurrent check evaluations."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show passing checks too."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Exit code only."),
    log_level: str = typer.Option("WARNING", help="Log level for structured logging."),
    audit_log: Optional[Path] = typer.Option(None, dir_okay=False, help="Audit log output (JSONL)."),
) -> None:
    """Evaluate a scorecard and exit with the gate result."""
    configure_logging(log_level, quiet=quiet)

    try:
        options = EvalOptions(
            format=output_format,
            fail_under=fail_under,
            skip_manual=skip_manual,
            include_info=include_info,
            domains=domain or [],
            timeout=timeout,
            parallel=parallel,
            verbose=verbose,
            quiet=quiet,
        )
    except ValidationError as exc:
        typer.echo(f"Invalid options: {exc}", err=True)
        raise typer.Exit(code=ExitCode.INVALID_INPUT) from exc
    if options.format not in _SUPPORTED_FORMATS:
        typer.echo(f"Output format {options.format!r} is not available", err=True)
        raise typer.Exit(code=ExitCode.INVALID_INPUT)

    container = create_container(settings=_load_settings(config))
    pipeline = container.pipeline()
    audit_logger = AuditLogger(audit_log) if audit_log else None

    try:
        result = pipeline.run(
            document_path=file,
            options=options,
            overrides_path=override,
            community_path=community,
            output_path=output,
            audit_logger=audit_logger,
        )
    except DocumentLoadError as exc:
        typer.echo(f"Invalid input {exc.path}:", err=True)
        for message in exc.errors:
            typer.echo(f"  {message}", err=True)
        raise typer.Exit(code=ExitCode.INVALID_INPUT) from exc
    except ConfigurationError as exc:
        typer.echo(f"Configuration error: {exc}", err=True)
        raise typer.Exit(code=ExitCode.INVALID_INPUT) from exc

    if not quiet:
        if options.format == "json":
            typer.echo(json.dumps(serialize_result(result, include_info=include_info), indent=2))
        elif options.format == "badge":
            typer.echo(json.dumps(badge_payload(result.rating.stars)))
        else:
            _render_terminal(result, verbose=verbose, include_info=include_info)

    raise typer.Exit(code=exit_code_for(result))


def badge_payload(stars: float) -> dict[str, Any]:
    """Shields.io endpoint payload for ``stars``."""
    return {
        "schemaVersion": 1,
        "label": "prodstars",
        "message": f"{stars:.1f}/5",
        "color": get_badge_color(stars),
    }


@app.command()
def rating(stars: float = typer.Argument(..., help="Star value between 0.0 and 5.0.")) -> None:
    """Print the label and badge color for a star value."""
    try:
        label = get_rating_label(stars)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="stars") from exc
    typer.echo(f"{stars:.1f} {label} {get_badge_color(stars)}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
