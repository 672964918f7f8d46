from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from prodstars.cli import app

TOKEN_VAR = "PRODSTARS_TEST_SESSION_SECRET"


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def write_scorecard(path: Path, document: dict, body: str = "# Readiness\n") -> Path:
    path.write_text(
        "---\n" + yaml.safe_dump(document, sort_keys=False) + "---\n" + body,
        encoding="utf-8",
    )
    return path


def build_document(tmp_path: Path, **kwargs) -> dict:
    (tmp_path / "Dockerfile").write_text("FROM python:3.12-slim\n", encoding="utf-8")
    document = {
        "schema": "prodstars/v1.0",
        "product": "billing-api",
        "version": "3.2.0",
        "minimum_rating": 3.0,
        "domains": [
            {
                "id": "authentication",
                "name": "Authentication",
                "checks": [
                    {
                        "id": "auth-001",
                        "name": "Session secret configured",
                        "severity": "critical",
                        "weight": {"developer": 2},
                        "eval": {"method": "env_var", "target": TOKEN_VAR},
                        "pass_score": 10,
                        "remediation": {
                            "summary": "Set a session secret",
                            "commands": [f"export {TOKEN_VAR}=..."],
                        },
                    }
                ],
            },
            {
                "id": "operations",
                "name": "Operations",
                "checks": [
                    {
                        "id": "ops-001",
                        "name": "Container build file present",
                        "severity": "medium",
                        "weight": {"developer": 6},
                        "eval": {"method": "file_exists", "target": str(tmp_path / "Dockerfile")},
                        "pass_score": 10,
                    },
                    {
                        "id": "ops-002",
                        "name": "Runbook reviewed",
                        "severity": "info",
                        "weight": {"developer": 1},
                        "eval": {"method": "manual"},
                        "pass_score": 10,
                    },
                ],
            },
        ],
    }
    document.update(kwargs)
    return document


def test_eval_passes_gate(tmp_path: Path, runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(TOKEN_VAR, "s3cr3t-value")
    scorecard = write_scorecard(tmp_path / "PRODSTARS.md", build_document(tmp_path))

    result = runner.invoke(app, ["eval", "--file", str(scorecard), "--verbose"])

    assert result.exit_code == 0, result.output
    assert "billing-api 3.2.0: 5.0/5.0 stars (Exceptional)" in result.stdout
    assert "[PASS ] auth-001" in result.stdout
    assert "s3cr3t-value" not in result.stdout
    assert "Gate passed (minimum 3.0)" in result.stdout


def test_eval_fails_gate_on_critical_failure(
    tmp_path: Path, runner: CliRunner, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.delenv(TOKEN_VAR, raising=False)
    scorecard = write_scorecard(tmp_path / "PRODSTARS.md", build_document(tmp_path))

    result = runner.invoke(app, ["eval", "--file", str(scorecard)])

    assert result.exit_code == 1, result.output
    assert "1.5/5.0 stars (Critical Issues)" in result.stdout
    assert "capped from 2.5" in result.stdout
    assert "risk auth-001" in result.stdout
    assert "Gate failed (minimum 3.0)" in result.stdout


def test_eval_json_output_and_file(
    tmp_path: Path, runner: CliRunner, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.delenv(TOKEN_VAR, raising=False)
    scorecard = write_scorecard(tmp_path / "PRODSTARS.md", build_document(tmp_path))
    output_path = tmp_path / "out" / "result.json"

    result = runner.invoke(
        app,
        [
            "eval",
            "--file",
            str(scorecard),
            "--format",
            "json",
            "--output",
            str(output_path),
            "--fail-under",
            "1.0",
        ],
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["schema"] == "prodstars/v1.0"
    assert payload["rating"]["stars"] == 1.5
    assert payload["rating"]["capped"] is True
    assert payload["gate"] == {"minimum_rating": 1.0, "passed": True}
    assert [check["id"] for check in payload["checks"]] == ["auth-001", "ops-001"]
    assert payload["summary"]["info"] == 1
    assert payload["top_risks"][0]["remediation_commands"] == [f"export {TOKEN_VAR}=..."]

    written = json.loads(output_path.read_text(encoding="utf-8"))
    assert written["metadata"]["document"] == str(scorecard)
    assert written["rating"] == payload["rating"]


def test_eval_include_info_and_domain_filter(tmp_path: Path, runner: CliRunner) -> None:
    scorecard = write_scorecard(tmp_path / "PRODSTARS.md", build_document(tmp_path))

    result = runner.invoke(
        app,
        ["eval", "-f", str(scorecard), "--format", "json", "--include-info", "--domain", "operations"],
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert [domain["id"] for domain in payload["domains"]] == ["operations"]
    assert [check["status"] for check in payload["checks"]] == ["pass", "skip"]


def test_eval_badge_and_quiet(tmp_path: Path, runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(TOKEN_VAR, "value")
    scorecard = write_scorecard(tmp_path / "PRODSTARS.md", build_document(tmp_path))

    badge = runner.invoke(app, ["eval", "-f", str(scorecard), "--format", "badge"])
    quiet = runner.invoke(app, ["eval", "-f", str(scorecard), "--quiet"])

    assert badge.exit_code == 0, badge.output
    assert json.loads(badge.stdout) == {
        "schemaVersion": 1,
        "label": "prodstars",
        "message": "5.0/5",
        "color": "brightgreen",
    }
    assert quiet.exit_code == 0
    assert quiet.stdout == ""


def test_eval_applies_overrides_file(
    tmp_path: Path, runner: CliRunner, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.delenv(TOKEN_VAR, raising=False)
    scorecard = write_scorecard(tmp_path / "PRODSTARS.md", build_document(tmp_path))
    overrides = tmp_path / "overrides.yaml"
    overrides.write_text(
        yaml.safe_dump(
            {
                "schema": "prodstars-overrides/v1.0",
                "check_overrides": {"auth-001": {"skip": True, "skip_reason": "SSO gateway handles sessions"}},
            }
        ),
        encoding="utf-8",
    )

    result = runner.invoke(
        app, ["eval", "-f", str(scorecard), "--override", str(overrides), "--format", "json"]
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["rating"]["stars"] == 5.0
    assert payload["checks"][0]["details"] == "SSO gateway handles sessions"


@pytest.mark.parametrize(
    ("mutate", "args"),
    [
        (lambda doc: doc.update(domains="not-a-list"), []),
        (lambda doc: doc["domains"][0]["checks"][0]["eval"].update(method="dns_resolve"), []),
        (lambda doc: doc["domains"][0]["checks"][0]["eval"].update(operator="roughly"), []),
        (lambda doc: None, ["--format", "sarif"]),
        (lambda doc: None, ["--fail-under", "6"]),
        (lambda doc: None, ["--domain", "x-acme-billing"]),
    ],
)
def test_eval_invalid_input_exit_code(tmp_path: Path, runner: CliRunner, mutate, args) -> None:
    document = build_document(tmp_path)
    mutate(document)
    scorecard = write_scorecard(tmp_path / "PRODSTARS.md", document)

    result = runner.invoke(app, ["eval", "-f", str(scorecard), *args])

    assert result.exit_code == 2


def test_eval_missing_frontmatter(tmp_path: Path, runner: CliRunner) -> None:
    scorecard = tmp_path / "PRODSTARS.md"
    scorecard.write_text("# No frontmatter here\n", encoding="utf-8")

    result = runner.invoke(app, ["eval", "-f", str(scorecard)])

    assert result.exit_code == 2
    assert "missing YAML frontmatter" in result.output


def test_eval_reads_engine_config(tmp_path: Path, runner: CliRunner) -> None:
    document = build_document(tmp_path)
    document["domains"][1]["checks"][0]["eval"]["target"] = "Dockerfile"
    scorecard = write_scorecard(tmp_path / "PRODSTARS.md", document)
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        yaml.safe_dump({"engine": {"parallel": 1}, "handlers": {"files": {"base_path": str(tmp_path)}}}),
        encoding="utf-8",
    )

    result = runner.invoke(
        app,
        ["eval", "-f", str(scorecard), "--config", str(config_path), "--domain", "operations"],
    )

    assert result.exit_code == 0, result.output
    assert f"{'operations':<24} 5.0  Exceptional" in result.stdout


@pytest.mark.parametrize(
    ("stars", "expected"),
    [
        ("4.6", "4.6 Exceptional brightgreen"),
        ("3.2", "3.2 Acceptable yellow"),
        ("1.5", "1.5 Critical Issues red"),
    ],
)
def test_rating_command(runner: CliRunner, stars: str, expected: str) -> None:
    result = runner.invoke(app, ["rating", stars])

    assert result.exit_code == 0
    assert result.stdout.strip() == expected


def test_rating_command_rejects_out_of_range(runner: CliRunner) -> None:
    result = runner.invoke(app, ["rating", "7"])

    assert result.exit_code == 2
