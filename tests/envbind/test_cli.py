"""Command-line tests for the ``envbind`` Typer application."""

from __future__ import annotations

import json
import logging

import pytest
import typer
from typer.testing import CliRunner

from EnvBind.cli import app, resolve_target
from EnvBind.logging import JSONFormatter

from tests.envbind.records import ServiceClientConfig

runner = CliRunner()

TARGET = "tests.envbind.records:ServiceClientConfig"


def test_resolve_target() -> None:
    assert resolve_target(TARGET) is ServiceClientConfig


@pytest.mark.parametrize(
    "spec",
    [
        "tests.envbind.records",
        ":ServiceClientConfig",
        "tests.envbind.records:Missing",
        "tests.envbind.no_such_module:Thing",
        "tests.envbind.records:Color",
    ],
)
def test_resolve_target_rejects_bad_specs(spec: str) -> None:
    with pytest.raises(typer.BadParameter):
        resolve_target(spec)


def test_template_to_stdout() -> None:
    result = runner.invoke(app, ["template", TARGET, "--prefix", "APP_"])
    assert result.exit_code == 0, result.output
    assert "APP_CLIENT_ID=" in result.output
    assert "# path: credentials.client_id" in result.output
    assert "APP_CLIENT_SECRET" not in result.output


def test_template_flags(tmp_path) -> None:
    output = tmp_path / "app.env"
    result = runner.invoke(
        app,
        ["template", TARGET, "--values", "--no-paths", "--original-order", "--output", str(output)],
    )
    assert result.exit_code == 0, result.output
    text = output.read_text(encoding="utf-8")
    keys = [line.split("=", 1)[0] for line in text.splitlines() if line and not line.startswith("#")]
    assert keys[0] == "SERVER_REST_BASE_URL"
    assert "TEST_DURATION=5s" in text
    assert "# path:" not in text


def test_template_uses_settings_from_environment() -> None:
    result = runner.invoke(
        app, ["template", TARGET], env={"ENVBIND_NAMESPACE_SEPARATOR": "__"}
    )
    assert result.exit_code == 0, result.output
    assert "STRUCT__MODE=" in result.output


def test_check_reports_success() -> None:
    result = runner.invoke(
        app,
        ["check", TARGET, "--prefix", "APP_"],
        env={"APP_CLIENT_ID": "id", "APP_TEST_DURATION": "1m"},
    )
    assert result.exit_code == 0, result.output
    assert "ok: ServiceClientConfig loaded" in result.output


def test_check_reports_missing_required() -> None:
    result = runner.invoke(
        app, ["check", TARGET, "--prefix", "APP_"], env={"APP_CLIENT_SECRET": "secret"}
    )
    assert result.exit_code == 1
    assert "error: envbind: credentials [APP_]: field is required" in result.output
    assert "APP_CLIENT_ID" in result.output


def test_check_reports_parse_errors() -> None:
    result = runner.invoke(
        app,
        ["check", TARGET, "--prefix", "APP_"],
        env={"APP_CLIENT_ID": "id", "APP_DEBUG": "maybe"},
    )
    assert result.exit_code == 1
    assert "invalid boolean" in result.output


def test_bad_target_is_a_usage_error() -> None:
    result = runner.invoke(app, ["check", "not-a-target"])
    assert result.exit_code == 2


def test_json_formatter_includes_structured_fields() -> None:
    record = logging.LogRecord("EnvBind.loader", logging.DEBUG, __file__, 1, "Loaded", None, None)
    record.extra_fields = {"key": "APP_NAME", "applied": True}
    payload = json.loads(JSONFormatter().format(record))
    assert payload["message"] == "Loaded"
    assert payload["level"] == "DEBUG"
    assert payload["key"] == "APP_NAME"
    assert payload["applied"] is True
