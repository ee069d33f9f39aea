"""Validation of loader configuration and CLI settings."""

from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from EnvBind import Loader, LoaderConfig, MappingSource
from EnvBind.logging import StructuredLogger, configure_logging, get_logger
from EnvBind.settings import DEFAULT_CONFIG, CliSettings, LogFormat, LogLevel

from tests.envbind.records import SimpleApp


def test_defaults() -> None:
    assert DEFAULT_CONFIG.tag_key == "env"
    assert DEFAULT_CONFIG.namespace_separator == "_"
    assert (
        DEFAULT_CONFIG.ignore_sentinel,
        DEFAULT_CONFIG.squash_sentinel,
        DEFAULT_CONFIG.no_prefix_sentinel,
    ) == ("-", "&", "!")


def test_loader_config_is_frozen() -> None:
    with pytest.raises(ValidationError):
        DEFAULT_CONFIG.tag_key = "other"


@pytest.mark.parametrize(
    "overrides",
    [
        {"tag_key": ""},
        {"namespace_separator": ""},
        {"no_prefix_sentinel": "!!"},
        {"squash_sentinel": "-"},
        {"ignore_sentinel": ","},
        {"unknown": "x"},
    ],
)
def test_invalid_loader_config(overrides) -> None:
    with pytest.raises(ValidationError):
        LoaderConfig(**overrides)


def test_cli_settings_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("ENVBIND_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("ENVBIND_LOG_FORMAT", "json")
    monkeypatch.setenv("ENVBIND_WRAP_WIDTH", "100")
    monkeypatch.setenv("ENVBIND_TAG_KEY", "cfg")
    settings = CliSettings()
    assert settings.log_level is LogLevel.DEBUG
    assert settings.log_format is LogFormat.JSON
    assert settings.wrap_width == 100
    assert settings.loader_config() == LoaderConfig(tag_key="cfg")


def test_cli_settings_rejects_narrow_wrap(monkeypatch) -> None:
    monkeypatch.setenv("ENVBIND_WRAP_WIDTH", "5")
    with pytest.raises(ValidationError):
        CliSettings()


def test_configure_logging_replaces_its_own_handler() -> None:
    logger = configure_logging("DEBUG", "json")
    configure_logging("INFO", "console")
    managed = [h for h in logger.handlers if getattr(h, "_envbind_managed", False)]
    assert len(managed) == 1
    assert logger.level == logging.INFO
    assert logger.propagate is False


def test_structured_logger_merges_fields() -> None:
    adapter = StructuredLogger(logging.getLogger("EnvBind.test"), {"prefix": "APP_"})
    child = adapter.child(key="APP_NAME", skipped=None)
    assert isinstance(child, StructuredLogger)
    msg, kwargs = child.process("Loaded", {"extra": {"extra_fields": {"applied": True}}})
    assert msg == "Loaded"
    assert kwargs["extra"]["extra_fields"] == {
        "prefix": "APP_",
        "key": "APP_NAME",
        "applied": True,
    }


def test_get_logger_starts_without_fields() -> None:
    adapter = get_logger("EnvBind.loader")
    assert adapter.base_fields == {}
    assert adapter.logger is logging.getLogger("EnvBind.loader")


def test_load_logs_carry_record_and_prefix(caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="EnvBind")
    Loader(MappingSource({"APP_NAME": "Go"})).load("APP_", SimpleApp())

    field_records = [r for r in caplog.records if r.getMessage() == "Loaded field"]
    assert len(field_records) == 1
    assert field_records[0].extra_fields == {
        "record": "SimpleApp",
        "prefix": "APP_",
        "field": "name",
        "key": "APP_NAME",
        "applied": True,
    }
    summary = [r for r in caplog.records if r.getMessage() == "Loaded record"]
    assert summary[0].extra_fields["loaded"] is True
    assert "Go" not in str(field_records[0].extra_fields)
