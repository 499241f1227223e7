"""Unit tests for structlog setup."""

import json
import logging

import pytest
import structlog

from beacon_health.config.manager import ConfigManager
from beacon_health.logging_config import configure_logging, configure_logging_from_config


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()


def test_sets_root_level():
    configure_logging("WARNING")
    assert logging.getLogger().level == logging.WARNING


def test_unknown_level_falls_back_to_info():
    configure_logging("chatty")
    assert logging.getLogger().level == logging.INFO


def test_json_output(capsys):
    configure_logging("DEBUG", json_output=True)
    structlog.get_logger("beacon_health.test").info("beacon_health_observed", duration_ms=1.5)

    line = capsys.readouterr().err.strip().splitlines()[-1]
    record = json.loads(line)
    assert record["event"] == "beacon_health_observed"
    assert record["duration_ms"] == 1.5
    assert record["level"] == "info"
    assert record["logger"] == "beacon_health.test"


def test_level_filters_events(capsys):
    configure_logging("ERROR", json_output=True)
    structlog.get_logger("beacon_health.test").info("mount_resolved")
    assert "mount_resolved" not in capsys.readouterr().err


def test_configure_from_config(tmp_path, monkeypatch, capsys):
    monkeypatch.delenv("BEACON_HEALTH_LOGGING_LEVEL", raising=False)
    monkeypatch.delenv("BEACON_HEALTH_LOGGING_JSON", raising=False)
    config_file = tmp_path / "config.toml"
    config_file.write_text('[logging]\nlevel = "WARNING"\njson = true\n')
    manager = ConfigManager(config_file=config_file, env_file=tmp_path / ".env")
    manager.load()

    configure_logging_from_config(manager)

    assert logging.getLogger().level == logging.WARNING
    log = structlog.get_logger("beacon_health.test")
    log.info("mount_resolved")
    log.warning("health_platform_unsupported", platform="win32")

    lines = capsys.readouterr().err.strip().splitlines()
    records = [json.loads(line) for line in lines if line.startswith("{")]
    assert [r["event"] for r in records] == ["health_platform_unsupported"]
    assert records[0]["platform"] == "win32"
