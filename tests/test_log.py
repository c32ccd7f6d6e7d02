"""Tests for logging configuration."""

from __future__ import annotations

import json
import logging

import pytest
import structlog

from sample_workflows.log import configure_logging, get_logger


@pytest.fixture(autouse=True)
def restore_logging():
    """Restore structlog and the root logger after each test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.unit
class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_installs_single_root_handler(self) -> None:
        """Test the root logger gets exactly one structlog-formatted handler."""
        configure_logging("debug")

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, structlog.stdlib.ProcessorFormatter)
        assert root.level == logging.DEBUG
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING

    def test_unknown_level_defaults_to_info(self) -> None:
        """Test an unknown level name falls back to INFO."""
        configure_logging("chatty")

        assert logging.getLogger().level == logging.INFO

    def test_json_output(self, capsys) -> None:
        """Test JSON rendering produces one parseable line per event."""
        configure_logging("info", json_output=True)

        get_logger("tests.log").info("sample_synced", sample_id="abc")

        lines = [line for line in capsys.readouterr().err.splitlines() if line.strip()]
        record = json.loads(lines[-1])
        assert record["event"] == "sample_synced"
        assert record["sample_id"] == "abc"
        assert record["level"] == "info"
        assert record["logger"] == "tests.log"
        assert "timestamp" in record

    def test_stdlib_records_share_pipeline(self, capsys) -> None:
        """Test standard library log records are rendered the same way."""
        configure_logging("info", json_output=True)

        logging.getLogger("alembic").warning("migration pending")

        record = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert record["event"] == "migration pending"
        assert record["level"] == "warning"
