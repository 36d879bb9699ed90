"""
Tests for logging setup and formatters.
"""

import json
import logging

import pytest

from zfs_telemetry.logging_config import (
    HumanReadableFormatter,
    StructuredFormatter,
    setup_logging,
)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="zfs_telemetry.telemetry.orchestrator",
        level=logging.WARNING,
        pathname=__file__,
        lineno=10,
        msg="Failed to get %s",
        args=("datasets",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestFormatters:
    """Test the structured and human-readable formatters."""

    def test_structured_formatter(self):
        data = json.loads(StructuredFormatter().format(make_record(source="datasets")))

        assert data["level"] == "WARNING"
        assert data["logger"] == "zfs_telemetry.telemetry.orchestrator"
        assert data["message"] == "Failed to get datasets"
        assert data["source"] == "datasets"
        assert "duration_seconds" not in data

    def test_structured_formatter_duration(self):
        data = json.loads(StructuredFormatter().format(make_record(duration_seconds=0.5)))
        assert data["duration_seconds"] == 0.5

    def test_human_readable_without_colors(self):
        text = HumanReadableFormatter().format(make_record())
        assert " - WARNING - " in text
        assert text.endswith("Failed to get datasets")

    def test_colors_do_not_leak_into_record(self):
        record = make_record()
        text = HumanReadableFormatter(use_colors=True).format(record)

        assert "\033[33m" in text
        assert record.levelname == "WARNING"


class TestSetupLogging:
    """Test setup_logging handler wiring."""

    def test_console_only(self, restore_root_logger):
        setup_logging(console_level="WARNING")

        assert len(restore_root_logger.handlers) == 1
        assert restore_root_logger.handlers[0].level == logging.WARNING

    def test_file_logging(self, restore_root_logger, tmp_path):
        setup_logging(console_level="ERROR", log_dir=str(tmp_path / "logs"), use_json=True)

        logging.getLogger("zfs_telemetry.test").error("pool fetch timed out")
        for handler in restore_root_logger.handlers:
            handler.flush()

        main_log = (tmp_path / "logs" / "zfs-telemetry.log").read_text().splitlines()
        error_log = (tmp_path / "logs" / "error.log").read_text().splitlines()
        assert json.loads(main_log[-1])["message"] == "pool fetch timed out"
        assert len(error_log) == 1
