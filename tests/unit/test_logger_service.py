"""Tests for the logging service and the line-callback adapter."""

import json
import logging

import pytest

from gapfill.config_manager import ConfigManager
from gapfill.logger_service import (
    ContextFormatter,
    LineLogger,
    LoggerService,
    filter_sensitive_data,
)

FORMAT = "%(levelname)s - %(message)s - [%(context)s]"


def _record(context):
    record = logging.LogRecord("gapfill.test", logging.INFO, __file__, 1, "hello", None, None)
    record.context = context
    return record


def test_context_formatter_renders_key_values():
    formatter = ContextFormatter(FORMAT)
    assert formatter.format(_record({"fills": 2, "channel": "A"})) == "INFO - hello - [fills=2, channel=A]"


def test_context_formatter_drops_empty_context():
    formatter = ContextFormatter(FORMAT)
    assert formatter.format(_record({})) == "INFO - hello"


def test_filter_sensitive_data():
    filtered = filter_sensitive_data({"api_key": "abc", "nested": {"password": "x"}, "fills": 3})
    assert filtered == {"api_key": "********", "nested": {"password": "********"}, "fills": 3}
    assert filter_sensitive_data({}) is None


@pytest.mark.usefixtures("clean_gapfill_env")
def test_logger_service_writes_json_file(tmp_path):
    config = ConfigManager.from_dict({
        "logging": {
            "level": "DEBUG",
            "console": {"enabled": False},
            "file": {"enabled": True, "directory": str(tmp_path), "filename": "run.log"},
        },
    })
    service = LoggerService(config)
    try:
        service.info("Gap fill finished", source_module="GapFillEngine", context={"fills": 4})
    finally:
        service.close()

    lines = (tmp_path / "run.log").read_text(encoding="utf-8").splitlines()
    entries = [json.loads(line) for line in lines]
    finished = [e for e in entries if e["message"] == "Gap fill finished"]
    assert finished
    assert finished[0]["name"] == "gapfill.GapFillEngine"
    assert finished[0]["level"] == "INFO"
    assert finished[0]["context"] == {"fills": 4}


class TestLineLogger:
    """Tests for the callback-based logger adapter."""

    def test_formats_lines(self):
        lines = []
        logger = LineLogger(lines.append)
        logger.info("Processed %d periods", 3, source_module="Engine", context={"fills": 2})
        assert lines == ["[INFO] Engine: Processed 3 periods (fills=2)"]

    def test_respects_min_level(self):
        lines = []
        logger = LineLogger(lines.append, min_level=logging.WARNING)
        logger.debug("hidden")
        logger.info("hidden")
        logger.warning("shown")
        assert lines == ["[WARNING] shown"]


def test_collaborators_satisfy_protocols():
    from gapfill.core.types import FillCacheProtocol, LoggerProtocol, SafeMathProtocol
    from gapfill.utils import DecimalSafeMath, FillValueCache

    assert isinstance(LineLogger(print), LoggerProtocol)
    assert isinstance(FillValueCache(), FillCacheProtocol)
    assert isinstance(DecimalSafeMath(), SafeMathProtocol)
