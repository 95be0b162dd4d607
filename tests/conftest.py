"""Shared fixtures for the gapfill test suite.

Provides a recording mock logger and the scenario dataset used across modules.
"""

import pytest

from gapfill.settings import GapFillConfig

from .helpers import build_series, change_and_cumulative


@pytest.fixture
def mock_logger():
    """Create a mock logger for testing."""
    class MockLogger:
        def __init__(self):
            self.messages = []

        def log(self, level, message, **kwargs):
            self.messages.append({
                "level": level,
                "message": message,
                "kwargs": kwargs,
            })

        def info(self, message, **kwargs):
            self.log("INFO", message, **kwargs)

        def warning(self, message, **kwargs):
            self.log("WARNING", message, **kwargs)

        def error(self, message, **kwargs):
            self.log("ERROR", message, **kwargs)

        def critical(self, message, **kwargs):
            self.log("CRITICAL", message, **kwargs)

        def debug(self, message, **kwargs):
            self.log("DEBUG", message, **kwargs)

        def exception(self, message, **kwargs):
            self.log("ERROR", message, **kwargs)

        def messages_at(self, level):
            return [m["message"] for m in self.messages if m["level"] == level]

    return MockLogger()


@pytest.fixture
def midpoint_config():
    """One change column plus its cumulative partner, midpoint policy."""
    return GapFillConfig(change_columns_per_row=1, fill_policy="midpoint")


@pytest.fixture
def weighted_config():
    """One change column plus its cumulative partner, time-weighted policy."""
    return GapFillConfig(change_columns_per_row=1, fill_policy="position_weighted")


@pytest.fixture
def scenario_records():
    """Channel A: changes [10, -, -, 40, 50], cumulative known where change is."""
    return build_series({
        "A": change_and_cumulative(
            [10.0, None, None, 40.0, 50.0],
            [10.0, None, None, 100.0, 150.0],
        ),
    })
