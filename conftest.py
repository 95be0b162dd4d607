"""
Root conftest.py for project-wide pytest configuration.

This file registers custom markers and the command line options that control
which groups of tests run.
"""
import os

import pytest


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers.

    These markers can be used to categorize tests and selectively run them.
    """
    config.addinivalue_line("markers", "unit: mark a test as a unit test")
    config.addinivalue_line("markers", "integration: mark a test as an integration test")
    config.addinivalue_line("markers", "slow: mark a test as slow to run")


def pytest_addoption(parser: pytest.Parser) -> None:
    """Add custom command line options to pytest."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="run slow tests"
    )


def pytest_collection_modifyitems(
    config: pytest.Config,
    items: list[pytest.Item]
) -> None:
    """Skip slow tests unless --run-slow is provided."""
    if not config.getoption("--run-slow"):
        skip_slow = pytest.mark.skip(reason="need --run-slow option to run")
        for item in items:
            if "slow" in item.keywords:
                item.add_marker(skip_slow)


@pytest.fixture
def clean_gapfill_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove GAPFILL_* overrides inherited from the shell."""
    for key in list(os.environ):
        if key.startswith("GAPFILL_"):
            monkeypatch.delenv(key, raising=False)
