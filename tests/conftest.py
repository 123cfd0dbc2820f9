"""Pytest fixtures for shutdown sequence tests."""

import logging
from collections.abc import Generator

import pytest
from prometheus_client import REGISTRY

from tests.testing_utils import RecordingExit


@pytest.fixture(autouse=True)
def clear_prometheus_registry() -> Generator[None, None, None]:
    """Clear Prometheus registry before and after each test for isolation."""
    collectors = list(REGISTRY._collector_to_names.keys())
    for collector in collectors:
        try:
            REGISTRY.unregister(collector)
        except (KeyError, ValueError):
            pass
    yield
    collectors = list(REGISTRY._collector_to_names.keys())
    for collector in collectors:
        try:
            REGISTRY.unregister(collector)
        except (KeyError, ValueError):
            pass


@pytest.fixture
def logger(caplog: pytest.LogCaptureFixture) -> logging.Logger:
    """Logger captured by caplog at debug level."""
    caplog.set_level(logging.DEBUG)
    return logging.getLogger("tests.shutdown")


@pytest.fixture
def exit_recorder() -> RecordingExit:
    return RecordingExit()
