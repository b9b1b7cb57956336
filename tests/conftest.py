"""Shared fixtures for fee forecast tests."""

import logging
from datetime import datetime

import pytest

from feeforecast.predictor import FeePredictionService
from feeforecast.store import MemoryStore


class FakeClock:
    """Manually advanced epoch-milliseconds clock."""

    def __init__(self, start: datetime):
        self.now = int(start.timestamp() * 1000)

    def __call__(self) -> int:
        return self.now

    def advance(self, millis: int) -> None:
        self.now += millis


@pytest.fixture
def clock():
    # Wednesday 2024-01-03 10:00 local time
    return FakeClock(datetime(2024, 1, 3, 10, 0))


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def service(store, clock):
    return FeePredictionService(store, clock=clock)


@pytest.fixture
def restore_root_logging():
    """Undo handler changes made by setup_logging."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
