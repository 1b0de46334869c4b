# tests/conftest.py

from collections.abc import Callable

import pytest

from Buid.metrics import reset_counters


class FakeClock:
    """Callable clock returning Unix nanoseconds; advances by ``step`` per read."""

    def __init__(self, now: int, step: int = 0):
        self.now = now
        self.step = step
        self.reads = 0

    def __call__(self) -> int:
        value = self.now
        self.now += self.step
        self.reads += 1
        return value


@pytest.fixture(autouse=True)
def _reset_metrics():
    reset_counters()
    yield
    reset_counters()


@pytest.fixture
def fake_clock() -> Callable[..., FakeClock]:
    return FakeClock
