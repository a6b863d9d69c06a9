"""
Shared fixtures for the explorer service tests.
"""

import pytest
from prometheus_client import CollectorRegistry

from shared.metrics import MetricsCollector


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    """Clock starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
def metrics():
    """Explorer metrics on an isolated registry."""
    return MetricsCollector("explorer", registry=CollectorRegistry())


@pytest.fixture
def sample(metrics):
    """Read a metric sample from the isolated registry."""

    def _sample(name, **labels):
        return metrics.registry.get_sample_value(name, labels) or 0.0

    return _sample
