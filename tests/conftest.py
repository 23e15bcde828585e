"""
Pytest configuration and shared fixtures.
"""

from datetime import datetime, timedelta, timezone

import pytest

from identity.resolver import ClusterResolver
from identity.store import InMemoryContactStore


class StepClock:
    """Returns a strictly increasing time on every call."""

    def __init__(self, start=None, step=timedelta(seconds=1)):
        self.now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)
        self.step = step

    def __call__(self):
        value = self.now
        self.now += self.step
        return value


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def store(clock) -> InMemoryContactStore:
    """Empty in-memory contact store with a ticking clock."""
    return InMemoryContactStore(clock=clock)


@pytest.fixture
def resolver(store, clock) -> ClusterResolver:
    return ClusterResolver(store, clock=clock)
