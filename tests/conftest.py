"""Shared test fixtures: a controllable clock and in-memory repositories."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from uptime_engine.domain.entities.service import Service
from uptime_engine.infrastructure.stores.in_memory_status_store import (
    InMemoryStatusStore,
)

T0 = datetime(2024, 3, 1, 0, 0, tzinfo=timezone.utc)


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now

    def set(self, now: datetime) -> datetime:
        self.now = now
        return now


@pytest.fixture
def clock() -> FixedClock:
    """Clock frozen at T0 (2024-03-01 00:00 UTC)."""
    return FixedClock()


@pytest.fixture
def store() -> InMemoryStatusStore:
    """Empty in-memory store."""
    return InMemoryStatusStore()


@pytest.fixture
def organization_id():
    return uuid4()


@pytest.fixture
def make_service(organization_id):
    """Factory for Service entities belonging to the test organization."""

    def _make(name: str = "checkout-api", **kwargs) -> Service:
        kwargs.setdefault("organization_id", organization_id)
        kwargs.setdefault("created_at", T0 - timedelta(days=365))
        return Service(name=name, **kwargs)

    return _make
