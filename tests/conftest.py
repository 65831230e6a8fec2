"""Shared fixtures for the credit-consistency test suite."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from credit_consistency.bootstrap import ConsistencyContext, build_context
from credit_consistency.core.clock import SimClock
from credit_consistency.infrastructure.event_store import InMemoryEventStore
from credit_consistency.infrastructure.repositories import (
    BillingCycleRepository,
    CreditLineRepository,
)


@pytest.fixture
def sim_clock() -> SimClock:
    return SimClock(datetime(2024, 6, 1, tzinfo=timezone.utc))


@pytest.fixture
def store() -> InMemoryEventStore:
    return InMemoryEventStore()


@pytest.fixture
def credit_lines(store: InMemoryEventStore, sim_clock: SimClock) -> CreditLineRepository:
    return CreditLineRepository(store, clock=sim_clock)


@pytest.fixture
def billing_cycles(store: InMemoryEventStore, sim_clock: SimClock) -> BillingCycleRepository:
    return BillingCycleRepository(store, clock=sim_clock)


@pytest.fixture
def ctx(sim_clock: SimClock) -> ConsistencyContext:
    """Fully wired context with the reconciler subscribed."""
    return build_context(clock=sim_clock)
