"""Wire the event store, repositories, reconciler and services together."""

from __future__ import annotations

from dataclasses import dataclass

from credit_consistency.application.services import (
    BillingCycleService,
    CreditLineService,
    OwnershipService,
)
from credit_consistency.core.clock import IClock, WallClock
from credit_consistency.core.config import Settings
from credit_consistency.infrastructure.event_store import InMemoryEventStore
from credit_consistency.infrastructure.repositories import (
    BillingCycleRepository,
    CreditLineRepository,
    OwnershipRepository,
)
from credit_consistency.reconciliation.process import BillingCycleReconciler


@dataclass
class ConsistencyContext:
    settings: Settings
    clock: IClock
    store: InMemoryEventStore
    credit_lines: CreditLineRepository
    billing_cycles: BillingCycleRepository
    ownerships: OwnershipRepository
    reconciler: BillingCycleReconciler
    credit_line_service: CreditLineService
    billing_cycle_service: BillingCycleService
    ownership_service: OwnershipService


def build_context(
    settings: Settings | None = None,
    *,
    clock: IClock | None = None,
    store: InMemoryEventStore | None = None,
) -> ConsistencyContext:
    """Build a fully wired context with the reconciler subscribed."""
    settings = settings or Settings()
    clock = clock or WallClock()
    store = store if store is not None else InMemoryEventStore()
    policy = settings.policy

    credit_lines = CreditLineRepository(store, policy=policy, clock=clock)
    billing_cycles = BillingCycleRepository(store, policy=policy, clock=clock)
    ownerships = OwnershipRepository()

    reconciler = BillingCycleReconciler(
        credit_lines,
        billing_cycles,
        backoff_seconds=settings.reconciliation.backoff_seconds,
        clock=clock,
    ).attach(store)

    return ConsistencyContext(
        settings=settings,
        clock=clock,
        store=store,
        credit_lines=credit_lines,
        billing_cycles=billing_cycles,
        ownerships=ownerships,
        reconciler=reconciler,
        credit_line_service=CreditLineService(credit_lines, policy=policy, clock=clock),
        billing_cycle_service=BillingCycleService(billing_cycles, ownerships),
        ownership_service=OwnershipService(ownerships, policy=policy),
    )
