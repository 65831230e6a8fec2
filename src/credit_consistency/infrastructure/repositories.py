"""Repositories: ``find`` by replay, ``save`` by expected-version append."""

from __future__ import annotations

import logging

from credit_consistency.core.clock import IClock
from credit_consistency.core.config import DEFAULT_POLICY, CreditPolicyConfig
from credit_consistency.core.result import Result
from credit_consistency.domain.aggregate import Aggregate
from credit_consistency.domain.billing_cycle import BillingCycle
from credit_consistency.domain.credit_line import CreditLine
from credit_consistency.domain.events import BillingCycleEvent, CreditLineEvent
from credit_consistency.domain.ids import BillingCycleId, CardId
from credit_consistency.domain.ownership import Ownership
from credit_consistency.infrastructure.collection import VersionedCollection
from credit_consistency.infrastructure.event_store import IEventStore

logger = logging.getLogger(__name__)


class _EventSourcedRepository:
    """Shared save path for event-sourced aggregates."""

    def __init__(
        self,
        store: IEventStore,
        *,
        policy: CreditPolicyConfig = DEFAULT_POLICY,
        clock: IClock | None = None,
    ) -> None:
        self._store = store
        self._policy = policy
        self._clock = clock

    def _save(self, aggregate: Aggregate, expected_version: int | None) -> Result:
        """Append the aggregate's pending events.

        *expected_version* defaults to the version the aggregate was loaded
        at.  Pending events are dequeued either way; on failure they are
        discarded and the caller must re-read.
        """
        stream_id = aggregate.stream_id()
        if expected_version is None:
            expected_version = aggregate.persisted_version
        events = aggregate.dequeue_pending_events()
        result = self._store.append_to_stream(stream_id, events, expected_version)
        if result is Result.SUCCESS:
            aggregate.mark_persisted()
        return result


class CreditLineRepository(_EventSourcedRepository):

    def find(self, card_id: CardId) -> CreditLine:
        events = self._store.read_events(card_id.stream_id(), CreditLineEvent)
        return CreditLine.recreate(events, policy=self._policy, clock=self._clock)

    def save(self, card: CreditLine, expected_version: int | None = None) -> Result:
        return self._save(card, expected_version)


class BillingCycleRepository(_EventSourcedRepository):

    def find(self, cycle_id: BillingCycleId) -> BillingCycle:
        events = self._store.read_events(cycle_id.stream_id(), BillingCycleEvent)
        return BillingCycle.recreate(events, policy=self._policy, clock=self._clock)

    def save(self, cycle: BillingCycle, expected_version: int | None = None) -> Result:
        return self._save(cycle, expected_version)


class OwnershipRepository:

    def __init__(self, collection: VersionedCollection[Ownership] | None = None) -> None:
        self._collection = collection or VersionedCollection("ownership")

    def find(self, card_id: CardId) -> Ownership:
        entry = self._collection.find_versioned(str(card_id))
        if entry is None:
            return Ownership.empty()
        return entry.record.with_version(entry.version)

    def save(self, card_id: CardId, ownership: Ownership) -> Result:
        return self._collection.save(str(card_id), ownership, ownership.version)
