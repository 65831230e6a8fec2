"""Reconciliation process keeping credit lines and billing cycles in step.

No transaction spans the two aggregates.  Instead this stateless
subscriber reacts to lifecycle events from one side and issues a command
against the other:

*  credit line ``CycleOpened``  -> create the ``BillingCycle`` stream with
   expected version 0.  A conflict means the cycle already exists
   (duplicate delivery) and is ignored.
*  billing cycle ``BillingCycleClosed`` -> load the credit line, call
   ``record_cycle_closure`` and save.  A conflict means the credit line
   moved on concurrently; re-read and retry until the save lands.
"""

from __future__ import annotations

import logging
from typing import Any

from credit_consistency.core.clock import IClock
from credit_consistency.core.result import Result
from credit_consistency.domain.billing_cycle import BillingCycle
from credit_consistency.domain.events import BillingCycleClosed, CycleOpened
from credit_consistency.infrastructure.event_store import IEventStore
from credit_consistency.infrastructure.repositories import (
    BillingCycleRepository,
    CreditLineRepository,
)
from credit_consistency.observability import metrics
from credit_consistency.reconciliation.retry import retry_until_success

logger = logging.getLogger(__name__)


class BillingCycleReconciler:
    """Event store subscriber bridging the two aggregates.

    Parameters
    ----------
    credit_lines:
        Repository for the credit line side.
    billing_cycles:
        Repository for the billing cycle side.
    backoff_seconds:
        Pause between conflicting attempts when recording a closure.
    clock:
        Clock stamped on billing cycles opened here.
    """

    def __init__(
        self,
        credit_lines: CreditLineRepository,
        billing_cycles: BillingCycleRepository,
        *,
        backoff_seconds: float = 0.0,
        clock: IClock | None = None,
    ) -> None:
        self._credit_lines = credit_lines
        self._billing_cycles = billing_cycles
        self._backoff_seconds = backoff_seconds
        self._clock = clock

    def attach(self, store: IEventStore) -> BillingCycleReconciler:
        store.subscribe(self.handle)
        return self

    def handle(self, event: Any) -> None:
        match event:
            case CycleOpened():
                self.on_cycle_opened(event)
            case BillingCycleClosed():
                self.on_billing_cycle_closed(event)
            case _:
                pass

    # -- Credit line -> billing cycle --------------------------------------

    def on_cycle_opened(self, event: CycleOpened) -> Result:
        cycle = BillingCycle.open_cycle(
            event.cycle_id,
            event.card_id,
            event.from_date,
            event.to_date,
            event.starting_limit,
            clock=self._clock,
        )
        result = self._billing_cycles.save(cycle, expected_version=0)
        if result is Result.FAILURE:
            logger.info("Billing cycle %s already exists, skipping", event.cycle_id)
        else:
            logger.info("Opened billing cycle %s", event.cycle_id)
        return result

    # -- Billing cycle -> credit line --------------------------------------

    def on_billing_cycle_closed(self, event: BillingCycleClosed) -> Result:
        if not self._credit_lines.find(event.card_id).exists:
            logger.warning(
                "Closure of %s refers to unknown card %s",
                event.cycle_id, event.card_id,
            )
            return Result.FAILURE

        def attempt() -> Result:
            card = self._credit_lines.find(event.card_id)
            card.record_cycle_closure(
                event.cycle_id, event.closing_limit, event.closed_at
            )
            return self._credit_lines.save(card)

        result = retry_until_success(
            attempt,
            lambda outcome: outcome is Result.FAILURE,
            backoff_seconds=self._backoff_seconds,
            on_retry=lambda _: metrics.record_reconciliation_retry(
                type(event).__qualname__
            ),
            description=f"Recording closure of {event.cycle_id}",
        )
        logger.info(
            "Recorded closure of %s on card %s (debt %s)",
            event.cycle_id, event.card_id, event.closing_limit.used,
        )
        return result
