"""Billing cycle aggregate.

One instance per ``(card, from, to)`` window.  Opened exactly once,
closed exactly once, never reopened: the next window is a new aggregate
with a successor ``BillingCycleId``.

Repaying a closed cycle is rejected.  Debt left at closure can only be
settled through the successor cycle's carried-forward ``used`` balance.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from enum import Enum

from credit_consistency.core.clock import IClock
from credit_consistency.core.config import DEFAULT_POLICY, CreditPolicyConfig
from credit_consistency.core.errors import AggregateNotFoundError, UnknownEventError
from credit_consistency.core.money import Limit, Money, require_non_negative
from credit_consistency.core.result import Result
from credit_consistency.domain.aggregate import Aggregate
from credit_consistency.domain.events import (
    BillingCycleClosed,
    BillingCycleEvent,
    BillingCycleEventType,
    BillingCycleOpened,
    CardRepaid,
    CardWithdrawn,
)
from credit_consistency.domain.ids import BillingCycleId, CardId


class CycleStatus(str, Enum):
    OPENED = "opened"
    CLOSED = "closed"


@dataclass(frozen=True)
class BillingCycleState:
    cycle_id: BillingCycleId | None = None
    card_id: CardId | None = None
    status: CycleStatus | None = None
    limit: Limit | None = None
    withdrawals_in_cycle: int = 0

    @property
    def exists(self) -> bool:
        return self.cycle_id is not None


def evolve(state: BillingCycleState, event: BillingCycleEventType) -> BillingCycleState:
    match event:
        case BillingCycleOpened():
            return BillingCycleState(
                cycle_id=event.cycle_id,
                card_id=event.card_id,
                status=CycleStatus.OPENED,
                limit=event.starting_limit,
            )
        case CardWithdrawn():
            return replace(
                state,
                limit=state.limit.use(event.amount),
                withdrawals_in_cycle=state.withdrawals_in_cycle + 1,
            )
        case CardRepaid():
            return replace(state, limit=state.limit.top_up(event.amount))
        case BillingCycleClosed():
            return replace(state, status=CycleStatus.CLOSED)
        case _:
            raise UnknownEventError("BillingCycle", event)


class BillingCycle(Aggregate[BillingCycleState, BillingCycleEventType]):
    """Event-sourced billing cycle."""

    event_family = BillingCycleEvent

    @staticmethod
    def initial_state() -> BillingCycleState:
        return BillingCycleState()

    @staticmethod
    def evolve(
        state: BillingCycleState, event: BillingCycleEventType
    ) -> BillingCycleState:
        return evolve(state, event)

    # -- Factories ---------------------------------------------------------

    @classmethod
    def open_cycle(
        cls,
        cycle_id: BillingCycleId,
        card_id: CardId,
        from_date: date,
        to_date: date,
        starting_limit: Limit,
        *,
        policy: CreditPolicyConfig = DEFAULT_POLICY,
        clock: IClock | None = None,
    ) -> BillingCycle:
        cycle = cls(policy=policy, clock=clock)
        cycle._emit(
            BillingCycleOpened(
                cycle_id, card_id, from_date, to_date, starting_limit,
                cycle._clock.now(),
            )
        )
        return cycle

    @classmethod
    def with_limit(
        cls,
        limit: Money,
        *,
        policy: CreditPolicyConfig = DEFAULT_POLICY,
        clock: IClock | None = None,
    ) -> BillingCycle:
        """Fresh cycle from today for a brand-new card, nothing used."""
        cycle = cls(policy=policy, clock=clock)
        card_id = CardId.random()
        cycle_id = BillingCycleId.starting(
            card_id, cycle._clock.today(), policy.cycle_length_days
        )
        cycle._emit(
            BillingCycleOpened(
                cycle_id, card_id, cycle_id.from_date, cycle_id.to_date,
                Limit.initial(limit), cycle._clock.now(),
            )
        )
        return cycle

    # -- Queries -----------------------------------------------------------

    @property
    def cycle_id(self) -> BillingCycleId | None:
        return self._state.cycle_id

    @property
    def card_id(self) -> CardId | None:
        return self._state.card_id

    @property
    def exists(self) -> bool:
        return self._state.exists

    @property
    def status(self) -> CycleStatus | None:
        return self._state.status

    @property
    def withdrawals_in_cycle(self) -> int:
        return self._state.withdrawals_in_cycle

    def available_limit(self) -> Money | None:
        if self._state.limit is None:
            return None
        return self._state.limit.available

    def stream_id(self) -> str:
        if self._state.cycle_id is None:
            raise AggregateNotFoundError("BillingCycle has not been opened")
        return self._state.cycle_id.stream_id()

    # -- Commands ----------------------------------------------------------

    def withdraw(self, amount: Money) -> Result:
        require_non_negative(amount)
        state = self._state
        if state.status is not CycleStatus.OPENED:
            return Result.FAILURE
        if state.limit.available < amount:
            return Result.FAILURE
        if state.withdrawals_in_cycle >= self._policy.max_withdrawals_per_cycle:
            return Result.FAILURE
        return self._emit(
            CardWithdrawn(state.cycle_id, state.card_id, amount, self._clock.now())
        )

    def repay(self, amount: Money) -> Result:
        require_non_negative(amount)
        state = self._state
        if state.status is not CycleStatus.OPENED:
            return Result.FAILURE
        return self._emit(
            CardRepaid(state.cycle_id, state.card_id, amount, self._clock.now())
        )

    def close_cycle(self) -> Result:
        state = self._state
        if state.status is not CycleStatus.OPENED:
            return Result.FAILURE
        return self._emit(
            BillingCycleClosed(
                cycle_id=state.cycle_id,
                card_id=state.card_id,
                closing_limit=state.limit,
                withdrawals_in_cycle=state.withdrawals_in_cycle,
                closed_at=self._clock.now(),
            )
        )
