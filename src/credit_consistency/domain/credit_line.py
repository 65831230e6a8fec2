"""Credit line aggregate.

Owns the card's limit, the reference to its current billing cycle and the
debt carried over from closed cycles.  Invariants:

*  at most one billing cycle is open at a time;
*  a deactivated card accepts no further limit assignment or cycle opening.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime

from credit_consistency.core.clock import IClock
from credit_consistency.core.config import DEFAULT_POLICY, CreditPolicyConfig
from credit_consistency.core.errors import (
    AggregateNotFoundError,
    CurrencyMismatchError,
    UnknownEventError,
)
from credit_consistency.core.money import Limit, Money, require_non_negative
from credit_consistency.core.result import Result
from credit_consistency.domain.aggregate import Aggregate
from credit_consistency.domain.events import (
    CardCreated,
    CardDeactivated,
    CreditLineEvent,
    CreditLineEventType,
    CycleClosed,
    CycleOpened,
    LimitAssigned,
)
from credit_consistency.domain.ids import BillingCycleId, CardId


@dataclass(frozen=True)
class CurrentCycle:
    cycle_id: BillingCycleId
    is_open: bool


@dataclass(frozen=True)
class CreditLineState:
    card_id: CardId | None = None
    currency: str = ""
    limit: Limit | None = None
    current_cycle: CurrentCycle | None = None
    debt: Money | None = None
    active: bool = False

    @property
    def exists(self) -> bool:
        return self.card_id is not None

    @property
    def has_open_cycle(self) -> bool:
        return self.current_cycle is not None and self.current_cycle.is_open


def evolve(state: CreditLineState, event: CreditLineEventType) -> CreditLineState:
    match event:
        case CardCreated():
            return CreditLineState(
                card_id=event.card_id,
                currency=event.currency,
                debt=Money.zero(event.currency),
                active=True,
            )
        case LimitAssigned():
            return replace(state, limit=event.limit)
        case CycleOpened():
            return replace(
                state, current_cycle=CurrentCycle(event.cycle_id, is_open=True)
            )
        case CycleClosed():
            limit = state.limit
            if limit is not None:
                limit = Limit(limit.max, event.closing_debt)
            return replace(
                state,
                current_cycle=CurrentCycle(event.cycle_id, is_open=False),
                debt=event.closing_debt,
                limit=limit,
            )
        case CardDeactivated():
            return replace(state, active=False)
        case _:
            raise UnknownEventError("CreditLine", event)


class CreditLine(Aggregate[CreditLineState, CreditLineEventType]):
    """Event-sourced credit line (the "virtual credit card")."""

    event_family = CreditLineEvent

    @staticmethod
    def initial_state() -> CreditLineState:
        return CreditLineState()

    @staticmethod
    def evolve(state: CreditLineState, event: CreditLineEventType) -> CreditLineState:
        return evolve(state, event)

    # -- Factories ---------------------------------------------------------

    @classmethod
    def create(
        cls,
        card_id: CardId,
        currency: str,
        *,
        policy: CreditPolicyConfig = DEFAULT_POLICY,
        clock: IClock | None = None,
    ) -> CreditLine:
        card = cls(policy=policy, clock=clock)
        card._emit(CardCreated(card_id, currency.upper(), card._clock.now()))
        return card

    @classmethod
    def with_limit(
        cls,
        limit: Money,
        *,
        policy: CreditPolicyConfig = DEFAULT_POLICY,
        clock: IClock | None = None,
    ) -> CreditLine:
        card = cls.create(CardId.random(), limit.currency, policy=policy, clock=clock)
        card.assign_limit(limit)
        return card

    # -- Queries -----------------------------------------------------------

    @property
    def card_id(self) -> CardId | None:
        return self._state.card_id

    @property
    def exists(self) -> bool:
        return self._state.exists

    @property
    def is_active(self) -> bool:
        return self._state.active

    @property
    def current_cycle(self) -> CurrentCycle | None:
        return self._state.current_cycle

    @property
    def debt(self) -> Money | None:
        return self._state.debt

    def available_limit(self) -> Money | None:
        if self._state.limit is None:
            return None
        return self._state.limit.available

    def stream_id(self) -> str:
        if self._state.card_id is None:
            raise AggregateNotFoundError("CreditLine has not been created")
        return self._state.card_id.stream_id()

    # -- Commands ----------------------------------------------------------

    def assign_limit(self, amount: Money) -> Result:
        """Set the limit to ``(max=amount, used=carried debt)``."""
        require_non_negative(amount)
        state = self._state
        if not state.exists or not state.active:
            return Result.FAILURE
        if amount.currency != state.currency:
            raise CurrencyMismatchError(state.currency, amount.currency)
        debt = state.debt if state.debt is not None else Money.zero(amount.currency)
        return self._emit(
            LimitAssigned(state.card_id, Limit(amount, debt), self._clock.now())
        )

    def open_next_cycle(self) -> Result:
        """Open the successor billing cycle, snapshotting the current limit."""
        state = self._state
        if not state.exists or not state.active:
            return Result.FAILURE
        if state.has_open_cycle:
            return Result.FAILURE
        if state.limit is None:
            return Result.FAILURE

        length = self._policy.cycle_length_days
        if state.current_cycle is None:
            cycle_id = BillingCycleId.starting(
                state.card_id, self._clock.today(), length
            )
        else:
            cycle_id = state.current_cycle.cycle_id.next(length)

        return self._emit(
            CycleOpened(
                card_id=state.card_id,
                cycle_id=cycle_id,
                from_date=cycle_id.from_date,
                to_date=cycle_id.to_date,
                starting_limit=state.limit,
                opened_at=self._clock.now(),
            )
        )

    def record_cycle_closure(
        self,
        cycle_id: BillingCycleId,
        closing_limit: Limit,
        closed_at: datetime,
    ) -> Result:
        """Record that the billing cycle *cycle_id* was closed.

        A closure for any cycle other than the currently open one is a
        no-op.  Nonzero closing debt also deactivates the card.
        """
        state = self._state
        current = state.current_cycle
        if current is None or not current.is_open or current.cycle_id != cycle_id:
            return Result.SUCCESS

        debt = closing_limit.used
        events: list[CreditLineEventType] = [
            CycleClosed(state.card_id, cycle_id, debt, closed_at)
        ]
        if not debt.is_zero():
            events.append(CardDeactivated(state.card_id, debt, closed_at))
        return self._emit(*events)
