"""Domain events for the credit line and billing cycle aggregates.

Design invariants
-----------------
1.  Every event is **immutable** (``frozen=True``).
2.  Each aggregate owns a **closed event family**: a marker base class
    (``CreditLineEvent`` / ``BillingCycleEvent``) plus a ``Union`` alias
    listing every member.  Folds ``match`` over the union and reject
    anything else.
3.  Events carry their own business timestamp.  Store-level metadata
    (event id, stream version, append time) lives in ``EventEnvelope``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Union

from credit_consistency.core.money import Limit, Money
from credit_consistency.domain.ids import BillingCycleId, CardId


# =========================================================================
# Credit line family  (stream: CreditLine:<card id>)
# =========================================================================

@dataclass(frozen=True)
class CreditLineEvent:
    """Marker base for the credit line event family."""


@dataclass(frozen=True)
class CardCreated(CreditLineEvent):
    card_id: CardId
    currency: str
    created_at: datetime


@dataclass(frozen=True)
class LimitAssigned(CreditLineEvent):
    card_id: CardId
    limit: Limit                 # max = assigned amount, used = carried debt
    assigned_at: datetime


@dataclass(frozen=True)
class CycleOpened(CreditLineEvent):
    card_id: CardId
    cycle_id: BillingCycleId
    from_date: date
    to_date: date
    starting_limit: Limit        # snapshot at open time
    opened_at: datetime


@dataclass(frozen=True)
class CycleClosed(CreditLineEvent):
    card_id: CardId
    cycle_id: BillingCycleId
    closing_debt: Money
    closed_at: datetime


@dataclass(frozen=True)
class CardDeactivated(CreditLineEvent):
    card_id: CardId
    outstanding_debt: Money
    deactivated_at: datetime


CreditLineEventType = Union[
    CardCreated,
    LimitAssigned,
    CycleOpened,
    CycleClosed,
    CardDeactivated,
]


# =========================================================================
# Billing cycle family  (stream: BillingCycle:<card id>:<from>:<to>)
# =========================================================================

@dataclass(frozen=True)
class BillingCycleEvent:
    """Marker base for the billing cycle event family."""


@dataclass(frozen=True)
class BillingCycleOpened(BillingCycleEvent):
    cycle_id: BillingCycleId
    card_id: CardId
    from_date: date
    to_date: date
    starting_limit: Limit
    opened_at: datetime


@dataclass(frozen=True)
class CardWithdrawn(BillingCycleEvent):
    cycle_id: BillingCycleId
    card_id: CardId
    amount: Money
    withdrawn_at: datetime


@dataclass(frozen=True)
class CardRepaid(BillingCycleEvent):
    cycle_id: BillingCycleId
    card_id: CardId
    amount: Money
    repaid_at: datetime


@dataclass(frozen=True)
class BillingCycleClosed(BillingCycleEvent):
    cycle_id: BillingCycleId
    card_id: CardId
    closing_limit: Limit
    withdrawals_in_cycle: int
    closed_at: datetime


BillingCycleEventType = Union[
    BillingCycleOpened,
    CardWithdrawn,
    CardRepaid,
    BillingCycleClosed,
]
