"""Aggregate identities and stream-id derivation.

A credit line's stream id comes from a random UUID.  A billing cycle's
stream id is derived deterministically from ``(card_id, from_date,
to_date)`` so that a duplicate "cycle opened" delivery always targets the
same stream.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date, timedelta

from credit_consistency.core.ids import new_uuid

DEFAULT_CYCLE_LENGTH_DAYS = 30


@dataclass(frozen=True)
class CardId:
    id: uuid.UUID

    @classmethod
    def random(cls) -> CardId:
        return cls(new_uuid())

    def stream_id(self) -> str:
        return f"CreditLine:{self.id}"

    def __str__(self) -> str:
        return str(self.id)


@dataclass(frozen=True)
class OwnerId:
    id: uuid.UUID

    @classmethod
    def random(cls) -> OwnerId:
        return cls(new_uuid())


@dataclass(frozen=True)
class BillingCycleId:
    card_id: CardId
    from_date: date
    to_date: date

    @classmethod
    def starting(
        cls,
        card_id: CardId,
        from_date: date,
        length_days: int = DEFAULT_CYCLE_LENGTH_DAYS,
    ) -> BillingCycleId:
        return cls(card_id, from_date, from_date + timedelta(days=length_days))

    def next(self, length_days: int = DEFAULT_CYCLE_LENGTH_DAYS) -> BillingCycleId:
        """Successor window, starting the day after this one ends."""
        return BillingCycleId.starting(
            self.card_id, self.to_date + timedelta(days=1), length_days
        )

    def stream_id(self) -> str:
        return (
            f"BillingCycle:{self.card_id.id}:"
            f"{self.from_date.isoformat()}:{self.to_date.isoformat()}"
        )

    def __str__(self) -> str:
        return self.stream_id()
