"""Command services: load, run one command, save.

Each service call is a single attempt.  A ``Result.FAILURE`` is either a
business rejection or an optimistic-concurrency conflict on save; callers
that care about the difference re-read and retry themselves.
"""

from __future__ import annotations

import logging

from credit_consistency.core.clock import IClock
from credit_consistency.core.config import DEFAULT_POLICY, CreditPolicyConfig
from credit_consistency.core.money import Money
from credit_consistency.core.result import Result
from credit_consistency.domain.credit_line import CreditLine
from credit_consistency.domain.ids import BillingCycleId, CardId, OwnerId
from credit_consistency.infrastructure.repositories import (
    BillingCycleRepository,
    CreditLineRepository,
    OwnershipRepository,
)

logger = logging.getLogger(__name__)


class CreditLineService:

    def __init__(
        self,
        credit_lines: CreditLineRepository,
        *,
        policy: CreditPolicyConfig = DEFAULT_POLICY,
        clock: IClock | None = None,
    ) -> None:
        self._credit_lines = credit_lines
        self._policy = policy
        self._clock = clock

    def create_card(self, currency: str | None = None) -> CardId:
        card_id = CardId.random()
        card = CreditLine.create(
            card_id,
            currency or self._policy.default_currency,
            policy=self._policy,
            clock=self._clock,
        )
        self._credit_lines.save(card, expected_version=0)
        logger.info("Created card %s", card_id)
        return card_id

    def assign_limit(self, card_id: CardId, amount: Money) -> Result:
        card = self._credit_lines.find(card_id)
        expected_version = card.version
        result = card.assign_limit(amount)
        if result is Result.FAILURE:
            return result
        return self._credit_lines.save(card, expected_version)

    def open_next_cycle(self, card_id: CardId) -> Result:
        card = self._credit_lines.find(card_id)
        expected_version = card.version
        result = card.open_next_cycle()
        if result is Result.FAILURE:
            return result
        return self._credit_lines.save(card, expected_version)

    def current_open_cycle(self, card_id: CardId) -> BillingCycleId | None:
        current = self._credit_lines.find(card_id).current_cycle
        if current is None or not current.is_open:
            return None
        return current.cycle_id


class BillingCycleService:

    def __init__(
        self,
        billing_cycles: BillingCycleRepository,
        ownerships: OwnershipRepository,
    ) -> None:
        self._billing_cycles = billing_cycles
        self._ownerships = ownerships

    def withdraw(
        self, cycle_id: BillingCycleId, amount: Money, owner_id: OwnerId
    ) -> Result:
        if not self._ownerships.find(cycle_id.card_id).has_access(owner_id):
            return Result.FAILURE
        cycle = self._billing_cycles.find(cycle_id)
        expected_version = cycle.version
        result = cycle.withdraw(amount)
        if result is Result.FAILURE:
            return result
        return self._billing_cycles.save(cycle, expected_version)

    def repay(self, cycle_id: BillingCycleId, amount: Money) -> Result:
        cycle = self._billing_cycles.find(cycle_id)
        expected_version = cycle.version
        result = cycle.repay(amount)
        if result is Result.FAILURE:
            return result
        return self._billing_cycles.save(cycle, expected_version)

    def close(self, cycle_id: BillingCycleId) -> Result:
        cycle = self._billing_cycles.find(cycle_id)
        expected_version = cycle.version
        result = cycle.close_cycle()
        if result is Result.FAILURE:
            return result
        return self._billing_cycles.save(cycle, expected_version)


class OwnershipService:

    def __init__(
        self,
        ownerships: OwnershipRepository,
        *,
        policy: CreditPolicyConfig = DEFAULT_POLICY,
    ) -> None:
        self._ownerships = ownerships
        self._max_owners = policy.max_owners

    def add_access(self, card_id: CardId, owner_id: OwnerId) -> Result:
        ownership = self._ownerships.find(card_id)
        if ownership.has_access(owner_id):
            return Result.SUCCESS
        if ownership.size() >= self._max_owners:
            return Result.FAILURE
        return self._ownerships.save(card_id, ownership.add_access(owner_id))

    def revoke_access(self, card_id: CardId, owner_id: OwnerId) -> Result:
        ownership = self._ownerships.find(card_id)
        return self._ownerships.save(card_id, ownership.revoke(owner_id))
