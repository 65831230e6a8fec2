"""Ownership value, repository and service."""

from __future__ import annotations

import pytest

from credit_consistency.application.services import OwnershipService
from credit_consistency.core.config import CreditPolicyConfig
from credit_consistency.core.result import Result
from credit_consistency.domain.ids import CardId, OwnerId
from credit_consistency.domain.ownership import Ownership
from credit_consistency.infrastructure.repositories import OwnershipRepository


@pytest.fixture
def ownerships() -> OwnershipRepository:
    return OwnershipRepository()


@pytest.fixture
def service(ownerships: OwnershipRepository) -> OwnershipService:
    return OwnershipService(ownerships)


class TestOwnership:
    def test_of_and_access(self):
        alice, bob = OwnerId.random(), OwnerId.random()
        ownership = Ownership.of(alice)
        assert ownership.has_access(alice)
        assert not ownership.has_access(bob)

    def test_add_and_revoke_are_non_destructive(self):
        alice = OwnerId.random()
        empty = Ownership.empty()
        added = empty.add_access(alice)
        assert empty.size() == 0
        assert added.size() == 1
        assert added.revoke(alice).size() == 0


class TestOwnershipRepository:
    def test_unknown_card_has_no_owners(self, ownerships):
        assert ownerships.find(CardId.random()) == Ownership.empty()

    def test_save_bumps_version(self, ownerships):
        card_id = CardId.random()
        ownerships.save(card_id, Ownership.of(OwnerId.random()))
        assert ownerships.find(card_id).version == 1

    def test_stale_save_fails(self, ownerships):
        card_id = CardId.random()
        first = ownerships.find(card_id)
        second = ownerships.find(card_id)

        assert ownerships.save(card_id, first.add_access(OwnerId.random())) is Result.SUCCESS
        assert ownerships.save(card_id, second.add_access(OwnerId.random())) is Result.FAILURE
        assert ownerships.find(card_id).size() == 1


class TestOwnershipService:
    def test_add_access(self, service, ownerships):
        card_id, alice = CardId.random(), OwnerId.random()
        assert service.add_access(card_id, alice) is Result.SUCCESS
        assert ownerships.find(card_id).has_access(alice)

    def test_at_most_two_owners(self, service, ownerships):
        card_id = CardId.random()
        assert service.add_access(card_id, OwnerId.random()) is Result.SUCCESS
        assert service.add_access(card_id, OwnerId.random()) is Result.SUCCESS
        assert service.add_access(card_id, OwnerId.random()) is Result.FAILURE
        assert ownerships.find(card_id).size() == 2

    def test_re_adding_owner_is_idempotent(self, service, ownerships):
        card_id, alice = CardId.random(), OwnerId.random()
        service.add_access(card_id, alice)
        service.add_access(card_id, OwnerId.random())
        assert service.add_access(card_id, alice) is Result.SUCCESS
        assert ownerships.find(card_id).size() == 2

    def test_revoke_frees_a_slot(self, service, ownerships):
        card_id, alice = CardId.random(), OwnerId.random()
        service.add_access(card_id, alice)
        service.add_access(card_id, OwnerId.random())

        assert service.revoke_access(card_id, alice) is Result.SUCCESS
        assert service.add_access(card_id, OwnerId.random()) is Result.SUCCESS
        assert not ownerships.find(card_id).has_access(alice)

    def test_owner_cap_from_policy(self, ownerships):
        service = OwnershipService(ownerships, policy=CreditPolicyConfig(max_owners=1))
        card_id = CardId.random()
        service.add_access(card_id, OwnerId.random())
        assert service.add_access(card_id, OwnerId.random()) is Result.FAILURE
