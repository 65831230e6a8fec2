"""VersionedCollection compare-and-swap semantics."""

from __future__ import annotations

from dataclasses import dataclass, replace

from credit_consistency.core.result import Result
from credit_consistency.infrastructure.collection import VersionedCollection


@dataclass(frozen=True)
class Entity:
    id: str


@dataclass(frozen=True)
class VersionedEntity:
    id: str
    version: int = 0


class TestFind:
    def test_missing_key(self):
        collection: VersionedCollection[Entity] = VersionedCollection()
        assert collection.find("x") is None
        assert collection.version_of("x") == 0

    def test_existing_key(self):
        collection: VersionedCollection[Entity] = VersionedCollection()
        collection.save("x", Entity("x"))
        assert collection.find("x") == Entity("x")
        assert collection.version_of("x") == 1


class TestSave:
    def test_sequential_saves_with_explicit_version(self):
        collection: VersionedCollection[Entity] = VersionedCollection()
        for version in range(5):
            assert collection.save("x", Entity("x"), version) is Result.SUCCESS
        assert collection.version_of("x") == 5

    def test_explicit_stale_version_fails(self):
        collection: VersionedCollection[Entity] = VersionedCollection()
        collection.save("x", Entity("x"), 0)
        assert collection.save("x", Entity("y"), 0) is Result.FAILURE
        assert collection.find("x") == Entity("x")

    def test_versioned_record_supplies_expected_version(self):
        collection: VersionedCollection[VersionedEntity] = VersionedCollection()
        entity = VersionedEntity("x")
        assert collection.save("x", entity) is Result.SUCCESS

        # Same stale snapshot again: stored version is now 1.
        assert collection.save("x", entity) is Result.FAILURE
        assert collection.save("x", replace(entity, version=1)) is Result.SUCCESS
        assert collection.version_of("x") == 2

    def test_unversioned_record_without_expected_version_wins(self):
        collection: VersionedCollection[Entity] = VersionedCollection()
        collection.save("x", Entity("a"))
        assert collection.save("x", Entity("b")) is Result.SUCCESS
        assert collection.find("x") == Entity("b")


class TestFindAndUpdate:
    def test_uses_default_for_missing(self):
        collection: VersionedCollection[list] = VersionedCollection()
        result = collection.find_and_update("k", lambda xs: xs + [1], list)
        assert result is Result.SUCCESS
        assert collection.find("k") == [1]

    def test_updates_existing(self):
        collection: VersionedCollection[list] = VersionedCollection()
        collection.save("k", [1], 0)
        collection.find_and_update("k", lambda xs: xs + [2], list)
        assert collection.find("k") == [1, 2]
        assert collection.version_of("k") == 2
