"""Card ownership: the set of owners allowed to withdraw from a card.

Stored outside the event store in a ``VersionedCollection`` and versioned
independently of the credit line.  ``version`` is the stored version the
value was read at; edits keep it so the repository can check it on save.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from credit_consistency.domain.ids import OwnerId


@dataclass(frozen=True)
class Ownership:
    owners: frozenset[OwnerId] = frozenset()
    version: int = 0

    @classmethod
    def of(cls, *owners: OwnerId) -> Ownership:
        return cls(frozenset(owners))

    @classmethod
    def empty(cls) -> Ownership:
        return cls()

    def has_access(self, owner_id: OwnerId) -> bool:
        return owner_id in self.owners

    def add_access(self, owner_id: OwnerId) -> Ownership:
        return replace(self, owners=self.owners | {owner_id})

    def revoke(self, owner_id: OwnerId) -> Ownership:
        return replace(self, owners=self.owners - {owner_id})

    def with_version(self, version: int) -> Ownership:
        return replace(self, version=version)

    def size(self) -> int:
        return len(self.owners)
