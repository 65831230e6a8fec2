"""Versioned key/value collection with compare-and-swap saves.

Each key holds one ``(record, version)`` slot.  ``save`` succeeds only when
the slot is at the expected version (0 for a missing key) and bumps it by
exactly one.  Used for state that is not event-sourced, such as card
ownership.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from credit_consistency.core.result import Result

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class VersionedRecord(Generic[T]):
    record: T
    version: int


class VersionedCollection(Generic[T]):

    def __init__(self, name: str = "") -> None:
        self._name = name
        self._entries: dict[str, VersionedRecord[T]] = {}
        self._lock = threading.Lock()

    def save(self, key: str, record: T, expected_version: int | None = None) -> Result:
        """Store *record* under *key* if the slot is at *expected_version*.

        With no *expected_version* the record's own ``version`` attribute is
        used, falling back to the slot's current version (last write wins).
        """
        with self._lock:
            current = self._entries.get(key)
            current_version = current.version if current is not None else 0
            if expected_version is None:
                expected_version = getattr(record, "version", current_version)
            if current_version != expected_version:
                logger.info(
                    "Version conflict in %s[%s]: expected %d, actual %d",
                    self._name or "collection", key, expected_version,
                    current_version,
                )
                return Result.FAILURE
            self._entries[key] = VersionedRecord(record, expected_version + 1)
            return Result.SUCCESS

    def find(self, key: str) -> T | None:
        entry = self._entries.get(key)
        return entry.record if entry is not None else None

    def find_versioned(self, key: str) -> VersionedRecord[T] | None:
        return self._entries.get(key)

    def version_of(self, key: str) -> int:
        entry = self._entries.get(key)
        return entry.version if entry is not None else 0

    def find_and_update(
        self,
        key: str,
        handle: Callable[[T], T],
        default: Callable[[], T],
    ) -> Result:
        """Read, transform with *handle*, save against the version read."""
        entry = self._entries.get(key)
        if entry is None:
            record, version = default(), 0
        else:
            record, version = entry.record, entry.version
        return self.save(key, handle(record), version)

    def __len__(self) -> int:
        return len(self._entries)
