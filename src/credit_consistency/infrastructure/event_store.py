"""Append-only, per-stream event store with optimistic concurrency.

Design invariants
-----------------
1.  ``append_to_stream()`` checks ``expected_version`` against the current
    stream version and writes the new events in **one atomic step per
    stream** (a per-stream ``threading.Lock``).  On mismatch nothing is
    written and ``Result.FAILURE`` is returned.  The store never retries.
2.  Stream versions are contiguous from 1; each envelope carries its
    ``stream_version``.
3.  ``read_events()`` returns an empty list for an unknown stream.  "No
    stream yet" and "empty aggregate" are the same state.
4.  After a successful append, every new event is published synchronously,
    on the appender's call path, to each subscriber in registration order.
    Publishing happens outside the stream lock so subscribers may append to
    any stream.  A subscriber exception is logged and dead-lettered; it
    never undoes the committed append.

This module provides:

*  ``IEventStore``: the protocol.
*  ``EventEnvelope`` / ``EventStream``: immutable stored records.
*  ``InMemoryEventStore``: process-memory implementation.
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol

from credit_consistency.core.ids import new_id, utc_now
from credit_consistency.core.result import Result
from credit_consistency.observability import metrics

logger = logging.getLogger(__name__)

# Subscribers receive the event payload, not the envelope.
EventHandler = Callable[[Any], None]


# ---------------------------------------------------------------------------
# Stored records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EventEnvelope:
    data: Any
    stream_id: str
    event_type: str
    event_id: str
    stream_version: int
    occurred_at: datetime

    @classmethod
    def wrap(cls, stream_id: str, event: Any, version: int) -> EventEnvelope:
        return cls(
            data=event,
            stream_id=stream_id,
            event_type=type(event).__qualname__,
            event_id=new_id(),
            stream_version=version,
            occurred_at=utc_now(),
        )


@dataclass(frozen=True)
class EventStream:
    stream_id: str
    events: tuple[EventEnvelope, ...] = ()

    @property
    def version(self) -> int:
        return len(self.events)

    def append(self, envelopes: Sequence[EventEnvelope]) -> EventStream:
        return EventStream(self.stream_id, self.events + tuple(envelopes))

    def events_of_type(self, event_type: type | None = None) -> list[Any]:
        """Payloads in append order, optionally filtered by ``isinstance``."""
        return [
            env.data
            for env in self.events
            if event_type is None or isinstance(env.data, event_type)
        ]


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------

class IEventStore(Protocol):
    """Per-stream append-only log with expected-version writes."""

    def append_to_stream(
        self,
        stream_id: str,
        events: Sequence[Any],
        expected_version: int,
    ) -> Result:
        """Append *events* iff the stream is at *expected_version*."""
        ...

    def read_events(
        self,
        stream_id: str,
        event_type: type | None = None,
    ) -> list[Any]:
        """Event payloads of *stream_id* in append order."""
        ...

    def subscribe(self, handler: EventHandler) -> None:
        """Register *handler* for every event appended from now on."""
        ...


# ---------------------------------------------------------------------------
# In-memory implementation
# ---------------------------------------------------------------------------

class InMemoryEventStore:
    """Dict-backed event store.  No persistence across restarts."""

    def __init__(self) -> None:
        self._streams: dict[str, EventStream] = {}
        self._stream_locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()
        self._log: list[EventEnvelope] = []
        self._log_lock = threading.Lock()
        self._subscribers: list[EventHandler] = []
        self._error_counts: dict[str, int] = defaultdict(int)
        self._dead_letters: list[tuple[Any, str]] = []
        self._errors_lock = threading.Lock()

    def _lock_for(self, stream_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._stream_locks.get(stream_id)
            if lock is None:
                lock = threading.Lock()
                self._stream_locks[stream_id] = lock
            return lock

    # -- Writes ------------------------------------------------------------

    def append_to_stream(
        self,
        stream_id: str,
        events: Sequence[Any],
        expected_version: int,
    ) -> Result:
        """Append *events* to *stream_id* under an expected-version check.

        Returns ``Result.FAILURE`` without writing anything when the stream
        is not at *expected_version*.
        """
        with self._lock_for(stream_id):
            stream = self._streams.get(stream_id) or EventStream(stream_id)
            if stream.version != expected_version:
                logger.info(
                    "Version conflict on %s: expected %d, actual %d",
                    stream_id, expected_version, stream.version,
                )
                metrics.record_conflict(stream_id)
                return Result.FAILURE

            envelopes = [
                EventEnvelope.wrap(stream_id, event, expected_version + offset)
                for offset, event in enumerate(events, start=1)
            ]
            if envelopes:
                self._streams[stream_id] = stream.append(envelopes)
                with self._log_lock:
                    self._log.extend(envelopes)

        if envelopes:
            logger.debug(
                "Appended %d event(s) to %s (version %d)",
                len(envelopes), stream_id, expected_version + len(envelopes),
            )
            metrics.record_append(stream_id, len(envelopes))
            self._publish(envelopes)
        return Result.SUCCESS

    def subscribe(self, handler: EventHandler) -> None:
        self._subscribers.append(handler)

    def _publish(self, envelopes: Sequence[EventEnvelope]) -> None:
        for envelope in envelopes:
            for handler in list(self._subscribers):
                try:
                    handler(envelope.data)
                except Exception as exc:
                    key = envelope.event_type
                    with self._errors_lock:
                        self._error_counts[key] += 1
                        self._dead_letters.append((envelope.data, str(exc)))
                    metrics.record_subscriber_error(key)
                    logger.exception(
                        "Subscriber error on %s from %s: %s",
                        key, envelope.stream_id, exc,
                    )

    # -- Reads -------------------------------------------------------------

    def read_stream(self, stream_id: str) -> EventStream:
        return self._streams.get(stream_id) or EventStream(stream_id)

    def read_events(
        self,
        stream_id: str,
        event_type: type | None = None,
    ) -> list[Any]:
        return self.read_stream(stream_id).events_of_type(event_type)

    def stream_version(self, stream_id: str) -> int:
        return self.read_stream(stream_id).version

    def stream_ids(self) -> list[str]:
        return list(self._streams)

    def read_all(self) -> list[EventEnvelope]:
        """Every stored envelope in global commit order."""
        with self._log_lock:
            return list(self._log)

    # -- Observability -----------------------------------------------------

    def error_counts(self) -> dict[str, int]:
        """Return ``{event_type_name: subscriber_error_count}``."""
        with self._errors_lock:
            return dict(self._error_counts)

    @property
    def dead_letters(self) -> list[tuple[Any, str]]:
        """Events whose subscribers raised, with the error message."""
        with self._errors_lock:
            return list(self._dead_letters)

    # -- Testing helpers ---------------------------------------------------

    def clear(self) -> None:
        """Remove all streams.  Testing only."""
        with self._locks_guard:
            self._streams.clear()
            self._stream_locks.clear()
        with self._log_lock:
            self._log.clear()
        with self._errors_lock:
            self._error_counts.clear()
            self._dead_letters.clear()

    def __len__(self) -> int:
        return len(self._log)
