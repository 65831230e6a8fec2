"""Aggregate reconstruction discipline shared by every event-sourced entity.

An aggregate is a thin wrapper around an immutable state snapshot:

*  ``evolve(state, event) -> state`` is a pure fold step, supplied per
   aggregate type.
*  ``recreate(events)`` folds a whole stream from ``initial_state()``.
*  Commands validate against the current snapshot and, on success, call
   ``_emit(*events)``.  The events are folded into the snapshot
   immediately and queued as *pending* until a repository appends them.

A failed command returns ``Result.FAILURE`` before calling ``_emit``, so it
leaves state, version and the pending queue untouched.  ``_emit`` folds all
of its events into a scratch state first and only then commits, so a
multi-event command is all-or-nothing as well.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import ClassVar, Generic, TypeVar

from credit_consistency.core.clock import IClock, WallClock
from credit_consistency.core.config import DEFAULT_POLICY, CreditPolicyConfig
from credit_consistency.core.result import Result

S = TypeVar("S")
E = TypeVar("E")


def aggregate_stream(
    events: Iterable[E],
    evolve: Callable[[S, E], S],
    initial: Callable[[], S],
) -> S:
    """Left fold of *events* over *evolve*, starting at ``initial()``."""
    state = initial()
    for event in events:
        state = evolve(state, event)
    return state


class Aggregate(Generic[S, E]):
    """Base class for event-sourced aggregates.

    Subclasses set ``event_family`` and implement ``initial_state`` and
    ``evolve`` as static methods.  ``version`` counts every event folded
    into the snapshot, pending ones included; ``persisted_version`` is the
    version the aggregate was loaded at and is the default expected version
    when saving.
    """

    event_family: ClassVar[type]

    def __init__(
        self,
        state: S | None = None,
        version: int = 0,
        *,
        policy: CreditPolicyConfig = DEFAULT_POLICY,
        clock: IClock | None = None,
    ) -> None:
        self._state: S = state if state is not None else self.initial_state()
        self._version = version
        self._persisted_version = version
        self._pending: list[E] = []
        self._policy = policy
        self._clock: IClock = clock or WallClock()

    # -- Fold contract -----------------------------------------------------

    @staticmethod
    def initial_state() -> S:
        raise NotImplementedError

    @staticmethod
    def evolve(state: S, event: E) -> S:
        raise NotImplementedError

    @classmethod
    def recreate(
        cls,
        events: Iterable[E],
        *,
        policy: CreditPolicyConfig = DEFAULT_POLICY,
        clock: IClock | None = None,
    ):
        """Rebuild an aggregate by replaying *events* from the initial state."""
        stream = list(events)
        state = aggregate_stream(stream, cls.evolve, cls.initial_state)
        return cls(state, len(stream), policy=policy, clock=clock)

    # -- Accessors ---------------------------------------------------------

    @property
    def state(self) -> S:
        return self._state

    @property
    def version(self) -> int:
        return self._version

    @property
    def persisted_version(self) -> int:
        return self._persisted_version

    @property
    def pending_events(self) -> tuple[E, ...]:
        return tuple(self._pending)

    def dequeue_pending_events(self) -> list[E]:
        """Hand the pending queue to the caller and clear it."""
        events, self._pending = self._pending, []
        return events

    def mark_persisted(self) -> None:
        self._persisted_version = self._version

    # -- Event application -------------------------------------------------

    def _emit(self, *events: E) -> Result:
        state = self._state
        for event in events:
            state = self.evolve(state, event)
        self._state = state
        self._version += len(events)
        self._pending.extend(events)
        return Result.SUCCESS

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(version={self._version}, "
            f"pending={len(self._pending)}, state={self._state!r})"
        )
