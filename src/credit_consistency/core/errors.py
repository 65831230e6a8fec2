"""Custom exception hierarchy.

Business rejections and optimistic-concurrency conflicts are reported as
``Result.FAILURE``.  The exceptions below signal programming or
configuration mistakes only.
"""


class ConsistencyError(Exception):
    """Base exception for all consistency-core errors."""


# --- Configuration ---
class ConfigError(ConsistencyError):
    """Invalid or missing configuration."""


# --- Money ---
class MoneyError(ConsistencyError):
    """Invalid money arithmetic."""


class CurrencyMismatchError(MoneyError):
    """Arithmetic or comparison across two different currencies."""

    def __init__(self, left: str, right: str):
        self.left = left
        self.right = right
        super().__init__(f"Currency mismatch: {left} vs {right}")


class InvalidAmountError(MoneyError):
    """A command received a negative amount."""


# --- Aggregates ---
class AggregateError(ConsistencyError):
    """Aggregate reconstruction or persistence error."""


class UnknownEventError(AggregateError):
    """An event outside the aggregate's event family reached its fold."""

    def __init__(self, aggregate: str, event: object):
        self.aggregate = aggregate
        self.event = event
        super().__init__(
            f"{aggregate} cannot apply event of type {type(event).__qualname__}"
        )


class AggregateNotFoundError(AggregateError):
    """A save was requested for an aggregate that has no identity yet."""
