"""Money and credit limit value objects.

Both types are immutable.  Amounts are ``Decimal``; currencies are ISO 4217
codes compared verbatim.  Arithmetic across currencies raises
``CurrencyMismatchError``.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from .errors import CurrencyMismatchError, InvalidAmountError


@dataclass(frozen=True)
class Money:
    amount: Decimal
    currency: str

    @classmethod
    def of(cls, amount: Decimal | int | str | float, currency: str) -> Money:
        """Build from any numeric literal; floats go through ``str``."""
        return cls(Decimal(str(amount)), currency.upper())

    @classmethod
    def zero(cls, currency: str) -> Money:
        return cls(Decimal("0"), currency.upper())

    # -- Predicates --------------------------------------------------------

    def is_zero(self) -> bool:
        return self.amount == 0

    def is_negative(self) -> bool:
        return self.amount < 0

    def is_positive_or_zero(self) -> bool:
        return self.amount >= 0

    # -- Arithmetic --------------------------------------------------------

    def _check(self, other: Money) -> None:
        if self.currency != other.currency:
            raise CurrencyMismatchError(self.currency, other.currency)

    def __add__(self, other: Money) -> Money:
        self._check(other)
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: Money) -> Money:
        self._check(other)
        return Money(self.amount - other.amount, self.currency)

    def __lt__(self, other: Money) -> bool:
        self._check(other)
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        self._check(other)
        return self.amount <= other.amount

    def __gt__(self, other: Money) -> bool:
        self._check(other)
        return self.amount > other.amount

    def __ge__(self, other: Money) -> bool:
        self._check(other)
        return self.amount >= other.amount

    def __str__(self) -> str:
        return f"{self.amount} {self.currency}"


def require_non_negative(amount: Money) -> None:
    """Raise ``InvalidAmountError`` for a negative command amount."""
    if amount.is_negative():
        raise InvalidAmountError(f"Amount must not be negative: {amount}")


@dataclass(frozen=True)
class Limit:
    """Credit limit: ``max`` granted, ``used`` outstanding.

    ``used`` never goes below zero; topping up past the debt clamps it.
    """

    max: Money
    used: Money

    @classmethod
    def initial(cls, max: Money) -> Limit:
        return cls(max, Money.zero(max.currency))

    @property
    def currency(self) -> str:
        return self.max.currency

    @property
    def available(self) -> Money:
        return self.max - self.used

    def use(self, amount: Money) -> Limit:
        return Limit(self.max, self.used + amount)

    def top_up(self, amount: Money) -> Limit:
        used = self.used - amount
        if used.is_negative():
            used = Money.zero(self.currency)
        return Limit(self.max, used)
