"""Money and Limit value objects."""

from decimal import Decimal

import pytest

from credit_consistency.core.errors import CurrencyMismatchError
from credit_consistency.core.money import Limit, Money


class TestMoney:
    def test_of_normalises_amount_and_currency(self):
        m = Money.of(10, "usd")
        assert m.amount == Decimal("10")
        assert m.currency == "USD"

    def test_equal_regardless_of_scale(self):
        assert Money.of("50", "USD") == Money.of("50.00", "USD")

    def test_float_goes_through_str(self):
        assert Money.of(0.1, "USD").amount == Decimal("0.1")

    def test_add_and_subtract(self):
        assert Money.of(3, "USD") + Money.of(4, "USD") == Money.of(7, "USD")
        assert Money.of(3, "USD") - Money.of(4, "USD") == Money.of(-1, "USD")

    def test_comparisons(self):
        assert Money.of(1, "USD") < Money.of(2, "USD")
        assert Money.of(2, "USD") >= Money.of(2, "USD")

    def test_currency_mismatch_raises(self):
        with pytest.raises(CurrencyMismatchError, match="USD vs EUR"):
            Money.of(1, "USD") + Money.of(1, "EUR")
        with pytest.raises(CurrencyMismatchError):
            Money.of(1, "USD") < Money.of(1, "EUR")

    def test_predicates(self):
        assert Money.zero("USD").is_zero()
        assert Money.of(-1, "USD").is_negative()
        assert Money.zero("USD").is_positive_or_zero()


class TestLimit:
    def test_initial_has_nothing_used(self):
        limit = Limit.initial(Money.of(100, "USD"))
        assert limit.used == Money.zero("USD")
        assert limit.available == Money.of(100, "USD")

    def test_use_reduces_available(self):
        limit = Limit.initial(Money.of(100, "USD")).use(Money.of(30, "USD"))
        assert limit.available == Money.of(70, "USD")

    def test_top_up_credits_used(self):
        limit = Limit(Money.of(100, "USD"), Money.of(50, "USD"))
        assert limit.top_up(Money.of(20, "USD")).used == Money.of(30, "USD")

    def test_top_up_beyond_debt_clamps_to_zero(self):
        limit = Limit(Money.of(100, "USD"), Money.of(50, "USD"))
        topped = limit.top_up(Money.of(80, "USD"))
        assert topped.used == Money.zero("USD")
        assert topped.available == Money.of(100, "USD")
