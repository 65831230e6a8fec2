"""Property test: billing cycle limit invariants hold for any command mix."""

from hypothesis import given, settings, strategies as st

from credit_consistency.core.clock import SimClock
from credit_consistency.core.money import Money
from credit_consistency.core.result import Result
from credit_consistency.domain.billing_cycle import BillingCycle

MAX = 100

ops = st.lists(
    st.tuples(
        st.sampled_from(["withdraw", "repay"]),
        st.integers(min_value=0, max_value=2 * MAX),
    ),
    max_size=80,
)


@given(ops=ops)
@settings(max_examples=200, deadline=None)
def test_used_stays_within_bounds(ops):
    cycle = BillingCycle.with_limit(Money.of(MAX, "USD"), clock=SimClock())
    for name, n in ops:
        amount = Money.of(n, "USD")
        before = cycle.state
        result = getattr(cycle, name)(amount)
        used = cycle.state.limit.used
        assert Money.zero("USD") <= used <= Money.of(MAX, "USD")
        assert cycle.withdrawals_in_cycle <= 45
        if result is Result.FAILURE:
            assert cycle.state == before


@given(n=st.integers(min_value=0, max_value=2 * MAX))
def test_withdraw_succeeds_iff_available(n):
    cycle = BillingCycle.with_limit(Money.of(MAX, "USD"), clock=SimClock())
    result = cycle.withdraw(Money.of(n, "USD"))
    assert (result is Result.SUCCESS) == (n <= MAX)
