"""Cross-aggregate reconciliation between credit lines and billing cycles."""

from credit_consistency.reconciliation.process import BillingCycleReconciler
from credit_consistency.reconciliation.retry import retry_until_success

__all__ = ["BillingCycleReconciler", "retry_until_success"]
