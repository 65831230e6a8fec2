"""Retry combinator with no upper bound on attempts.

Only the reconciliation process uses it.  Every other call site is single
attempt and reports a conflict as ``Result.FAILURE``.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def retry_until_success(
    attempt: Callable[[], T],
    is_conflict: Callable[[T], bool],
    *,
    backoff_seconds: float = 0.0,
    on_retry: Callable[[int], None] | None = None,
    description: str = "operation",
) -> T:
    """Call *attempt* until its outcome is not a conflict, then return it.

    There is no attempt cap: this returns only once *attempt* produces a
    non-conflicting outcome.  Exceptions raised by *attempt* propagate.

    Parameters
    ----------
    attempt:
        Zero-argument closure doing one full re-read / re-apply / re-save.
    is_conflict:
        Predicate on the outcome; ``True`` means try again.
    backoff_seconds:
        Sleep between attempts.  ``0`` busy-retries.
    on_retry:
        Called with the number of the attempt that just conflicted.
    """
    attempts = 0
    while True:
        attempts += 1
        outcome = attempt()
        if not is_conflict(outcome):
            if attempts > 1:
                logger.info(
                    "%s succeeded after %d attempts", description, attempts,
                )
            return outcome
        logger.warning(
            "%s conflicted (attempt %d), retrying", description, attempts,
        )
        if on_retry is not None:
            on_retry(attempts)
        if backoff_seconds > 0:
            time.sleep(backoff_seconds)
