"""Prometheus metrics for the event store and the reconciliation process."""

from __future__ import annotations

from prometheus_client import Counter, start_http_server

# ---------------------------------------------------------------------------
# Event store metrics
# ---------------------------------------------------------------------------

EVENTS_APPENDED = Counter(
    "consistency_events_appended_total",
    "Events appended to the event store",
    ["stream_type"],
)

APPEND_CONFLICTS = Counter(
    "consistency_append_conflicts_total",
    "Appends rejected by the expected-version check",
    ["stream_type"],
)

SUBSCRIBER_ERRORS = Counter(
    "consistency_subscriber_errors_total",
    "Exceptions raised by event store subscribers",
    ["event_type"],
)

# ---------------------------------------------------------------------------
# Reconciliation metrics
# ---------------------------------------------------------------------------

RECONCILIATION_RETRIES = Counter(
    "consistency_reconciliation_retries_total",
    "Reconciliation attempts repeated after a concurrency conflict",
    ["event_type"],
)


def start_metrics_server(port: int = 9090) -> None:
    """Start the Prometheus HTTP endpoint in a background thread."""
    start_http_server(port)


def stream_type(stream_id: str) -> str:
    """``"CreditLine:..."`` -> ``"CreditLine"``."""
    return stream_id.split(":", 1)[0]


def record_append(stream_id: str, count: int) -> None:
    EVENTS_APPENDED.labels(stream_type=stream_type(stream_id)).inc(count)


def record_conflict(stream_id: str) -> None:
    APPEND_CONFLICTS.labels(stream_type=stream_type(stream_id)).inc()


def record_subscriber_error(event_type: str) -> None:
    SUBSCRIBER_ERRORS.labels(event_type=event_type).inc()


def record_reconciliation_retry(event_type: str) -> None:
    RECONCILIATION_RETRIES.labels(event_type=event_type).inc()
