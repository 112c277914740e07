"""Prometheus counters for account lifecycle events."""

from __future__ import annotations

from prometheus_client import Counter

ACCOUNT_EVENTS = Counter(
    "account_events_total",
    "Account lifecycle events handled by the service.",
    ["event"],
)


def record_event(event: str) -> None:
    """Increment the counter for ``event``."""
    ACCOUNT_EVENTS.labels(event=event).inc()
