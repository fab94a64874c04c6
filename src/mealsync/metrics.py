"""Prometheus metrics definitions for mealsync."""

from __future__ import annotations

from prometheus_client import Counter

MUTATIONS = Counter(
    "mealsync_mutations_total",
    "Shopping list mutations by operation and reconciliation outcome",
    ["operation", "outcome"],
)

REMOTE_REQUESTS = Counter(
    "mealsync_remote_requests_total",
    "Requests sent to the Mealie API by operation and status",
    ["operation", "status"],
)

BULK_ITEMS = Counter(
    "mealsync_bulk_items_total",
    "Items processed by bulk operations",
    ["operation", "result"],
)

__all__ = [
    "MUTATIONS",
    "REMOTE_REQUESTS",
    "BULK_ITEMS",
]
