"""Prometheus metrics for docaudit.

Covers coordinator calls, appended history entries, batch round-trips,
and failures by stage.
"""

from prometheus_client import Counter, Histogram

# Coordinator calls
AUDIT_CALLS = Counter(
    "docaudit_calls_total",
    "Total number of audit coordinator calls",
    labelnames=["operation", "status"],
)

AUDIT_CALL_LATENCY = Histogram(
    "docaudit_call_latency_seconds",
    "Audit coordinator call latency in seconds",
    labelnames=["operation"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# History
HISTORY_ENTRIES = Counter(
    "docaudit_history_entries_total",
    "History entries appended to audit records",
    labelnames=["action", "origin"],
)

BACKFILL_FALLBACKS = Counter(
    "docaudit_backfill_fallbacks_total",
    "Backfills degraded to a plain create because the prior state was unavailable",
)

# Batching
BATCH_CHUNKS = Counter(
    "docaudit_batch_chunks_total",
    "Chunks issued to the store by the batch executor",
    labelnames=["kind"],
)

# Errors
ERRORS = Counter(
    "docaudit_errors_total",
    "Total number of audit failures",
    labelnames=["stage"],
)
