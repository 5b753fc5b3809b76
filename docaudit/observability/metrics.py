"""Prometheus metrics for the audit trail."""

from prometheus_client import Counter, Histogram

HISTORY_RECORDS_WRITTEN = Counter(
    "docaudit_history_records_written_total",
    "Total number of history records inserted",
    labelnames=["location", "operation", "mode"],
)

HISTORY_WRITE_FAILURES = Counter(
    "docaudit_history_write_failures_total",
    "Total number of history record inserts that failed",
    labelnames=["location", "operation", "error_type"],
)

HISTORY_WRITE_LATENCY = Histogram(
    "docaudit_history_write_latency_seconds",
    "Latency of history record inserts in seconds",
    labelnames=["location"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

UNMODIFIED_SAVES_SKIPPED = Counter(
    "docaudit_unmodified_saves_skipped_total",
    "Saves that produced no history record because nothing changed",
    labelnames=["location"],
)

REGISTRY_LOOKUPS = Counter(
    "docaudit_registry_lookups_total",
    "Audit collection resolutions by cache outcome",
    labelnames=["result"],
)
