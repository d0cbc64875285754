"""Prometheus metric inventory.

Every metric the service exposes is defined here; the modules that own
the behaviour import the one they need and update it at the point of
action.  Scraped from GET /metrics.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by the MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    # Course fetches carry an artificial delay (COURSE_FETCH_DELAY_MS,
    # 300ms by default), so report endpoints land in the 0.25-0.5 range.
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Analytics metrics
# ---------------------------------------------------------------------------

AGGREGATIONS = Counter(
    "analytics_aggregations_total",
    "Analytics aggregation runs by report and outcome",
    ["report", "outcome"],  # report: students|courses|summary; outcome: ok|error
)

AGGREGATION_DURATION = Histogram(
    "analytics_aggregation_duration_seconds",
    "Wall time of one aggregation call, snapshot load included",
    ["report"],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
)

SKIPPED_REFERENCES = Counter(
    "analytics_skipped_references_total",
    "Submission course references with no matching course record",
)

STORE_DECODE_FAILURES = Counter(
    "record_store_decode_failures_total",
    "Stored collections that could not be parsed and fell back to empty",
    ["key"],
)
