"""Prometheus metrics for analysis volume, detected fees, health scores and storage reliability"""

from typing import List
from prometheus_client import Counter, Histogram

from wellness_gateway.domain.models import DetectedFee

# Analysis metrics
analysis_counter = Counter(
    "wellness_analysis_total",
    "Computation requests served",
    ["kind"],  # summary | fees | health | predictions | simulation | goals
)

fees_detected_counter = Counter(
    "wellness_fees_detected_total",
    "Detected hidden fee entries by severity",
    ["severity"],
)

health_score_histogram = Histogram(
    "wellness_health_score",
    "Distribution of computed health scores",
    buckets=[20, 40, 60, 80, 100],
)

simulations_saved_counter = Counter(
    "wellness_simulations_saved_total",
    "Simulator runs persisted",
)

# Storage API metrics
malformed_records_counter = Counter(
    "wellness_malformed_records_total",
    "Collaborator records skipped or coerced during parsing",
    ["entity"],
)

storage_fetch_failures_counter = Counter(
    "storage_fetch_failures_total",
    "Failed storage API calls",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_fees(fees: List[DetectedFee]) -> None:
    analysis_counter.labels(kind="fees").inc()
    for fee in fees:
        fees_detected_counter.labels(severity=fee.severity.value).inc()


def record_health_score(score: int) -> None:
    analysis_counter.labels(kind="health").inc()
    health_score_histogram.observe(score)


def record_malformed(entity: str, count: int) -> None:
    if count > 0:
        malformed_records_counter.labels(entity=entity).inc(count)
