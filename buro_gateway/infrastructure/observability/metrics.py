"""Prometheus metrics for monitoring grade distribution, sync volume, and directory health"""

from prometheus_client import Counter, Histogram

# Assessment metrics
assessment_counter = Counter(
    "buro_assessment_total",
    "Total risk assessments issued",
    ["grade", "source"],
)

person_not_found_counter = Counter(
    "buro_person_not_found_total",
    "Queries for persons without records in any probed source",
)

# Record store metrics
records_created_counter = Counter(
    "buro_records_created_total",
    "Records inserted by sync, reconciliation and mock generation",
    ["kind", "source"],  # kind: income | expense
)

# Core directory metrics
core_fetch_failures_counter = Counter(
    "core_fetch_failures_total",
    "Failed core directory calls",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_assessment(grade: str, source: str) -> None:
    """Record the grade handed out and the source it was computed from"""
    assessment_counter.labels(grade=grade, source=source).inc()


def record_created(kind: str, source: str, count: int) -> None:
    """Count inserted records per collection"""
    if count > 0:
        records_created_counter.labels(kind=kind, source=source).inc(count)
