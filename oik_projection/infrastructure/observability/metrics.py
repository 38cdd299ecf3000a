"""Prometheus metrics for monitoring projection outcomes and advisory health"""

from prometheus_client import Counter, Histogram

# Projection metrics
projection_counter = Counter(
    "oik_projection_requests_total",
    "Projections generated",
    ["alert_level"],  # healthy | warning | critical | none
)

income_source_counter = Counter(
    "oik_projection_income_source_total",
    "Income source chosen for the current month",
    ["source"],  # anchor | recurring | historical
)

# Advisory metrics
advisory_counter = Counter(
    "oik_advisory_narratives_total",
    "Advisory narratives returned",
    ["source"],  # ai | fallback
)

advisory_latency_histogram = Histogram(
    "advisory_latency_seconds",
    "Advisory generator response time",
    buckets=[0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 15.0],
)

# Identity metrics
identity_failures_counter = Counter(
    "identity_failures_total",
    "Rejected or failed token validations",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_projection(alert_level: str | None, income_source: str | None, narrative_source: str | None) -> None:
    """Record one completed projection request"""
    projection_counter.labels(alert_level=alert_level or "none").inc()
    if income_source:
        income_source_counter.labels(source=income_source).inc()
    if narrative_source:
        advisory_counter.labels(source=narrative_source).inc()
