"""Prometheus metrics for monitoring uploads, candidate volume, and external call performance"""

from prometheus_client import Counter, Histogram

# Upload metrics
upload_counter = Counter(
    "fraudscan_upload_total",
    "CSV uploads processed",
    ["outcome"],  # processed | no_data | parse_error | computation_error
)

records_processed_counter = Counter(
    "fraudscan_records_processed_total",
    "Transactions turned into processed records",
)

candidates_bucket_counter = Counter(
    "fraudscan_candidates_bucket",
    "Candidates submitted per scoring run by bucket",
    ["bucket"],  # 0, 1-10, 11-29, 30
)

# Scorer metrics
scorer_latency_histogram = Histogram(
    "scorer_latency_seconds",
    "Fraud scorer response time",
    buckets=[0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 30.0],
)

scorer_failure_counter = Counter(
    "scorer_failures_total",
    "Failed fraud scorer calls",
)

# Persistence metrics
persistence_failure_counter = Counter(
    "persistence_failures_total",
    "Failed datastore submissions",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_upload(outcome: str, record_count: int = 0) -> None:
    upload_counter.labels(outcome=outcome).inc()
    if record_count:
        records_processed_counter.inc(record_count)


def record_candidates(candidate_count: int, limit: int = 30) -> None:
    """Bucket candidate counts to see how often the submission cap is hit"""
    if candidate_count == 0:
        bucket = "0"
    elif candidate_count <= 10:
        bucket = "1-10"
    elif candidate_count < limit:
        bucket = f"11-{limit - 1}"
    else:
        bucket = str(limit)

    candidates_bucket_counter.labels(bucket=bucket).inc()
