"""Prometheus metrics for the S3 ILM Operator."""

from prometheus_client import Counter, Gauge, Histogram

_PREFIX = "s3_ilm_operator"

# ILMPolicy reconciliation
reconcile_total = Counter(
    f"{_PREFIX}_reconcile_total",
    "ILMPolicy reconciliations by outcome (success, retry, invalid, error)",
    ["result"],
)
reconcile_duration_seconds = Histogram(
    f"{_PREFIX}_reconcile_duration_seconds",
    "Time spent reconciling one ILMPolicy",
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)
drift_detected_total = Counter(
    f"{_PREFIX}_drift_detected_total",
    "Out-of-band lifecycle changes found on a bucket",
    ["namespace", "policy"],
)

# Lifecycle state machine
lifecycle_operations_total = Counter(
    f"{_PREFIX}_lifecycle_operations_total",
    "Lifecycle configuration reads and writes by operation and result",
    ["operation", "result"],
)
lifecycle_rules_written_total = Counter(
    f"{_PREFIX}_lifecycle_rules_written_total",
    "Lifecycle rules submitted to the store",
)
lifecycle_rules = Gauge(
    f"{_PREFIX}_lifecycle_rules",
    "Rules currently mirrored in the status of each ILMPolicy",
    ["namespace", "policy"],
)

# Outgoing API calls
api_call_total = Counter(
    f"{_PREFIX}_api_call_total",
    "Kubernetes and object store API calls",
    ["api_type", "operation", "result"],
)
api_call_duration_seconds = Histogram(
    f"{_PREFIX}_api_call_duration_seconds",
    "Latency of Kubernetes and object store API calls",
    ["api_type", "operation"],
    buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0),
)
throttled_calls_total = Counter(
    f"{_PREFIX}_throttled_calls_total",
    "API calls delayed by the client-side rate limiter",
    ["api_type"],
)
