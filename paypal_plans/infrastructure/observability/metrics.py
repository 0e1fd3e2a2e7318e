"""Prometheus metrics for monitoring gateway calls, plan creation and HTTP latency"""

from prometheus_client import Counter, Histogram

# Operation metrics
operation_counter = Counter(
    "paypal_plans_operation_total",
    "Public operations completed",
    ["operation", "outcome"],  # success | validation_error | gateway_error | rejected | unexpected_error
)

plans_created_counter = Counter(
    "paypal_plans_created_total",
    "Payments and billing agreements created",
    ["kind"],  # one_time | recurring | fixed_recurring | installments
)

# Gateway metrics
gateway_latency_histogram = Histogram(
    "paypal_gateway_latency_seconds",
    "PayPal API response time",
    ["operation"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_operation(operation: str, outcome: str) -> None:
    """Record the outcome of a public operation"""
    operation_counter.labels(operation=operation, outcome=outcome).inc()
