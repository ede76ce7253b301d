"""Prometheus metrics for account operations, bank-link calls, and request latency"""

from prometheus_client import Counter, Histogram

# Account metrics
account_operations_counter = Counter(
    "account_operations_total",
    "Account CRUD and payment operations",
    ["operation"],  # create | update | delete | payment | migrate
)

account_refresh_counter = Counter(
    "account_refresh_total",
    "Linked account refresh attempts",
    ["outcome"],  # updated | skipped | failed
)

# Aggregator API metrics
plaid_request_counter = Counter(
    "plaid_requests_total",
    "Bank-link aggregator API calls",
    ["endpoint", "outcome"],  # outcome: ok | error
)

plaid_latency_histogram = Histogram(
    "plaid_request_latency_seconds",
    "Bank-link aggregator response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_account_operation(operation: str) -> None:
    account_operations_counter.labels(operation=operation).inc()


def record_refresh(outcome: str, count: int = 1) -> None:
    """Record refresh outcomes for monitoring stale or broken bank links"""
    if count > 0:
        account_refresh_counter.labels(outcome=outcome).inc(count)
