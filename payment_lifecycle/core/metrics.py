"""Prometheus metrics for the payment lifecycle service.

Metrics are organized into two categories:

Business Metrics (for Collections/Finance):
- evergreen_agreements_created_total: New agreements by payment type
- evergreen_payments_recorded_total: Recorded payments by method
- evergreen_payment_amount_total: Sum of recorded payment amounts
- evergreen_agreement_status_total: Status classifications served

Technical Metrics (for Engineering/SRE):
- evergreen_record_payment_latency_seconds: Record-payment latency
- evergreen_payment_conflicts_total: Concurrent recording conflicts
- evergreen_http_requests_total: HTTP requests by endpoint/status
"""

import time
from contextlib import contextmanager
from decimal import Decimal
from typing import Generator

from prometheus_client import Counter, Histogram, REGISTRY, generate_latest
from prometheus_client.exposition import CONTENT_TYPE_LATEST


# =============================================================================
# Business Metrics (Collections/Finance dashboards)
# =============================================================================

agreements_created_total = Counter(
    "evergreen_agreements_created_total",
    "Total number of client payment agreements created",
    ["payment_type"],  # spot_cash, installment
)

payments_recorded_total = Counter(
    "evergreen_payments_recorded_total",
    "Total number of payments recorded",
    ["method"],  # CASH, CHECK, BANK_TRANSFER, ONLINE
)

payment_amount_total = Counter(
    "evergreen_payment_amount_total",
    "Sum of recorded payment amounts in whole currency units",
)

agreements_completed_total = Counter(
    "evergreen_agreements_completed_total",
    "Agreements whose final installment was recorded",
)

agreement_status_total = Counter(
    "evergreen_agreement_status_total",
    "Agreement status classifications served",
    ["status"],
)


# =============================================================================
# Technical Metrics (Engineering/SRE dashboards)
# =============================================================================

record_payment_latency = Histogram(
    "evergreen_record_payment_latency_seconds",
    "Record-payment request latency in seconds",
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

payment_conflicts_total = Counter(
    "evergreen_payment_conflicts_total",
    "Payment recordings rejected because another recording won the race",
)

http_requests_total = Counter(
    "evergreen_http_requests_total",
    "Total HTTP requests by endpoint and status",
    ["method", "endpoint", "status"],
)

http_request_latency = Histogram(
    "evergreen_http_request_latency_seconds",
    "HTTP request latency by endpoint",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)


# =============================================================================
# Helper Functions
# =============================================================================

def record_agreement_created(payment_type: str) -> None:
    """Record a newly created agreement."""
    agreements_created_total.labels(payment_type=payment_type).inc()


def record_payment_recorded(method: str, amount: Decimal, completed: bool) -> None:
    """Record a successfully persisted payment."""
    payments_recorded_total.labels(method=method).inc()
    payment_amount_total.inc(float(amount))
    if completed:
        agreements_completed_total.inc()


def record_agreement_status(status: str) -> None:
    """Record a status classification served to a caller."""
    agreement_status_total.labels(status=status).inc()


def record_payment_conflict() -> None:
    """Record a rejected concurrent payment recording."""
    payment_conflicts_total.inc()


@contextmanager
def track_record_payment_latency() -> Generator[None, None, None]:
    """Context manager to track record-payment latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        duration = time.perf_counter() - start
        record_payment_latency.observe(duration)


def record_http_request(method: str, endpoint: str, status: int, duration: float) -> None:
    """Record an HTTP request."""
    http_requests_total.labels(method=method, endpoint=endpoint, status=str(status)).inc()
    http_request_latency.labels(method=method, endpoint=endpoint).observe(duration)


def get_metrics() -> bytes:
    """Get current metrics in Prometheus format."""
    return generate_latest(REGISTRY)


def get_metrics_content_type() -> str:
    """Get the content type for metrics response."""
    return CONTENT_TYPE_LATEST
