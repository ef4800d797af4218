"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Booking metrics
booking_attempts = Counter(
    'booking_attempts_total',
    'Total booking creation attempts',
    ['outcome']  # success, conflict, not_found, invalid, stale
)

booking_latency = Histogram(
    'booking_create_latency_seconds',
    'Booking creation latency',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

booking_claim_retries = Counter(
    'booking_calendar_claim_retries_total',
    'Booking creations retried after losing the per-space calendar claim'
)

booking_transitions = Counter(
    'booking_transitions_total',
    'Booking status transitions',
    ['source', 'status']  # source: owner, payment
)

# Payment metrics
payment_requests = Counter(
    'payment_requests_total',
    'Mobile money payment requests',
    ['provider', 'outcome']  # accepted, failed
)

payment_reconciliations = Counter(
    'payment_reconciliations_total',
    'Mobile money status polls',
    ['provider', 'status']
)

# Notification metrics
notification_failures = Counter(
    'booking_notification_failures_total',
    'Booking confirmation notifications that failed and were dropped'
)

# Cache metrics
cache_operations = Counter(
    'cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get/set, hit/miss
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_booking_attempt(outcome: str):
    booking_attempts.labels(outcome=outcome).inc()


def record_transition(source: str, status: str):
    booking_transitions.labels(source=source, status=status).inc()


def record_payment_request(provider: str, accepted: bool):
    outcome = "accepted" if accepted else "failed"
    payment_requests.labels(provider=provider, outcome=outcome).inc()


def record_payment_reconciliation(provider: str, status: str):
    payment_reconciliations.labels(provider=provider, status=status).inc()


def record_cache_operation(operation: str, hit: bool):
    result = "hit" if hit else "miss"
    cache_operations.labels(operation=operation, result=result).inc()
