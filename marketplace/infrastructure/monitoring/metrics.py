"""
Prometheus metrics for system monitoring.
"""

import os

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
    multiprocess,
)

from marketplace.config.logging import get_logger

logger = get_logger(__name__)


def _build_registry() -> CollectorRegistry:
    """Single-process registry, or a multiprocess one for gunicorn/celery."""
    registry = CollectorRegistry()
    multiproc_dir = os.getenv("PROMETHEUS_MULTIPROC_DIR")
    if not multiproc_dir:
        return registry

    os.makedirs(multiproc_dir, exist_ok=True)
    if not os.access(multiproc_dir, os.W_OK):
        logger.warning("PROMETHEUS_MULTIPROC_DIR is not writable", path=multiproc_dir)
        return CollectorRegistry()

    try:
        multiprocess.MultiProcessCollector(registry)
    except ValueError as e:
        logger.warning("Failed to initialize multiprocess collector", error=str(e))
        return CollectorRegistry()
    return registry


registry = _build_registry()


def get_registry() -> CollectorRegistry:
    """Get the current registry."""
    return registry


class _NoopMetric:
    """Stands in for a metric that could not be registered."""

    def labels(self, *args, **kwargs):
        return self

    def inc(self, amount=1):
        pass

    def observe(self, value):
        pass


def _get_metric(metric_class, *args, **kwargs):
    try:
        return metric_class(*args, **kwargs, registry=get_registry())
    except ValueError as e:
        # Duplicate registration when a module is re-imported
        logger.warning(
            "Failed to create metric", metric=metric_class.__name__, error=str(e)
        )
        return _NoopMetric()


# Routing metrics
JOB_CLAIMS = _get_metric(
    Counter,
    "job_claims_total",
    "Router claim attempts by outcome",
    ["result"],
)

DISPATCHES_ISSUED = _get_metric(
    Counter,
    "dispatches_issued_total",
    "Offers sent to contractors",
    ["source"],
)

DISPATCH_RESPONSES = _get_metric(
    Counter,
    "dispatch_responses_total",
    "Contractor responses to offers",
    ["decision", "result"],
)

DISPATCHES_EXPIRED = _get_metric(
    Counter,
    "dispatches_expired_total",
    "Offers expired by acceptance or by the sweeper",
    ["reason"],
)

# SLA metrics
MONITORING_EVENTS_EMITTED = _get_metric(
    Counter,
    "monitoring_events_emitted_total",
    "SLA monitoring events written",
    ["event_type"],
)

SLA_EVALUATION_DURATION = _get_metric(
    Histogram,
    "sla_evaluation_duration_seconds",
    "Time spent evaluating routing SLAs",
    buckets=[0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0],
)

# Payment metrics
PAYMENT_INTENTS = _get_metric(
    Counter,
    "payment_intents_total",
    "Escrow payment intent requests by outcome",
    ["outcome"],
)

PAYMENT_PROVIDER_CALLS = _get_metric(
    Counter,
    "payment_provider_calls_total",
    "Calls made to the payment provider",
    ["provider", "operation", "status"],
)

# API metrics
API_REQUESTS = _get_metric(
    Counter,
    "api_requests_total",
    "Total number of API requests",
    ["method", "endpoint", "status_code"],
)

API_REQUEST_DURATION = _get_metric(
    Histogram,
    "api_request_duration_seconds",
    "Time spent processing API requests",
    ["method", "endpoint"],
    buckets=[0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0],
)

# Error metrics
ERRORS_TOTAL = _get_metric(
    Counter,
    "errors_total",
    "Total number of errors",
    ["error_type", "component"],
)

# Worker metrics
WORKER_TASKS_PROCESSED = _get_metric(
    Counter,
    "worker_tasks_processed_total",
    "Total number of background tasks processed",
    ["task_type", "status"],
)


def record_claim_attempt(result: str):
    """Record a claim attempt."""
    JOB_CLAIMS.labels(result=result).inc()


def record_dispatches_issued(count: int, source: str = "router"):
    """Record offers sent by a fan-out."""
    if count:
        DISPATCHES_ISSUED.labels(source=source).inc(count)


def record_dispatch_response(decision: str, result: str):
    """Record a contractor response."""
    DISPATCH_RESPONSES.labels(decision=decision, result=result).inc()


def record_dispatches_expired(count: int, reason: str):
    """Record expired offers."""
    if count:
        DISPATCHES_EXPIRED.labels(reason=reason).inc(count)


def record_monitoring_event(event_type: str):
    """Record a written monitoring event."""
    MONITORING_EVENTS_EMITTED.labels(event_type=event_type).inc()


def record_payment_intent(outcome: str):
    """Record a payment intent outcome."""
    PAYMENT_INTENTS.labels(outcome=outcome).inc()


def record_provider_call(provider: str, operation: str, status: str):
    """Record a payment provider call."""
    PAYMENT_PROVIDER_CALLS.labels(
        provider=provider, operation=operation, status=status
    ).inc()


def record_api_request(method: str, endpoint: str, status_code: int, duration: float):
    """Record an API request."""
    API_REQUESTS.labels(method=method, endpoint=endpoint, status_code=status_code).inc()
    API_REQUEST_DURATION.labels(method=method, endpoint=endpoint).observe(duration)


def record_error(error_type: str, component: str):
    """Record error metric."""
    ERRORS_TOTAL.labels(error_type=error_type, component=component).inc()


def record_worker_task(task_type: str, status: str):
    """Record background task processing metric."""
    WORKER_TASKS_PROCESSED.labels(task_type=task_type, status=status).inc()


def get_metrics():
    """Get all metrics in Prometheus format."""
    return generate_latest(registry)


def get_metrics_content_type():
    """Get the content type for metrics."""
    return CONTENT_TYPE_LATEST
