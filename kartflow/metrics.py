"""
Prometheus metrics for the KartFlow console.

Tracks page views, backend calls, and the operator actions the console
forwards (orders, status changes, stock adjustments, logins).
"""

from fastapi import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

from .domain.order_status import OrderStatus
from .validators import MOVEMENT_TYPES

ORDER_STATUS_LABELS = frozenset(status.value for status in OrderStatus)
INVALID_LABEL = "invalid"

# Request metrics
http_requests_total = Counter(
    "console_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "console_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.025, 0.05, 0.075, 0.1, 0.25, 0.5, 0.75, 1.0, 2.5, 5.0),
)

# Page view metrics
console_page_views_total = Counter(
    "console_page_views_total", "Total page views", ["page"]
)

# Backend request metrics
console_backend_requests_total = Counter(
    "console_backend_requests_total",
    "Total requests to the e-commerce backend",
    ["service", "operation", "status"],
)

console_backend_request_duration_seconds = Histogram(
    "console_backend_request_duration_seconds",
    "Backend request duration in seconds",
    ["service", "operation"],
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

console_backend_errors_total = Counter(
    "console_backend_errors_total",
    "Total backend request errors",
    ["service", "error_type"],
)

# Operator actions
console_orders_created_total = Counter(
    "console_orders_created_total", "Orders submitted from the console", ["status"]
)

console_order_status_updates_total = Counter(
    "console_order_status_updates_total",
    "Order status changes submitted from the console",
    ["target_status", "status"],
)

console_stock_adjustments_total = Counter(
    "console_stock_adjustments_total",
    "Stock adjustments submitted from the console",
    ["movement_type", "status"],
)

console_login_attempts_total = Counter(
    "console_login_attempts_total", "Login and registration attempts", ["kind", "status"]
)


def _outcome(success: bool) -> str:
    return "success" if success else "failure"


def track_request_metrics(method: str, endpoint: str, status_code: int, duration: float):
    """Track HTTP request metrics."""
    http_requests_total.labels(method=method, endpoint=endpoint, status=status_code).inc()
    http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)


def track_page_view(page: str):
    """Track page view metrics."""
    console_page_views_total.labels(page=page).inc()


def track_backend_request(service: str, operation: str, status_code: int, duration: float):
    """Track backend request metrics."""
    console_backend_requests_total.labels(
        service=service, operation=operation, status=status_code
    ).inc()
    console_backend_request_duration_seconds.labels(
        service=service, operation=operation
    ).observe(duration)


def track_backend_error(service: str, error_type: str):
    """Track backend errors."""
    console_backend_errors_total.labels(service=service, error_type=error_type).inc()


def track_order_created(success: bool):
    console_orders_created_total.labels(status=_outcome(success)).inc()


def track_status_update(target_status: str, success: bool):
    """Count a status change; targets outside the workflow share the ``invalid`` label."""
    label = target_status if target_status in ORDER_STATUS_LABELS else INVALID_LABEL
    console_order_status_updates_total.labels(target_status=label, status=_outcome(success)).inc()


def track_stock_adjustment(movement_type: str, success: bool):
    label = movement_type if movement_type in MOVEMENT_TYPES else INVALID_LABEL
    console_stock_adjustments_total.labels(movement_type=label, status=_outcome(success)).inc()


def track_login_attempt(kind: str, success: bool):
    console_login_attempts_total.labels(kind=kind, status=_outcome(success)).inc()


async def metrics_endpoint():
    """
    Prometheus metrics endpoint.

    Returns:
        Response with Prometheus metrics in text format
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
