"""
Prometheus metrics for the inventory dashboard.

Tracks HTTP requests, page views, calls to the inventory API, and the
inventory operations users trigger (medicine edits, transactions,
month close).
"""

from fastapi import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

# Request metrics
http_requests_total = Counter(
    "medinventory_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "medinventory_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.025, 0.05, 0.075, 0.1, 0.25, 0.5, 0.75, 1.0, 2.5, 5.0),
)

# Page view metrics
page_views_total = Counter(
    "medinventory_page_views_total", "Total dashboard page views", ["tab"]
)

# Inventory API metrics
api_requests_total = Counter(
    "medinventory_api_requests_total",
    "Total requests sent to the inventory API",
    ["endpoint", "method", "status"],
)

api_request_duration_seconds = Histogram(
    "medinventory_api_request_duration_seconds",
    "Inventory API request duration in seconds",
    ["endpoint", "method"],
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

api_errors_total = Counter(
    "medinventory_api_errors_total",
    "Total inventory API errors",
    ["endpoint", "error_type"],
)

# User operations
inventory_operations_total = Counter(
    "medinventory_operations_total",
    "Inventory operations triggered from the dashboard",
    ["operation", "status"],
)

report_exports_total = Counter(
    "medinventory_report_exports_total",
    "Report exports",
    ["report_type"],
)


def track_request_metrics(
    method: str, endpoint: str, status_code: int, duration: float
):
    """Track HTTP request metrics."""
    http_requests_total.labels(
        method=method, endpoint=endpoint, status=status_code
    ).inc()
    http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(
        duration
    )


def track_page_view(tab: str):
    page_views_total.labels(tab=tab).inc()


def track_api_call(endpoint: str, method: str, status_code: int, duration: float):
    """Track one completed inventory API call."""
    api_requests_total.labels(
        endpoint=endpoint, method=method, status=status_code
    ).inc()
    api_request_duration_seconds.labels(endpoint=endpoint, method=method).observe(
        duration
    )


def track_api_error(endpoint: str, error_type: str):
    api_errors_total.labels(endpoint=endpoint, error_type=error_type).inc()


def track_operation(operation: str, success: bool):
    """Track a user-triggered inventory operation."""
    status = "success" if success else "failure"
    inventory_operations_total.labels(operation=operation, status=status).inc()


def track_report_export(report_type: str):
    report_exports_total.labels(report_type=report_type).inc()


async def metrics_endpoint():
    """
    Prometheus metrics endpoint.

    Returns:
        Response with Prometheus metrics in text format
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
