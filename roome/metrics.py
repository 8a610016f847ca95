"""Prometheus metrics for monitoring and observability."""

from __future__ import annotations

import re
import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware

# Request metrics
REQUEST_COUNT = Counter(
    "roome_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

REQUEST_LATENCY = Histogram(
    "roome_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

REQUEST_IN_PROGRESS = Gauge(
    "roome_http_requests_in_progress",
    "HTTP requests currently being processed",
    ["method", "endpoint"],
)

# Error metrics
ERROR_COUNT = Counter(
    "roome_errors_total",
    "Total application errors",
    ["error_type", "endpoint"],
)

# Component metrics
COMPONENT_RENDERS_TOTAL = Counter(
    "roome_component_renders_total",
    "Dynamic component renders",
    ["branch", "outcome"],
)

COMPONENT_USAGE_EVENTS_TOTAL = Counter(
    "roome_component_usage_events_total",
    "Component usage events recorded",
)

USAGE_TRACKING_FAILURES_TOTAL = Counter(
    "roome_usage_tracking_failures_total",
    "Usage tracking sends that failed and were dropped",
)

UUID_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}", re.IGNORECASE
)
NAME_SEGMENT_PATTERN = re.compile(r"(/ui-components/name/)[^/]+")


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    metrics: bytes = generate_latest()
    return metrics


def get_metrics_content_type() -> str:
    """Get the content type for Prometheus metrics."""
    content_type: str = CONTENT_TYPE_LATEST
    return content_type


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware to collect request metrics."""

    # Paths to exclude from metrics
    EXCLUDE_PATHS = {"/metrics", "/api/health", "/api/ready", "/favicon.ico"}

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        if request.url.path in self.EXCLUDE_PATHS:
            return await call_next(request)

        method = request.method
        endpoint = normalize_path(request.url.path)

        REQUEST_IN_PROGRESS.labels(method=method, endpoint=endpoint).inc()
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
            REQUEST_COUNT.labels(
                method=method,
                endpoint=endpoint,
                status_code=str(response.status_code),
            ).inc()
            REQUEST_LATENCY.labels(method=method, endpoint=endpoint).observe(
                time.perf_counter() - start_time
            )
            return response

        except Exception as e:
            ERROR_COUNT.labels(error_type=type(e).__name__, endpoint=endpoint).inc()
            raise

        finally:
            REQUEST_IN_PROGRESS.labels(method=method, endpoint=endpoint).dec()


def normalize_path(path: str) -> str:
    """Replace ids and component names with placeholders to bound label cardinality."""
    path = UUID_PATTERN.sub("{id}", path)
    return NAME_SEGMENT_PATTERN.sub(r"\1{name}", path)


def record_render(branch: str, outcome: str) -> None:
    """Record a component render (outcome: ok, inactive, load_error, render_error)."""
    COMPONENT_RENDERS_TOTAL.labels(branch=branch, outcome=outcome).inc()


def record_usage_event() -> None:
    COMPONENT_USAGE_EVENTS_TOTAL.inc()


def record_tracking_failure() -> None:
    USAGE_TRACKING_FAILURES_TOTAL.inc()
