"""
Prometheus metrics collection for Tradewire.

Provides:
- HTTP request metrics (count, duration)
- Dispatch metrics (trades sent, failures by reason)
- Authorization callback outcomes
- /metrics endpoint for Prometheus scraping
"""

import time
import os
from typing import Callable

from fastapi import FastAPI, Response, Request
from prometheus_client import (
    Counter, Histogram, Gauge,
    generate_latest, REGISTRY, CONTENT_TYPE_LATEST
)
from starlette.middleware.base import BaseHTTPMiddleware


# ============================================================================
# Metrics Definitions
# ============================================================================

http_requests_total = Counter(
    'tradewire_http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status']
)

http_request_duration_seconds = Histogram(
    'tradewire_http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
)

http_requests_in_progress = Gauge(
    'tradewire_http_requests_in_progress',
    'HTTP requests currently being processed',
    ['method', 'endpoint']
)

trades_dispatched_total = Counter(
    'tradewire_trades_dispatched_total',
    'Trade instructions sent and logged'
)

dispatch_failures_total = Counter(
    'tradewire_dispatch_failures_total',
    'Trade dispatch attempts that did not complete',
    ['reason']
)

auth_callbacks_total = Counter(
    'tradewire_auth_callbacks_total',
    'OAuth callbacks by outcome',
    ['outcome']
)


# ============================================================================
# Metrics Middleware
# ============================================================================

class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware to collect HTTP request metrics."""

    EXCLUDE_PATHS = {"/metrics", "/health", "/favicon.ico"}

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in self.EXCLUDE_PATHS:
            return await call_next(request)

        path = request.url.path
        method = request.method
        http_requests_in_progress.labels(method=method, endpoint=path).inc()
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
            status = response.status_code
        except Exception:
            status = 500
            raise
        finally:
            duration = time.perf_counter() - start_time
            http_requests_total.labels(method=method, endpoint=path, status=status).inc()
            http_request_duration_seconds.labels(method=method, endpoint=path).observe(duration)
            http_requests_in_progress.labels(method=method, endpoint=path).dec()

        return response


# ============================================================================
# Setup Function
# ============================================================================

def setup_metrics(app: FastAPI) -> None:
    """Setup Prometheus metrics collection.

    Args:
        app: FastAPI application instance
    """
    if os.getenv("METRICS_ENABLED", "true").lower() != "true":
        return

    app.add_middleware(MetricsMiddleware)

    @app.get("/metrics", include_in_schema=False)
    async def metrics_endpoint() -> Response:
        """Prometheus metrics endpoint."""
        return Response(
            content=generate_latest(REGISTRY),
            media_type=CONTENT_TYPE_LATEST
        )


# ============================================================================
# Helper Functions
# ============================================================================

def record_dispatch() -> None:
    trades_dispatched_total.inc()


def record_dispatch_failure(reason: str) -> None:
    dispatch_failures_total.labels(reason=reason).inc()


def record_auth_callback(outcome: str) -> None:
    auth_callbacks_total.labels(outcome=outcome).inc()
