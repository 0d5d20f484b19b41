"""
Security middleware for Tradewire.

Provides:
- Security headers (HSTS, X-Content-Type-Options, etc.)
- Request ID injection
- Access logging
"""

import logging
import time
import uuid
from typing import Callable, Optional, Set

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from tradewire.config import settings

access_logger = logging.getLogger("tradewire.access")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to all responses."""

    def __init__(self, app,
                 enable_hsts: Optional[bool] = None,
                 hsts_max_age: int = 31536000):
        super().__init__(app)

        # HSTS (only enable in production by default)
        self.enable_hsts = enable_hsts if enable_hsts is not None else (
            settings.is_production
        )
        self.hsts_max_age = hsts_max_age

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        # Callback URL carries the OAuth code
        if request.url.path == "/oauth2callback":
            response.headers["Cache-Control"] = "no-store"

        if self.enable_hsts:
            response.headers["Strict-Transport-Security"] = (
                f"max-age={self.hsts_max_age}; includeSubDomains; preload"
            )

        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log all requests with context.

    Query strings are not logged: the OAuth callback carries the
    authorization code there.
    """

    def __init__(self, app, exclude_paths: Optional[Set[str]] = None):
        super().__init__(app)
        self.exclude_paths = exclude_paths or {"/health", "/health/live", "/metrics"}

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in self.exclude_paths:
            return await call_next(request)

        start_time = time.perf_counter()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            duration = time.perf_counter() - start_time
            # Set by SecurityHeadersMiddleware further down the stack
            request_id = getattr(request.state, "request_id", None) or request.headers.get("X-Request-ID")

            client_ip = request.headers.get("X-Forwarded-For", "")
            if client_ip:
                client_ip = client_ip.split(",")[0].strip()
            elif request.client:
                client_ip = request.client.host
            else:
                client_ip = "unknown"

            log_data = {
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": status_code,
                "duration_ms": round(duration * 1000, 2),
                "client_ip": client_ip,
                "user_agent": request.headers.get("User-Agent", "")[:100],
            }

            if status_code >= 500:
                access_logger.error("Request failed", extra=log_data)
            elif status_code >= 400:
                access_logger.warning("Request client error", extra=log_data)
            else:
                access_logger.info("Request completed", extra=log_data)

        return response
