"""
Middleware components for request handling and logging.

Provides request tracing and logging, slow request monitoring, and
cache-control headers for the dashboard.
"""

import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from .logging_config import clear_request_id, get_logger, set_request_id

logger = get_logger(__name__)

QUIET_PREFIXES = ("/static/", "/health", "/metrics")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Assign a request ID and log every request with its outcome and timing.

    The request ID is taken from ``X-Request-ID`` when present, stored in the
    logging context (and so forwarded to the inventory API), and echoed in
    the response. Static, health and metrics requests are logged at DEBUG.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = set_request_id(request.headers.get("X-Request-ID"))
        path = request.url.path
        log = logger.debug if path.startswith(QUIET_PREFIXES) else logger.info
        start_time = time.perf_counter()

        log(
            f"Request started: {request.method} {path}",
            extra={
                "extra_fields": {
                    "method": request.method,
                    "path": path,
                    "client_host": request.client.host if request.client else None,
                    "htmx": request.headers.get("HX-Request") == "true",
                }
            },
        )

        try:
            response = await call_next(request)
            duration_ms = (time.perf_counter() - start_time) * 1000
            response.headers["X-Request-ID"] = request_id

            log(
                f"Request completed: {request.method} {path} "
                f"[{response.status_code}] ({duration_ms:.2f}ms)",
                extra={
                    "extra_fields": {
                        "status_code": response.status_code,
                        "duration_ms": duration_ms,
                    }
                },
            )
            return response
        except Exception as exc:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"Request failed: {request.method} {path} ({duration_ms:.2f}ms)",
                extra={"extra_fields": {"error": str(exc)}},
            )
            raise
        finally:
            clear_request_id()


class CacheControlMiddleware(BaseHTTPMiddleware):
    """
    Set cache headers.

    Static assets are cacheable by browsers. Every other response carries
    inventory data or session state and is marked ``no-store``.
    """

    STATIC_MAX_AGE = {
        ".css": 86400,
        ".js": 86400,
        ".svg": 604800,
        ".png": 604800,
        ".ico": 604800,
    }
    DEFAULT_STATIC_MAX_AGE = 3600

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        path = request.url.path

        if path.startswith("/static/"):
            suffix = path[path.rfind("."):] if "." in path else ""
            max_age = self.STATIC_MAX_AGE.get(suffix, self.DEFAULT_STATIC_MAX_AGE)
            response.headers["Cache-Control"] = f"public, max-age={max_age}"
        elif "Cache-Control" not in response.headers:
            response.headers["Cache-Control"] = "no-store"

        return response


class PerformanceMonitoringMiddleware(BaseHTTPMiddleware):
    """Log a warning for requests slower than a threshold."""

    def __init__(
        self,
        app: ASGIApp,
        slow_request_threshold_ms: float = 1000.0,
    ) -> None:
        """
        Args:
            app: ASGI application instance
            slow_request_threshold_ms: Threshold in milliseconds for slow requests
        """
        super().__init__(app)
        self.slow_request_threshold_ms = slow_request_threshold_ms

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        if duration_ms > self.slow_request_threshold_ms:
            logger.warning(
                f"Slow request detected: {request.method} {request.url.path} "
                f"took {duration_ms:.2f}ms (threshold: {self.slow_request_threshold_ms}ms)",
                extra={
                    "extra_fields": {
                        "path": request.url.path,
                        "duration_ms": duration_ms,
                        "threshold_ms": self.slow_request_threshold_ms,
                    }
                },
            )

        return response
