"""
Metrics middleware for the dashboard.

Automatically tracks HTTP request metrics for all endpoints.
"""

import time
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware


class PrometheusMiddleware(BaseHTTPMiddleware):
    """
    Track request count and duration for every request.

    Static assets and the metrics endpoint itself are skipped. Requests are
    labelled with the matched route template, so ``/medicines/17`` and
    ``/medicines/abc-1`` share ``/medicines/{medicine_id}``. Unmatched paths
    fall back to collapsing numeric segments.
    """

    SKIPPED_PREFIXES = ("/static/", "/metrics")

    def __init__(self, app, track_func: Callable):
        """
        Initialize the middleware.

        Args:
            app: FastAPI application
            track_func: Function called with (method, endpoint, status_code, duration)
        """
        super().__init__(app)
        self.track_func = track_func

    @staticmethod
    def collapse_ids(path: str) -> str:
        return "/".join(
            "{id}" if segment.isdigit() else segment for segment in path.split("/")
        )

    @classmethod
    def endpoint_label(cls, request: Request) -> str:
        route = request.scope.get("route")
        path_format = getattr(route, "path_format", None)
        if path_format:
            return path_format
        return cls.collapse_ids(request.url.path)

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if path.startswith(self.SKIPPED_PREFIXES):
            return await call_next(request)

        start_time = time.time()
        response = await call_next(request)
        duration = time.time() - start_time

        self.track_func(
            method=request.method,
            endpoint=self.endpoint_label(request),
            status_code=response.status_code,
            duration=duration,
        )

        return response
