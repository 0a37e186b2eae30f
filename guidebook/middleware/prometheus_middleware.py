# guidebook/middleware/prometheus_middleware.py
"""HTTP request metrics."""

import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..monitoring.prometheus_metrics import prometheus_metrics


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware to collect Prometheus metrics for HTTP requests."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path == "/metrics":
            return await call_next(request)

        method = request.method
        # Normalize endpoint label to reduce cardinality (strip numeric IDs)
        # Example: /api/v1/bookings/123/cancel -> /api/v1/bookings/:id/cancel
        path = "/".join(
            ":id" if segment.isdigit() else segment for segment in request.url.path.split("/")
        )

        start_time = time.perf_counter()
        response = await call_next(request)
        prometheus_metrics.record_http_request(
            method=method,
            endpoint=path,
            duration=time.perf_counter() - start_time,
            status_code=response.status_code,
        )
        return response
