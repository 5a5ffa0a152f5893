"""
CityGuide Backend — Request Logging Middleware
================================================

What:  One access-log line per request on the `cityguide.access` logger.
How:   Measures wall time around the downstream handler and logs
       method, path, status, duration, request ID and client IP.

Level by status class:
    5xx → ERROR   (server problem)
    4xx → WARNING (client error: bad input, auth failure, missing resource)
    else→ INFO

Request bodies and the Authorization header are never logged. Health probes
are skipped to keep the log readable.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from cityguide.middleware.request_id import request_id_var

logger = logging.getLogger("cityguide.access")

SKIPPED_PATHS = {"/api/health"}


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in SKIPPED_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        logger.log(
            level_for_status(status),
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
