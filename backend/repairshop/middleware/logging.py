"""
Repair Shop Backend — Access Logging Middleware
================================================

What:  One access line per request on the ``repairshop.access`` logger.
How:   Times the downstream call and logs method, path, status, duration
       and client address. The level follows the status class:
       5xx → ERROR, 4xx → WARNING, otherwise INFO.

Request bodies are never logged; they carry customer and employee
personal data and employee passwords.

Example:
    2025-03-02T10:14:07 [WARNING] repairshop.access [3f9c1a2b]: POST /api/customers/register 400 12.4ms from 127.0.0.1
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("repairshop.access")

# Probed every few seconds by load balancers
QUIET_PATHS = frozenset({"/health"})


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
        if path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        client_ip = request.client.host if request.client else "unknown"
        status = response.status_code
        logger.log(
            level_for_status(status),
            "%s %s %d %.1fms from %s",
            request.method,
            path,
            status,
            duration_ms,
            client_ip,
            extra={
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
