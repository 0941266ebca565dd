"""
TripDesk Backend — Request Logging Middleware
===============================================

What:  One access log line per request: method, path, status, duration,
       request id and client address.
Who:   Logger "tripdesk.access". Level follows the status class
       (5xx ERROR, 4xx WARNING, otherwise INFO).

Never logged: request bodies (they hold traveler contact details and admin
passwords) and the Cookie header.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from tripdesk.middleware.request_id import request_id_var

logger = logging.getLogger("tripdesk.access")

# Probe traffic; logging it buries real requests.
QUIET_PATHS = frozenset({"/health"})


def _level_for(status: int) -> int:
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
        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        logger.log(
            _level_for(status),
            "%s %s %d %.1fms from %s",
            request.method,
            path,
            status,
            duration_ms,
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
