"""
TripDesk Backend — Request ID Middleware
==========================================

What:  Gives every request a short correlation id, returned in X-Request-ID.
How:   Reuses a client-supplied X-Request-ID or generates one, stores it in a
       ContextVar for loggers and exception handlers, and in request.state
       for route handlers.
When:  Outermost application middleware, so every log line of the request
       (including the access line) can see the id.

Error bodies carry only {"message": ...}; the id travels in the header.
"""

import logging
import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

# Client-supplied ids are echoed into logs and headers; keep them short and plain.
_VALID_CLIENT_ID = re.compile(r"[A-Za-z0-9._-]{1,64}")

# Coroutine-local: concurrent requests share a thread but not this value.
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


class RequestIDLogFilter(logging.Filter):
    """Adds `request_id` to every record so formats can reference %(request_id)s."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = request_id_var.get("") or "-"
        return True


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        supplied = request.headers.get(REQUEST_ID_HEADER, "")
        rid = supplied if _VALID_CLIENT_ID.fullmatch(supplied) else new_request_id()

        # Left set after the response: the catch-all 500 handler runs outside
        # this middleware and still reads it.
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
