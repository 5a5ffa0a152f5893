"""
CityGuide Backend — Request ID Middleware
===========================================

What:  Assigns every request a correlation ID and echoes it in X-Request-ID.
How:   Reuses a client-supplied X-Request-ID when present, otherwise generates
       a short UUID prefix. The ID lives in a ContextVar so exception handlers
       and loggers anywhere in the request can read it, and in request.state
       for route handlers.

Error bodies carry the same value as `requestId`, so a user-reported error
can be matched to its log lines.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"
# Upper bound on client-supplied IDs so they cannot flood the logs
MAX_REQUEST_ID_LENGTH = 64

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    return uuid.uuid4().hex[:12]


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER, "")[:MAX_REQUEST_ID_LENGTH] or new_request_id()

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
