"""
Bookshelf API — Request ID Middleware
======================================

What:  Assigns an id to each incoming request and returns it in X-Request-ID.
Why:   Every log line and every error body of a request carries the same id,
       so a client reporting a failure can be matched to the server logs.
How:   Reuses the client's X-Request-ID when present, otherwise generates a
       short one; stores it in a ContextVar for loggers and error handlers.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

MAX_CLIENT_ID_LENGTH = 64


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Behavior:
        1. Take X-Request-ID from the client if it is present and not oversized
        2. Otherwise generate the first 8 hex characters of a UUID4
        3. Store it in request_id_var and request.state.request_id
        4. Echo it in the response's X-Request-ID header
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID", "")
        if not rid or len(rid) > MAX_CLIENT_ID_LENGTH:
            rid = uuid.uuid4().hex[:8]

        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers["X-Request-ID"] = rid
        return response
