"""Request ID middleware for tracing."""

import uuid
from collections.abc import Callable
from contextvars import ContextVar

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

request_id_var: ContextVar[str] = ContextVar("request_id", default="-")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware that adds a unique request ID to each request.

    The request ID is:
    - Generated if not provided in X-Request-ID header
    - Exposed to log records through ``request_id_var``
    - Added to response headers (never to cached image bodies)
    """

    HEADER_NAME = "X-Request-ID"

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request with request ID."""
        request_id = request.headers.get(self.HEADER_NAME) or str(uuid.uuid4())

        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[self.HEADER_NAME] = request_id
        return response
