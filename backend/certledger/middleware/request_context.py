"""
Request context middleware for invocation logging.

WHAT: Middleware that assigns every request an ID and makes it available
throughout the request lifecycle.

WHY: Service log lines for one invocation (validation failure, duplicate,
index write) need a common ID to be correlated, and the caller gets the
same ID back in the ``X-Request-ID`` header.

HOW: Stores the context in a ContextVar so services can read it without
being handed the request object.
"""

import uuid
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Optional, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


@dataclass
class RequestContext:
    """
    Container for request-scoped context data.

    Fields:
    - request_id: Unique identifier for the request (for log correlation)
    - path: Request path
    - method: HTTP method (GET, POST, etc.)
    """

    request_id: str
    path: str
    method: str


_request_context: ContextVar[Optional[RequestContext]] = ContextVar(
    "request_context", default=None
)


def get_request_context() -> Optional[RequestContext]:
    """
    Get the current request context.

    Returns:
        RequestContext if within a request, None otherwise
    """
    return _request_context.get()


def get_request_id() -> str:
    """Current request ID, or ``"-"`` outside a request."""
    ctx = _request_context.get()
    return ctx.request_id if ctx else "-"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Middleware that captures and stores request context.

    A client-supplied ``X-Request-ID`` header is reused; otherwise a UUID4
    is generated.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Process request and add context.

        Args:
            request: Incoming request
            call_next: Next middleware/handler

        Returns:
            Response with request ID header added
        """
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        context = RequestContext(
            request_id=request_id,
            path=request.url.path,
            method=request.method,
        )
        request.state.context = context
        token = _request_context.set(context)

        try:
            response = await call_next(request)
        finally:
            _request_context.reset(token)

        response.headers["X-Request-ID"] = request_id
        return response
