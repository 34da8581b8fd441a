"""
Middleware package.

WHY: Middleware provides cross-cutting concerns that apply to all requests.
"""

from certledger.middleware.request_context import (
    RequestContextMiddleware,
    RequestContext,
    get_request_context,
    get_request_id,
)

__all__ = [
    "RequestContextMiddleware",
    "RequestContext",
    "get_request_context",
    "get_request_id",
]
