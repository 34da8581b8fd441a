"""
Request Context Middleware Tests.

WHAT: Unit tests for the RequestContextMiddleware.

WHY: Service log lines are correlated by request ID, so the ID has to be
generated (or taken from the client), exposed through the context
variable during the request, and echoed back in the response.
"""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from certledger.middleware.request_context import (
    RequestContext,
    RequestContextMiddleware,
    _request_context,
    get_request_context,
    get_request_id,
)


def _make_app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(RequestContextMiddleware)

    @app.get("/ctx")
    async def ctx() -> dict:
        context = get_request_context()
        return {"request_id": context.request_id, "path": context.path, "method": context.method}

    return app


class TestGetRequestId:
    """Tests for get_request_id outside of requests."""

    def test_placeholder_without_context(self):
        token = _request_context.set(None)
        try:
            assert get_request_id() == "-"
        finally:
            _request_context.reset(token)

    def test_reads_context(self):
        token = _request_context.set(RequestContext(request_id="abc", path="/", method="GET"))
        try:
            assert get_request_id() == "abc"
        finally:
            _request_context.reset(token)


@pytest.mark.asyncio
class TestRequestContextMiddleware:
    """Tests for the middleware."""

    async def test_generates_request_id(self):
        async with AsyncClient(transport=ASGITransport(app=_make_app()), base_url="http://test") as ac:
            response = await ac.get("/ctx")

        data = response.json()
        assert data["path"] == "/ctx"
        assert data["method"] == "GET"
        assert response.headers["X-Request-ID"] == data["request_id"]
        assert len(data["request_id"]) == 36

    async def test_reuses_client_request_id(self):
        async with AsyncClient(transport=ASGITransport(app=_make_app()), base_url="http://test") as ac:
            response = await ac.get("/ctx", headers={"X-Request-ID": "req-42"})

        assert response.json()["request_id"] == "req-42"
        assert response.headers["X-Request-ID"] == "req-42"

    async def test_context_reset_after_request(self):
        async with AsyncClient(transport=ASGITransport(app=_make_app()), base_url="http://test") as ac:
            await ac.get("/ctx")

        assert get_request_context() is None
