"""
Tests for custom exception hierarchy.

WHY: Exception testing ensures:
1. Exceptions serialize correctly without leaking sensitive data
2. HTTP status codes map correctly
3. Context data (certificate IDs, argument positions) reaches the payload
4. Exception handlers work as expected
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from certledger.core.exceptions import (
    AppException,
    ValidationError,
    InvalidArgumentCountError,
    InvalidArgumentError,
    InvalidNumericArgumentError,
    ResourceNotFoundError,
    RecordNotFoundError,
    ResourceAlreadyExistsError,
    DuplicateRecordError,
    DatabaseError,
    StoreUnavailableError,
    QueryFailedError,
)
from certledger.core.exception_handlers import app_exception_handler


class TestAppException:
    """Test base AppException class."""

    def test_default_message(self):
        """Verify default message is used when none provided."""
        exc = AppException()
        assert exc.message == "An unexpected error occurred"
        assert exc.status_code == 500

    def test_custom_message(self):
        exc = AppException(message="Custom error message")
        assert exc.message == "Custom error message"
        assert str(exc) == "Custom error message"

    def test_custom_status_code(self):
        exc = AppException(status_code=418)
        assert exc.status_code == 418

    def test_to_dict_basic(self):
        """Verify exception serializes to dict correctly."""
        exc = AppException(message="Test error", certificate_id="as23df")
        result = exc.to_dict()

        assert result["error"] == "AppException"
        assert result["message"] == "Test error"
        assert result["status_code"] == 500
        assert result["details"] == {"certificate_id": "as23df"}

    def test_to_dict_filters_sensitive_data(self):
        exc = AppException(message="Test error", password="x", api_key="y", position=2)
        result = exc.to_dict()

        assert result["details"] == {"position": 2}

    def test_to_dict_no_context(self):
        exc = AppException(message="Test error")
        assert exc.to_dict()["details"] is None


class TestLedgerExceptions:
    """Status codes and hierarchy of the record service errors."""

    @pytest.mark.parametrize(
        "exc_class,status_code,parent",
        [
            (InvalidArgumentCountError, 400, ValidationError),
            (InvalidArgumentError, 400, ValidationError),
            (InvalidNumericArgumentError, 400, ValidationError),
            (RecordNotFoundError, 404, ResourceNotFoundError),
            (DuplicateRecordError, 409, ResourceAlreadyExistsError),
            (StoreUnavailableError, 503, DatabaseError),
            (QueryFailedError, 502, DatabaseError),
        ],
    )
    def test_status_and_parent(self, exc_class, status_code, parent):
        exc = exc_class()
        assert exc.status_code == status_code
        assert isinstance(exc, parent)
        assert isinstance(exc, AppException)

    def test_position_in_details(self):
        exc = InvalidArgumentError("2nd argument must be a non-empty string", position=2)
        assert exc.to_dict()["details"] == {"position": 2}


class TestExceptionHandler:
    """Test FastAPI exception handler."""

    def test_handler_returns_structured_json(self):
        app = FastAPI()
        app.add_exception_handler(AppException, app_exception_handler)

        @app.get("/missing")
        async def missing():
            raise RecordNotFoundError("Certificate does not exist: x1", certificate_id="x1")

        client = TestClient(app)
        response = client.get("/missing")

        assert response.status_code == 404
        assert response.json() == {
            "error": "RecordNotFoundError",
            "message": "Certificate does not exist: x1",
            "status_code": 404,
            "details": {"certificate_id": "x1"},
        }
