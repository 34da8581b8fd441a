"""
Custom exception hierarchy for structured error handling.

WHY: Every failure of a ledger invocation is terminal for that invocation and
must reach the caller as a short structured message naming the offending key
or argument position. Custom exceptions provide:
1. HTTP status code mapping for FastAPI
2. Structured error responses with contextual data
3. No internal state or stack traces in error messages

IMPORTANT: NEVER raise the base Exception class. Always use custom exceptions.
"""

from typing import Any, Dict, Optional


class AppException(Exception):
    """
    Base exception class for all application exceptions.

    All custom exceptions should inherit from this class.
    """

    status_code: int = 500
    default_message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        **context: Any,
    ):
        """
        Initialize exception with message and context.

        Args:
            message: Human-readable error message
            status_code: HTTP status code (overrides class default)
            **context: Additional context (certificate_id, position, ...)
        """
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.context = context
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize exception to dictionary for JSON response.

        Returns:
            Dictionary with error details (sensitive fields filtered out)
        """
        sensitive_fields = {"password", "token", "secret", "api_key"}
        filtered_context = {
            k: v for k, v in self.context.items() if k.lower() not in sensitive_fields
        }

        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "status_code": self.status_code,
            "details": filtered_context if filtered_context else None,
        }


# ============================================================================
# Validation & Input Exceptions
# ============================================================================


class ValidationError(AppException):
    """
    Raised when input validation fails.

    HTTP Status: 400 Bad Request
    """

    status_code = 400
    default_message = "Validation failed"


class InvalidArgumentCountError(ValidationError):
    """
    Raised when an invocation carries the wrong number of positional arguments.

    HTTP Status: 400 Bad Request
    """

    default_message = "Incorrect number of arguments"


class InvalidArgumentError(ValidationError):
    """
    Raised when a positional argument is empty or cannot be encoded.

    The failing position is carried in ``context["position"]`` (1-based).

    HTTP Status: 400 Bad Request
    """

    default_message = "Invalid argument"


class InvalidNumericArgumentError(ValidationError):
    """
    Raised when an argument that must be a base-10 integer is not one.

    HTTP Status: 400 Bad Request
    """

    default_message = "Argument must be a numeric string"


# ============================================================================
# Resource Exceptions
# ============================================================================


class ResourceNotFoundError(AppException):
    """
    Raised when a requested resource doesn't exist.

    HTTP Status: 404 Not Found
    """

    status_code = 404
    default_message = "Resource not found"


class RecordNotFoundError(ResourceNotFoundError):
    """Raised when no certificate is stored under the requested key."""

    default_message = "Certificate does not exist"


class ResourceAlreadyExistsError(AppException):
    """
    Raised when attempting to create a resource that already exists.

    HTTP Status: 409 Conflict
    """

    status_code = 409
    default_message = "Resource already exists"


class DuplicateRecordError(ResourceAlreadyExistsError):
    """
    Raised when a certificate ID is already present in the store.

    Detected before any write, so the store is left untouched.
    """

    default_message = "Certificate already exists"


# ============================================================================
# Store Exceptions
# ============================================================================


class DatabaseError(AppException):
    """
    Raised when state store operations fail.

    Store errors are caught at the service layer and converted to
    application exceptions with safe error messages (no SQL exposed).

    HTTP Status: 500 Internal Server Error
    """

    status_code = 500
    default_message = "Database error"


class StoreUnavailableError(DatabaseError):
    """
    Raised when a point read or write against the state store fails.

    HTTP Status: 503 Service Unavailable
    """

    status_code = 503
    default_message = "State store unavailable"


class QueryFailedError(DatabaseError):
    """
    Raised when the rich query facility rejects or fails a query.

    The underlying facility message is surfaced verbatim.

    HTTP Status: 502 Bad Gateway
    """

    status_code = 502
    default_message = "Query failed"
