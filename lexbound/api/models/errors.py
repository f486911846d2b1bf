"""Error envelope models (OpenAI-style ``{"error": {...}}``)."""

from typing import Any

from pydantic import BaseModel


class APIError(BaseModel):
    """Error object."""

    message: str
    type: str
    param: str | None = None
    code: str | None = None


class ErrorResponse(BaseModel):
    """Error response wrapper, optionally carrying the authorized context."""

    error: APIError
    authorized_context: dict[str, Any] | None = None


# ============================================================================
# Error Type Constants
# ============================================================================

ERROR_TYPE_INVALID_REQUEST = "invalid_request_error"
ERROR_TYPE_NOT_FOUND = "not_found_error"
ERROR_TYPE_API_ERROR = "api_error"
ERROR_TYPE_SERVER = "server_error"


# ============================================================================
# Error Factory Functions
# ============================================================================


def create_error_response(
    message: str,
    error_type: str = ERROR_TYPE_API_ERROR,
    param: str | None = None,
    code: str | None = None,
    authorized_context: dict[str, Any] | None = None,
) -> ErrorResponse:
    """Create an error response.

    Args:
        message: Human-readable error message
        error_type: Type of error (see ERROR_TYPE_* constants)
        param: Request field that caused the error (optional)
        code: Error code (optional)
        authorized_context: Context to return alongside the error (optional)

    Returns:
        ErrorResponse object
    """
    return ErrorResponse(
        error=APIError(
            message=message,
            type=error_type,
            param=param,
            code=code,
        ),
        authorized_context=authorized_context,
    )


def invalid_request_error(message: str, param: str | None = None) -> ErrorResponse:
    """Create invalid request error."""
    return create_error_response(message, ERROR_TYPE_INVALID_REQUEST, param=param)


def not_found_error(
    message: str,
    param: str | None = None,
    code: str | None = None,
    authorized_context: dict[str, Any] | None = None,
) -> ErrorResponse:
    """Create not found error."""
    return create_error_response(
        message, ERROR_TYPE_NOT_FOUND, param=param, code=code,
        authorized_context=authorized_context,
    )


def transport_error(message: str) -> ErrorResponse:
    """Create error for a failed text-completion call."""
    return create_error_response(message, ERROR_TYPE_API_ERROR, code="completion_failed")


def server_error(message: str = "Internal server error") -> ErrorResponse:
    """Create server error."""
    return create_error_response(message, ERROR_TYPE_SERVER)
