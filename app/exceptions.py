# =============================================================================
# app/exceptions.py - Custom Exceptions and Handlers
# =============================================================================
# Centralized exception handling for the API.
# Every error body has the same shape: {"detail", "code", "suggestion"?, "details"?}
# so the web dashboard and the mobile app can branch on `code`.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class BrightOpsException(Exception):
    """
    Base exception for the Bright Ops API.

    All custom exceptions inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: str = "BRIGHTOPS_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Request Exceptions
# =============================================================================

class InvalidRequestError(BrightOpsException):
    """Raised when a request body or query is missing or malformed."""

    def __init__(
        self,
        message: str,
        code: str = "INVALID_REQUEST",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=400,
            suggestion=suggestion,
            details=details,
        )


class UnauthorizedError(BrightOpsException):
    """Raised when a request lacks valid credentials."""

    def __init__(self, message: str = "Unauthorized", code: str = "UNAUTHENTICATED"):
        super().__init__(
            message=message,
            code=code,
            status_code=401,
            suggestion="Sign in again and retry with a fresh access token",
        )


class AccessDeniedError(BrightOpsException):
    """Raised when the caller is authenticated but not allowed."""

    def __init__(self, message: str, code: str = "ACCESS_DENIED", details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code=code,
            status_code=403,
            details=details,
        )


class ResourceNotFoundError(BrightOpsException):
    """Raised when a referenced row doesn't exist."""

    def __init__(self, resource: str, identifier: str | None = None, message: str | None = None):
        super().__init__(
            message=message or (f"{resource} not found: {identifier}" if identifier else f"{resource} not found"),
            code=f"{resource.upper().replace(' ', '_')}_NOT_FOUND",
            status_code=404,
            suggestion=f"Check that the {resource.lower()} exists and you have access to it",
            details={"identifier": identifier} if identifier else None,
        )


class ConflictError(BrightOpsException):
    """Raised when an insert collides with existing data."""

    def __init__(self, message: str, code: str = "CONFLICT", details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code=code,
            status_code=409,
            details=details,
        )


# =============================================================================
# Server-side Exceptions
# =============================================================================

class ConfigurationError(BrightOpsException):
    """Raised when an integration is missing credentials or settings."""

    def __init__(self, message: str, suggestion: str | None = None, status_code: int = 500):
        super().__init__(
            message=message,
            code="NOT_CONFIGURED",
            status_code=status_code,
            suggestion=suggestion,
        )


class DatabaseOperationError(BrightOpsException):
    """Raised when a Supabase query or RPC fails."""

    def __init__(self, operation: str, error: str, status_code: int = 500):
        super().__init__(
            message=f"Failed to {operation}: {error}",
            code="DATABASE_ERROR",
            status_code=status_code,
            suggestion="Try again later or contact support if the issue persists",
            details={"operation": operation, "error": error},
        )


class ExternalServiceError(BrightOpsException):
    """Raised when a third-party API (SendGrid, Twilio, OpenAI) rejects a call."""

    def __init__(self, service: str, error: str, status_code: int = 502):
        super().__init__(
            message=error,
            code=f"{service.upper()}_ERROR",
            status_code=status_code,
            details={"service": service},
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def brightops_exception_handler(
    request: Request,
    exc: BrightOpsException
) -> JSONResponse:
    """
    Convert BrightOpsException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle request validation errors.

    Missing or malformed fields are client errors, reported as 400.
    """
    errors = exc.errors() if hasattr(exc, "errors") else str(exc)
    return JSONResponse(
        status_code=400,
        content={
            "detail": "Validation error",
            "code": "VALIDATION_ERROR",
            "errors": _jsonable_errors(errors),
        }
    )


def _jsonable_errors(errors: Any) -> Any:
    if not isinstance(errors, list):
        return errors
    # ctx may carry exception instances that aren't JSON serializable
    return [
        {key: (str(value) if key == "ctx" else value) for key, value in error.items() if key != "input"}
        for error in errors
    ]
