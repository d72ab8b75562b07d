"""
Service layer custom exceptions.

This module defines service-specific exceptions and the mapping from any
error raised by the analysis pipeline to an HTTP-equivalent status code,
so callers above the core can surface failures consistently.
"""

from typing import Any, Dict, Optional

from .riot_api.errors import RiotAPIError


class ServiceException(Exception):
    """Base exception for all service layer errors."""

    http_status: int = 500

    def __init__(
        self,
        message: str,
        service: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.service = service
        self.operation = operation
        self.context = context or {}
        self.original_error = original_error

    def __str__(self) -> str:
        if self.service and self.operation:
            return f"[{self.service}.{self.operation}] {self.message}"
        return self.message


class ValidationError(ServiceException):
    """Exception raised for missing or malformed input."""

    http_status = 400

    def __init__(
        self,
        message: str,
        service: Optional[str] = None,
        operation: Optional[str] = None,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        validation_context = context or {}
        if field:
            validation_context["field"] = field
        if value is not None:
            validation_context["value"] = str(value)

        super().__init__(
            message=f"Validation error: {message}",
            service=service,
            operation=operation,
            context=validation_context,
        )


class InsufficientDataError(ServiceException):
    """Raised when no usable match data is left after fetching and filtering."""

    http_status = 404

    def __init__(
        self,
        message: str = "No matches found",
        service: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            service=service,
            operation=operation,
            context=context,
        )


def http_status_for(error: BaseException) -> int:
    """
    Map an exception raised by the core to an HTTP-equivalent status.

    Upstream errors keep their own status; network failures without a status
    become 503.
    """
    if isinstance(error, ServiceException):
        return error.http_status
    if isinstance(error, RiotAPIError):
        return error.status_code or 503
    return 500


def error_payload(error: BaseException) -> Dict[str, Any]:
    """Human-readable error body for callers that expose the core over HTTP."""
    message = getattr(error, "message", None) or str(error)
    return {
        "status": "fail" if http_status_for(error) < 500 else "error",
        "status_code": http_status_for(error),
        "error": error.__class__.__name__,
        "message": message,
    }
