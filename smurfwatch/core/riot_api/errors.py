"""Custom error classes for the Riot API gateway."""

from typing import Optional, Dict, Any


class RiotAPIError(Exception):
    """Base exception for Riot API errors with status code tracking."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_data: Optional[Dict[str, Any]] = None,
        retry_after: Optional[float] = None,
        endpoint: Optional[str] = None,
    ) -> None:
        """
        Initialize RiotAPIError.

        Args:
            message: Error message
            status_code: HTTP status code (400, 401, 403, 404, 429, 503, etc.)
            response_data: Raw response body from the API, when it was JSON
            retry_after: Seconds to wait before retry (for 429 errors)
            endpoint: Request path that produced the error
        """
        super().__init__(message)
        self.status_code: Optional[int] = status_code
        self.response_data: Dict[str, Any] = response_data or {}
        self.retry_after: Optional[float] = retry_after
        self.endpoint: Optional[str] = endpoint
        self.message: str = message

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.status_code == 429 and self.retry_after:
            return f"Rate Limit Error {self.status_code}: {self.message} (Retry after: {self.retry_after}s)"
        if self.status_code:
            return f"Riot API Error {self.status_code}: {self.message}"
        return f"Riot API Error: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for JSON serialization."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "status_code": self.status_code,
            "retry_after": self.retry_after,
            "endpoint": self.endpoint,
        }


class BadRequestError(RiotAPIError):
    """Bad request (400) - invalid parameters."""


class UpstreamAuthError(RiotAPIError):
    """Authentication/authorization error (401, 403) - key invalid or lacks access."""


class NotFoundError(RiotAPIError):
    """Not found error (404) - player or match doesn't exist."""


class RateLimitError(RiotAPIError):
    """Rate limit error (429) - caller must back off."""


class UpstreamUnavailableError(RiotAPIError):
    """Network failure or 5xx from Riot servers."""


_STATUS_ERRORS = {
    400: (BadRequestError, "Invalid request parameters"),
    401: (UpstreamAuthError, "Invalid API key"),
    403: (UpstreamAuthError, "API key forbidden for this resource"),
    404: (NotFoundError, "Resource not found"),
    429: (RateLimitError, "Rate limit exceeded"),
}


def error_for_status(
    status: int,
    endpoint: Optional[str] = None,
    retry_after: Optional[float] = None,
    response_data: Optional[Dict[str, Any]] = None,
) -> RiotAPIError:
    """Build the typed error matching an HTTP status code."""
    if status in _STATUS_ERRORS:
        error_cls, message = _STATUS_ERRORS[status]
    elif status >= 500:
        error_cls, message = UpstreamUnavailableError, "Riot API unavailable"
    else:
        error_cls, message = RiotAPIError, f"Unexpected status {status}"

    return error_cls(
        message,
        status_code=status,
        response_data=response_data,
        retry_after=retry_after if status == 429 else None,
        endpoint=endpoint,
    )
