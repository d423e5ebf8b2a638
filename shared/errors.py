"""
Shared error handling for the Clash of Clans access proxy.
"""

from typing import Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    error: str
    details: Optional[str] = None
    hint: Optional[str] = None


class ProxyException(Exception):
    """Base exception for proxy services."""

    status_code = 500

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[str] = None,
        hint: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        self.code = code
        self.message = message
        self.details = details
        self.hint = hint
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(error=self.message, details=self.details, hint=self.hint)


class StartupConfigError(ProxyException):
    """Configuration that makes it impossible to start serving."""

    def __init__(self, message: str = "Invalid startup configuration", details: Optional[str] = None):
        super().__init__("STARTUP_CONFIG_ERROR", message, details)


class UpstreamError(ProxyException):
    """Errors classified from an upstream API exchange."""


class UpstreamAuthError(UpstreamError):
    """Credential or caller IP not authorized upstream."""

    def __init__(self, details: Optional[str] = None):
        super().__init__(
            "UPSTREAM_AUTH_ERROR",
            "IP not whitelisted. Add your server IP to this API key in CoC developer portal.",
            details,
            hint="Visit /myip endpoint to get your current IP",
            status_code=403,
        )


class UpstreamNotFound(UpstreamError):
    """Requested resource does not exist upstream."""

    def __init__(self, details: Optional[str] = None):
        super().__init__("UPSTREAM_NOT_FOUND", "Resource not found", details, status_code=404)


class UpstreamRateLimited(UpstreamError):
    """Upstream throttled the request."""

    def __init__(self, details: Optional[str] = None):
        super().__init__(
            "UPSTREAM_RATE_LIMITED",
            "Rate limit exceeded. Please try again later.",
            details,
            status_code=429,
        )


class UpstreamUnavailable(UpstreamError):
    """Upstream answered with a 5xx status."""

    def __init__(self, status_code: int, details: Optional[str] = None):
        super().__init__(
            "UPSTREAM_UNAVAILABLE",
            "Clash of Clans API is temporarily unavailable",
            details,
            status_code=status_code,
        )


class UpstreamGenericError(UpstreamError):
    """Any other non-success upstream status."""

    def __init__(self, status_code: int, details: Optional[str] = None):
        super().__init__("UPSTREAM_ERROR", "API request failed", details, status_code=status_code)


class TransportError(UpstreamError):
    """Network failure or timeout before an upstream status was received."""

    def __init__(self, details: Optional[str] = None):
        super().__init__("TRANSPORT_ERROR", "Network error or timeout", details, status_code=0)


class InternalHandlerFault(ProxyException):
    """Unexpected exception raised while handling a request."""

    def __init__(self, details: Optional[str] = None):
        super().__init__("INTERNAL_ERROR", "Internal server error", details, status_code=500)

    def to_response(self) -> ErrorResponse:
        # Internal details stay in the logs.
        return ErrorResponse(error=self.message)


def classify_status(status_code: int, details: Optional[str] = None) -> UpstreamError:
    """Map a non-success upstream HTTP status to its error type."""
    if status_code == 403:
        return UpstreamAuthError(details)
    if status_code == 404:
        return UpstreamNotFound(details)
    if status_code == 429:
        return UpstreamRateLimited(details)
    if status_code >= 500:
        return UpstreamUnavailable(status_code, details)
    return UpstreamGenericError(status_code, details)
