"""
Gateway error types.

Every failure surfaced by the gateway is a ``GatewayError`` subclass.
"""

from typing import Optional


class GatewayError(Exception):
    """Base exception for gateway errors."""

    def __init__(self, message: str, gateway: str = None):
        self.message = message
        self.gateway = gateway
        super().__init__(message)


class GatewayConfigError(GatewayError):
    """Raised when a client cannot be built from the supplied configuration."""
    pass


class GatewayNotFoundError(GatewayError):
    """Raised when a gateway is not found."""
    pass


class GatewayValidationError(GatewayError):
    """Raised when a request violates a parameter constraint. Never retried."""

    def __init__(self, message: str, gateway: str = None, field: Optional[str] = None):
        super().__init__(message, gateway)
        self.field = field


class GatewayConnectionError(GatewayError):
    """Raised when the HTTP call itself could not be completed."""
    pass


class GatewayTimeoutError(GatewayConnectionError):
    """Raised when request times out."""
    pass


class GatewayProviderError(GatewayError):
    """Raised when the provider answers with a non-success status."""

    def __init__(
        self,
        message: str,
        gateway: str = None,
        status_code: int = None,
        error_type: Optional[str] = None,
        provider_message: Optional[str] = None,
    ):
        super().__init__(message, gateway)
        self.status_code = status_code
        self.error_type = error_type
        self.provider_message = provider_message


class GatewayAuthenticationError(GatewayProviderError):
    """Raised when authentication fails."""
    pass


class GatewayRateLimitError(GatewayProviderError):
    """Raised when rate limit is exceeded."""

    def __init__(self, message: str, gateway: str = None, retry_after: float = None, **kwargs):
        super().__init__(message, gateway, **kwargs)
        self.retry_after = retry_after


class GatewayDecodeError(GatewayError):
    """Raised when a success response body does not match the expected shape."""
    pass


class GatewayContentMissingError(GatewayError):
    """Raised when a success response carries no usable candidate."""
    pass
