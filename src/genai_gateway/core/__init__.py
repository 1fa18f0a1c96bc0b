"""
Core gateway components.
"""

from .interface import AbstractGateway, GatewayCapability
from .registry import GatewayRegistry
from .config import (
    ClientConfig,
    ClientOption,
    GatewayConfig,
    GatewayInstanceConfig,
    load_config,
    with_anthropic_version,
    with_base_url,
    with_header,
    with_http_client,
    with_model,
    with_timeout,
)
from .errors import (
    GatewayError,
    GatewayConfigError,
    GatewayNotFoundError,
    GatewayValidationError,
    GatewayConnectionError,
    GatewayTimeoutError,
    GatewayProviderError,
    GatewayAuthenticationError,
    GatewayRateLimitError,
    GatewayDecodeError,
    GatewayContentMissingError,
)

__all__ = [
    "AbstractGateway",
    "GatewayCapability",
    "GatewayRegistry",
    "ClientConfig",
    "ClientOption",
    "GatewayConfig",
    "GatewayInstanceConfig",
    "load_config",
    "with_anthropic_version",
    "with_base_url",
    "with_header",
    "with_http_client",
    "with_model",
    "with_timeout",
    "GatewayError",
    "GatewayConfigError",
    "GatewayNotFoundError",
    "GatewayValidationError",
    "GatewayConnectionError",
    "GatewayTimeoutError",
    "GatewayProviderError",
    "GatewayAuthenticationError",
    "GatewayRateLimitError",
    "GatewayDecodeError",
    "GatewayContentMissingError",
]
