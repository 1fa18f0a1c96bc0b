"""
Generative-AI Provider Gateway

One synchronous client contract over two providers:
- Anthropic Messages API (chat, vision, JSON-schema output)
- OpenAI (chat, vision, JSON-schema output, image generation, speech)

Requests are validated before any network call, and every failure is
raised as a ``GatewayError`` subclass.
"""

from .core.interface import AbstractGateway, GatewayCapability
from .core.registry import GatewayRegistry
from .core.config import (
    ClientConfig,
    GatewayConfig,
    load_config,
    with_anthropic_version,
    with_base_url,
    with_header,
    with_http_client,
    with_model,
    with_timeout,
)
from .core.errors import (
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
from .adapters import AnthropicAdapter, OpenAIAdapter
from .models.request import Message, TextPart, ImagePart, ResponseFormatSchema
from .models.response import ChatResponse, Candidate, Usage
from .models.content import build_response_schema, build_openai_vision_content, build_anthropic_vision_content
from .models.media import ImageGenRequest, ImageGenResponse, GeneratedImage, TTSRequest, TTSResponse

__all__ = [
    "AbstractGateway",
    "GatewayCapability",
    "GatewayRegistry",
    "ClientConfig",
    "GatewayConfig",
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
    "AnthropicAdapter",
    "OpenAIAdapter",
    "Message",
    "TextPart",
    "ImagePart",
    "ResponseFormatSchema",
    "ChatResponse",
    "Candidate",
    "Usage",
    "build_response_schema",
    "build_openai_vision_content",
    "build_anthropic_vision_content",
    "ImageGenRequest",
    "ImageGenResponse",
    "GeneratedImage",
    "TTSRequest",
    "TTSResponse",
]
