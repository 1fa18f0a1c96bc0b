"""
Direct Anthropic API adapter.

Talks to the Messages API, the single endpoint Anthropic exposes for
both text and vision requests.
"""

import logging
from typing import Any, Mapping, Optional, Sequence, Set

import httpx
from pydantic import ValidationError

from ..core.config import ClientConfig, ClientOption, build_client_config
from ..core.errors import GatewayConfigError, GatewayValidationError
from ..core.interface import AbstractGateway, GatewayCapability, MessageInput, check_send_arguments
from ..core.transport import Transport
from ..models.content import build_anthropic_vision_content
from ..models.request import ChatRequest, ResponseFormatSchema
from ..models.response import ChatResponse

logger = logging.getLogger(__name__)


class AnthropicAdapter(AbstractGateway):
    """
    Direct Anthropic API adapter.

    Example:
        >>> claude = AnthropicAdapter(api_key, with_model("claude-3-5-sonnet-20240620"))
        >>> claude.get_first_candidate([{"role": "user", "content": "Hello"}], max_tokens=256)
    """

    ANTHROPIC_BASE_URL = "https://api.anthropic.com/v1"
    ANTHROPIC_VERSION = "2023-06-01"
    DEFAULT_MODEL = "claude-3-5-sonnet-20240620"
    MESSAGES_PATH = "/messages"

    build_vision_content = staticmethod(build_anthropic_vision_content)

    def __init__(self, api_key: str, *options: ClientOption, name: str = "anthropic"):
        """
        Initialize Anthropic adapter.

        Args:
            api_key: Anthropic API key
            *options: Client options, applied in order
            name: Unique name for this adapter instance

        Raises:
            GatewayConfigError: If the API key is empty or an option is invalid
        """
        if not api_key:
            raise GatewayConfigError("API key required", gateway=name)

        defaults = ClientConfig(
            base_url=self.ANTHROPIC_BASE_URL,
            model=self.DEFAULT_MODEL,
            anthropic_version=self.ANTHROPIC_VERSION,
        )
        config = build_client_config(defaults, list(options))
        if not config.anthropic_version:
            raise GatewayConfigError("Anthropic version header is empty", gateway=name)

        headers = {
            **config.headers,
            "x-api-key": api_key,
            "anthropic-version": config.anthropic_version,
        }

        owns_client = config.http_client is None
        http_client = config.http_client or httpx.Client(timeout=config.timeout)

        self._name = name
        self._config = config
        self._messages_url = config.base_url + self.MESSAGES_PATH
        self._transport = Transport(
            name,
            http_client,
            headers,
            timeout=config.timeout,
            owns_client=owns_client,
        )

        logger.info(f"Created Anthropic client {name} at {config.base_url} (model: {config.model})")

    @property
    def name(self) -> str:
        return self._name

    @property
    def gateway_type(self) -> str:
        return "anthropic"

    @property
    def capabilities(self) -> Set[GatewayCapability]:
        return {
            GatewayCapability.CHAT_COMPLETION,
            GatewayCapability.VISION,
            GatewayCapability.JSON_SCHEMA,
        }

    @property
    def config(self) -> ClientConfig:
        return self._config

    def close(self) -> None:
        """Close HTTP client."""
        self._transport.close()
        logger.info(f"Closed Anthropic client {self._name}")

    def send_message(
        self,
        messages: Optional[Sequence[MessageInput]] = None,
        *,
        custom_body: Optional[Mapping[str, Any]] = None,
        response_format: Optional[ResponseFormatSchema] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        timeout: Optional[float] = None,
    ) -> ChatResponse:
        """
        Create a message via the Anthropic API.

        A ``response_format`` is sent as a single forced tool, so the reply's
        first candidate is the tool input encoded as JSON.
        """
        checked = check_send_arguments(self._name, messages, custom_body, response_format)

        if checked is None:
            body = dict(custom_body)
            if response_format is not None:
                body["tools"] = [response_format.to_anthropic_tool()]
                body["tool_choice"] = response_format.to_anthropic_tool_choice()
        else:
            try:
                request = ChatRequest(
                    model=self._config.model,
                    messages=checked,
                    max_tokens=max_tokens,
                    temperature=temperature,
                    response_format=response_format,
                )
            except ValidationError as e:
                raise GatewayValidationError(f"Invalid chat request: {e}", gateway=self._name) from e
            body = request.to_anthropic_format()

        data = self._transport.post_json(self._messages_url, body, timeout=timeout)
        return ChatResponse.from_anthropic(data, gateway=self._name)
