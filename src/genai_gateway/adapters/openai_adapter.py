"""
Direct OpenAI API adapter.

Covers chat completions (text, vision, JSON-schema output), image
generation and speech synthesis. Speech is the one endpoint that answers
with raw bytes instead of JSON.
"""

import logging
from typing import Any, Mapping, Optional, Sequence, Set

import httpx
from pydantic import ValidationError

from ..core.config import ClientConfig, ClientOption, build_client_config
from ..core.errors import GatewayConfigError, GatewayContentMissingError, GatewayValidationError
from ..core.interface import AbstractGateway, GatewayCapability, MessageInput, check_send_arguments
from ..core.transport import Transport
from ..models.content import build_openai_vision_content
from ..models.media import ImageGenRequest, ImageGenResponse, TTSRequest, TTSResponse
from ..models.request import ChatRequest, ResponseFormatSchema
from ..models.response import ChatResponse

logger = logging.getLogger(__name__)


class OpenAIAdapter(AbstractGateway):
    """
    Direct OpenAI API adapter.

    Example:
        >>> gpt = OpenAIAdapter(api_key, with_model("gpt-4o-mini"), organization="org-123")
        >>> gpt.get_first_candidate([{"role": "user", "content": "Hello"}])
    """

    OPENAI_BASE_URL = "https://api.openai.com/v1"
    DEFAULT_MODEL = "gpt-4o-mini"
    CHAT_PATH = "/chat/completions"
    IMAGES_PATH = "/images/generations"
    SPEECH_PATH = "/audio/speech"

    build_vision_content = staticmethod(build_openai_vision_content)

    def __init__(
        self,
        api_key: str,
        *options: ClientOption,
        organization: Optional[str] = None,
        project: Optional[str] = None,
        name: str = "openai",
    ):
        """
        Initialize OpenAI adapter.

        Args:
            api_key: OpenAI API key
            *options: Client options, applied in order
            organization: OpenAI organization ID
            project: OpenAI project ID
            name: Unique name for this adapter instance

        Raises:
            GatewayConfigError: If the API key is empty or an option is invalid
        """
        if not api_key:
            raise GatewayConfigError("API key required", gateway=name)

        defaults = ClientConfig(base_url=self.OPENAI_BASE_URL, model=self.DEFAULT_MODEL)
        config = build_client_config(defaults, list(options))

        headers = {**config.headers, "Authorization": f"Bearer {api_key}"}
        if organization:
            headers["OpenAI-Organization"] = organization
        if project:
            headers["OpenAI-Project"] = project

        owns_client = config.http_client is None
        http_client = config.http_client or httpx.Client(timeout=config.timeout)

        self._name = name
        self._config = config
        self._chat_url = config.base_url + self.CHAT_PATH
        self._images_url = config.base_url + self.IMAGES_PATH
        self._speech_url = config.base_url + self.SPEECH_PATH
        self._transport = Transport(
            name,
            http_client,
            headers,
            timeout=config.timeout,
            owns_client=owns_client,
        )

        logger.info(f"Created OpenAI client {name} at {config.base_url} (model: {config.model})")

    @property
    def name(self) -> str:
        return self._name

    @property
    def gateway_type(self) -> str:
        return "openai"

    @property
    def capabilities(self) -> Set[GatewayCapability]:
        return {
            GatewayCapability.CHAT_COMPLETION,
            GatewayCapability.VISION,
            GatewayCapability.JSON_SCHEMA,
            GatewayCapability.IMAGES,
            GatewayCapability.AUDIO,
        }

    @property
    def config(self) -> ClientConfig:
        return self._config

    def close(self) -> None:
        """Close HTTP client."""
        self._transport.close()
        logger.info(f"Closed OpenAI client {self._name}")

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
        """Create a chat completion via OpenAI API."""
        checked = check_send_arguments(self._name, messages, custom_body, response_format)

        if checked is None:
            body = dict(custom_body)
            if response_format is not None:
                body["response_format"] = response_format.to_openai_format()
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
            body = request.to_openai_format()

        data = self._transport.post_json(self._chat_url, body, timeout=timeout)
        return ChatResponse.from_openai(data, gateway=self._name)

    def generate_image(
        self,
        request: ImageGenRequest,
        timeout: Optional[float] = None,
    ) -> ImageGenResponse:
        """
        Generate images.

        The request is validated before any network call.

        Args:
            request: Image-generation request
            timeout: Deadline in seconds for this call only

        Returns:
            Generated image URLs or base64 payloads
        """
        request.validate_request(gateway=self._name)

        logger.debug(f"Generating {request.n or 1} image(s) with {request.model}")
        data = self._transport.post_json(self._images_url, request.to_request_body(), timeout=timeout)
        return ImageGenResponse.from_openai(data, gateway=self._name)

    def synthesize_speech(
        self,
        request: TTSRequest,
        timeout: Optional[float] = None,
    ) -> TTSResponse:
        """
        Convert text to speech.

        The endpoint returns the audio file itself, which is base64-encoded
        here together with the extension of the requested format (``.mp3``
        when no format was requested).

        Args:
            request: Speech request
            timeout: Deadline in seconds for this call only

        Returns:
            Base64 audio and file extension
        """
        request.validate_request(gateway=self._name)

        logger.debug(f"Synthesizing {len(request.input)} characters with {request.model}/{request.voice}")
        audio = self._transport.post_for_bytes(self._speech_url, request.to_request_body(), timeout=timeout)
        if not audio:
            raise GatewayContentMissingError("Speech response contained no audio", gateway=self._name)

        return TTSResponse.from_audio(audio, request.file_extension)
