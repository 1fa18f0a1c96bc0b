"""
Abstract Gateway interface definition.

Defines the contract that all provider adapters must implement.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Mapping, Optional, Sequence, Set, Union
from enum import Enum

from pydantic import ValidationError

from .errors import GatewayValidationError
from ..models.request import Message, ResponseFormatSchema
from ..models.response import ChatResponse


class GatewayCapability(str, Enum):
    """Capabilities that a gateway may support."""
    CHAT_COMPLETION = "chat_completion"
    VISION = "vision"
    JSON_SCHEMA = "json_schema"
    IMAGES = "images"
    AUDIO = "audio"


MessageInput = Union[Message, Mapping[str, Any]]


class AbstractGateway(ABC):
    """
    Abstract base class for provider adapters.

    Adapters are synchronous: each operation performs one blocking HTTP
    round trip. Configuration is frozen at construction, so one adapter
    can serve concurrent callers.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Unique name of this gateway instance.

        Returns:
            Gateway name (e.g., "anthropic", "openai-images")
        """
        pass

    @property
    @abstractmethod
    def gateway_type(self) -> str:
        """
        Type of gateway (e.g., "openai", "anthropic").

        Returns:
            Gateway type identifier
        """
        pass

    @property
    @abstractmethod
    def capabilities(self) -> Set[GatewayCapability]:
        """
        Set of capabilities this gateway supports.

        Returns:
            Set of GatewayCapability values
        """
        pass

    @abstractmethod
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
        Send a chat request.

        Exactly one of ``messages`` or ``custom_body`` must be given. A
        custom body is sent as-is, apart from injecting ``response_format``.

        Args:
            messages: Conversation messages, in wire order
            custom_body: Complete provider request body
            response_format: Optional JSON schema constraining the reply
            max_tokens: Maximum tokens to generate
            temperature: Sampling temperature
            timeout: Deadline in seconds for this call only

        Returns:
            Chat response
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the HTTP client if this gateway created it."""
        pass

    def get_first_candidate(
        self,
        messages: Optional[Sequence[MessageInput]] = None,
        **kwargs,
    ) -> str:
        """
        Send a chat request and return the first candidate's text.

        Takes the same arguments as ``send_message``.

        Raises:
            GatewayContentMissingError: If the reply has no candidate text
        """
        return self.send_message(messages, **kwargs).get_first_candidate()

    def supports(self, capability: GatewayCapability) -> bool:
        """
        Check if gateway supports a capability.

        Args:
            capability: Capability to check

        Returns:
            True if supported
        """
        return capability in self.capabilities

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, type={self.gateway_type!r})"


def check_send_arguments(
    gateway: str,
    messages: Optional[Sequence[MessageInput]],
    custom_body: Optional[Mapping[str, Any]],
    response_format: Optional[ResponseFormatSchema],
) -> Optional[List[Message]]:
    """
    Validate ``send_message`` preconditions shared by all adapters.

    Returns:
        The messages as ``Message`` models, or None for a custom body

    Raises:
        GatewayValidationError: If the arguments are inconsistent
    """
    if (messages is None) == (custom_body is None):
        raise GatewayValidationError(
            "Exactly one of messages or custom_body must be provided",
            gateway=gateway,
        )

    if response_format is not None and not isinstance(response_format, ResponseFormatSchema):
        raise GatewayValidationError(
            "response_format must be built with build_response_schema",
            gateway=gateway,
            field="response_format",
        )

    if custom_body is not None:
        if not isinstance(custom_body, Mapping) or not custom_body.get("messages"):
            raise GatewayValidationError(
                "custom_body must contain messages",
                gateway=gateway,
                field="custom_body",
            )
        return None

    if not messages:
        raise GatewayValidationError("messages must not be empty", gateway=gateway, field="messages")

    try:
        return [m if isinstance(m, Message) else Message.model_validate(m) for m in messages]
    except ValidationError as e:
        raise GatewayValidationError(
            f"Invalid message: {e}",
            gateway=gateway,
            field="messages",
        ) from e
