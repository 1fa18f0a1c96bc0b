"""
Request models for gateway chat calls.

A message's content is either plain text or an ordered list of content
parts. Parts are serialized per provider at the edge, so the same
``ChatRequest`` can target either wire format.
"""

from typing import Optional, List, Dict, Any, Union, Literal, Annotated

from pydantic import BaseModel, ConfigDict, Field, model_validator

ANTHROPIC_DEFAULT_MAX_TOKENS = 4096
ANTHROPIC_DEFAULT_TEMPERATURE = 1.0


class TextPart(BaseModel):
    """Text content part."""
    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    text: str


class ImagePart(BaseModel):
    """
    Image content part.

    Carries exactly one source: a ``url`` (which may itself be a data URI)
    or base64 ``data`` with its ``media_type``.
    """
    model_config = ConfigDict(frozen=True)

    type: Literal["image"] = "image"
    url: Optional[str] = None
    media_type: Optional[str] = None
    data: Optional[str] = None

    @model_validator(mode="after")
    def _check_source(self) -> "ImagePart":
        if bool(self.url) == bool(self.data):
            raise ValueError("Image part needs exactly one of url or data")
        if self.data and not self.media_type:
            raise ValueError("Image part with base64 data needs a media_type")
        return self


ContentPart = Annotated[Union[TextPart, ImagePart], Field(discriminator="type")]


class Message(BaseModel):
    """Role-tagged message. Order within a conversation is caller-defined."""
    model_config = ConfigDict(frozen=True)

    role: Literal["system", "user", "assistant"]
    content: Union[str, List[ContentPart]]


class ResponseFormatSchema(BaseModel):
    """
    Named JSON schema a caller attaches to constrain the reply.

    The schema tree is forwarded untouched. The two providers wrap it
    differently, see ``to_openai_format`` and ``to_anthropic_tool``.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    json_schema: Dict[str, Any]

    def to_openai_format(self) -> Dict[str, Any]:
        """The tree is already the full object schema."""
        return {
            "type": "json_schema",
            "json_schema": {
                "name": self.name,
                "schema": self.json_schema,
            },
        }

    def to_anthropic_tool(self) -> Dict[str, Any]:
        """The tree is the property map of a top-level object."""
        return {
            "name": self.name,
            "description": f"Respond using the {self.name} JSON schema.",
            "input_schema": {
                "type": "object",
                "properties": self.json_schema,
            },
        }

    def to_anthropic_tool_choice(self) -> Dict[str, Any]:
        return {"type": "tool", "name": self.name}


class ChatRequest(BaseModel):
    """Chat request synthesized by an adapter from caller messages."""
    model_config = ConfigDict(frozen=True)

    model: str = Field(..., description="Model identifier")
    messages: List[Message] = Field(..., description="Conversation messages")

    max_tokens: Optional[int] = Field(default=None, ge=1)
    temperature: Optional[float] = Field(default=None, ge=0, le=2)
    response_format: Optional[ResponseFormatSchema] = None

    def to_openai_format(self) -> Dict[str, Any]:
        """Convert to OpenAI API format."""
        data = {
            "model": self.model,
            "messages": [
                {"role": m.role, "content": _content_to_openai(m.content)}
                for m in self.messages
            ],
        }

        if self.max_tokens is not None:
            data["max_tokens"] = self.max_tokens

        if self.temperature is not None:
            data["temperature"] = self.temperature

        if self.response_format is not None:
            data["response_format"] = self.response_format.to_openai_format()

        return data

    def to_anthropic_format(self) -> Dict[str, Any]:
        """Convert to Anthropic API format."""
        # Anthropic takes a single top-level system prompt
        system_parts = []
        messages = []

        for m in self.messages:
            if m.role == "system":
                system_parts.append(_content_text(m.content))
            else:
                messages.append({"role": m.role, "content": _content_to_anthropic(m.content)})

        data = {
            "model": self.model,
            "messages": messages,
            "max_tokens": self.max_tokens or ANTHROPIC_DEFAULT_MAX_TOKENS,
            "temperature": (
                self.temperature if self.temperature is not None
                else ANTHROPIC_DEFAULT_TEMPERATURE
            ),
        }

        if system_parts:
            data["system"] = "\n\n".join(system_parts)

        if self.response_format is not None:
            data["tools"] = [self.response_format.to_anthropic_tool()]
            data["tool_choice"] = self.response_format.to_anthropic_tool_choice()

        return data


def _content_text(content: Union[str, List[ContentPart]]) -> str:
    if isinstance(content, str):
        return content
    return "\n".join(p.text for p in content if isinstance(p, TextPart))


def _content_to_openai(content: Union[str, List[ContentPart]]) -> Union[str, List[Dict[str, Any]]]:
    if isinstance(content, str):
        return content

    parts = []
    for part in content:
        if isinstance(part, TextPart):
            parts.append({"type": "text", "text": part.text})
        elif isinstance(part, ImagePart):
            url = part.url or f"data:{part.media_type};base64,{part.data}"
            parts.append({"type": "image_url", "image_url": {"url": url}})
        else:
            raise TypeError(f"Unsupported content part: {type(part).__name__}")
    return parts


def _content_to_anthropic(content: Union[str, List[ContentPart]]) -> Union[str, List[Dict[str, Any]]]:
    if isinstance(content, str):
        return content

    parts = []
    for part in content:
        if isinstance(part, TextPart):
            parts.append({"type": "text", "text": part.text})
        elif isinstance(part, ImagePart):
            parts.append({"type": "image", "source": _anthropic_image_source(part)})
        else:
            raise TypeError(f"Unsupported content part: {type(part).__name__}")
    return parts


def _anthropic_image_source(part: ImagePart) -> Dict[str, Any]:
    if part.data:
        return {"type": "base64", "media_type": part.media_type, "data": part.data}

    if part.url.startswith("data:") and "," in part.url:
        # data:[<mediatype>][;base64],<data>
        header, data = part.url.split(",", 1)
        media_type = header[len("data:"):].split(";")[0]
        return {"type": "base64", "media_type": media_type, "data": data}

    return {"type": "url", "url": part.url}
