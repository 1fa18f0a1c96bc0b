"""
Builders for structured-output schemas and single-image vision content.
"""

from typing import Any, Dict, FrozenSet, List, Optional

from ..core.errors import GatewayValidationError
from .request import ContentPart, ImagePart, ResponseFormatSchema, TextPart

ANTHROPIC_IMAGE_MEDIA_TYPES: FrozenSet[str] = frozenset({
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
})

OPENAI_IMAGE_MEDIA_TYPES: FrozenSet[str] = frozenset({
    "image/png",
    "image/jpeg",
    "image/jpg",
    "image/gif",
    "image/webp",
})


def build_response_schema(name: str, schema: Dict[str, Any]) -> ResponseFormatSchema:
    """
    Wrap a JSON-schema tree under a name.

    The tree is not inspected. For OpenAI pass the full object schema;
    for Anthropic pass the property map, which gets wrapped in a
    top-level ``{"type": "object"}``.

    Example:
        >>> fmt = build_response_schema("story", {
        ...     "type": "object",
        ...     "properties": {"title": {"type": "string"}},
        ... })
    """
    return ResponseFormatSchema(name=name, json_schema=schema)


def build_openai_vision_content(
    media_type: str,
    using_url: bool,
    payload: str,
    text: Optional[str] = None,
) -> List[ContentPart]:
    """
    Build an image-then-text content list for the OpenAI chat endpoint.

    Base64 payloads are inlined as ``data:<media_type>;base64,<payload>``.
    """
    return _build_vision_content(
        OPENAI_IMAGE_MEDIA_TYPES,
        media_type,
        using_url,
        payload,
        text,
        inline_data_uri=True,
    )


def build_anthropic_vision_content(
    media_type: str,
    using_url: bool,
    payload: str,
    text: Optional[str] = None,
) -> List[ContentPart]:
    """Build an image-then-text content list for the Anthropic messages endpoint."""
    return _build_vision_content(
        ANTHROPIC_IMAGE_MEDIA_TYPES,
        media_type,
        using_url,
        payload,
        text,
        inline_data_uri=False,
    )


def _build_vision_content(
    allowed_media_types: FrozenSet[str],
    media_type: str,
    using_url: bool,
    payload: str,
    text: Optional[str],
    inline_data_uri: bool,
) -> List[ContentPart]:
    if not payload:
        raise GatewayValidationError("Image payload must not be empty", field="payload")

    if using_url:
        image = ImagePart(url=payload)
    else:
        if media_type not in allowed_media_types:
            supported = ", ".join(sorted(allowed_media_types))
            raise GatewayValidationError(
                f"Unsupported media type {media_type!r}, supported: {supported}",
                field="media_type",
            )
        if inline_data_uri:
            image = ImagePart(url=f"data:{media_type};base64,{payload}")
        else:
            image = ImagePart(media_type=media_type, data=payload)

    content: List[ContentPart] = [image]
    if text:
        content.append(TextPart(text=text))
    return content
