"""
Gateway data models.
"""

from .request import ChatRequest, Message, TextPart, ImagePart, ContentPart, ResponseFormatSchema
from .response import ChatResponse, Candidate, Usage
from .content import build_response_schema, build_openai_vision_content, build_anthropic_vision_content
from .media import ImageGenRequest, ImageGenResponse, GeneratedImage, TTSRequest, TTSResponse

__all__ = [
    "ChatRequest",
    "Message",
    "TextPart",
    "ImagePart",
    "ContentPart",
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
