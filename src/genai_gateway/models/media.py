"""
Image-generation and text-to-speech models.

Validation runs in a fixed order and stops at the first violation, so a
caller always gets the same error for the same bad request.
"""

import base64
from typing import Dict, FrozenSet, List, Optional, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..core.errors import GatewayDecodeError, GatewayValidationError

IMAGE_MODEL_STANDARD = "dall-e-2"
IMAGE_MODEL_HD = "dall-e-3"
IMAGE_MODELS: FrozenSet[str] = frozenset({IMAGE_MODEL_STANDARD, IMAGE_MODEL_HD})
IMAGE_QUALITIES: FrozenSet[str] = frozenset({"standard", "hd"})
IMAGE_STYLES: FrozenSet[str] = frozenset({"vivid", "natural"})
IMAGE_RESPONSE_FORMATS: FrozenSet[str] = frozenset({"url", "b64_json"})
IMAGE_SIZES: Dict[str, FrozenSet[str]] = {
    IMAGE_MODEL_STANDARD: frozenset({"256x256", "512x512", "1024x1024"}),
    IMAGE_MODEL_HD: frozenset({"1024x1024", "1792x1024", "1024x1792"}),
}
IMAGE_MIN_COUNT = 1
IMAGE_MAX_COUNT = 10

SPEECH_MODELS: FrozenSet[str] = frozenset({"tts-1", "tts-1-hd"})
SPEECH_VOICES: FrozenSet[str] = frozenset({"alloy", "echo", "fable", "onyx", "nova", "shimmer"})
SPEECH_FORMATS: FrozenSet[str] = frozenset({"mp3", "opus", "aac", "flac", "wav", "pcm"})
SPEECH_DEFAULT_FORMAT = "mp3"
SPEECH_MIN_SPEED = 0.25
SPEECH_MAX_SPEED = 4.0
SPEECH_MAX_INPUT_CHARS = 4096


def _one_of(values: FrozenSet[str]) -> str:
    return ", ".join(sorted(values))


class _MediaRequest(BaseModel):
    """Request base whose construction errors are gateway validation errors."""
    model_config = ConfigDict(frozen=True)

    def __init__(self, **data: Any):
        try:
            super().__init__(**data)
        except ValidationError as e:
            errors = e.errors()
            loc = errors[0]["loc"] if errors else ()
            raise GatewayValidationError(
                f"Invalid {type(self).__name__}: {e}",
                field=str(loc[0]) if loc else None,
            ) from e


class ImageGenRequest(_MediaRequest):
    """Image-generation request. Call ``validate_request`` before sending."""

    prompt: str
    model: str
    n: Optional[int] = None
    quality: Optional[str] = None
    size: Optional[str] = None
    style: Optional[str] = None
    response_format: Optional[str] = None
    user: Optional[str] = None

    def validate_request(self, gateway: str = None) -> None:
        """
        Check the model-dependent parameter matrix.

        ``quality`` and ``style`` are only legal on the high-tier model.

        Raises:
            GatewayValidationError: On the first violated constraint
        """
        def fail(message: str, field: str) -> None:
            raise GatewayValidationError(message, gateway=gateway, field=field)

        if self.model not in IMAGE_MODELS:
            fail(f"Model must be one of: {_one_of(IMAGE_MODELS)}", "model")

        if self.n is not None and not IMAGE_MIN_COUNT <= self.n <= IMAGE_MAX_COUNT:
            fail(f"n must be between {IMAGE_MIN_COUNT} and {IMAGE_MAX_COUNT}", "n")

        if self.quality is not None:
            if self.model != IMAGE_MODEL_HD:
                fail(f"quality is only supported for {IMAGE_MODEL_HD}", "quality")
            if self.quality not in IMAGE_QUALITIES:
                fail(f"quality must be one of: {_one_of(IMAGE_QUALITIES)}", "quality")

        if self.style is not None:
            if self.model != IMAGE_MODEL_HD:
                fail(f"style is only supported for {IMAGE_MODEL_HD}", "style")
            if self.style not in IMAGE_STYLES:
                fail(f"style must be one of: {_one_of(IMAGE_STYLES)}", "style")

        if self.response_format is not None and self.response_format not in IMAGE_RESPONSE_FORMATS:
            fail(f"response_format must be one of: {_one_of(IMAGE_RESPONSE_FORMATS)}", "response_format")

        if self.size is not None and self.size not in IMAGE_SIZES[self.model]:
            fail(f"size for {self.model} must be one of: {_one_of(IMAGE_SIZES[self.model])}", "size")

        if not self.prompt:
            fail("prompt must not be empty", "prompt")

    def to_request_body(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class GeneratedImage(BaseModel):
    """One generated image, as a URL or as base64 data."""
    model_config = ConfigDict(frozen=True)

    url: Optional[str] = None
    b64_json: Optional[str] = None
    revised_prompt: Optional[str] = None


class ImageGenResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    created: int = 0
    images: List[GeneratedImage] = Field(default_factory=list)

    @classmethod
    def from_openai(cls, data: Dict[str, Any], gateway: str = None) -> "ImageGenResponse":
        """Create from OpenAI images API response."""
        try:
            return cls(
                created=data.get("created") or 0,
                images=[GeneratedImage(**item) for item in data.get("data") or []],
            )
        except (TypeError, ValueError) as e:
            raise GatewayDecodeError(
                f"Unexpected image generation shape: {e}",
                gateway=gateway,
            ) from e


class TTSRequest(_MediaRequest):
    """Text-to-speech request. Call ``validate_request`` before sending."""

    model: str
    input: str
    voice: str
    response_format: Optional[str] = None
    speed: Optional[float] = None

    def validate_request(self, gateway: str = None) -> None:
        """
        Raises:
            GatewayValidationError: On the first violated constraint
        """
        def fail(message: str, field: str) -> None:
            raise GatewayValidationError(message, gateway=gateway, field=field)

        if self.model not in SPEECH_MODELS:
            fail(f"Model must be one of: {_one_of(SPEECH_MODELS)}", "model")

        if not self.input:
            fail("input text must not be empty", "input")

        if len(self.input) > SPEECH_MAX_INPUT_CHARS:
            fail(f"input text must be at most {SPEECH_MAX_INPUT_CHARS} characters", "input")

        if self.voice not in SPEECH_VOICES:
            fail(f"voice must be one of: {_one_of(SPEECH_VOICES)}", "voice")

        if self.response_format is not None and self.response_format not in SPEECH_FORMATS:
            fail(f"response_format must be one of: {_one_of(SPEECH_FORMATS)}", "response_format")

        if self.speed is not None and not SPEECH_MIN_SPEED <= self.speed <= SPEECH_MAX_SPEED:
            fail(f"speed must be between {SPEECH_MIN_SPEED} and {SPEECH_MAX_SPEED}", "speed")

    @property
    def file_extension(self) -> str:
        return "." + (self.response_format or SPEECH_DEFAULT_FORMAT)

    def to_request_body(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class TTSResponse(BaseModel):
    """Synthesized audio as base64, with the file extension it should be saved under."""
    model_config = ConfigDict(frozen=True)

    audio_base64: str
    file_extension: str

    @classmethod
    def from_audio(cls, audio: bytes, file_extension: str) -> "TTSResponse":
        return cls(
            audio_base64=base64.b64encode(audio).decode("ascii"),
            file_extension=file_extension,
        )

    def audio_bytes(self) -> bytes:
        return base64.b64decode(self.audio_base64)
