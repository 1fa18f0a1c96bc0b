"""
Response models for gateway chat calls.
"""

import json
from typing import Optional, List, Dict, Any

from pydantic import BaseModel, ConfigDict, Field

from ..core.errors import GatewayContentMissingError, GatewayDecodeError


class Usage(BaseModel):
    """Token usage information."""
    model_config = ConfigDict(frozen=True)

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class Candidate(BaseModel):
    """A single generated completion."""
    model_config = ConfigDict(frozen=True)

    role: str = "assistant"
    text: Optional[str] = None
    finish_reason: Optional[str] = None
    refusal: Optional[str] = None


class ChatResponse(BaseModel):
    """
    Provider-neutral chat response.

    Build it with ``from_openai`` or ``from_anthropic``; both raise
    ``GatewayDecodeError`` instead of failing on an unexpected body.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(default="")
    model: str = Field(default="")
    candidates: List[Candidate] = Field(default_factory=list)
    usage: Usage = Field(default_factory=Usage)

    # Provider metadata
    provider: Optional[str] = None
    gateway: Optional[str] = None

    @classmethod
    def from_openai(cls, data: Dict[str, Any], gateway: str = None) -> "ChatResponse":
        """Create from OpenAI API response."""
        try:
            candidates = []
            for c in data.get("choices") or []:
                message = c.get("message") or {}
                candidates.append(Candidate(
                    role=message.get("role") or "assistant",
                    text=message.get("content"),
                    finish_reason=c.get("finish_reason"),
                    refusal=message.get("refusal"),
                ))

            usage_data = data.get("usage") or {}
            usage = Usage(
                prompt_tokens=usage_data.get("prompt_tokens") or 0,
                completion_tokens=usage_data.get("completion_tokens") or 0,
                total_tokens=usage_data.get("total_tokens") or 0,
            )

            return cls(
                id=data.get("id") or "",
                model=data.get("model") or "",
                candidates=candidates,
                usage=usage,
                provider="openai",
                gateway=gateway,
            )
        except (AttributeError, TypeError, ValueError) as e:
            raise GatewayDecodeError(
                f"Unexpected chat completion shape: {e}",
                gateway=gateway,
            ) from e

    @classmethod
    def from_anthropic(cls, data: Dict[str, Any], gateway: str = None) -> "ChatResponse":
        """
        Create from Anthropic API response.

        Each text or tool_use block becomes one candidate. A tool_use block
        is the structured-output reply, so its ``input`` is JSON-encoded.
        """
        try:
            stop_reason = data.get("stop_reason")
            role = data.get("role") or "assistant"

            candidates = []
            for block in data.get("content") or []:
                block_type = block.get("type")
                if block_type == "text":
                    text = block.get("text")
                elif block_type == "tool_use":
                    text = json.dumps(block.get("input", {}))
                else:
                    continue
                candidates.append(Candidate(role=role, text=text, finish_reason=stop_reason))

            usage_data = data.get("usage") or {}
            input_tokens = usage_data.get("input_tokens") or 0
            output_tokens = usage_data.get("output_tokens") or 0
            usage = Usage(
                prompt_tokens=input_tokens,
                completion_tokens=output_tokens,
                total_tokens=input_tokens + output_tokens,
            )

            return cls(
                id=data.get("id") or "",
                model=data.get("model") or "",
                candidates=candidates,
                usage=usage,
                provider="anthropic",
                gateway=gateway,
            )
        except (AttributeError, TypeError, ValueError) as e:
            raise GatewayDecodeError(
                f"Unexpected messages response shape: {e}",
                gateway=gateway,
            ) from e

    def get_first_candidate(self) -> str:
        """
        Get the text of the first candidate.

        Raises:
            GatewayContentMissingError: If there is no candidate or it has no text
        """
        if not self.candidates:
            raise GatewayContentMissingError(
                "Response contains no candidates",
                gateway=self.gateway,
            )

        text = self.candidates[0].text
        if text is None:
            raise GatewayContentMissingError(
                "First candidate has no text content",
                gateway=self.gateway,
            )
        return text

    def get_first_candidate_json(self) -> Any:
        """Parse the first candidate's text as JSON (structured-output replies)."""
        text = self.get_first_candidate()
        try:
            return json.loads(text)
        except ValueError as e:
            raise GatewayDecodeError(
                f"First candidate is not valid JSON: {e}",
                gateway=self.gateway,
            ) from e
