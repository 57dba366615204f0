"""Shared schemas for LLM infrastructure.

Prompt payloads are typed: a Message holds a list of parts, each part
is one of TextPart, ImagePart or FilePart (discriminated by ``type``).
"""

from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TextPart(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    text: str


class ImagePart(BaseModel):
    """Inline image as a ``data:<mime>;base64,...`` URI."""

    model_config = ConfigDict(frozen=True)

    type: Literal["image"] = "image"
    data_uri: str


class FilePart(BaseModel):
    """Inline document (PDF) as a ``data:<mime>;base64,...`` URI."""

    model_config = ConfigDict(frozen=True)

    type: Literal["file"] = "file"
    data_uri: str
    mime_type: str
    filename: str = "document.pdf"


Part = Annotated[TextPart | ImagePart | FilePart, Field(discriminator="type")]


class Message(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Literal["system", "user", "assistant"]
    parts: list[Part]

    @property
    def text(self) -> str:
        """Concatenated text of all text parts."""
        return "\n".join(p.text for p in self.parts if isinstance(p, TextPart))

    @property
    def is_text_only(self) -> bool:
        return len(self.parts) == 1 and isinstance(self.parts[0], TextPart)


class LLMRequest(BaseModel):
    """Input for one upstream call."""

    messages: list[Message]
    model: str
    max_tokens: int = 2500
    temperature: float | None = None
    # Passed through unchanged as provider-specific request body fields.
    provider_options: dict[str, Any] = Field(default_factory=dict)

    @property
    def prompt_text(self) -> str:
        return "\n\n".join(m.text for m in self.messages)


class TokenUsage(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    @property
    def is_empty(self) -> bool:
        return self.prompt_tokens == 0 and self.completion_tokens == 0


class LLMResponse(BaseModel):
    """Unified response from an upstream provider."""

    content: str
    provider: str  # openrouter
    model_id: str  # anthropic/claude-haiku-4.5:online, ...
    usage: TokenUsage | None = None
    generation_id: str | None = None  # opaque id for billing lookup
    latency_ms: int = 0
    finished_at: datetime = Field(default_factory=datetime.now)
