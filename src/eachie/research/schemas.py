"""Research request, per-call results, aggregate result and progress events.

Everything here serializes to camelCase JSON (``modelId``,
``durationMs``, ``successCount`` ...) to match existing consumers.
Use ``model_dump_json(by_alias=True, exclude_none=True)`` on the wire.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field, SecretStr
from pydantic.alias_generators import to_camel

from eachie.llm.errors import ErrorCode
from eachie.llm.schemas import TokenUsage


class CamelModel(BaseModel):
    """Base for every wire model: snake_case in Python, camelCase in JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class FrozenCamelModel(CamelModel):
    model_config = ConfigDict(**CamelModel.model_config, frozen=True)


# --- Request ---


class AttachmentType(StrEnum):
    """Attachment categories.

    - image: base64, sent to vision-capable models only
    - pdf: base64, parsed by the gateway for document-capable models
    - text: raw text, appended to the query for every model
    """

    IMAGE = "image"
    PDF = "pdf"
    TEXT = "text"


class Attachment(FrozenCamelModel):
    """Pre-decoded, already validated attachment."""

    name: str
    type: AttachmentType
    mime_type: str
    content: str
    size: int = 0


class ResearchRequest(CamelModel):
    """Request body for POST /api/research and /api/research/stream."""

    query: str = ""
    attachments: list[Attachment] = Field(default_factory=list)
    model_ids: list[str] = Field(default_factory=list)
    orchestrator_id: str | None = None
    orchestrator_prompt: str | None = None
    api_key: SecretStr | None = None
    byok_mode: bool = False


# --- Results ---


class ModelCallResult(FrozenCamelModel):
    """Outcome of one dispatched model call."""

    model: str  # display name
    model_id: str
    content: str = ""
    success: bool
    error: str | None = None
    error_code: ErrorCode | None = None
    duration_ms: int = 0
    usage: TokenUsage | None = None
    cost: float = 0.0
    is_estimated_cost: bool = False


class AggregateResult(FrozenCamelModel):
    """Final record of one research round."""

    query: str
    responses: list[ModelCallResult]  # dispatch order
    synthesis: str
    total_duration_ms: int
    model_count: int
    success_count: int
    failure_count: int
    total_cost: float
    has_estimated_costs: bool
    timestamp: datetime
    orchestrator: str
    synthesis_cost: float = 0.0
    synthesis_duration_ms: int = 0


# --- Progress events ---


class ModelCompleteEvent(FrozenCamelModel):
    event: ClassVar[str] = "model_complete"

    model: str
    success: bool
    error_code: ErrorCode | None = None


class SynthesisStartEvent(FrozenCamelModel):
    event: ClassVar[str] = "synthesis_start"


class CompleteEvent(FrozenCamelModel):
    event: ClassVar[str] = "complete"

    result: AggregateResult


class ErrorEvent(FrozenCamelModel):
    event: ClassVar[str] = "error"

    message: str
    code: str | None = None


ProgressEvent = ModelCompleteEvent | SynthesisStartEvent | CompleteEvent | ErrorEvent

TERMINAL_EVENTS: frozenset[str] = frozenset({CompleteEvent.event, ErrorEvent.event})
