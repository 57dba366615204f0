"""Response schemas for the API layer."""

from __future__ import annotations

from pydantic import Field

from eachie.llm.registry import ReasoningMode
from eachie.research.schemas import CamelModel


class ModelOptionResponse(CamelModel):
    """One research model in the public catalogue."""

    id: str
    name: str
    description: str
    provider: str
    blended_cost: float = Field(description="USD per 1M tokens, 3:1 output:input.")
    supports_vision: bool
    reasoning: ReasoningMode


class SynthesizerOptionResponse(CamelModel):
    id: str
    name: str
    description: str
    blended_cost: float


class ModelCatalogResponse(CamelModel):
    """Response for ``GET /api/models``.

    Example::

        {
            "models": [{"id": "anthropic/claude-haiku-4.5:online", ...}],
            "synthesizers": [{"id": "anthropic/claude-sonnet-4.5", ...}],
            "defaultModels": ["anthropic/claude-haiku-4.5:online"],
            "defaultSynthesizer": "anthropic/claude-sonnet-4.5",
            "maxSelectedModels": 12
        }
    """

    models: list[ModelOptionResponse]
    synthesizers: list[SynthesizerOptionResponse]
    default_models: list[str]
    default_synthesizer: str
    max_selected_models: int
