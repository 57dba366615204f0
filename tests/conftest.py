"""Shared pytest fixtures."""

import asyncio
from dataclasses import dataclass, field

import pytest

from eachie.config import Settings
from eachie.llm.providers.base import LLMProvider
from eachie.llm.registry import ModelRegistryConfig
from eachie.llm.schemas import LLMRequest, LLMResponse, TokenUsage
from eachie.pricing import CostEstimator

REGISTRY_DATA = {
    "models": {
        "test/m1": {"name": "Model One", "provider": "Test", "supports_vision": True},
        "test/m2": {"name": "Model Two", "provider": "Test"},
        "test/m3": {"name": "Model Three", "provider": "Test"},
        "test/thinker": {
            "name": "Thinker",
            "provider": "Test",
            "reasoning": "high",
        },
    },
    "synthesizers": {
        "test/synth": {"name": "Synth", "blended_cost": 2.0},
    },
    "pricing": {
        "test/m1": {"input": 1.0, "output": 2.0},
        "test/m2": {"input": 1.0, "output": 2.0},
        "test/m3": {"input": 1.0, "output": 2.0},
        "test/synth": {"input": 3.0, "output": 15.0},
    },
    "default_models": ["test/m1", "test/m2"],
    "default_synthesizer": "test/synth",
}


@dataclass
class Scripted:
    """Behaviour of one scripted upstream model."""

    content: str = "answer"
    delay: float = 0.0
    error: Exception | None = None
    usage: TokenUsage | None = None
    generation_id: str | None = None


@dataclass
class ScriptedProvider(LLMProvider):
    """In-memory provider; replies per model id and records requests."""

    script: dict[str, Scripted] = field(default_factory=dict)
    requests: list[LLMRequest] = field(default_factory=list)

    provider_name = "scripted"

    def reply(self, model_id: str, content: str = "answer", **kwargs: object) -> None:
        """Script the response for ``model_id`` (see Scripted)."""
        self.script[model_id] = Scripted(content=content, **kwargs)  # type: ignore[arg-type]

    def fail(self, model_id: str, message: str, delay: float = 0.0) -> None:
        self.script[model_id] = Scripted(error=RuntimeError(message), delay=delay)

    async def complete(self, request: LLMRequest) -> LLMResponse:
        self.requests.append(request)
        step = self.script.get(request.model, Scripted())
        if step.delay:
            await asyncio.sleep(step.delay)
        if step.error is not None:
            raise step.error
        return LLMResponse(
            content=step.content,
            provider=self.provider_name,
            model_id=request.model,
            usage=step.usage,
            generation_id=step.generation_id,
        )

    def requests_for(self, model_id: str) -> list[LLMRequest]:
        return [r for r in self.requests if r.model == model_id]


@pytest.fixture()
def registry() -> ModelRegistryConfig:
    return ModelRegistryConfig.model_validate(REGISTRY_DATA)


@pytest.fixture()
def estimator(registry: ModelRegistryConfig) -> CostEstimator:
    """Estimator without a billing client: token and heuristic tiers only."""
    return CostEstimator(registry)


@pytest.fixture()
def provider() -> ScriptedProvider:
    return ScriptedProvider()


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        openrouter_api_key="sk-shared",  # type: ignore[arg-type]
        _env_file=None,
    )
