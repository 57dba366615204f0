"""Tests for LLM providers."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest

from eachie.config import Settings
from eachie.llm.factory import create_provider_factory
from eachie.llm.messages import MessageBuilder, system_message, user_message
from eachie.llm.providers.base import LLMProvider
from eachie.llm.providers.openrouter import OpenRouterProvider, _to_openai_message
from eachie.llm.schemas import LLMRequest, LLMResponse


def _completion(
    content: str | None = "hi",
    usage: object | None = None,
    response_id: str = "gen-123",
) -> SimpleNamespace:
    return SimpleNamespace(
        id=response_id,
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=usage,
    )


def _provider_with(create: AsyncMock) -> OpenRouterProvider:
    provider = OpenRouterProvider(api_key="sk-test")
    provider._client = SimpleNamespace(  # type: ignore[assignment]
        chat=SimpleNamespace(completions=SimpleNamespace(create=create))
    )
    return provider


class TestLLMProviderInterface:
    """Verify LLMProvider ABC contract."""

    def test_cannot_instantiate_abc(self) -> None:
        with pytest.raises(TypeError):
            LLMProvider()  # type: ignore[abstract]

    def test_subclass_must_implement_complete(self) -> None:
        class IncompleteProvider(LLMProvider):
            provider_name = "incomplete"

        with pytest.raises(TypeError):
            IncompleteProvider()  # type: ignore[abstract]

    def test_measure_latency(self) -> None:
        class DummyProvider(LLMProvider):
            provider_name = "dummy"

            async def complete(self, request: LLMRequest) -> LLMResponse:
                return LLMResponse(content="", provider="dummy", model_id="d")

        with DummyProvider()._measure_latency() as timer:
            pass
        assert timer.elapsed_ms >= 0


class TestOpenRouterProvider:
    async def test_complete_maps_response(self) -> None:
        usage = SimpleNamespace(prompt_tokens=10, completion_tokens=5, total_tokens=15)
        create = AsyncMock(return_value=_completion("answer", usage))
        provider = _provider_with(create)

        response = await provider.complete(
            LLMRequest(messages=[user_message("q")], model="vendor/m", max_tokens=100)
        )

        assert response.content == "answer"
        assert response.provider == "openrouter"
        assert response.model_id == "vendor/m"
        assert response.generation_id == "gen-123"
        assert response.usage is not None
        assert response.usage.prompt_tokens == 10
        assert response.usage.completion_tokens == 5

    async def test_request_body(self) -> None:
        create = AsyncMock(return_value=_completion())
        provider = _provider_with(create)

        await provider.complete(
            LLMRequest(
                messages=[system_message("sys"), user_message("q")],
                model="vendor/m",
                max_tokens=2500,
                provider_options={"reasoning": {"effort": "high"}},
            )
        )

        kwargs = create.call_args.kwargs
        assert kwargs["model"] == "vendor/m"
        assert kwargs["max_tokens"] == 2500
        assert kwargs["messages"] == [
            {"role": "system", "content": "sys"},
            {"role": "user", "content": "q"},
        ]
        assert kwargs["extra_body"] == {"reasoning": {"effort": "high"}}
        assert "temperature" not in kwargs

    async def test_no_extra_body_without_options(self) -> None:
        create = AsyncMock(return_value=_completion())
        provider = _provider_with(create)
        await provider.complete(LLMRequest(messages=[user_message("q")], model="m"))
        assert "extra_body" not in create.call_args.kwargs

    async def test_missing_usage_and_content(self) -> None:
        create = AsyncMock(return_value=_completion(content=None, usage=None))
        provider = _provider_with(create)
        response = await provider.complete(
            LLMRequest(messages=[user_message("q")], model="m")
        )
        assert response.content == ""
        assert response.usage is None

    async def test_errors_propagate(self) -> None:
        create = AsyncMock(side_effect=RuntimeError("rate limit exceeded"))
        provider = _provider_with(create)
        with pytest.raises(RuntimeError, match="rate limit"):
            await provider.complete(LLMRequest(messages=[user_message("q")], model="m"))


class TestToOpenAIMessage:
    def test_multimodal_parts(self) -> None:
        message = (
            MessageBuilder("user")
            .text("look")
            .image("image/png", "AAAA")
            .file("application/pdf", "BBBB", "a.pdf")
            .build()
        )
        assert _to_openai_message(message) == {
            "role": "user",
            "content": [
                {"type": "text", "text": "look"},
                {"type": "image_url", "image_url": {"url": "data:image/png;base64,AAAA"}},
                {
                    "type": "file",
                    "file": {
                        "filename": "a.pdf",
                        "file_data": "data:application/pdf;base64,BBBB",
                    },
                },
            ],
        }


class TestProviderFactory:
    def test_creates_provider_per_key(self) -> None:
        settings = Settings(_env_file=None)
        with patch("eachie.llm.providers.openrouter.openai.AsyncOpenAI") as mock_cls:
            factory = create_provider_factory(settings)
            provider = factory("sk-caller")

        assert isinstance(provider, OpenRouterProvider)
        kwargs = mock_cls.call_args.kwargs
        assert kwargs["api_key"] == "sk-caller"
        assert kwargs["base_url"] == settings.openrouter_base_url
        assert kwargs["timeout"] == settings.llm_timeout_seconds
        assert kwargs["max_retries"] == 0

    def test_unknown_provider(self) -> None:
        with pytest.raises(KeyError):
            create_provider_factory(Settings(_env_file=None), provider_name="nope")
