"""OpenRouter provider via the OpenAI-compatible chat completions API."""

from typing import Any

import httpx
import openai

from eachie.llm.providers.base import LLMProvider
from eachie.llm.schemas import (
    FilePart,
    ImagePart,
    LLMRequest,
    LLMResponse,
    Message,
    TextPart,
    TokenUsage,
)


class OpenRouterProvider(LLMProvider):
    """Provider for OpenRouter, which fronts every research model.

    A new instance is created per request because the credential may
    be the caller's own key (BYOK). The underlying HTTP connection pool
    can be shared by passing ``http_client``.
    """

    provider_name = "openrouter"

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://openrouter.ai/api/v1",
        timeout: float = 300.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = openai.AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=0,
            http_client=http_client,
        )

    async def complete(self, request: LLMRequest) -> LLMResponse:
        """Generate text completion via OpenRouter."""
        kwargs: dict[str, Any] = {
            "model": request.model,
            "messages": [_to_openai_message(m) for m in request.messages],
            "max_tokens": request.max_tokens,
        }
        if request.temperature is not None:
            kwargs["temperature"] = request.temperature
        if request.provider_options:
            kwargs["extra_body"] = request.provider_options

        with self._measure_latency() as timer:
            response = await self._client.chat.completions.create(**kwargs)

        content = ""
        if response.choices:
            content = response.choices[0].message.content or ""

        usage = response.usage
        return LLMResponse(
            content=content,
            provider=self.provider_name,
            model_id=request.model,
            usage=TokenUsage(
                prompt_tokens=usage.prompt_tokens or 0,
                completion_tokens=usage.completion_tokens or 0,
                total_tokens=usage.total_tokens or 0,
            )
            if usage
            else None,
            generation_id=response.id or None,
            latency_ms=timer.elapsed_ms,
        )


def _to_openai_message(message: Message) -> dict[str, Any]:
    """Convert a typed Message to the chat completions wire format.

    Text-only messages use the plain string form; anything multimodal
    uses the content-parts list.
    """
    if message.is_text_only:
        return {"role": message.role, "content": message.text}

    content: list[dict[str, Any]] = []
    for part in message.parts:
        if isinstance(part, TextPart):
            content.append({"type": "text", "text": part.text})
        elif isinstance(part, ImagePart):
            content.append({"type": "image_url", "image_url": {"url": part.data_uri}})
        elif isinstance(part, FilePart):
            content.append(
                {
                    "type": "file",
                    "file": {"filename": part.filename, "file_data": part.data_uri},
                }
            )
    return {"role": message.role, "content": content}
