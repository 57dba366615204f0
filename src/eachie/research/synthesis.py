"""Synthesis stage: one extra call that merges the successful answers."""

from __future__ import annotations

import time
from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from eachie.errors import SynthesisError
from eachie.llm.messages import user_message
from eachie.llm.providers.base import LLMProvider
from eachie.llm.schemas import LLMRequest
from eachie.pricing import CostEstimator
from eachie.research.prompts import build_synthesis_prompt
from eachie.research.schemas import ModelCallResult

logger = structlog.get_logger()


@dataclass(frozen=True)
class SynthesisOutcome:
    text: str
    model_id: str
    cost: float = 0.0
    is_estimated_cost: bool = False
    duration_ms: int = 0


class SynthesisStage:
    """Calls the synthesizer model exactly once.

    A failed synthesis is not downgraded to a partial result: the
    upstream error is re-raised as SynthesisError.
    """

    def __init__(
        self,
        provider: LLMProvider,
        estimator: CostEstimator,
        *,
        api_key: str | None = None,
        max_tokens: int = 1500,
    ) -> None:
        self._provider = provider
        self._estimator = estimator
        self._api_key = api_key
        self._max_tokens = max_tokens

    async def run(
        self,
        query: str,
        responses: Sequence[ModelCallResult],
        synthesizer_id: str,
        instruction: str | None = None,
    ) -> SynthesisOutcome:
        """Synthesize successful responses.

        Raises:
            ValueError: if no successful response is given.
            SynthesisError: if the synthesizer call fails.
        """
        successful = [r for r in responses if r.success]
        if not successful:
            raise ValueError("Synthesis requires at least one successful response")

        request = LLMRequest(
            messages=[
                user_message(build_synthesis_prompt(query, successful, instruction))
            ],
            model=synthesizer_id,
            max_tokens=self._max_tokens,
        )

        start = time.perf_counter()
        try:
            response = await self._provider.complete(request)
        except Exception as exc:
            logger.error(
                "synthesis_failed",
                model=synthesizer_id,
                error=str(exc),
            )
            raise SynthesisError(synthesizer_id, exc) from exc
        duration_ms = int((time.perf_counter() - start) * 1000)

        estimate = await self._estimator.estimate(
            synthesizer_id,
            usage=response.usage,
            generation_id=response.generation_id,
            prompt_text=request.prompt_text,
            output_text=response.content,
            api_key=self._api_key,
        )
        logger.info(
            "synthesis_completed",
            model=synthesizer_id,
            inputs=len(successful),
            duration_ms=duration_ms,
            cost_usd=estimate.cost,
        )
        return SynthesisOutcome(
            text=response.content,
            model_id=synthesizer_id,
            cost=estimate.cost,
            is_estimated_cost=estimate.is_estimated,
            duration_ms=duration_ms,
        )
