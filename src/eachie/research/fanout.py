"""Fan-out coordinator: query every selected model concurrently.

Dispatch all, wait for all. Each call settles into exactly one
ModelCallResult and emits exactly one ``model_complete`` event at the
moment it settles, so events arrive in completion order while the
returned list keeps dispatch order. A failing call never affects its
siblings. There is no quorum, early exit or per-call timeout; the HTTP
client's timeout is the only per-call limit.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable, Sequence

import structlog

from eachie.llm.errors import ErrorCode, classify_error
from eachie.llm.providers.base import LLMProvider
from eachie.llm.registry import ModelSpec
from eachie.llm.schemas import LLMRequest, LLMResponse
from eachie.pricing import CostEstimator
from eachie.research.alerts import CreditExhaustionAlert
from eachie.research.prompts import build_model_messages
from eachie.research.schemas import (
    Attachment,
    ModelCallResult,
    ModelCompleteEvent,
    ProgressEvent,
)

logger = structlog.get_logger()

EmitFn = Callable[[ProgressEvent], None]


def noop_emit(event: ProgressEvent) -> None:
    return None


class FanOutCoordinator:
    """Runs one research round across N models.

    Args:
        provider: Upstream client bound to the request credential.
        estimator: Cost estimator for successful calls.
        api_key: Credential forwarded to the exact billing lookup.
        max_tokens: Completion limit for each research call.
        credit_alert: Set only when the shared server key is in use;
            triggered on credit exhaustion.
    """

    def __init__(
        self,
        provider: LLMProvider,
        estimator: CostEstimator,
        *,
        api_key: str | None = None,
        max_tokens: int = 2500,
        credit_alert: CreditExhaustionAlert | None = None,
    ) -> None:
        self._provider = provider
        self._estimator = estimator
        self._api_key = api_key
        self._max_tokens = max_tokens
        self._credit_alert = credit_alert

    async def run(
        self,
        query: str,
        models: Sequence[ModelSpec],
        attachments: Sequence[Attachment] = (),
        emit: EmitFn = noop_emit,
    ) -> list[ModelCallResult]:
        """Dispatch one call per model and return results in dispatch order."""
        logger.info(
            "fanout_started",
            models=[m.model_id for m in models],
            attachments=len(attachments),
        )
        results = await asyncio.gather(
            *(self._call_model(spec, query, attachments, emit) for spec in models)
        )
        logger.info(
            "fanout_settled",
            model_count=len(results),
            success_count=sum(1 for r in results if r.success),
        )
        return list(results)

    async def _call_model(
        self,
        spec: ModelSpec,
        query: str,
        attachments: Sequence[Attachment],
        emit: EmitFn,
    ) -> ModelCallResult:
        request = LLMRequest(
            messages=build_model_messages(spec, query, attachments),
            model=spec.model_id,
            max_tokens=self._max_tokens,
            provider_options=spec.provider_options(),
        )

        start = time.perf_counter()
        try:
            response = await self._provider.complete(request)
        except Exception as exc:
            failed = self._failed(spec, exc, _elapsed_ms(start))
            emit(
                ModelCompleteEvent(
                    model=spec.name, success=False, error_code=failed.error_code
                )
            )
            return failed

        duration_ms = _elapsed_ms(start)
        # Emitted before the billing lookup so events follow upstream completion.
        emit(ModelCompleteEvent(model=spec.name, success=True))
        return await self._succeeded(spec, request, response, duration_ms)

    async def _succeeded(
        self,
        spec: ModelSpec,
        request: LLMRequest,
        response: LLMResponse,
        duration_ms: int,
    ) -> ModelCallResult:
        estimate = await self._estimator.estimate(
            spec.model_id,
            usage=response.usage,
            generation_id=response.generation_id,
            prompt_text=request.prompt_text,
            output_text=response.content,
            api_key=self._api_key,
        )
        logger.info(
            "model_call_completed",
            model=spec.model_id,
            duration_ms=duration_ms,
            tokens_in=response.usage.prompt_tokens if response.usage else None,
            tokens_out=response.usage.completion_tokens if response.usage else None,
            cost_usd=estimate.cost,
            is_estimated=estimate.is_estimated,
        )
        return ModelCallResult(
            model=spec.name,
            model_id=spec.model_id,
            content=response.content,
            success=True,
            duration_ms=duration_ms,
            usage=response.usage,
            cost=estimate.cost,
            is_estimated_cost=estimate.is_estimated,
        )

    def _failed(
        self,
        spec: ModelSpec,
        exc: Exception,
        duration_ms: int,
    ) -> ModelCallResult:
        message = str(exc) or type(exc).__name__
        code = classify_error(message)
        logger.warning(
            "model_call_failed",
            model=spec.model_id,
            duration_ms=duration_ms,
            error_code=str(code),
            error=message,
        )
        if code == ErrorCode.CREDIT_EXHAUSTED and self._credit_alert is not None:
            self._credit_alert.trigger(spec.model_id, message)
        return ModelCallResult(
            model=spec.name,
            model_id=spec.model_id,
            success=False,
            error=message,
            error_code=code,
            duration_ms=duration_ms,
        )


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)
