"""Per-call cost estimation with a three-tier fallback.

Upstream providers do not reliably report both the billed amount and
token counts, so cost is computed by the first strategy that yields a
nonzero figure:

1. exact     -- billed cost from the gateway's generation lookup
2. token     -- usage token counts x rate table (exact)
3. heuristic -- token counts approximated from text length (estimated)

If none applies the cost is zero and not estimated. Amounts are USD.
"""

from __future__ import annotations

import math
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import NamedTuple

import httpx
import structlog

from eachie.llm.registry import ModelRegistryConfig, TokenRate
from eachie.llm.schemas import TokenUsage

logger = structlog.get_logger()

CHARS_PER_TOKEN = 4


class CostEstimate(NamedTuple):
    cost: float
    is_estimated: bool


ZERO_COST = CostEstimate(0.0, False)


@dataclass(frozen=True)
class CostInputs:
    """Everything a strategy may look at for one call."""

    model_id: str
    usage: TokenUsage | None = None
    generation_id: str | None = None
    prompt_text: str = ""
    output_text: str = ""
    api_key: str | None = None


CostStrategy = Callable[[CostInputs], Awaitable[CostEstimate | None]]


def token_rate_cost(rate: TokenRate, prompt_tokens: int, completion_tokens: int) -> float:
    """Cost in USD for token counts at per-million rates."""
    return (prompt_tokens / 1_000_000) * rate.input + (
        completion_tokens / 1_000_000
    ) * rate.output


def approximate_tokens(text: str) -> int:
    return math.ceil(len(text) / CHARS_PER_TOKEN)


async def first_estimate(
    strategies: Sequence[CostStrategy],
    inputs: CostInputs,
) -> CostEstimate:
    """Run strategies in order; the first non-None result wins."""
    for strategy in strategies:
        result = await strategy(inputs)
        if result is not None:
            return result
    return ZERO_COST


class CostEstimator:
    """Computes (cost, is_estimated) for one upstream call.

    Args:
        registry: Source of per-model token rates.
        http_client: Client for the exact billing lookup. When None the
            exact tier is skipped.
        billing_base_url: Gateway API root; the lookup hits
            ``{billing_base_url}/generation?id=<generation_id>``.
        timeout: Seconds allowed for the billing lookup.
    """

    def __init__(
        self,
        registry: ModelRegistryConfig,
        http_client: httpx.AsyncClient | None = None,
        *,
        billing_base_url: str = "https://openrouter.ai/api/v1",
        timeout: float = 10.0,
    ) -> None:
        self._registry = registry
        self._http_client = http_client
        self._billing_base_url = billing_base_url.rstrip("/")
        self._timeout = timeout
        self._strategies: tuple[CostStrategy, ...] = (
            self.exact_cost,
            self.token_cost,
            self.heuristic_cost,
        )

    async def estimate(
        self,
        model_id: str,
        usage: TokenUsage | None = None,
        generation_id: str | None = None,
        prompt_text: str = "",
        output_text: str = "",
        *,
        api_key: str | None = None,
    ) -> CostEstimate:
        inputs = CostInputs(
            model_id=model_id,
            usage=usage,
            generation_id=generation_id,
            prompt_text=prompt_text,
            output_text=output_text,
            api_key=api_key,
        )
        estimate = await first_estimate(self._strategies, inputs)
        logger.debug(
            "cost_estimated",
            model=model_id,
            cost_usd=estimate.cost,
            is_estimated=estimate.is_estimated,
        )
        return estimate

    # -- strategies -----------------------------------------------------

    async def exact_cost(self, inputs: CostInputs) -> CostEstimate | None:
        """Billed cost of one generation, or None if unavailable.

        Lookup failures are logged and never raised.
        """
        if not inputs.generation_id or self._http_client is None:
            return None

        headers = {}
        if inputs.api_key:
            headers["Authorization"] = f"Bearer {inputs.api_key}"
        try:
            response = await self._http_client.get(
                f"{self._billing_base_url}/generation",
                params={"id": inputs.generation_id},
                headers=headers,
                timeout=self._timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(
                "generation_cost_lookup_failed",
                model=inputs.model_id,
                generation_id=inputs.generation_id,
                error=str(exc),
            )
            return None

        data = payload.get("data") if isinstance(payload, dict) else None
        total_cost = data.get("total_cost") if isinstance(data, dict) else None
        if not isinstance(total_cost, int | float) or total_cost <= 0:
            return None
        return CostEstimate(float(total_cost), False)

    async def token_cost(self, inputs: CostInputs) -> CostEstimate | None:
        rate = self._registry.get_rate(inputs.model_id)
        if rate is None or inputs.usage is None or inputs.usage.is_empty:
            return None
        cost = token_rate_cost(
            rate, inputs.usage.prompt_tokens, inputs.usage.completion_tokens
        )
        return CostEstimate(cost, False) if cost > 0 else None

    async def heuristic_cost(self, inputs: CostInputs) -> CostEstimate | None:
        rate = self._registry.get_rate(inputs.model_id)
        if rate is None or not inputs.output_text:
            return None
        cost = token_rate_cost(
            rate,
            approximate_tokens(inputs.prompt_text),
            approximate_tokens(inputs.output_text),
        )
        return CostEstimate(cost, True) if cost > 0 else None
