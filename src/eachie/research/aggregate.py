"""Assemble the final AggregateResult. Pure: no I/O."""

from __future__ import annotations

import time
from collections.abc import Sequence
from datetime import UTC, datetime

from eachie.research.schemas import AggregateResult, ModelCallResult
from eachie.research.synthesis import SynthesisOutcome

ALL_MODELS_FAILED_SYNTHESIS = (
    "All models failed to respond. Please check your API key and try again."
)


def build_aggregate_result(
    *,
    query: str,
    responses: Sequence[ModelCallResult],
    synthesis: SynthesisOutcome | None,
    orchestrator: str,
    started_at: float,
    finished_at: float | None = None,
    timestamp: datetime | None = None,
) -> AggregateResult:
    """Build the result record for one research round.

    Counts are derived from ``responses`` itself, never from counters
    kept elsewhere.

    Args:
        query: Original query text.
        responses: Settled results in dispatch order.
        synthesis: Synthesis outcome, or None when every model failed.
        orchestrator: Display name of the synthesizer model.
        started_at: ``time.perf_counter()`` at request start.
        finished_at: Defaults to ``time.perf_counter()`` now.
        timestamp: Completion time; defaults to now (UTC).

    Raises:
        ValueError: if synthesis is missing while some model succeeded,
            or present while none did.
    """
    success_count = sum(1 for r in responses if r.success)
    failure_count = sum(1 for r in responses if not r.success)

    if success_count > 0 and synthesis is None:
        raise ValueError("Synthesis outcome required when a model succeeded")
    if success_count == 0 and synthesis is not None:
        raise ValueError("Synthesis must be skipped when every model failed")

    end = time.perf_counter() if finished_at is None else finished_at
    total_cost = sum(r.cost for r in responses)
    has_estimated = any(r.is_estimated_cost for r in responses)
    if synthesis is not None:
        total_cost += synthesis.cost
        has_estimated = has_estimated or synthesis.is_estimated_cost

    return AggregateResult(
        query=query,
        responses=list(responses),
        synthesis=synthesis.text if synthesis else ALL_MODELS_FAILED_SYNTHESIS,
        total_duration_ms=int((end - started_at) * 1000),
        model_count=len(responses),
        success_count=success_count,
        failure_count=failure_count,
        total_cost=total_cost,
        has_estimated_costs=has_estimated,
        timestamp=timestamp or datetime.now(UTC),
        orchestrator=orchestrator,
        synthesis_cost=synthesis.cost if synthesis else 0.0,
        synthesis_duration_ms=synthesis.duration_ms if synthesis else 0,
    )
