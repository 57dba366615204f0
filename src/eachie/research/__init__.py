"""Multi-model research: fan-out, cost, synthesis, progress streaming.

Quick start::

    service = ResearchService(registry, settings, provider_factory, estimator)
    result = await service.run(ResearchRequest(query="..."))
"""

from eachie.research.aggregate import ALL_MODELS_FAILED_SYNTHESIS, build_aggregate_result
from eachie.research.channel import ProgressChannel, encode_event
from eachie.research.fanout import FanOutCoordinator
from eachie.research.schemas import (
    AggregateResult,
    Attachment,
    ModelCallResult,
    ResearchRequest,
)
from eachie.research.service import ResearchService
from eachie.research.synthesis import SynthesisStage

__all__ = [
    "ALL_MODELS_FAILED_SYNTHESIS",
    "AggregateResult",
    "Attachment",
    "FanOutCoordinator",
    "ModelCallResult",
    "ProgressChannel",
    "ResearchRequest",
    "ResearchService",
    "SynthesisStage",
    "build_aggregate_result",
    "encode_event",
]
