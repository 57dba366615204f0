"""Research lifecycle: validate, fan out, synthesize, aggregate.

Two entry points share one pipeline:

- ``run()``    -- returns the AggregateResult, raises on error
- ``stream()`` -- writes progress events to a ProgressChannel and always
  ends it with exactly one terminal event (``complete`` or ``error``)
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass

import structlog

from eachie.config import Settings
from eachie.errors import MissingCredentialError, NoValidModelsError, ResearchConfigError
from eachie.llm.factory import ProviderFactory
from eachie.llm.registry import ModelRegistryConfig, ModelSpec
from eachie.pricing import CostEstimator
from eachie.research.aggregate import build_aggregate_result
from eachie.research.alerts import AlertNotifier, CreditExhaustionAlert
from eachie.research.channel import ProgressChannel
from eachie.research.fanout import EmitFn, FanOutCoordinator, noop_emit
from eachie.research.schemas import (
    AggregateResult,
    Attachment,
    AttachmentType,
    CompleteEvent,
    ErrorEvent,
    ResearchRequest,
    SynthesisStartEvent,
)
from eachie.research.synthesis import SynthesisStage

logger = structlog.get_logger()


@dataclass(frozen=True)
class ResearchPlan:
    """Validated, resolved inputs for one research round."""

    query: str
    models: list[ModelSpec]
    attachments: list[Attachment]
    api_key: str
    uses_shared_key: bool
    synthesizer_id: str
    instruction: str | None


class ResearchService:
    """Runs research rounds against an injected registry and providers.

    Args:
        registry: Immutable model registry.
        settings: Limits, defaults and the shared credential.
        provider_factory: Maps a credential to an upstream provider.
        estimator: Cost estimator shared by all requests.
        notifier: Receives the credit-exhaustion alert, if configured.
    """

    def __init__(
        self,
        registry: ModelRegistryConfig,
        settings: Settings,
        provider_factory: ProviderFactory,
        estimator: CostEstimator,
        notifier: AlertNotifier | None = None,
    ) -> None:
        self._registry = registry
        self._settings = settings
        self._provider_factory = provider_factory
        self._estimator = estimator
        self._notifier = notifier

    # -- validation -----------------------------------------------------

    def resolve_credential(self, request: ResearchRequest) -> tuple[str, bool]:
        """Return (api_key, uses_shared_key).

        Caller key wins. The shared key is used only outside BYOK mode.

        Raises:
            MissingCredentialError: if no key is available.
        """
        if request.api_key is not None and request.api_key.get_secret_value():
            return request.api_key.get_secret_value(), False

        byok = request.byok_mode or self._settings.force_byok
        shared = self._settings.openrouter_api_key
        if not byok and shared is not None and shared.get_secret_value():
            return shared.get_secret_value(), True

        raise MissingCredentialError()

    def prepare(self, request: ResearchRequest) -> ResearchPlan:
        """Validate a request before anything is dispatched.

        Raises:
            ResearchConfigError: empty query, no credential, or no
                resolvable models.
        """
        if not request.query.strip():
            raise ResearchConfigError("Query is required")

        api_key, uses_shared_key = self.resolve_credential(request)

        models = self._registry.resolve_models(
            request.model_ids,
            limit=self._settings.max_selected_models,
        )
        if not models:
            raise NoValidModelsError()

        return ResearchPlan(
            query=request.query,
            models=models,
            attachments=self._limit_images(request.attachments),
            api_key=api_key,
            uses_shared_key=uses_shared_key,
            synthesizer_id=request.orchestrator_id or self._registry.default_synthesizer,
            instruction=request.orchestrator_prompt or None,
        )

    def _limit_images(self, attachments: list[Attachment]) -> list[Attachment]:
        limit = self._settings.max_images
        kept: list[Attachment] = []
        images = 0
        for attachment in attachments:
            if attachment.type == AttachmentType.IMAGE:
                images += 1
                if images > limit:
                    continue
            kept.append(attachment)
        if images > limit:
            logger.warning("images_dropped", attached=images, limit=limit)
        return kept

    # -- entry points ---------------------------------------------------

    async def run(self, request: ResearchRequest) -> AggregateResult:
        """Run a research round without progress events.

        Raises:
            ResearchConfigError: before dispatch.
            SynthesisError: if synthesis fails after a success.
        """
        plan = self.prepare(request)
        return await self.execute(plan)

    async def stream(self, request: ResearchRequest, channel: ProgressChannel) -> None:
        """Run a research round, reporting progress on ``channel``.

        Every failure becomes a terminal ``error`` event, which closes
        the channel. Cancellation (request deadline) propagates with the
        channel still open so the transport can report it.
        """
        try:
            plan = self.prepare(request)
            result = await self.execute(plan, channel.send)
        except ResearchConfigError as exc:
            logger.info("research_rejected", reason=str(exc))
            channel.send(ErrorEvent(message=str(exc), code="config_error"))
        except Exception as exc:
            logger.error("research_failed", error=str(exc), exc_info=True)
            channel.send(ErrorEvent(message=str(exc) or "Research failed"))
        else:
            channel.send(CompleteEvent(result=result))

    # -- pipeline -------------------------------------------------------

    async def execute(
        self,
        plan: ResearchPlan,
        emit: EmitFn = noop_emit,
    ) -> AggregateResult:
        """Fan out, synthesize when anything succeeded, and aggregate."""
        started_at = time.perf_counter()
        provider = self._provider_factory(plan.api_key)
        credit_alert = (
            CreditExhaustionAlert(self._notifier)
            if plan.uses_shared_key and self._notifier is not None
            else None
        )

        with structlog.contextvars.bound_contextvars(research_id=uuid.uuid4().hex[:12]):
            logger.info(
                "research_started",
                model_count=len(plan.models),
                synthesizer=plan.synthesizer_id,
                shared_key=plan.uses_shared_key,
            )
            coordinator = FanOutCoordinator(
                provider,
                self._estimator,
                api_key=plan.api_key,
                max_tokens=self._settings.research_max_tokens,
                credit_alert=credit_alert,
            )
            responses = await coordinator.run(
                plan.query, plan.models, plan.attachments, emit
            )

            synthesis = None
            if any(r.success for r in responses):
                emit(SynthesisStartEvent())
                stage = SynthesisStage(
                    provider,
                    self._estimator,
                    api_key=plan.api_key,
                    max_tokens=self._settings.synthesis_max_tokens,
                )
                synthesis = await stage.run(
                    plan.query,
                    responses,
                    plan.synthesizer_id,
                    plan.instruction,
                )
            else:
                logger.warning("all_models_failed", model_count=len(responses))

            result = build_aggregate_result(
                query=plan.query,
                responses=responses,
                synthesis=synthesis,
                orchestrator=self._registry.synthesizer_name(plan.synthesizer_id),
                started_at=started_at,
            )
            logger.info(
                "research_completed",
                success_count=result.success_count,
                failure_count=result.failure_count,
                total_cost_usd=result.total_cost,
                has_estimated_costs=result.has_estimated_costs,
                total_duration_ms=result.total_duration_ms,
            )
            return result
