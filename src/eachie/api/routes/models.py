"""Model catalogue endpoint."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from eachie.api.deps import get_registry
from eachie.api.schemas import (
    ModelCatalogResponse,
    ModelOptionResponse,
    SynthesizerOptionResponse,
)
from eachie.config import Settings, get_settings
from eachie.llm.registry import ModelRegistryConfig

router = APIRouter(tags=["models"])

RegistryDep = Annotated[ModelRegistryConfig, Depends(get_registry)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


@router.get("/models", response_model_by_alias=True)
async def list_models(
    registry: RegistryDep,
    settings: SettingsDep,
) -> ModelCatalogResponse:
    """List research models and synthesizers in registry order."""
    return ModelCatalogResponse(
        models=[
            ModelOptionResponse(
                id=spec.model_id,
                name=spec.name,
                description=spec.description,
                provider=spec.provider,
                blended_cost=spec.blended_cost,
                supports_vision=spec.supports_vision,
                reasoning=spec.reasoning,
            )
            for spec in registry.models.values()
        ],
        synthesizers=[
            SynthesizerOptionResponse(
                id=spec.model_id,
                name=spec.name,
                description=spec.description,
                blended_cost=spec.blended_cost,
            )
            for spec in registry.synthesizers.values()
        ],
        default_models=list(registry.default_models),
        default_synthesizer=registry.default_synthesizer,
        max_selected_models=settings.max_selected_models,
    )
