"""FastAPI dependency injection."""

from __future__ import annotations

from typing import cast

from fastapi import Request

from eachie.llm.registry import ModelRegistryConfig
from eachie.research.service import ResearchService

__all__ = ["get_registry", "get_research_service"]


async def get_research_service(request: Request) -> ResearchService:
    """Retrieve ResearchService from app state.

    Initialized during lifespan startup.
    """
    return cast(ResearchService, request.app.state.research_service)


async def get_registry(request: Request) -> ModelRegistryConfig:
    """Retrieve the model registry from app state."""
    return cast(ModelRegistryConfig, request.app.state.registry)
