"""Fixtures for API tests: app state is set directly, lifespan is skipped."""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from eachie.api.app import app
from eachie.config import Settings, get_settings
from eachie.llm.registry import ModelRegistryConfig
from eachie.pricing import CostEstimator
from eachie.research.service import ResearchService


@pytest.fixture()
def research_service(
    registry: ModelRegistryConfig,
    settings: Settings,
    estimator: CostEstimator,
    provider,
) -> ResearchService:
    return ResearchService(registry, settings, lambda key: provider, estimator)


@pytest.fixture()
async def client(
    registry: ModelRegistryConfig,
    settings: Settings,
    research_service: ResearchService,
) -> AsyncGenerator[AsyncClient]:
    """AsyncClient against the real app with in-memory providers."""
    app.state.registry = registry
    app.state.research_service = research_service
    app.dependency_overrides[get_settings] = lambda: settings
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()
    del app.state.registry
    del app.state.research_service
