"""Provider factory -- builds a provider for a given credential.

The credential is chosen per request (caller key or shared server key),
so the service holds a factory rather than a provider instance.
"""

from __future__ import annotations

from collections.abc import Callable

import httpx
import structlog

from eachie.config import Settings
from eachie.llm.providers import PROVIDER_REGISTRY, LLMProvider

logger = structlog.get_logger()

ProviderFactory = Callable[[str], LLMProvider]


def create_provider_factory(
    settings: Settings,
    http_client: httpx.AsyncClient | None = None,
    *,
    provider_name: str = "openrouter",
) -> ProviderFactory:
    """Return a callable mapping an API key to a configured provider.

    Raises:
        KeyError: if provider_name is not in PROVIDER_REGISTRY.
    """
    provider_cls = PROVIDER_REGISTRY[provider_name]

    def _create(api_key: str) -> LLMProvider:
        return provider_cls(  # type: ignore[call-arg]
            api_key=api_key,
            base_url=settings.openrouter_base_url,
            timeout=settings.llm_timeout_seconds,
            http_client=http_client,
        )

    logger.info(
        "llm_provider_factory_created",
        provider=provider_name,
        base_url=settings.openrouter_base_url,
        timeout_s=settings.llm_timeout_seconds,
    )
    return _create
