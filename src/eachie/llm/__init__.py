"""LLM infrastructure: typed prompts, providers, registry, error codes.

Quick start::

    from eachie.config import get_settings
    from eachie.llm import create_provider_factory, load_registry

    settings = get_settings()
    registry = load_registry(settings.model_registry_path)
    provider = create_provider_factory(settings)(api_key)
    response = await provider.complete(request)
"""

from eachie.llm.errors import ErrorCode, classify_error
from eachie.llm.factory import ProviderFactory, create_provider_factory
from eachie.llm.registry import ModelRegistryConfig, ModelSpec, load_registry
from eachie.llm.schemas import LLMRequest, LLMResponse, TokenUsage

__all__ = [
    "ErrorCode",
    "LLMRequest",
    "LLMResponse",
    "ModelRegistryConfig",
    "ModelSpec",
    "ProviderFactory",
    "TokenUsage",
    "classify_error",
    "create_provider_factory",
    "load_registry",
]
