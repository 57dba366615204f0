"""LLM provider implementations.

PROVIDER_REGISTRY maps provider names to their implementation classes.
Every research model is reached through OpenRouter today; a direct
provider is added by implementing LLMProvider and registering it here.
"""

from eachie.llm.providers.base import LLMProvider
from eachie.llm.providers.openrouter import OpenRouterProvider

PROVIDER_REGISTRY: dict[str, type[LLMProvider]] = {
    "openrouter": OpenRouterProvider,
}

__all__ = [
    "PROVIDER_REGISTRY",
    "LLMProvider",
    "OpenRouterProvider",
]
