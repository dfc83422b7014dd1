"""LLM provider configuration and dispatch."""

from .config import (
    LLMConfig,
    LLMProviderConfig,
    load_llm_config,
    reset_llm_config_cache,
    resolve_provider,
)
from .providers import (
    AnthropicProvider,
    GoogleProvider,
    LLMProvider,
    MockLLMProvider,
    OpenAIProvider,
    create_provider,
)

__all__ = [
    "AnthropicProvider",
    "GoogleProvider",
    "LLMConfig",
    "LLMProvider",
    "LLMProviderConfig",
    "MockLLMProvider",
    "OpenAIProvider",
    "create_provider",
    "load_llm_config",
    "reset_llm_config_cache",
    "resolve_provider",
]
