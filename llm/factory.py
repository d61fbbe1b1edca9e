"""LLM client factory."""

from enum import Enum
from typing import Optional, Union

from .base_client import BaseLLMClient
from .openai_client import OpenAIClient
from .anthropic_client import AnthropicClient


class LLMProvider(str, Enum):
    """Supported LLM providers."""
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


def provider_for_model(model: str) -> LLMProvider:
    """Infer the provider from a model name."""
    name = model.lower()
    if "claude" in name or "anthropic" in name:
        return LLMProvider.ANTHROPIC
    return LLMProvider.OPENAI


def create_llm_client(
    provider: Union[LLMProvider, str],
    api_key: Optional[str] = None,
    model: Optional[str] = None,
    timeout: float = 60.0
) -> BaseLLMClient:
    """
    Create an LLM client for the specified provider.

    Args:
        provider: LLM provider (openai or anthropic)
        api_key: API key for the provider
        model: Optional default model override
        timeout: Request timeout in seconds

    Returns:
        Configured LLM client

    Raises:
        ValueError: If provider is not supported
    """
    provider = LLMProvider(provider)
    if provider == LLMProvider.OPENAI:
        return OpenAIClient(api_key=api_key, model=model, timeout=timeout)
    elif provider == LLMProvider.ANTHROPIC:
        return AnthropicClient(api_key=api_key, model=model, timeout=timeout)
    else:
        raise ValueError(f"Unsupported LLM provider: {provider}")
