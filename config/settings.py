"""Application settings."""

import os
from typing import Optional
from pydantic import BaseModel

from llm.factory import LLMProvider, provider_for_model


class Settings(BaseModel):
    """Application configuration settings."""

    # LLM Provider settings
    llm_provider: Optional[str] = None  # "openai" or "anthropic"; inferred from llm_model if unset
    llm_model: Optional[str] = None  # Default model override
    query_model: Optional[str] = None  # Model for search query extraction
    synthesis_model: Optional[str] = None  # Model for research synthesis
    llm_timeout: float = 60.0  # Seconds per LLM call; calls are never retried

    # API Keys
    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None

    # Durable store and cache
    db_path: str = "data/conversations.db"
    cache_ttl_seconds: int = 3600
    cache_max_size: int = 1000

    # Memory policy
    max_recent_interactions: int = 10
    summarize_threshold: int = 3
    summary_window: int = 5
    summary_max_chars: int = 200
    llm_summarizer_enabled: bool = False

    # Web search
    search_api_url: str = "https://api.duckduckgo.com/"
    search_fallback_url: Optional[str] = None
    search_timeout: int = 10
    search_max_results: int = 5
    max_search_queries: int = 3

    # Logging
    verbose: bool = False
    log_level: str = "INFO"

    def __init__(self, **data):
        # Auto-load secrets and deployment paths from environment if not provided
        if data.get("openai_api_key") is None:
            data["openai_api_key"] = os.environ.get("OPENAI_API_KEY")

        if data.get("anthropic_api_key") is None:
            data["anthropic_api_key"] = os.environ.get("ANTHROPIC_API_KEY")

        if data.get("db_path") is None and os.environ.get("ASSISTANT_DB_PATH"):
            data["db_path"] = os.environ["ASSISTANT_DB_PATH"]

        if data.get("search_fallback_url") is None:
            data["search_fallback_url"] = os.environ.get("SEARCH_FALLBACK_URL")

        # Unset values fall back to field defaults
        super().__init__(**{key: value for key, value in data.items() if value is not None})

    def get_llm_provider(self) -> LLMProvider:
        """Resolve the configured provider, inferring it from the model name if unset."""
        if self.llm_provider:
            return LLMProvider(self.llm_provider)
        if self.llm_model:
            return provider_for_model(self.llm_model)
        return LLMProvider.OPENAI

    def get_llm_api_key(self) -> Optional[str]:
        """Get the API key for the configured LLM provider."""
        provider = self.get_llm_provider()
        if provider == LLMProvider.OPENAI:
            return self.openai_api_key
        elif provider == LLMProvider.ANTHROPIC:
            return self.anthropic_api_key
        return None
