"""External retrieval capabilities."""

from .web_search import SearchResult, BaseSearchClient, DuckDuckGoSearchClient

__all__ = [
    "SearchResult",
    "BaseSearchClient",
    "DuckDuckGoSearchClient",
]
