"""Web search clients used by the research agent."""

import logging
from abc import ABC, abstractmethod
from typing import Optional
from urllib.parse import urlparse

import requests
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class SearchResult(BaseModel):
    """A single ranked search snippet."""
    title: str
    url: str
    snippet: str
    source: str
    relevance_score: Optional[float] = Field(None, ge=0.0, le=1.0)


class BaseSearchClient(ABC):
    """Search capability. Implementations never raise."""

    @abstractmethod
    def search(self, query: str, max_results: int = 5) -> list[SearchResult]:
        pass


class DuckDuckGoSearchClient(BaseSearchClient):
    """
    Web search via the DuckDuckGo Instant Answer API.

    Falls back to an optional JSON search endpoint when DuckDuckGo returns
    nothing or fails, and finally to a single placeholder result so the
    caller always receives something to synthesize from.
    """

    DEFAULT_API_URL = "https://api.duckduckgo.com/"

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        fallback_url: Optional[str] = None,
        timeout: int = 10
    ):
        """
        Initialize search client.

        Args:
            api_url: DuckDuckGo Instant Answer endpoint
            fallback_url: Optional search endpoint accepting ?q=&limit= and returning {"results": [...]}
            timeout: Request timeout in seconds (default: 10)
        """
        self.api_url = api_url
        self.fallback_url = fallback_url.rstrip('/') if fallback_url else None
        self.timeout = timeout

    def _get_headers(self) -> dict:
        return {
            "Accept": "application/json",
            "User-Agent": "Atlas-Assistant/1.0"
        }

    def search(self, query: str, max_results: int = 5) -> list[SearchResult]:
        """
        Search the web.

        Args:
            query: Search query
            max_results: Maximum number of results

        Returns:
            Ranked results; a single placeholder result on total failure
        """
        try:
            response = requests.get(
                self.api_url,
                params={
                    "q": query,
                    "format": "json",
                    "no_html": 1,
                    "skip_disambig": 1,
                },
                headers=self._get_headers(),
                timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.warning(f"DuckDuckGo search failed for '{query}': {e}")
            return self._fallback_search(query, max_results)

        if not isinstance(data, dict):
            logger.warning(f"Unexpected DuckDuckGo response format: {type(data)}")
            return self._fallback_search(query, max_results)

        results = []

        if data.get("Abstract"):
            results.append(SearchResult(
                title=data.get("Heading") or "Search Result",
                url=data.get("AbstractURL") or "#",
                snippet=data["Abstract"],
                source=data.get("AbstractSource") or "DuckDuckGo",
                relevance_score=0.9
            ))

        related = data.get("RelatedTopics")
        if isinstance(related, list):
            for topic in related:
                if len(results) >= max_results:
                    break
                if not isinstance(topic, dict):
                    continue
                text = topic.get("Text")
                first_url = topic.get("FirstURL")
                if text and first_url:
                    results.append(SearchResult(
                        title=text.split(" - ")[0] or "Related Topic",
                        url=first_url,
                        snippet=text,
                        source="DuckDuckGo",
                        relevance_score=0.7
                    ))

        if not results:
            return self._fallback_search(query, max_results)

        return results[:max_results]

    def _fallback_search(self, query: str, max_results: int) -> list[SearchResult]:
        if self.fallback_url:
            try:
                response = requests.get(
                    f"{self.fallback_url}/search",
                    params={"q": query, "limit": max_results},
                    headers=self._get_headers(),
                    timeout=self.timeout
                )
                if response.status_code != 200:
                    raise requests.exceptions.HTTPError(
                        f"Search API returned status {response.status_code}"
                    )
                data = response.json()
                results = [self._parse_fallback_item(item) for item in data.get("results", [])]
                if results:
                    return results[:max_results]
            except (requests.exceptions.RequestException, ValueError, TypeError, AttributeError) as e:
                logger.warning(f"Fallback search failed for '{query}': {e}")

        return [self._placeholder_result(query)]

    def _parse_fallback_item(self, item: dict) -> SearchResult:
        url = item.get("url") or "#"
        score = item.get("score")
        return SearchResult(
            title=item.get("title") or "Search Result",
            url=url,
            snippet=item.get("description") or item.get("snippet") or "",
            source=urlparse(url).hostname or "web",
            relevance_score=min(max(float(score), 0.0), 1.0) if score is not None else 0.5
        )

    def _placeholder_result(self, query: str) -> SearchResult:
        return SearchResult(
            title=f"Search results for: {query}",
            url="#",
            snippet=(
                "I apologize, but I'm currently unable to perform web searches. "
                "This feature requires additional API configuration."
            ),
            source="System",
            relevance_score=0.1
        )

    def search_with_context(
        self,
        query: str,
        context: str,
        max_results: int = 5
    ) -> list[SearchResult]:
        """
        Search with conversational context and re-rank by context overlap.

        Args:
            query: Base search query
            context: Conversation context used to expand and rank
            max_results: Maximum number of results

        Returns:
            Results sorted by context relevance, highest first
        """
        results = self.search(f"{query} {context}".strip(), max_results)
        context_words = [w for w in context.lower().split() if len(w) > 3]

        ranked = []
        for result in results:
            text = f"{result.title} {result.snippet}".lower()
            score = result.relevance_score if result.relevance_score is not None else 0.5
            score += 0.1 * sum(1 for word in context_words if word in text)
            ranked.append(result.model_copy(update={"relevance_score": min(score, 1.0)}))

        return sorted(ranked, key=lambda r: r.relevance_score or 0.0, reverse=True)
