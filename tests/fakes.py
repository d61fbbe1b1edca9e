"""Test doubles for external capabilities."""

import threading
from typing import Callable, List, Optional, Union

from errors import PersistenceError, ProviderError
from llm.base_client import BaseLLMClient, LLMResponse, Message
from memory.cache import BaseCache, TTLCache
from memory.models import ConversationMemory
from memory.sqlite_store import BasePersistentStore
from retrieval.web_search import BaseSearchClient, SearchResult

Reply = Union[str, Exception]


class FakeLLMClient(BaseLLMClient):
    """Returns scripted replies in order; exceptions in the script are raised."""

    def __init__(self, replies: Optional[List[Reply]] = None, default: str = "ok"):
        self.replies = list(replies or [])
        self.default = default
        self.calls: List[List[Message]] = []
        self.models: List[Optional[str]] = []

    def chat(self, messages, temperature=0.7, max_tokens=4000, model=None) -> LLMResponse:
        self.calls.append(list(messages))
        self.models.append(model)
        reply = self.replies.pop(0) if self.replies else self.default
        if isinstance(reply, Exception):
            raise reply
        return LLMResponse(
            content=reply,
            model=model or "fake-model",
            usage={"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15},
            finish_reason="stop"
        )

    def get_provider_name(self) -> str:
        return "fake"

    def get_model_name(self) -> str:
        return "fake-model"


class FakeSearchClient(BaseSearchClient):
    """Returns one result per query and records the queries it saw."""

    def __init__(self, results_per_query: int = 2):
        self.results_per_query = results_per_query
        self.queries: List[str] = []
        self._lock = threading.Lock()

    def search(self, query: str, max_results: int = 5) -> List[SearchResult]:
        with self._lock:
            self.queries.append(query)
        return [
            SearchResult(
                title=f"{query} #{i}",
                url=f"https://example.com/{i}",
                snippet=f"Snippet {i} about {query}",
                source="example.com",
                relevance_score=0.8
            )
            for i in range(min(self.results_per_query, max_results))
        ]


class InMemoryStore(BasePersistentStore):
    """Durable store double that counts reads and can be told to fail writes."""

    def __init__(self):
        self.rows = {}
        self.reads = 0
        self.fail_writes = False
        self.fail_deletes = False
        self.on_upsert: Optional[Callable[[str], None]] = None

    def upsert(self, conversation_id: str, memory: ConversationMemory) -> None:
        if self.on_upsert:
            self.on_upsert(conversation_id)
        if self.fail_writes:
            raise PersistenceError("disk full")
        self.rows[conversation_id] = memory.model_dump_json()

    def read_one(self, conversation_id: str) -> Optional[ConversationMemory]:
        self.reads += 1
        raw = self.rows.get(conversation_id)
        return ConversationMemory.model_validate_json(raw) if raw else None

    def delete(self, conversation_id: str) -> None:
        if self.fail_deletes:
            raise PersistenceError("delete refused")
        self.rows.pop(conversation_id, None)

    def list_by_user(self, user_id: str, limit: int = 50) -> List[ConversationMemory]:
        memories = [ConversationMemory.model_validate_json(raw) for raw in self.rows.values()]
        memories = [m for m in memories if m.user_id == user_id]
        return sorted(memories, key=lambda m: m.last_updated, reverse=True)[:limit]


class BrokenCache(BaseCache):
    """Cache whose every operation fails."""

    def put(self, key, value, ttl_seconds):
        raise ConnectionError("cache down")

    def get(self, key):
        raise ConnectionError("cache down")

    def delete(self, key):
        raise ConnectionError("cache down")


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_cache(clock: Optional[FakeClock] = None) -> TTLCache:
    return TTLCache(max_size=100, clock=clock or FakeClock())


def provider_failure(message: str = "rate limited") -> ProviderError:
    return ProviderError(message, provider="fake")
