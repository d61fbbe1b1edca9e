"""Hybrid conversation memory: fast-path cache in front of a durable store."""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from errors import PersistenceError
from schemas.context import utc_now
from .cache import BaseCache
from .models import ConversationMemory, MemoryEntry, TurnRecord, DEFAULT_USER_ID
from .sqlite_store import BasePersistentStore
from .summarizer import Summarizer, TopicSummarizer

logger = logging.getLogger(__name__)


class HybridMemoryStore:
    """
    Cache-aside persistence of per-conversation memory.

    The durable store is the source of truth. The cache only accelerates
    reads: a miss re-reads the durable row and repopulates the cache, so any
    divergence heals on the next read. Cache failures are never fatal;
    durable failures raise PersistenceError.
    """

    CACHE_KEY_PREFIX = "conversation:"

    def __init__(
        self,
        persistent_store: BasePersistentStore,
        cache: BaseCache,
        summarizer: Optional[Summarizer] = None,
        cache_ttl_seconds: int = 3600,
        max_interactions: int = 10,
        summarize_threshold: int = 3
    ):
        """
        Initialize memory store.

        Args:
            persistent_store: Durable keyed store
            cache: Fast-path cache
            summarizer: Summary generator (default: TopicSummarizer)
            cache_ttl_seconds: Expiry for cache entries
            max_interactions: Number of recent interactions kept per conversation
            summarize_threshold: Minimum retained interactions before a summary is computed
        """
        self.persistent_store = persistent_store
        self.cache = cache
        self.summarizer = summarizer or TopicSummarizer()
        self.cache_ttl_seconds = cache_ttl_seconds
        self.max_interactions = max_interactions
        self.summarize_threshold = summarize_threshold

    def _cache_key(self, conversation_id: str) -> str:
        return f"{self.CACHE_KEY_PREFIX}{conversation_id}"

    def get(self, conversation_id: str) -> Optional[ConversationMemory]:
        """
        Get memory for a conversation.

        Args:
            conversation_id: Conversation ID

        Returns:
            ConversationMemory, or None if neither layer has the conversation

        Raises:
            PersistenceError: If the durable read fails
        """
        cached = self._cache_get(conversation_id)
        if cached is not None:
            return cached

        try:
            memory = self.persistent_store.read_one(conversation_id)
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"read failed for {conversation_id}: {e}") from e

        if memory is None:
            return None

        logger.debug(f"Cache miss for {conversation_id}, repopulating from durable store")
        self._cache_put(conversation_id, memory)
        return memory

    def append(
        self,
        conversation_id: str,
        turn: TurnRecord,
        user_id: Optional[str] = None
    ) -> MemoryEntry:
        """
        Record a turn in conversation memory.

        Creates the conversation on first write. Keeps only the most recent
        interactions, recomputes the summary once enough are retained, and
        writes cache and durable store concurrently.

        Args:
            conversation_id: Conversation ID
            turn: Turn to record
            user_id: Owner used when the conversation is created

        Returns:
            The recorded MemoryEntry

        Raises:
            PersistenceError: If the durable read or write fails. A failed write
                also drops the cached copy, so the next read sees the durable row.
        """
        memory = self.get(conversation_id) or ConversationMemory(
            conversation_id=conversation_id,
            user_id=user_id or DEFAULT_USER_ID,
        )

        entry = MemoryEntry.from_turn(conversation_id, turn)
        interactions = (memory.recent_interactions + [entry])[-self.max_interactions:]

        summary = memory.summary
        if len(interactions) >= self.summarize_threshold:
            summary = self.summarizer.summarize(interactions)

        updated = memory.model_copy(update={
            "recent_interactions": interactions,
            "summary": summary,
            "last_updated": max(utc_now(), memory.last_updated),
        })

        with ThreadPoolExecutor(max_workers=2) as executor:
            cache_future = executor.submit(self._cache_put, conversation_id, updated)
            durable_future = executor.submit(self.persistent_store.upsert, conversation_id, updated)

            cache_future.result()
            try:
                durable_future.result()
            except Exception as e:
                # The cache must not keep a turn the durable store rejected
                self._cache_delete(conversation_id)
                if isinstance(e, PersistenceError):
                    raise
                raise PersistenceError(f"write failed for {conversation_id}: {e}") from e

        logger.debug(
            f"Appended {entry.agent_used} turn to {conversation_id} "
            f"({len(interactions)} retained)"
        )
        return entry

    def clear(self, conversation_id: str) -> None:
        """
        Remove a conversation from cache and durable store.

        Clearing an unknown conversation is not an error.

        Raises:
            PersistenceError: If the durable delete fails
        """
        with ThreadPoolExecutor(max_workers=2) as executor:
            cache_future = executor.submit(self._cache_delete, conversation_id)
            durable_future = executor.submit(self.persistent_store.delete, conversation_id)

            cache_future.result()
            try:
                durable_future.result()
            except PersistenceError:
                raise
            except Exception as e:
                raise PersistenceError(f"delete failed for {conversation_id}: {e}") from e

        logger.info(f"Cleared memory for conversation {conversation_id}")

    def list_conversations(self, user_id: str, limit: int = 50) -> List[ConversationMemory]:
        """List durable memories for a user, most recently updated first."""
        try:
            return self.persistent_store.list_by_user(user_id, limit=limit)
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"list failed for user {user_id}: {e}") from e

    def _cache_get(self, conversation_id: str) -> Optional[ConversationMemory]:
        key = self._cache_key(conversation_id)
        try:
            raw = self.cache.get(key)
            if raw is None:
                return None
            return ConversationMemory.model_validate_json(raw)
        except Exception as e:
            logger.warning(f"Cache read failed for {conversation_id}, using durable store: {e}")
            return None

    def _cache_put(self, conversation_id: str, memory: ConversationMemory) -> None:
        try:
            self.cache.put(
                self._cache_key(conversation_id),
                memory.model_dump_json(),
                self.cache_ttl_seconds
            )
        except Exception as e:
            logger.warning(f"Cache write failed for {conversation_id}: {e}")

    def _cache_delete(self, conversation_id: str) -> None:
        try:
            self.cache.delete(self._cache_key(conversation_id))
        except Exception as e:
            logger.warning(f"Cache delete failed for {conversation_id}: {e}")
