"""Conversation lifecycle: create, inspect, update, delete and list conversations."""

import logging
import threading
import uuid
from typing import Dict, List, Optional, Tuple

from errors import ConversationNotFoundError
from schemas.context import ConversationContext, ConversationMetadata, utc_now
from schemas.responses import ResponseMetadata
from .memory_store import HybridMemoryStore
from .models import ConversationMemory, TurnRecord

logger = logging.getLogger(__name__)


class ConversationRegistry:
    """Thread-safe map of active conversation contexts keyed by conversation ID."""

    def __init__(self):
        self._contexts: Dict[str, ConversationContext] = {}
        self._lock = threading.Lock()

    def get(self, conversation_id: str) -> Optional[ConversationContext]:
        with self._lock:
            return self._contexts.get(conversation_id)

    def put(self, context: ConversationContext) -> None:
        with self._lock:
            self._contexts[context.conversation_id] = context

    def remove(self, conversation_id: str) -> None:
        with self._lock:
            self._contexts.pop(conversation_id, None)

    def for_user(self, user_id: str) -> List[ConversationContext]:
        with self._lock:
            return [c for c in self._contexts.values() if c.user_id == user_id]


class ConversationManager:
    """Manages conversation lifecycle on top of the memory store."""

    GREETING = "Hello! I'm Atlas, your AI assistant. How can I help you today?"

    def __init__(
        self,
        memory_store: HybridMemoryStore,
        registry: Optional[ConversationRegistry] = None
    ):
        """
        Initialize conversation manager.

        Args:
            memory_store: Memory store holding conversation history
            registry: Active conversation registry (a fresh one if omitted)
        """
        self.memory_store = memory_store
        self.registry = registry or ConversationRegistry()

    def create_conversation(
        self,
        user_id: str,
        metadata: Optional[ConversationMetadata] = None
    ) -> ConversationContext:
        """
        Start a new conversation and record the greeting turn.

        Args:
            user_id: Owner of the conversation
            metadata: Optional initial metadata

        Returns:
            Context of the new conversation
        """
        now = utc_now()
        metadata = (metadata or ConversationMetadata()).model_copy(
            update={"created_at": now, "last_activity": now}
        )
        context = ConversationContext(
            user_id=user_id,
            conversation_id=str(uuid.uuid4()),
            session_id=str(uuid.uuid4()),
            metadata=metadata,
        )
        self.registry.put(context)

        self.memory_store.append(
            context.conversation_id,
            TurnRecord(
                user_input="Conversation started",
                agent_response=self.GREETING,
                agent_used="system",
                timestamp=now,
                metadata=ResponseMetadata(extra={"type": "conversation_start"}),
            ),
            user_id=user_id,
        )

        logger.info(f"Created conversation {context.conversation_id} for user {user_id}")
        return context

    def get_conversation(
        self,
        conversation_id: str
    ) -> Tuple[Optional[ConversationContext], Optional[ConversationMemory]]:
        """Return the active context (if any) and stored memory (if any)."""
        return self.registry.get(conversation_id), self.memory_store.get(conversation_id)

    def update_conversation(
        self,
        conversation_id: str,
        metadata: ConversationMetadata
    ) -> ConversationContext:
        """
        Merge metadata into an active conversation.

        Raises:
            ConversationNotFoundError: If the conversation is not active
        """
        context = self.registry.get(conversation_id)
        if context is None:
            raise ConversationNotFoundError(conversation_id)

        current = context.metadata
        merged = ConversationMetadata(
            created_at=current.created_at,
            last_activity=utc_now(),
            title=metadata.title if metadata.title is not None else current.title,
            extra={**current.extra, **metadata.extra},
        )
        updated = context.with_metadata(merged)
        self.registry.put(updated)
        return updated

    def delete_conversation(self, conversation_id: str) -> None:
        """Forget a conversation and erase its memory."""
        self.registry.remove(conversation_id)
        self.memory_store.clear(conversation_id)
        logger.info(f"Deleted conversation {conversation_id}")

    def list_conversations(self, user_id: str) -> List[ConversationContext]:
        """
        List a user's conversations.

        Active contexts come first; conversations only present in the durable
        store (e.g. after a restart) are listed with a reconstructed context.
        """
        contexts = self.registry.for_user(user_id)
        known = {c.conversation_id for c in contexts}

        for memory in self.memory_store.list_conversations(user_id):
            if memory.conversation_id in known:
                continue
            contexts.append(ConversationContext(
                user_id=memory.user_id,
                conversation_id=memory.conversation_id,
                session_id=str(uuid.uuid4()),
                metadata=ConversationMetadata(last_activity=memory.last_updated),
            ))

        return contexts
