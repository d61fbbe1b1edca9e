"""Memory system for conversation persistence."""

from .models import ConversationMemory, MemoryEntry, TurnRecord
from .cache import BaseCache, TTLCache
from .sqlite_store import BasePersistentStore, SQLiteConversationStore
from .summarizer import Summarizer, TopicSummarizer, LLMSummarizer
from .memory_store import HybridMemoryStore
from .conversation_manager import ConversationManager, ConversationRegistry

__all__ = [
    "ConversationMemory",
    "MemoryEntry",
    "TurnRecord",
    "BaseCache",
    "TTLCache",
    "BasePersistentStore",
    "SQLiteConversationStore",
    "Summarizer",
    "TopicSummarizer",
    "LLMSummarizer",
    "HybridMemoryStore",
    "ConversationManager",
    "ConversationRegistry",
]
