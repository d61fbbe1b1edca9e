"""Memory data models."""

import uuid
from datetime import datetime
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, ConfigDict, Field

from schemas.context import utc_now
from schemas.responses import ResponseMetadata

DEFAULT_USER_ID = "unknown"


class TurnRecord(BaseModel):
    """A turn to be appended to conversation memory."""
    user_input: str
    agent_response: str
    agent_used: str
    timestamp: datetime = Field(default_factory=utc_now)
    metadata: Optional[ResponseMetadata] = None


class MemoryEntry(BaseModel):
    """A recorded turn. Never updated in place."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    conversation_id: str
    user_input: str
    agent_response: str
    agent_used: str
    timestamp: datetime
    metadata: Optional[ResponseMetadata] = None

    @classmethod
    def from_turn(cls, conversation_id: str, turn: TurnRecord) -> "MemoryEntry":
        """Create an entry with a fresh id from a turn record."""
        return cls(
            conversation_id=conversation_id,
            user_input=turn.user_input,
            agent_response=turn.agent_response,
            agent_used=turn.agent_used,
            timestamp=turn.timestamp,
            metadata=turn.metadata,
        )


class ConversationMemory(BaseModel):
    """Per-conversation memory aggregate."""
    conversation_id: str
    user_id: str = DEFAULT_USER_ID
    recent_interactions: List[MemoryEntry] = Field(default_factory=list)
    summary: str = ""  # Derived; only the memory store writes it
    context: Dict[str, Any] = Field(default_factory=dict)
    last_updated: datetime = Field(default_factory=utc_now)
