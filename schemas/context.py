"""Conversation context and request schemas."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from errors import RequestValidationError


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class AgentType(str, Enum):
    """Processing strategy that handles a request."""
    REASONING = "reasoning"
    RESEARCH = "research"
    TASK = "task"


class RequestKind(str, Enum):
    """Routing hint supplied by the caller (not authoritative)."""
    CHAT = "chat"
    TASK = "task"
    RESEARCH = "research"
    REASONING = "reasoning"


class Priority(str, Enum):
    """Request priority. Informational only."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class ConversationMetadata(BaseModel):
    """Metadata accumulated on a conversation."""
    created_at: Optional[datetime] = None
    last_activity: Optional[datetime] = None
    title: Optional[str] = None
    extra: dict[str, Any] = Field(default_factory=dict, description="Opaque pass-through values")


class ConversationContext(BaseModel):
    """Identifies a conversation. Identifiers never change after creation."""
    model_config = ConfigDict(frozen=True)

    user_id: str
    conversation_id: str
    session_id: str
    metadata: ConversationMetadata = Field(default_factory=ConversationMetadata)

    @field_validator("conversation_id")
    @classmethod
    def _conversation_id_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("conversation_id must not be blank")
        return value

    def with_metadata(self, metadata: ConversationMetadata) -> "ConversationContext":
        """Return a copy carrying new metadata and the same identifiers."""
        return self.model_copy(update={"metadata": metadata})


class RequestMetadata(BaseModel):
    """Caller-supplied metadata for a single request."""
    source: Optional[str] = None
    extra: dict[str, Any] = Field(default_factory=dict)


class AgentRequest(BaseModel):
    """One turn of input."""
    kind: RequestKind = RequestKind.CHAT
    content: str
    context: ConversationContext
    priority: Priority = Priority.MEDIUM
    metadata: Optional[RequestMetadata] = None

    @field_validator("content")
    @classmethod
    def _content_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("content must not be blank")
        return value

    @property
    def conversation_id(self) -> str:
        return self.context.conversation_id

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "AgentRequest":
        """
        Build a request from an untrusted payload.

        Args:
            payload: Raw request fields

        Returns:
            Validated AgentRequest

        Raises:
            RequestValidationError: If required fields are missing or malformed
        """
        try:
            return cls.model_validate(payload)
        except ValidationError as e:
            fields = ", ".join(
                ".".join(str(part) for part in err["loc"]) for err in e.errors()
            )
            raise RequestValidationError(f"Invalid request fields: {fields}") from e
