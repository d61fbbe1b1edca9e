"""Pydantic schemas for the assistant."""

from .context import (
    AgentType,
    RequestKind,
    Priority,
    ConversationMetadata,
    ConversationContext,
    RequestMetadata,
    AgentRequest,
)
from .responses import AgentResponse, ResponseMetadata

__all__ = [
    "AgentType",
    "RequestKind",
    "Priority",
    "ConversationMetadata",
    "ConversationContext",
    "RequestMetadata",
    "AgentRequest",
    "AgentResponse",
    "ResponseMetadata",
]
