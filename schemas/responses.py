"""Agent response schemas."""

from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator

MAX_FOLLOW_UP_ACTIONS = 3


class ResponseMetadata(BaseModel):
    """Diagnostics attached to an agent response."""
    model: Optional[str] = None
    tokens_used: Optional[int] = None
    reasoning: Optional[str] = None

    # Research agent
    search_queries: Optional[list[str]] = None
    sources_found: Optional[int] = None
    synthesis_model: Optional[str] = None

    # Task agent
    task_type: Optional[str] = None
    complexity: Optional[str] = None
    steps_executed: Optional[list[str]] = None

    # Fault description, never shown to the user
    error: Optional[str] = None

    extra: dict[str, Any] = Field(default_factory=dict)


class AgentResponse(BaseModel):
    """One turn of output."""
    succeeded: bool
    content: str
    agent_used: str
    execution_time_ms: int = 0
    metadata: Optional[ResponseMetadata] = None
    follow_up_actions: Optional[list[str]] = None

    @field_validator("follow_up_actions")
    @classmethod
    def _normalize_follow_ups(cls, value: Optional[list[str]]) -> Optional[list[str]]:
        if value is None:
            return None
        actions: list[str] = []
        for action in value:
            action = action.strip()
            if action and action not in actions:
                actions.append(action)
        return actions[:MAX_FOLLOW_UP_ACTIONS] or None
