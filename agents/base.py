"""Shared behaviour for processing agents."""

import json
import logging
from abc import ABC, abstractmethod
from typing import Optional

from llm.base_client import BaseLLMClient
from memory.models import ConversationMemory
from schemas.context import AgentRequest, AgentType
from schemas.responses import AgentResponse, ResponseMetadata

logger = logging.getLogger(__name__)

NO_CONTEXT = "No previous context"


def format_recent_interactions(memory: Optional[ConversationMemory]) -> str:
    """Serialize recent interactions for inclusion in a prompt."""
    if not memory or not memory.recent_interactions:
        return NO_CONTEXT
    return json.dumps(
        [entry.model_dump(mode="json", exclude_none=True) for entry in memory.recent_interactions],
        indent=2
    )


class BaseAgent(ABC):
    """A processing strategy selected per request."""

    agent_type: AgentType
    failure_message = "I encountered an error while processing your request. Please try again."

    def __init__(self, llm_client: BaseLLMClient):
        """
        Initialize agent.

        Args:
            llm_client: LLM client for completions
        """
        self.llm_client = llm_client

    @property
    def name(self) -> str:
        return self.agent_type.value

    @abstractmethod
    def process(
        self,
        request: AgentRequest,
        memory: Optional[ConversationMemory]
    ) -> AgentResponse:
        """
        Handle one request.

        Never raises: collaborator failures produce a response with
        succeeded=False.
        """
        pass

    def _failure_response(self, error: Exception) -> AgentResponse:
        logger.error(f"{self.name} agent error: {error}")
        return AgentResponse(
            succeeded=False,
            content=self.failure_message,
            agent_used=self.name,
            execution_time_ms=0,
            metadata=ResponseMetadata(error=str(error) or type(error).__name__)
        )
