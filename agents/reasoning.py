"""Reasoning agent for general conversation and analysis."""

import json
import logging
from typing import Optional

from llm.base_client import BaseLLMClient, Message
from memory.models import ConversationMemory
from schemas.context import AgentRequest, AgentType
from schemas.responses import AgentResponse, ResponseMetadata
from .base import BaseAgent, format_recent_interactions

logger = logging.getLogger(__name__)


class ReasoningAgent(BaseAgent):
    """Answers directly from the LLM with conversation context."""

    agent_type = AgentType.REASONING

    PERSONA = """You are Atlas, an advanced AI assistant with sophisticated reasoning capabilities.

Your core characteristics:
- Highly intelligent and analytical
- Professional yet personable communication style
- Proactive in offering solutions and insights
- Capable of complex reasoning and problem-solving
- Always maintain context awareness"""

    GUIDELINES = """Your responses should be:
1. Thoughtful and well-reasoned
2. Contextually aware of previous interactions
3. Actionable when appropriate
4. Clear and concise
5. Professional but warm in tone"""

    def __init__(self, llm_client: BaseLLMClient, model: Optional[str] = None):
        """
        Initialize reasoning agent.

        Args:
            llm_client: LLM client for completions
            model: Optional model override
        """
        super().__init__(llm_client)
        self.model = model

    def process(
        self,
        request: AgentRequest,
        memory: Optional[ConversationMemory]
    ) -> AgentResponse:
        messages = [
            Message(role="system", content=self._build_system_prompt(memory)),
            Message(role="user", content=self._build_user_prompt(request))
        ]

        try:
            response = self.llm_client.chat(
                messages=messages,
                temperature=0.7,
                max_tokens=2000,
                model=self.model
            )
        except Exception as e:
            return self._failure_response(e)

        return AgentResponse(
            succeeded=True,
            content=response.content,
            agent_used=self.name,
            metadata=ResponseMetadata(
                model=response.model or self.model or self.llm_client.get_model_name(),
                tokens_used=response.tokens_used,
                reasoning="Applied logical analysis and contextual understanding"
            )
        )

    def _build_system_prompt(self, memory: Optional[ConversationMemory]) -> str:
        parts = [self.PERSONA]
        if memory and memory.summary:
            parts.append(f"Conversation summary:\n{memory.summary}")
        parts.append(f"Previous conversation context:\n{format_recent_interactions(memory)}")
        parts.append(self.GUIDELINES)
        return "\n\n".join(parts)

    def _build_user_prompt(self, request: AgentRequest) -> str:
        request_metadata = request.metadata.model_dump(exclude_none=True) if request.metadata else {}
        return f"""User Request: {request.content}

Context Information:
- Priority: {request.priority.value}
- Request Type: {request.kind.value}
- Additional Metadata: {json.dumps(request_metadata, indent=2, default=str)}

Please provide a thoughtful, well-reasoned response that addresses the user's request comprehensively."""
