"""Task agent: plan a task with the LLM, then execute the plan."""

import json
import logging
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError

from errors import ParseError
from llm.base_client import BaseLLMClient, Message
from memory.models import ConversationMemory
from schemas.context import AgentRequest, AgentType
from schemas.responses import AgentResponse, ResponseMetadata
from .base import BaseAgent, format_recent_interactions
from .followups import pattern_follow_ups

logger = logging.getLogger(__name__)


class TaskAnalysis(BaseModel):
    """Structured breakdown of a task."""
    type: str
    complexity: Literal["simple", "medium", "complex"]
    steps: List[str] = Field(default_factory=list)
    requirements: List[str] = Field(default_factory=list)

    @classmethod
    def default(cls) -> "TaskAnalysis":
        return cls(
            type="general",
            complexity="medium",
            steps=["Analyze request", "Process information", "Provide response"],
            requirements=[]
        )


class TaskAgent(BaseAgent):
    """Breaks a request into a plan and executes it."""

    agent_type = AgentType.TASK
    failure_message = "I encountered an error while executing your task. Please try again."

    ANALYSIS_PROMPT = """Analyze the given task and provide a structured breakdown:
1. Task type (e.g., 'information_processing', 'calculation', 'planning', 'creative', 'technical')
2. Complexity level (simple/medium/complex)
3. Required steps to complete the task
4. Any special requirements or constraints

Respond with valid JSON only, using keys: type, complexity, steps, requirements"""

    EXECUTION_PROMPT = """You are a task execution specialist. Your job is to:
1. Execute tasks step by step based on the provided analysis
2. Provide detailed, actionable results
3. Suggest follow-up actions when appropriate
4. Maintain high accuracy and attention to detail

Task Analysis:
{analysis}

Previous Context:
{context}"""

    def __init__(self, llm_client: BaseLLMClient, model: Optional[str] = None):
        """
        Initialize task agent.

        Args:
            llm_client: LLM client for analysis and execution
            model: Optional model override
        """
        super().__init__(llm_client)
        self.model = model

    def process(
        self,
        request: AgentRequest,
        memory: Optional[ConversationMemory]
    ) -> AgentResponse:
        try:
            analysis = self._analyze_task(request.content)
            response = self.llm_client.chat(
                messages=self._build_execution_messages(analysis, request, memory),
                temperature=0.5,
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
                task_type=analysis.type,
                complexity=analysis.complexity,
                steps_executed=analysis.steps,
                tokens_used=response.tokens_used
            ),
            follow_up_actions=pattern_follow_ups(response.content) or None
        )

    def _analyze_task(self, content: str) -> TaskAnalysis:
        """Classify the task; unparseable output falls back to a generic plan."""
        response = self.llm_client.chat(
            messages=[
                Message(role="system", content=self.ANALYSIS_PROMPT),
                Message(role="user", content=content)
            ],
            temperature=0.3,  # Low temperature for consistent structure
            max_tokens=500,
            model=self.model
        )

        try:
            return self._parse_analysis(response.content)
        except ParseError as e:
            logger.warning(f"Task analysis unparseable, using default plan: {e}")
            return TaskAnalysis.default()

    def _parse_analysis(self, raw: str) -> TaskAnalysis:
        content = raw.strip()

        # Handle potential markdown code blocks
        if content.startswith("```"):
            content = content.split("```")[1]
            if content.startswith("json"):
                content = content[4:]
            content = content.strip()

        try:
            return TaskAnalysis.model_validate(json.loads(content))
        except (json.JSONDecodeError, ValidationError) as e:
            raise ParseError(f"Invalid task analysis: {e}") from e

    def _build_execution_messages(
        self,
        analysis: TaskAnalysis,
        request: AgentRequest,
        memory: Optional[ConversationMemory]
    ) -> List[Message]:
        system_prompt = self.EXECUTION_PROMPT.format(
            analysis=analysis.model_dump_json(indent=2),
            context=format_recent_interactions(memory)
        )
        user_prompt = f"""Task to Execute: {request.content}

Please execute this task following the analyzed steps. Provide a comprehensive result and note any follow-up actions that might be beneficial."""

        return [
            Message(role="system", content=system_prompt),
            Message(role="user", content=user_prompt)
        ]
