"""Processing agents for the assistant."""

from .base import BaseAgent
from .router import AgentRouter
from .reasoning import ReasoningAgent
from .research import ResearchAgent
from .task import TaskAgent, TaskAnalysis

__all__ = [
    "BaseAgent",
    "AgentRouter",
    "ReasoningAgent",
    "ResearchAgent",
    "TaskAgent",
    "TaskAnalysis",
]
