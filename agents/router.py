"""Router that selects the processing agent for a request."""

from schemas.context import AgentRequest, AgentType, RequestKind


class AgentRouter:
    """Routes requests to an agent by kind hint and content keywords."""

    def __init__(self):
        """Initialize router with selection rules, checked in priority order."""
        self.rules = [
            (AgentType.RESEARCH, RequestKind.RESEARCH, ["search", "find", "research"]),
            (AgentType.TASK, RequestKind.TASK, ["do", "execute", "run"]),
            (AgentType.REASONING, RequestKind.REASONING, ["analyze", "think", "reason"]),
        ]
        self.default = AgentType.REASONING

    def select(self, request: AgentRequest) -> AgentType:
        """
        Select the agent for a request.

        The first matching rule wins, so a request mentioning both "search"
        and "execute" goes to research.

        Args:
            request: Incoming request

        Returns:
            AgentType to run
        """
        content_lower = request.content.lower()

        for agent_type, kind, keywords in self.rules:
            if request.kind == kind:
                return agent_type
            if any(keyword in content_lower for keyword in keywords):
                return agent_type

        # Default to reasoning for general chat
        return self.default
