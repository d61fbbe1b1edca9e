"""Exception hierarchy for the assistant core."""


class AgentError(Exception):
    """Base class for all errors raised by the assistant core."""


class RequestValidationError(AgentError):
    """Request is missing required fields or is malformed."""


class ProviderError(AgentError):
    """LLM or search capability failed (transport, auth, or response format)."""

    def __init__(self, message: str, provider: str = "unknown"):
        super().__init__(message)
        self.provider = provider


class PersistenceError(AgentError):
    """Durable store operation failed."""


class ParseError(AgentError):
    """Structured LLM output could not be parsed."""


class ConversationNotFoundError(AgentError):
    """Conversation is not known to the lifecycle manager."""

    def __init__(self, conversation_id: str):
        super().__init__(f"Conversation not found: {conversation_id}")
        self.conversation_id = conversation_id
