"""Tests for request and response schemas."""

import pytest
from pydantic import ValidationError

from errors import RequestValidationError
from schemas.context import (
    AgentRequest,
    ConversationContext,
    ConversationMetadata,
    Priority,
    RequestKind,
)
from schemas.responses import AgentResponse


def payload(**overrides):
    data = {
        "content": "Find recent papers on transformer efficiency",
        "context": {"user_id": "u", "conversation_id": "c-1", "session_id": "s"},
    }
    data.update(overrides)
    return data


class TestAgentRequest:
    """Test request validation."""

    def test_defaults(self):
        request = AgentRequest.from_payload(payload())

        assert request.kind == RequestKind.CHAT
        assert request.priority == Priority.MEDIUM
        assert request.metadata is None
        assert request.conversation_id == "c-1"

    def test_string_enums_are_coerced(self):
        request = AgentRequest.from_payload(payload(kind="research", priority="urgent"))

        assert request.kind == RequestKind.RESEARCH
        assert request.priority == Priority.URGENT

    def test_missing_context_raises(self):
        data = payload()
        del data["context"]

        with pytest.raises(RequestValidationError, match="context"):
            AgentRequest.from_payload(data)

    def test_blank_content_raises(self):
        with pytest.raises(RequestValidationError, match="content"):
            AgentRequest.from_payload(payload(content="   "))

    def test_blank_conversation_id_raises(self):
        context = {"user_id": "u", "conversation_id": "", "session_id": "s"}

        with pytest.raises(RequestValidationError, match="conversation_id"):
            AgentRequest.from_payload(payload(context=context))

    def test_unknown_kind_raises(self):
        with pytest.raises(RequestValidationError):
            AgentRequest.from_payload(payload(kind="gossip"))


class TestConversationContext:
    """Test context immutability."""

    def test_identifiers_are_frozen(self):
        context = ConversationContext(user_id="u", conversation_id="c", session_id="s")

        with pytest.raises(ValidationError):
            context.conversation_id = "other"

    def test_with_metadata_keeps_identifiers(self):
        context = ConversationContext(user_id="u", conversation_id="c", session_id="s")

        updated = context.with_metadata(ConversationMetadata(title="Plans"))

        assert updated.conversation_id == "c"
        assert updated.metadata.title == "Plans"
        assert context.metadata.title is None


class TestAgentResponse:
    """Test follow-up normalization."""

    def test_follow_ups_deduplicated_and_capped(self):
        response = AgentResponse(
            succeeded=True,
            content="ok",
            agent_used="task",
            follow_up_actions=[" a ", "a", "b", "", "c", "d"],
        )

        assert response.follow_up_actions == ["a", "b", "c"]

    def test_empty_follow_ups_become_none(self):
        response = AgentResponse(succeeded=True, content="ok", agent_used="task", follow_up_actions=[])

        assert response.follow_up_actions is None

    def test_execution_time_defaults_to_zero(self):
        response = AgentResponse(succeeded=False, content="sorry", agent_used="reasoning")

        assert response.execution_time_ms == 0
