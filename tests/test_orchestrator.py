"""Tests for the orchestrator dispatch flow."""

import threading
import time

from agents.base import BaseAgent
from config.settings import Settings
from memory.memory_store import HybridMemoryStore
from orchestrator import AgentOrchestrator, ConversationLocks
from schemas.context import (
    AgentRequest,
    AgentType,
    ConversationContext,
    RequestKind,
)
from schemas.responses import AgentResponse, ResponseMetadata
from fakes import (
    FakeLLMClient,
    FakeSearchClient,
    InMemoryStore,
    make_cache,
    provider_failure,
)


def make_request(
    content: str,
    conversation_id: str = "conv-1",
    kind: RequestKind = RequestKind.CHAT
) -> AgentRequest:
    return AgentRequest(
        kind=kind,
        content=content,
        context=ConversationContext(user_id="user-1", conversation_id=conversation_id, session_id="s"),
    )


class RecordingAgent(BaseAgent):
    """Agent that records how many requests per conversation overlap."""

    agent_type = AgentType.REASONING

    def __init__(self, delay: float = 0.05, barrier: threading.Barrier = None):
        super().__init__(FakeLLMClient())
        self.delay = delay
        self.barrier = barrier
        self.in_flight = {}
        self.max_in_flight = {}
        self.seen_interaction_counts = []
        self._lock = threading.Lock()

    def process(self, request, memory):
        conversation_id = request.conversation_id
        with self._lock:
            self.in_flight[conversation_id] = self.in_flight.get(conversation_id, 0) + 1
            self.max_in_flight[conversation_id] = max(
                self.max_in_flight.get(conversation_id, 0), self.in_flight[conversation_id]
            )
            self.seen_interaction_counts.append(len(memory.recent_interactions) if memory else 0)

        if self.barrier is not None:
            self.barrier.wait()
        time.sleep(self.delay)

        with self._lock:
            self.in_flight[conversation_id] -= 1

        return AgentResponse(succeeded=True, content=f"echo {request.content}", agent_used=self.name)


def all_types(agent: BaseAgent):
    return {agent_type: agent for agent_type in AgentType}


class TestAgentOrchestrator:
    """Test request handling end-to-end with fake capabilities."""

    def setup_method(self):
        """Set up test fixtures."""
        self.durable = InMemoryStore()
        self.memory_store = HybridMemoryStore(persistent_store=self.durable, cache=make_cache())
        self.search = FakeSearchClient()

    def make_orchestrator(self, llm=None, agents=None) -> AgentOrchestrator:
        return AgentOrchestrator(
            settings=Settings(),
            memory_store=self.memory_store,
            llm_client=llm or FakeLLMClient(),
            search_client=self.search,
            agents=agents
        )

    def test_research_request_on_empty_conversation(self):
        llm = FakeLLMClient([
            "transformer efficiency 2024\nefficient attention papers",
            "Here are the key papers. Consider reading the survey.",
        ])
        orchestrator = self.make_orchestrator(llm)

        response = orchestrator.handle(make_request(
            "Find recent papers on transformer efficiency",
            conversation_id="c-new",
            kind=RequestKind.RESEARCH
        ))

        assert response.succeeded is True
        assert response.agent_used == "research"
        assert response.metadata.search_queries
        assert response.metadata.sources_found == 4

        memory = self.memory_store.get("c-new")
        assert len(memory.recent_interactions) == 1
        entry = memory.recent_interactions[0]
        assert entry.agent_used == "research"
        assert entry.user_input == "Find recent papers on transformer efficiency"
        assert entry.agent_response == response.content
        assert memory.user_id == "user-1"

    def test_keyword_routing(self):
        llm = FakeLLMClient(['{"type": "technical", "complexity": "simple", "steps": ["Run"], "requirements": []}'])
        orchestrator = self.make_orchestrator(llm)

        response = orchestrator.handle(make_request("run the build"))

        assert response.agent_used == "task"
        assert response.metadata.task_type == "technical"

    def test_select_agent_has_no_side_effects(self):
        orchestrator = self.make_orchestrator()

        assert orchestrator.select_agent(make_request("search the web")) == AgentType.RESEARCH
        assert self.memory_store.get("conv-1") is None

    def test_agent_failure_is_recorded(self):
        llm = FakeLLMClient([provider_failure("quota")])
        orchestrator = self.make_orchestrator(llm)

        response = orchestrator.handle(make_request("Hello there"))

        assert response.succeeded is False
        assert response.agent_used == "reasoning"

        memory = self.memory_store.get("conv-1")
        assert len(memory.recent_interactions) == 1
        assert memory.recent_interactions[0].agent_response == response.content
        assert memory.recent_interactions[0].metadata.error == "quota"

    def test_durable_failure_returns_orchestrator_apology(self):
        self.durable.fail_writes = True
        orchestrator = self.make_orchestrator()

        response = orchestrator.handle(make_request("Hello there"))

        assert response.succeeded is False
        assert response.agent_used == "orchestrator"
        assert response.execution_time_ms == 0
        assert response.content == AgentOrchestrator.ERROR_MESSAGE
        assert response.metadata.error == "disk full"

    def test_turn_rejected_by_durable_store_is_not_recorded(self):
        orchestrator = self.make_orchestrator(FakeLLMClient(default="answer"))
        orchestrator.handle(make_request("hello"))

        self.durable.fail_writes = True
        failed = orchestrator.handle(make_request("lost turn"))
        self.durable.fail_writes = False
        orchestrator.handle(make_request("next"))

        assert failed.agent_used == "orchestrator"
        history = orchestrator.get_conversation_history("conv-1")
        assert [turn["user_input"] for turn in history] == ["hello", "next"]
        durable = self.durable.read_one("conv-1")
        assert [e.user_input for e in durable.recent_interactions] == ["hello", "next"]

    def test_agent_exception_returns_orchestrator_apology(self):
        class ExplodingAgent(RecordingAgent):
            def process(self, request, memory):
                raise RuntimeError("boom")

        orchestrator = self.make_orchestrator(agents=all_types(ExplodingAgent()))

        response = orchestrator.handle(make_request("Hello"))

        assert response.agent_used == "orchestrator"
        assert response.metadata.error == "boom"
        assert self.memory_store.get("conv-1") is None

    def test_execution_time_is_stamped(self):
        agent = RecordingAgent(delay=0.02)
        orchestrator = self.make_orchestrator(agents=all_types(agent))

        response = orchestrator.handle(make_request("Hello"))

        assert response.succeeded is True
        assert response.execution_time_ms >= 20

    def test_turns_accumulate_across_requests(self):
        orchestrator = self.make_orchestrator(FakeLLMClient(default="answer"))

        for i in range(4):
            orchestrator.handle(make_request(f"question {i}"))

        history = orchestrator.get_conversation_history("conv-1")
        assert [turn["user_input"] for turn in history] == [f"question {i}" for i in range(4)]
        assert all(turn["agent_response"] == "answer" for turn in history)
        assert self.memory_store.get("conv-1").summary.startswith("Recent conversation topics:")

    def test_history_for_unknown_conversation(self):
        orchestrator = self.make_orchestrator()

        assert orchestrator.get_conversation_history("missing") is None

    def test_same_conversation_is_serialized(self):
        agent = RecordingAgent(delay=0.05)
        orchestrator = self.make_orchestrator(agents=all_types(agent))

        threads = [
            threading.Thread(target=orchestrator.handle, args=(make_request(f"msg {i}"),))
            for i in range(4)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert agent.max_in_flight["conv-1"] == 1
        # Each request saw every previously recorded turn
        assert sorted(agent.seen_interaction_counts) == [0, 1, 2, 3]
        assert len(self.memory_store.get("conv-1").recent_interactions) == 4

    def test_different_conversations_run_concurrently(self):
        # Both requests must be inside the agent at the same time to pass the barrier
        agent = RecordingAgent(delay=0, barrier=threading.Barrier(2, timeout=5))
        orchestrator = self.make_orchestrator(agents=all_types(agent))
        responses = {}

        def run(conversation_id):
            responses[conversation_id] = orchestrator.handle(make_request("hi", conversation_id))

        threads = [threading.Thread(target=run, args=(cid,)) for cid in ("a", "b")]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert responses["a"].succeeded is True
        assert responses["b"].succeeded is True

    def test_status_and_health(self):
        orchestrator = self.make_orchestrator()

        status = orchestrator.status()
        assert status["status"] == "active"
        assert set(status["agents"]) == {"reasoning", "research", "task"}
        assert status["active_conversations"] == 0
        assert orchestrator.health()["healthy"] is True


class TestConversationLocks:
    """Test per-conversation lock bookkeeping."""

    def test_lock_released_after_use(self):
        locks = ConversationLocks()

        with locks.hold("a"):
            assert locks.active_count() == 1

        assert locks.active_count() == 0

    def test_lock_released_on_error(self):
        locks = ConversationLocks()

        try:
            with locks.hold("a"):
                raise ValueError("fail")
        except ValueError:
            pass

        assert locks.active_count() == 0

    def test_independent_conversations(self):
        locks = ConversationLocks()

        with locks.hold("a"):
            with locks.hold("b"):
                assert locks.active_count() == 2
