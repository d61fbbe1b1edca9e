"""Main orchestrator: routes requests to agents and records them in conversation memory."""

import logging
import threading
import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from config.settings import Settings
from schemas.context import AgentRequest, AgentType, utc_now
from schemas.responses import AgentResponse, ResponseMetadata

# LLM and search capabilities
from llm.factory import create_llm_client
from llm.base_client import BaseLLMClient
from retrieval.web_search import BaseSearchClient, DuckDuckGoSearchClient

# Memory components
from memory.cache import TTLCache
from memory.memory_store import HybridMemoryStore
from memory.models import TurnRecord
from memory.sqlite_store import SQLiteConversationStore
from memory.summarizer import LLMSummarizer, Summarizer, TopicSummarizer

# Agents
from agents.base import BaseAgent
from agents.router import AgentRouter
from agents.reasoning import ReasoningAgent
from agents.research import ResearchAgent
from agents.task import TaskAgent

logger = logging.getLogger(__name__)


class ConversationLocks:
    """
    One mutex per conversation ID.

    Requests for the same conversation run one at a time; requests for
    different conversations never wait on each other. Locks are dropped once
    nobody holds or waits for them.
    """

    def __init__(self):
        self._locks: Dict[str, threading.Lock] = {}
        self._waiters: Dict[str, int] = {}
        self._guard = threading.Lock()

    @contextmanager
    def hold(self, conversation_id: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(conversation_id, threading.Lock())
            self._waiters[conversation_id] = self._waiters.get(conversation_id, 0) + 1

        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                self._waiters[conversation_id] -= 1
                if self._waiters[conversation_id] == 0:
                    del self._waiters[conversation_id]
                    del self._locks[conversation_id]

    def active_count(self) -> int:
        """Number of conversations with a request in flight or waiting."""
        with self._guard:
            return len(self._locks)


class AgentOrchestrator:
    """Dispatches requests to agents against per-conversation memory."""

    NAME = "orchestrator"
    ERROR_MESSAGE = "I encountered an error processing your request. Please try again."

    def __init__(
        self,
        settings: Optional[Settings] = None,
        memory_store: Optional[HybridMemoryStore] = None,
        llm_client: Optional[BaseLLMClient] = None,
        search_client: Optional[BaseSearchClient] = None,
        agents: Optional[Dict[AgentType, BaseAgent]] = None
    ):
        """
        Initialize orchestrator.

        Collaborators not supplied are built from settings.

        Args:
            settings: Application settings
            memory_store: Conversation memory store
            llm_client: LLM client shared by agents
            search_client: Web search client for the research agent
            agents: Agent per type (overrides the default agent set)
        """
        self.settings = settings or Settings()

        self.llm_client = llm_client or self._init_llm_client()
        self.search_client = search_client or DuckDuckGoSearchClient(
            api_url=self.settings.search_api_url,
            fallback_url=self.settings.search_fallback_url,
            timeout=self.settings.search_timeout
        )
        self.memory_store = memory_store or self._init_memory()

        self.router = AgentRouter()
        self.agents = agents or self._init_agents()
        self.locks = ConversationLocks()

    def _init_llm_client(self) -> BaseLLMClient:
        """Initialize LLM client based on settings."""
        provider = self.settings.get_llm_provider()
        if not self.settings.get_llm_api_key():
            logger.warning(
                f"No API key for {provider.value}. "
                "Agents will report failures until one is configured."
            )

        client = create_llm_client(
            provider=provider,
            api_key=self.settings.get_llm_api_key(),
            model=self.settings.llm_model,
            timeout=self.settings.llm_timeout
        )
        logger.info(f"LLM client: {provider.value} ({client.get_model_name()})")
        return client

    def _init_memory(self) -> HybridMemoryStore:
        """Initialize memory system."""
        summarizer: Summarizer
        if self.settings.llm_summarizer_enabled:
            summarizer = LLMSummarizer(self.llm_client, window=self.settings.summary_window)
        else:
            summarizer = TopicSummarizer(
                window=self.settings.summary_window,
                max_chars=self.settings.summary_max_chars
            )

        memory_store = HybridMemoryStore(
            persistent_store=SQLiteConversationStore(db_path=self.settings.db_path),
            cache=TTLCache(max_size=self.settings.cache_max_size),
            summarizer=summarizer,
            cache_ttl_seconds=self.settings.cache_ttl_seconds,
            max_interactions=self.settings.max_recent_interactions,
            summarize_threshold=self.settings.summarize_threshold
        )
        logger.info(f"Memory initialized: {self.settings.db_path}")
        return memory_store

    def _init_agents(self) -> Dict[AgentType, BaseAgent]:
        """Initialize the default agent set."""
        return {
            AgentType.REASONING: ReasoningAgent(self.llm_client),
            AgentType.RESEARCH: ResearchAgent(
                self.llm_client,
                self.search_client,
                query_model=self.settings.query_model,
                synthesis_model=self.settings.synthesis_model,
                max_queries=self.settings.max_search_queries,
                max_results=self.settings.search_max_results
            ),
            AgentType.TASK: TaskAgent(self.llm_client),
        }

    def select_agent(self, request: AgentRequest) -> AgentType:
        """Select the agent for a request (no side effects)."""
        return self.router.select(request)

    def handle(self, request: AgentRequest) -> AgentResponse:
        """
        Process a request end-to-end.

        Loads conversation memory, runs the selected agent, records the turn
        (also when the agent failed) and stamps the execution time. Requests
        for the same conversation are serialized. Never raises.

        Args:
            request: Validated agent request

        Returns:
            AgentResponse; on internal failure an apology from the orchestrator
        """
        start_time = time.perf_counter()
        conversation_id = request.context.conversation_id

        try:
            with self.locks.hold(conversation_id):
                memory = self.memory_store.get(conversation_id)

                agent_type = self.select_agent(request)
                logger.info(f"Routing conversation {conversation_id} to {agent_type.value} agent")

                response = self.agents[agent_type].process(request, memory)

                self.memory_store.append(
                    conversation_id,
                    TurnRecord(
                        user_input=request.content,
                        agent_response=response.content,
                        agent_used=response.agent_used,
                        timestamp=utc_now(),
                        metadata=response.metadata
                    ),
                    user_id=request.context.user_id
                )
        except Exception as e:
            logger.error(f"Orchestrator processing error for {conversation_id}: {e}", exc_info=True)
            return AgentResponse(
                succeeded=False,
                content=self.ERROR_MESSAGE,
                agent_used=self.NAME,
                execution_time_ms=0,
                metadata=ResponseMetadata(error=str(e) or type(e).__name__)
            )

        elapsed_ms = int((time.perf_counter() - start_time) * 1000)
        return response.model_copy(update={"execution_time_ms": elapsed_ms})

    def get_conversation_history(self, conversation_id: str) -> Optional[List[Dict[str, Any]]]:
        """Get conversation history for display."""
        memory = self.memory_store.get(conversation_id)
        if not memory:
            return None

        return [
            {
                "user_input": entry.user_input,
                "agent_response": entry.agent_response,
                "agent_used": entry.agent_used,
                "timestamp": entry.timestamp.isoformat(),
            }
            for entry in memory.recent_interactions
        ]

    def status(self) -> Dict[str, Any]:
        """Report which agents are available."""
        return {
            "status": "active",
            "timestamp": utc_now().isoformat(),
            "agents": {agent_type.value: "active" for agent_type in self.agents},
            "active_conversations": self.locks.active_count(),
        }

    def health(self) -> Dict[str, Any]:
        return {
            "healthy": True,
            "timestamp": utc_now().isoformat(),
        }
