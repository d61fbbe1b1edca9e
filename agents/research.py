"""Research agent: search the web and synthesize an answer."""

import json
import logging
import re
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from llm.base_client import BaseLLMClient, Message
from memory.models import ConversationMemory
from retrieval.web_search import BaseSearchClient, SearchResult
from schemas.context import AgentRequest, AgentType
from schemas.responses import AgentResponse, ResponseMetadata
from .base import BaseAgent, format_recent_interactions
from .followups import keyword_follow_ups

logger = logging.getLogger(__name__)


class ResearchAgent(BaseAgent):
    """
    Research agent.

    1. Extracts up to three search queries from the request with the LLM
    2. Runs the searches concurrently
    3. Synthesizes the results and recent memory into one answer
    4. Pulls suggested follow-up actions out of the synthesis
    """

    agent_type = AgentType.RESEARCH
    failure_message = "I encountered an error while researching your request. Please try again."

    QUERY_PROMPT = (
        "Extract 1-3 specific search queries from the user's request that would help "
        "gather relevant information. Return only the queries, one per line."
    )

    SYNTHESIS_PROMPT = """You are a research synthesis specialist. Your job is to:
1. Analyze search results and extract relevant information
2. Synthesize findings into a comprehensive, well-structured response
3. Cite sources appropriately
4. Suggest follow-up actions if relevant

Search Results:
{results}

Previous Context:
{context}"""

    # Leading list markers such as "1.", "2)", "-", "*"
    _LIST_MARKER = re.compile(r"^\s*(?:\d+[.)]|[-*•])\s+")

    def __init__(
        self,
        llm_client: BaseLLMClient,
        search_client: BaseSearchClient,
        query_model: Optional[str] = None,
        synthesis_model: Optional[str] = None,
        max_queries: int = 3,
        max_results: int = 5
    ):
        """
        Initialize research agent.

        Args:
            llm_client: LLM client for query extraction and synthesis
            search_client: Web search capability
            query_model: Optional model for query extraction
            synthesis_model: Optional model for synthesis
            max_queries: Maximum number of search queries per request
            max_results: Maximum results per search query
        """
        super().__init__(llm_client)
        self.search_client = search_client
        self.query_model = query_model
        self.synthesis_model = synthesis_model
        self.max_queries = max_queries
        self.max_results = max_results

    def process(
        self,
        request: AgentRequest,
        memory: Optional[ConversationMemory]
    ) -> AgentResponse:
        try:
            queries = self._extract_search_queries(request.content)
            results = self._run_searches(queries)
            response = self.llm_client.chat(
                messages=self._build_synthesis_messages(request.content, results, memory),
                temperature=0.7,
                max_tokens=2500,
                model=self.synthesis_model
            )
        except Exception as e:
            return self._failure_response(e)

        logger.info(f"Research: {len(queries)} queries, {len(results)} sources")

        return AgentResponse(
            succeeded=True,
            content=response.content,
            agent_used=self.name,
            metadata=ResponseMetadata(
                search_queries=queries,
                sources_found=len(results),
                synthesis_model=response.model or self.synthesis_model or self.llm_client.get_model_name(),
                tokens_used=response.tokens_used
            ),
            follow_up_actions=keyword_follow_ups(response.content) or None
        )

    def _extract_search_queries(self, content: str) -> List[str]:
        response = self.llm_client.chat(
            messages=[
                Message(role="system", content=self.QUERY_PROMPT),
                Message(role="user", content=content)
            ],
            temperature=0.3,
            max_tokens=200,
            model=self.query_model
        )

        queries = []
        for line in response.content.split("\n"):
            query = self._LIST_MARKER.sub("", line).strip().strip('"')
            if query:
                queries.append(query)

        if not queries:
            logger.warning("No search queries extracted, searching the request content")
            return [content.strip()]
        return queries[:self.max_queries]

    def _run_searches(self, queries: List[str]) -> List[SearchResult]:
        """Search all queries concurrently; results are flattened in query order."""
        with ThreadPoolExecutor(max_workers=len(queries)) as executor:
            per_query = list(executor.map(
                lambda query: self.search_client.search(query, self.max_results),
                queries
            ))
        return [result for results in per_query for result in results]

    def _build_synthesis_messages(
        self,
        original_request: str,
        results: List[SearchResult],
        memory: Optional[ConversationMemory]
    ) -> List[Message]:
        system_prompt = self.SYNTHESIS_PROMPT.format(
            results=json.dumps([r.model_dump(exclude_none=True) for r in results], indent=2),
            context=format_recent_interactions(memory)
        )
        user_prompt = f"""Original Request: {original_request}

Please synthesize the search results into a comprehensive response that directly addresses the user's request. Include relevant sources and suggest any follow-up actions that might be helpful."""

        return [
            Message(role="system", content=system_prompt),
            Message(role="user", content=user_prompt)
        ]
