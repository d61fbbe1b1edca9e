"""Conversation summarizers used when memory grows."""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from errors import ProviderError
from llm.base_client import BaseLLMClient, Message
from .models import MemoryEntry

logger = logging.getLogger(__name__)


class Summarizer(ABC):
    """Turns recent memory entries into a short summary."""

    @abstractmethod
    def summarize(self, entries: List[MemoryEntry]) -> str:
        pass


class TopicSummarizer(Summarizer):
    """Summarizes by listing what the user recently asked about."""

    def __init__(self, window: int = 5, max_chars: int = 200):
        self.window = window
        self.max_chars = max_chars

    def summarize(self, entries: List[MemoryEntry]) -> str:
        recent_topics = " ".join(entry.user_input for entry in entries[-self.window:])
        return f"Recent conversation topics: {recent_topics[:self.max_chars]}..."


class LLMSummarizer(Summarizer):
    """Summarizes with an LLM, falling back to topic listing on failure."""

    SYSTEM_PROMPT = """You are a conversation summarizer. Create a concise summary of the conversation below.

Output format:
SUMMARY: [2-3 sentence summary of what was discussed and decided]
KEY_TOPICS: [comma-separated list of main topics]"""

    def __init__(
        self,
        llm_client: BaseLLMClient,
        fallback: Optional[Summarizer] = None,
        window: int = 5
    ):
        """
        Initialize LLM summarizer.

        Args:
            llm_client: LLM client used for summarization
            fallback: Summarizer used when the LLM fails (default: TopicSummarizer)
            window: Number of most recent entries to summarize
        """
        self.llm_client = llm_client
        self.fallback = fallback or TopicSummarizer(window=window)
        self.window = window

    def summarize(self, entries: List[MemoryEntry]) -> str:
        turns_text = "\n".join(
            f"USER: {entry.user_input}\nASSISTANT ({entry.agent_used}): {entry.agent_response}"
            for entry in entries[-self.window:]
        )

        messages = [
            Message(role="system", content=self.SYSTEM_PROMPT),
            Message(role="user", content=f"Summarize this conversation:\n\n{turns_text}")
        ]

        try:
            response = self.llm_client.chat(
                messages=messages,
                temperature=0.3,
                max_tokens=500
            )
        except ProviderError as e:
            logger.warning(f"LLM summarization failed, using fallback: {e}")
            return self.fallback.summarize(entries)

        summary = ""
        key_topics = []
        for line in response.content.split("\n"):
            if line.startswith("SUMMARY:"):
                summary = line[8:].strip()
            elif line.startswith("KEY_TOPICS:"):
                key_topics = [t.strip() for t in line[11:].split(",") if t.strip()]

        if not summary:
            logger.warning("LLM summary missing SUMMARY line, using fallback")
            return self.fallback.summarize(entries)

        if key_topics:
            return f"{summary} Key topics: {', '.join(key_topics)}"
        return summary
