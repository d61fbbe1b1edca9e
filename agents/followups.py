"""Extraction of suggested next steps from generated text."""

import re
from typing import List, Pattern, Sequence

MAX_FOLLOW_UPS = 3

ACTION_KEYWORDS = ["suggest", "recommend", "could also", "might want to", "consider"]

ACTION_PATTERNS = [
    re.compile(r"next.*?(?:step|action|task)", re.IGNORECASE),
    re.compile(r"you.*?(?:might|could|should).*?(?:want|need|consider)", re.IGNORECASE),
    re.compile(r"(?:recommend|suggest).*?(?:to|that)", re.IGNORECASE),
]


def _sentences(content: str) -> List[str]:
    return [s.strip() for s in content.split(".") if s.strip()]


def keyword_follow_ups(
    content: str,
    keywords: Sequence[str] = ACTION_KEYWORDS,
    limit: int = MAX_FOLLOW_UPS
) -> List[str]:
    """Distinct sentences containing any action keyword (case-insensitive), in order."""
    actions: List[str] = []
    for sentence in _sentences(content):
        if sentence in actions:
            continue
        if any(keyword in sentence.lower() for keyword in keywords):
            actions.append(sentence)
        if len(actions) >= limit:
            break
    return actions


def pattern_follow_ups(
    content: str,
    patterns: Sequence[Pattern] = ACTION_PATTERNS,
    limit: int = MAX_FOLLOW_UPS
) -> List[str]:
    """Distinct sentences matching any action pattern, in order."""
    actions: List[str] = []
    for sentence in _sentences(content):
        if sentence in actions:
            continue
        if any(pattern.search(sentence) for pattern in patterns):
            actions.append(sentence)
        if len(actions) >= limit:
            break
    return actions
