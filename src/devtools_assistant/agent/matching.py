"""Scoring strategies for fuzzy tool matching."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from devtools_assistant.agent.registry import ToolDefinition

_TOKEN_PATTERN = re.compile(r"[a-z0-9]+")
_FILLER_WORDS = frozenset(
    {"a", "an", "the", "me", "my", "some", "please", "to", "for", "of", "and", "with", "i", "it"}
)


class MatchScorer(ABC):
    """Scores how well a tool answers a free-text query."""

    min_score: float = 1.0

    @abstractmethod
    def score(self, query: str, tool: ToolDefinition) -> float:
        """Return a non-negative relevance score."""


class TokenOverlapScorer(MatchScorer):
    """Lexical overlap between the query and a tool's descriptive fields.

    Weights:
    - exact name match: +100, name contains the whole query: +50
    - keyword phrase contained in the query: +20
    - query token found in the tool id or name: +10
    - query token found in a keyword or the category: +5
    - query token found in the description: +2
    - example phrase containing the whole query: +10

    A single id/name token hit clears the default threshold; description-only
    overlap needs several tokens, which keeps incidental words from matching.
    """

    def __init__(self, min_score: float = 10.0) -> None:
        self.min_score = min_score

    def score(self, query: str, tool: ToolDefinition) -> float:
        lowered = query.strip().lower()
        if not lowered:
            return 0.0
        tokens = [token for token in _tokenize(lowered) if token not in _FILLER_WORDS]
        name = tool.name.lower()

        score = 0.0
        if name == lowered:
            score += 100
        elif lowered in name:
            score += 50

        for keyword in tool.keywords:
            if re.search(rf"\b{re.escape(keyword.lower())}\b", lowered):
                score += 20

        name_tokens = set(_tokenize(tool.id.lower())) | set(_tokenize(name))
        keyword_tokens = {token for keyword in tool.keywords for token in _tokenize(keyword.lower())}
        category_tokens = set(_tokenize(tool.category.lower()))
        description_tokens = set(_tokenize(tool.description.lower()))

        for token in dict.fromkeys(tokens):
            singular = token[:-1] if token.endswith("s") and len(token) > 3 else token
            if token in name_tokens or singular in name_tokens:
                score += 10
            if token in keyword_tokens or singular in keyword_tokens:
                score += 5
            if token in category_tokens:
                score += 5
            if token in description_tokens or singular in description_tokens:
                score += 2

        for example in tool.examples:
            if lowered in example.lower():
                score += 10

        return score


def _tokenize(text: str) -> list[str]:
    return _TOKEN_PATTERN.findall(text)
