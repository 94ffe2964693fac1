"""Document store with keyword/metadata retrieval behind the CAG cache."""

from __future__ import annotations

import json
import re
import uuid
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

from devtools_assistant.config import CacheConfig, KnowledgeConfig
from devtools_assistant.knowledge.cache import CAGCache
from devtools_assistant.knowledge.loader import LoaderRegistry
from devtools_assistant.log import get_logger
from devtools_assistant.types import KnowledgeDocument

logger = get_logger(__name__)

STOP_WORDS = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of",
        "with", "by", "from", "is", "are", "was", "were", "be", "been", "being",
        "have", "has", "had", "do", "does", "did", "will", "would", "could",
        "should", "may", "might", "can", "this", "that", "these", "those",
    }
)

_WORD_SPLIT = re.compile(r"\W+")
_FULL_CONTENT_PATTERNS = (
    re.compile(
        r"\b(full|complete|entire|whole|all|untruncated|raw)\b.*\b(data|document|file|content|information)\b",
        re.IGNORECASE,
    ),
    re.compile(r"\b(show|display|read|access|see)\b.*\b(full|complete|entire|whole|all)\b", re.IGNORECASE),
)
_ELLIPSIS = "..."


class SearchMethod(str, Enum):
    KEYWORD = "keyword"
    METADATA = "metadata"
    # Served by keyword search; there is no embedding index.
    SEMANTIC = "semantic"


def extract_keywords(text: str, limit: int = 20) -> list[str]:
    """Lower-cased distinct tokens longer than two characters, stop-words removed."""
    words = (word for word in _WORD_SPLIT.split(text.lower()) if len(word) > 2 and word not in STOP_WORDS)
    return list(dict.fromkeys(words))[:limit]


def wants_full_content(message: str) -> bool:
    """True when the user asks for whole documents rather than excerpts."""
    return any(pattern.search(message) for pattern in _FULL_CONTENT_PATTERNS)


class KnowledgeBase:
    """Uploaded documents plus cached keyword and metadata search.

    `search` is cache-through: results are stored under `method:query` for
    `CacheConfig.search_ttl_seconds`. Adding or removing a document drops the
    cached search results so that searches never return removed documents.
    Other keys in a shared cache are left alone.
    """

    def __init__(
        self,
        config: KnowledgeConfig | None = None,
        *,
        cache: CAGCache | None = None,
        cache_config: CacheConfig | None = None,
        loaders: LoaderRegistry | None = None,
    ) -> None:
        self.config = config or KnowledgeConfig()
        self.cache_config = cache_config or CacheConfig()
        # An empty cache is falsy, so test for None to keep a shared instance.
        self.cache = cache if cache is not None else CAGCache(self.cache_config.max_size)
        self._loaders = loaders or LoaderRegistry()
        self._documents: dict[str, KnowledgeDocument] = {}

    def add_document(self, content: str, metadata: dict[str, Any] | None = None) -> str:
        doc_id = str(uuid.uuid4())
        self._documents[doc_id] = KnowledgeDocument(
            doc_id=doc_id,
            content=content,
            metadata={
                **(metadata or {}),
                "uploaded_at": datetime.now(timezone.utc).isoformat(),
                "keywords": extract_keywords(content, self.config.max_keywords),
            },
        )
        self._invalidate_searches()
        logger.info("document_added", doc_id=doc_id, length=len(content))
        return doc_id

    def add_file(self, path: str | Path, metadata: dict[str, Any] | None = None) -> str:
        """Load a text, markdown or JSON file and add it as a document."""
        loaded = self._loaders.load(path)
        return self.add_document(loaded.content, {**loaded.metadata, **(metadata or {})})

    def remove_document(self, doc_id: str) -> bool:
        removed = self._documents.pop(doc_id, None) is not None
        if removed:
            self._invalidate_searches()
            logger.info("document_removed", doc_id=doc_id)
        return removed

    def get_document(self, doc_id: str) -> KnowledgeDocument | None:
        return self._documents.get(doc_id)

    def list_documents(self) -> list[KnowledgeDocument]:
        return list(self._documents.values())

    def keyword_search(self, query: str, limit: int | None = 5) -> list[KnowledgeDocument]:
        """Rank documents by keyword score.

        Per query keyword: +2 if it is one of the document's derived keywords,
        +1 if it occurs anywhere in the lower-cased content. Only documents with
        a positive score are returned.

        Equal scores are not left in insertion order: they are ordered first by
        how often the query keywords occur in the content, so a document that
        mentions "docker" three times ranks above one that mentions it once.
        Insertion order only breaks ties that remain after that.
        """

        query_keywords = extract_keywords(query, self.config.max_keywords)
        scored: list[tuple[int, int, KnowledgeDocument]] = []
        for document in self._documents.values():
            content = document.content.lower()
            doc_keywords = set(document.keywords)
            score = 0
            occurrences = 0
            for keyword in query_keywords:
                if keyword in doc_keywords:
                    score += 2
                if keyword in content:
                    score += 1
                    occurrences += content.count(keyword)
            if score > 0:
                scored.append((score, occurrences, document))

        # sorted() is stable, so insertion order breaks the remaining ties.
        ranked = sorted(scored, key=lambda item: (item[0], item[1]), reverse=True)
        documents = [document for _, _, document in ranked]
        return documents if limit is None else documents[:limit]

    def metadata_search(self, filters: dict[str, Any], limit: int | None = 5) -> list[KnowledgeDocument]:
        results: list[KnowledgeDocument] = []
        for document in self._documents.values():
            if _metadata_match(document.metadata, filters):
                results.append(document)
                if limit is not None and len(results) >= limit:
                    break
        return results

    def search(
        self,
        query: str,
        *,
        method: SearchMethod | str = SearchMethod.KEYWORD,
        limit: int = 5,
    ) -> list[KnowledgeDocument]:
        method = SearchMethod(method)
        cache_key = f"{method.value}:{query}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return list(cached[:limit])

        if method is SearchMethod.METADATA:
            filters = _parse_filters(query)
            results = [] if filters is None else self.metadata_search(filters, limit=None)
        else:
            results = self.keyword_search(query, limit=None)

        self.cache.set(cache_key, tuple(results), ttl=self.cache_config.search_ttl_seconds)
        return results[:limit]

    def build_context(
        self,
        documents: list[KnowledgeDocument],
        max_length: int = 4000,
        include_full: bool = False,
    ) -> str:
        """Concatenate `[filename]\\ncontent\\n\\n` blocks in input order.

        Without `include_full`, the result never exceeds `max_length`: the first
        block that would overflow is cut and ends with an ellipsis, and nothing
        after it is added.
        """

        parts: list[str] = []
        length = 0
        for document in documents:
            block = f"[{document.filename or 'Document'}]\n{document.content}\n\n"
            if not include_full and length + len(block) > max_length:
                remaining = max_length - length
                if remaining > len(_ELLIPSIS):
                    parts.append(block[: remaining - len(_ELLIPSIS)] + _ELLIPSIS)
                break
            parts.append(block)
            length += len(block)
        return "".join(parts)

    def clear(self) -> None:
        self._documents.clear()
        self._invalidate_searches()

    def get_stats(self) -> dict[str, Any]:
        return {
            "document_count": len(self._documents),
            "cache_stats": self.cache.get_stats(),
        }

    def _invalidate_searches(self) -> None:
        dropped = self.cache.delete_prefixed(*(f"{method.value}:" for method in SearchMethod))
        logger.debug("search_cache_invalidated", entries=dropped)


def _parse_filters(query: str) -> dict[str, Any] | None:
    try:
        filters = json.loads(query)
    except json.JSONDecodeError:
        logger.debug("metadata_query_not_json", query=query)
        return None
    return filters if isinstance(filters, dict) else None


def _metadata_match(metadata: dict[str, Any], filters: dict[str, Any]) -> bool:
    for key, value in filters.items():
        if metadata.get(key) != value:
            return False
    return True
