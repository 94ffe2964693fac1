"""Developer tools conversational assistant."""

from .config import AssistantConfig, CacheConfig, CompletionConfig, KnowledgeConfig
from .context import AssistantContext, create_context

__all__ = [
    "AssistantConfig",
    "AssistantContext",
    "CacheConfig",
    "CompletionConfig",
    "KnowledgeConfig",
    "create_context",
]
