"""Explicit wiring of the assistant components."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from devtools_assistant.agent.intent import IntentParser
from devtools_assistant.agent.orchestrator import AssistantOrchestrator
from devtools_assistant.agent.registry import ToolRegistry
from devtools_assistant.agent.tools import register_default_tools
from devtools_assistant.config import AssistantConfig
from devtools_assistant.conversation.storage import KeyValueStore
from devtools_assistant.conversation.store import ConversationStore
from devtools_assistant.knowledge.base import KnowledgeBase
from devtools_assistant.knowledge.cache import CAGCache
from devtools_assistant.llm.provider import (
    CompletionProvider,
    LangChainCompletionProvider,
    create_chat_model,
)
from devtools_assistant.log import get_logger, setup_logging
from devtools_assistant.types import AssistantResponse

logger = get_logger(__name__)


@dataclass(slots=True)
class AssistantContext:
    """Everything one assistant session shares, built once and passed around."""

    config: AssistantConfig
    registry: ToolRegistry
    parser: IntentParser
    cache: CAGCache
    knowledge_base: KnowledgeBase
    conversations: ConversationStore
    orchestrator: AssistantOrchestrator

    async def process_message(self, text: str) -> AssistantResponse:
        return await self.orchestrator.process_message(text)


def create_context(
    config: AssistantConfig | None = None,
    *,
    llm: Any | None = None,
    completion_provider: CompletionProvider | None = None,
    storage: KeyValueStore | None = None,
    register_defaults: bool = True,
) -> AssistantContext:
    """Build an isolated assistant context.

    The completion provider is taken from `completion_provider`, else from a
    LangChain chat model (`llm`, or one created from `config.completion` when
    an OpenAI key is available). Without either, replies that need a model
    fall back to templated text.
    """

    config = config or AssistantConfig()
    setup_logging(config.log_level, json_output=config.log_json)

    registry = ToolRegistry(default_timeout_seconds=config.tool_timeout_seconds)
    if register_defaults:
        register_default_tools(registry)

    if completion_provider is None:
        chat_model = llm if llm is not None else create_chat_model(config.completion)
        if chat_model is not None:
            completion_provider = LangChainCompletionProvider(chat_model)

    cache = CAGCache(config.cache.max_size)
    knowledge_base = KnowledgeBase(config.knowledge, cache=cache, cache_config=config.cache)
    conversations = ConversationStore(storage)
    parser = IntentParser()
    orchestrator = AssistantOrchestrator(
        registry=registry,
        parser=parser,
        config=config,
        completion_provider=completion_provider,
        knowledge_base=knowledge_base,
        conversation_store=conversations,
    )
    logger.info(
        "context_created",
        tools=registry.get_stats()["total_tools"],
        completion_configured=completion_provider is not None,
        persistent=storage is not None,
    )
    return AssistantContext(
        config=config,
        registry=registry,
        parser=parser,
        cache=cache,
        knowledge_base=knowledge_base,
        conversations=conversations,
        orchestrator=orchestrator,
    )
