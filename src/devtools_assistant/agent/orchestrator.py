"""Per-message routing between help, tools, navigation and the completion provider."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder

from devtools_assistant.agent.fallback import build_fallback_text, build_help_response
from devtools_assistant.agent.intent import IntentParser
from devtools_assistant.agent.registry import ToolDefinition, ToolRegistry
from devtools_assistant.config import AssistantConfig
from devtools_assistant.conversation.models import Message, MessageRole
from devtools_assistant.conversation.store import ConversationStore
from devtools_assistant.knowledge.base import KnowledgeBase, SearchMethod, wants_full_content
from devtools_assistant.llm.provider import CompletionProvider
from devtools_assistant.log import get_logger
from devtools_assistant.obs.tracing import Timer
from devtools_assistant.types import (
    AssistantResponse,
    Intent,
    IntentLabel,
    InvocationStatus,
    ToolInvocationResult,
)

logger = get_logger(__name__)

_PROMPT = ChatPromptTemplate.from_messages(
    [
        ("system", "{system_prompt}"),
        MessagesPlaceholder(variable_name="history"),
    ]
)
_ROLE_MESSAGES: dict[MessageRole, type[BaseMessage]] = {
    MessageRole.USER: HumanMessage,
    MessageRole.ASSISTANT: AIMessage,
    MessageRole.SYSTEM: SystemMessage,
}
_CONVERSATION_NAME_LENGTH = 50


class AssistantOrchestrator:
    """Routes each user message to help, navigation, a tool or the model.

    Order of attempts for one message:

    1. Help requests get the capability listing; the provider is not called.
    2. A `navigate` intent whose suggested tool has a route returns that route.
    3. Non-conversational messages try a tool: the suggested tool when it is
       registered, otherwise the best fuzzy match. With no tool found, an
       intent at or above `tool_confidence_threshold` is still reported as a
       failed attempt. A route-only tool turns into a navigation reply.
    4. Everything else goes to the completion provider with the last
       `history_window` turns, enriched with knowledge base context. Any
       provider failure, or no provider at all, yields a templated reply.

    Every path returns a response with non-empty text, and both sides of the
    exchange are recorded in `history` (and in the conversation store when
    one is attached).

    `process_message` must not be called concurrently on one instance; history
    ordering is undefined otherwise.
    """

    def __init__(
        self,
        *,
        registry: ToolRegistry,
        parser: IntentParser | None = None,
        config: AssistantConfig | None = None,
        completion_provider: CompletionProvider | None = None,
        knowledge_base: KnowledgeBase | None = None,
        conversation_store: ConversationStore | None = None,
    ) -> None:
        self.registry = registry
        self.parser = parser or IntentParser()
        self.config = config or AssistantConfig()
        self.completion_provider = completion_provider
        self.knowledge_base = knowledge_base
        self.conversation_store = conversation_store
        self.conversation_id: str | None = None
        self._history: list[Message] = []

    @property
    def history(self) -> list[Message]:
        return [message.model_copy() for message in self._history]

    def clear_history(self) -> None:
        """Forget the in-memory turns; the next message starts a new stored conversation."""
        self._history.clear()
        self.conversation_id = None

    def update_config(self, **changes: Any) -> AssistantConfig:
        self.config = AssistantConfig.model_validate({**self.config.model_dump(), **changes})
        self.registry.default_timeout_seconds = self.config.tool_timeout_seconds
        return self.config

    async def process_message(self, text: str) -> AssistantResponse:
        self._record(MessageRole.USER, text)

        if self.parser.is_help_request(text):
            logger.info("message_routed", route="help")
            return self._reply(build_help_response(self.registry))

        intent = self.parser.parse(text)
        logger.debug(
            "intent_parsed",
            label=intent.label.value,
            confidence=intent.confidence,
            suggested_tool=intent.suggested_tool,
        )

        if intent.label is IntentLabel.NAVIGATE and intent.suggested_tool:
            tool = self.registry.get(intent.suggested_tool)
            if tool is not None and tool.route:
                logger.info("message_routed", route="navigate", tool_id=tool.id)
                return self._reply(
                    AssistantResponse(text=f"Opening {tool.name}...", intent=intent, navigate_to=tool.route)
                )

        failed: ToolInvocationResult | None = None
        if not self.parser.is_conversational(text):
            tool = self._select_tool(intent)
            if tool is not None or intent.confidence >= self.config.tool_confidence_threshold:
                result = await self._execute_from_intent(intent, tool)
                if result.status is InvocationStatus.SUCCEEDED:
                    logger.info("message_routed", route="tool", tool_id=result.tool_id)
                    return self._reply(
                        AssistantResponse(
                            text=result.message or f"Successfully executed {result.tool_name}",
                            tool_result=result,
                            intent=intent,
                        )
                    )
                if result.status is InvocationStatus.NAVIGATION_REQUESTED and result.navigate_to:
                    logger.info("message_routed", route="navigate", tool_id=result.tool_id)
                    return self._reply(
                        AssistantResponse(
                            text=f"Let me open {result.tool_name} for you.",
                            tool_result=result,
                            intent=intent,
                            navigate_to=result.navigate_to,
                        )
                    )
                failed = result

        return self._reply(await self._generate_ai_response(text, intent, failed))

    def _select_tool(self, intent: Intent) -> ToolDefinition | None:
        if intent.suggested_tool:
            tool = self.registry.get(intent.suggested_tool)
            if tool is not None:
                return tool
        return self.registry.find_best_match(intent.raw_query)

    async def _execute_from_intent(self, intent: Intent, tool: ToolDefinition | None) -> ToolInvocationResult:
        if tool is None:
            return ToolInvocationResult(
                tool_id="unknown",
                tool_name="Unknown",
                status=InvocationStatus.FAILED,
                error='Could not identify which tool to use. Try "help" to see available tools.',
                execution_time_ms=0.0,
                timestamp=datetime.now(timezone.utc),
            )

        params = intent.entities.as_params()
        if intent.label in (IntentLabel.ENCODE, IntentLabel.DECODE):
            params["action"] = intent.label.value
        return await self.registry.execute(tool.id, params)

    async def _generate_ai_response(
        self, text: str, intent: Intent, failed: ToolInvocationResult | None
    ) -> AssistantResponse:
        suggestions = self.parser.suggestions(text)

        def scripted(error: str | None = None) -> AssistantResponse:
            return AssistantResponse(
                text=build_fallback_text(intent, self.registry, self.config.low_confidence_threshold),
                tool_result=failed,
                intent=intent,
                suggestions=suggestions,
                error=error,
            )

        if self.completion_provider is None:
            logger.info("message_routed", route="scripted")
            return scripted()

        timeout = self.config.completion.timeout_seconds
        try:
            messages = self._build_prompt(text)
            with Timer() as timer:
                completion = await asyncio.wait_for(
                    self.completion_provider.send(messages, self.config.completion), timeout
                )
        except asyncio.TimeoutError:
            logger.warning("completion_failed", error="timeout", timeout_seconds=timeout)
            return scripted(f"Completion timed out after {timeout:g}s")
        except Exception as exc:  # any provider failure degrades to the scripted reply
            logger.warning("completion_failed", error=str(exc), error_type=exc.__class__.__name__)
            return scripted(str(exc) or exc.__class__.__name__)

        if not completion.message.strip():
            logger.warning("completion_empty", model=completion.model)
            return scripted("Completion provider returned an empty reply")

        logger.info(
            "message_routed",
            route="completion",
            model=completion.model,
            latency_ms=round(timer.elapsed_ms, 3),
        )
        return AssistantResponse(
            text=completion.message,
            tool_result=failed,
            intent=intent,
            suggestions=suggestions,
        )

    def _build_prompt(self, text: str) -> list[BaseMessage]:
        window = self._history[-self.config.history_window :]
        turns = [_ROLE_MESSAGES[message.role](content=message.content) for message in window]

        context = self._knowledge_context(text)
        if context and turns and isinstance(turns[-1], HumanMessage):
            turns[-1] = HumanMessage(
                content=f"{turns[-1].content}\n\nRelevant knowledge base context:\n{context}"
            )

        return _PROMPT.format_messages(system_prompt=self.config.system_prompt, history=turns)

    def _knowledge_context(self, text: str) -> str:
        if self.knowledge_base is None or not self.knowledge_base.list_documents():
            return ""
        settings = self.config.knowledge
        documents = self.knowledge_base.search(text, method=SearchMethod.KEYWORD, limit=settings.search_limit)
        if not documents:
            return ""
        logger.debug("knowledge_context_attached", documents=len(documents))
        return self.knowledge_base.build_context(
            documents,
            max_length=settings.context_length,
            include_full=wants_full_content(text),
        )

    def _reply(self, response: AssistantResponse) -> AssistantResponse:
        tool_payload = response.tool_result.to_payload() if response.tool_result else None
        self._record(MessageRole.ASSISTANT, response.text, tool_payload)
        return response

    def _record(self, role: MessageRole, content: str, tool_result: dict[str, Any] | None = None) -> None:
        timestamp = datetime.now(timezone.utc)
        if self._history and self._history[-1].timestamp > timestamp:
            timestamp = self._history[-1].timestamp
        self._history.append(Message(role=role, content=content, timestamp=timestamp, tool_result=tool_result))

        if self.conversation_store is None:
            return
        if self.conversation_id is None or not self.conversation_store.has_conversation(self.conversation_id):
            name = content.strip()[:_CONVERSATION_NAME_LENGTH] or "New conversation"
            conversation = self.conversation_store.create_conversation(
                name,
                provider=self.config.completion.provider,
                model=self.config.completion.model,
            )
            self.conversation_id = conversation.id
        self.conversation_store.add_message(self.conversation_id, role, content, tool_result)
