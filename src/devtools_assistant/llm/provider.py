"""Completion provider interface and its LangChain chat model adapter."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Protocol

from langchain_core.messages import BaseMessage

from devtools_assistant.config import CompletionConfig
from devtools_assistant.errors import CompletionError
from devtools_assistant.log import get_logger

logger = get_logger(__name__)

DEFAULT_OPENAI_MODEL = "gpt-4o-mini"


@dataclass(slots=True)
class CompletionResponse:
    message: str
    model: str | None = None
    usage: dict[str, int] = field(default_factory=dict)


class CompletionProvider(Protocol):
    """Sends a chat transcript to a model and returns its reply.

    Implementations raise `CompletionError` for network, authorization and
    provider failures.
    """

    async def send(self, messages: list[BaseMessage], config: CompletionConfig) -> CompletionResponse:
        ...


class LangChainCompletionProvider:
    """Adapts any LangChain chat model to `CompletionProvider`."""

    def __init__(self, llm: Any) -> None:
        self.llm = llm

    async def send(self, messages: list[BaseMessage], config: CompletionConfig) -> CompletionResponse:
        try:
            result = await self.llm.ainvoke(messages)
        except Exception as exc:  # provider SDKs raise their own hierarchies
            raise CompletionError(str(exc) or exc.__class__.__name__) from exc

        metadata = getattr(result, "response_metadata", None) or {}
        usage = getattr(result, "usage_metadata", None) or {}
        return CompletionResponse(
            message=_extract_text(result),
            model=metadata.get("model_name") or config.model,
            usage={key: int(value) for key, value in usage.items() if isinstance(value, int)},
        )


def create_chat_model(config: CompletionConfig | None = None) -> Any:
    """Build a `ChatOpenAI` model when an API key is available, else None."""
    config = config or CompletionConfig()
    api_key = config.api_key or os.getenv("OPENAI_API_KEY")
    if not api_key:
        return None

    from langchain_openai import ChatOpenAI

    kwargs: dict[str, Any] = {
        "model": config.model or os.getenv("OPENAI_MODEL", DEFAULT_OPENAI_MODEL),
        "temperature": config.temperature,
        "max_tokens": config.max_tokens,
        "timeout": config.timeout_seconds,
        "api_key": api_key,
    }
    if config.endpoint:
        kwargs["base_url"] = config.endpoint
    logger.info("chat_model_created", provider=config.provider, model=kwargs["model"])
    return ChatOpenAI(**kwargs)


def _extract_text(result: Any) -> str:
    content = getattr(result, "content", result)
    if isinstance(content, list):
        parts: list[str] = []
        for item in content:
            if isinstance(item, dict) and "text" in item:
                parts.append(str(item["text"]))
            else:
                parts.append(str(item))
        return " ".join(parts).strip()
    return str(content).strip()
