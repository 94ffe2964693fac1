"""Shared domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


@dataclass(slots=True)
class ToolResult:
    """Outcome reported by a tool capability."""

    success: bool
    data: Any = None
    message: str | None = None
    error: str | None = None
    copyable: str | None = None


class InvocationStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    NAVIGATION_REQUESTED = "navigation_requested"


@dataclass(slots=True)
class ToolInvocationResult:
    """A tool execution outcome with timing metadata.

    `NAVIGATION_REQUESTED` is returned for tools that only carry a route; the
    caller is expected to redirect to `navigate_to` instead of treating the
    invocation as a plain failure.
    """

    tool_id: str
    tool_name: str
    status: InvocationStatus
    execution_time_ms: float
    timestamp: datetime
    data: Any = None
    message: str | None = None
    error: str | None = None
    copyable: str | None = None
    navigate_to: str | None = None

    @property
    def success(self) -> bool:
        return self.status is InvocationStatus.SUCCEEDED

    def to_payload(self) -> dict[str, Any]:
        """JSON-friendly representation stored alongside conversation messages."""
        return {
            "tool_id": self.tool_id,
            "tool_name": self.tool_name,
            "status": self.status.value,
            "success": self.success,
            "message": self.message,
            "error": self.error,
            "copyable": self.copyable,
            "navigate_to": self.navigate_to,
            "execution_time_ms": self.execution_time_ms,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(slots=True)
class ToolTrace:
    """Trace record for an executed tool call."""

    tool_id: str
    input_payload: dict[str, Any]
    status: InvocationStatus
    latency_ms: float


class IntentLabel(str, Enum):
    ENCODE = "encode"
    DECODE = "decode"
    GENERATE = "generate"
    CONVERT = "convert"
    TEST = "test"
    ANALYZE = "analyze"
    CREATE = "create"
    HELP = "help"
    NAVIGATE = "navigate"
    EXECUTE = "execute"
    UNKNOWN = "unknown"


@dataclass(slots=True)
class Entities:
    """Parameters extracted from a user utterance."""

    format: str | None = None
    target_format: str | None = None
    value: str | None = None
    quantity: int | None = None
    length: int | None = None
    url: str | None = None
    tool_name: str | None = None
    action: str | None = None

    def as_params(self) -> dict[str, Any]:
        """Tool parameters derived from the populated entities."""
        params: dict[str, Any] = {}
        for name in ("value", "quantity", "length", "url", "target_format"):
            value = getattr(self, name)
            if value is not None:
                params[name] = value
        return params


@dataclass(slots=True)
class Intent:
    """Classification of a user utterance."""

    raw_query: str
    label: IntentLabel
    confidence: int
    entities: Entities = field(default_factory=Entities)
    suggested_tool: str | None = None
    suggested_category: str | None = None


@dataclass(slots=True)
class KnowledgeDocument:
    """An uploaded document with derived keywords in its metadata."""

    doc_id: str
    content: str
    metadata: dict[str, Any]

    @property
    def keywords(self) -> list[str]:
        return list(self.metadata.get("keywords", []))

    @property
    def filename(self) -> str | None:
        return self.metadata.get("filename")


@dataclass(slots=True)
class CacheEntry:
    key: str
    value: Any
    timestamp: float
    ttl: float | None = None

    def is_expired(self, now: float) -> bool:
        if not self.ttl:
            return False
        return now - self.timestamp > self.ttl


@dataclass(slots=True)
class AssistantResponse:
    """Reply produced for every processed message."""

    text: str
    tool_result: ToolInvocationResult | None = None
    intent: Intent | None = None
    suggestions: list[str] = field(default_factory=list)
    navigate_to: str | None = None
    error: str | None = None
