"""Tool registry built on Pydantic v2 models."""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Mapping
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from devtools_assistant.agent.matching import MatchScorer, TokenOverlapScorer
from devtools_assistant.log import get_logger
from devtools_assistant.obs.tracing import Timer
from devtools_assistant.types import (
    InvocationStatus,
    ToolInvocationResult,
    ToolResult,
    ToolTrace,
)

logger = get_logger(__name__)

ToolHandler = Callable[[Any], Any]

CATEGORY_LABELS: dict[str, str] = {
    "encoding": "Encoding & Decoding",
    "generator": "Generators",
    "converter": "Converters",
    "api-testing": "API Testing",
    "ai": "AI Tools",
    "development": "Development",
    "productivity": "Productivity",
    "security": "Security",
}


class ToolKind(str, Enum):
    """Which capabilities a tool carries."""

    EXECUTABLE = "executable"
    NAVIGABLE = "navigable"
    BOTH = "both"


class ToolDefinition(BaseModel):
    """Declarative tool definition used for registration and dispatch.

    `handler` is the execute capability. It receives the validated
    `input_schema` instance when a schema is declared, otherwise the raw
    parameter dict, and may be a plain function or a coroutine function.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: str = Field(min_length=1)
    name: str = ""
    description: str = ""
    category: str = "development"
    keywords: list[str] = Field(default_factory=list)
    examples: list[str] = Field(default_factory=list)
    route: str | None = None
    handler: ToolHandler | None = None
    input_schema: type[BaseModel] | None = None
    timeout_seconds: float | None = Field(default=None, gt=0.0)

    @model_validator(mode="after")
    def _check_capabilities(self) -> "ToolDefinition":
        if self.handler is None and not self.route:
            raise ValueError(f"Tool {self.id} needs a handler, a route, or both")
        if not self.name:
            self.name = self.id
        return self

    @property
    def kind(self) -> ToolKind:
        if self.handler is not None and self.route:
            return ToolKind.BOTH
        if self.handler is not None:
            return ToolKind.EXECUTABLE
        return ToolKind.NAVIGABLE


class ToolRegistry:
    """Catalog of invocable capabilities with guarded execution.

    One registry is created per assistant context and populated at start-up;
    after that it is only read.
    """

    def __init__(
        self,
        *,
        scorer: MatchScorer | None = None,
        default_timeout_seconds: float = 30.0,
    ) -> None:
        self._tools: dict[str, ToolDefinition] = {}
        self._observer: Callable[[ToolTrace], None] | None = None
        self.scorer = scorer or TokenOverlapScorer()
        self.default_timeout_seconds = default_timeout_seconds

    def register(self, tool: ToolDefinition) -> None:
        if tool.id in self._tools:
            raise ValueError(f"Tool already registered: {tool.id}")
        self._tools[tool.id] = tool
        logger.debug("tool_registered", tool_id=tool.id, kind=tool.kind.value)

    def register_all(self, tools: list[ToolDefinition]) -> None:
        for tool in tools:
            self.register(tool)

    def set_observer(self, observer: Callable[[ToolTrace], None] | None) -> None:
        """Set an optional callback invoked after each tool execution."""
        self._observer = observer

    def get(self, tool_id: str) -> ToolDefinition | None:
        return self._tools.get(tool_id)

    def all_tools(self) -> list[ToolDefinition]:
        return list(self._tools.values())

    def get_by_category(self, category: str) -> list[ToolDefinition]:
        return [tool for tool in self._tools.values() if tool.category == category]

    def get_categories(self) -> list[tuple[str, int]]:
        """Categories with their tool counts, most populous first."""
        counts: dict[str, int] = {}
        for tool in self._tools.values():
            counts[tool.category] = counts.get(tool.category, 0) + 1
        return sorted(counts.items(), key=lambda item: item[1], reverse=True)

    def search(self, query: str) -> list[ToolDefinition]:
        """Tools whose name, description, keywords or examples contain the query."""
        lowered = query.lower()
        return [
            tool
            for tool in self._tools.values()
            if lowered
            in " ".join([tool.name, tool.description, *tool.keywords, *tool.examples]).lower()
        ]

    def find_best_match(self, query: str) -> ToolDefinition | None:
        best_tool: ToolDefinition | None = None
        best_score = 0.0
        for tool in self._tools.values():
            score = self.scorer.score(query, tool)
            if score > best_score:
                best_tool = tool
                best_score = score

        if best_score < self.scorer.min_score:
            return None
        return best_tool

    def get_stats(self) -> dict[str, int]:
        return {
            "total_tools": len(self._tools),
            "categories": len({tool.category for tool in self._tools.values()}),
        }

    async def execute(
        self, tool_id: str, params: Mapping[str, Any] | None = None
    ) -> ToolInvocationResult:
        """Run a tool and report the outcome; never raises.

        Route-only tools yield `NAVIGATION_REQUESTED` and tools with a handler
        run it. A tool whose kind has no usable capability is reported as
        `FAILED`.
        """

        payload = dict(params or {})
        started_at = datetime.now(timezone.utc)
        tool = self._tools.get(tool_id)
        if tool is None:
            return ToolInvocationResult(
                tool_id=tool_id,
                tool_name="Unknown",
                status=InvocationStatus.FAILED,
                error=f"Tool not found: {tool_id}",
                execution_time_ms=0.0,
                timestamp=started_at,
            )

        handler = tool.handler
        match tool.kind:
            case ToolKind.NAVIGABLE:
                result = ToolInvocationResult(
                    tool_id=tool.id,
                    tool_name=tool.name,
                    status=InvocationStatus.NAVIGATION_REQUESTED,
                    error=f"Tool {tool.name} has no execute capability",
                    navigate_to=tool.route,
                    execution_time_ms=0.0,
                    timestamp=started_at,
                )
            case ToolKind.EXECUTABLE | ToolKind.BOTH if handler is not None:
                result = await self._invoke(tool, handler, payload, started_at)
            case kind:
                logger.error("tool_kind_unsupported", tool_id=tool.id, kind=str(kind))
                result = ToolInvocationResult(
                    tool_id=tool.id,
                    tool_name=tool.name,
                    status=InvocationStatus.FAILED,
                    error=f"Tool {tool.name} cannot be executed",
                    execution_time_ms=0.0,
                    timestamp=started_at,
                )

        if self._observer is not None:
            self._observer(
                ToolTrace(
                    tool_id=tool.id,
                    input_payload=payload,
                    status=result.status,
                    latency_ms=result.execution_time_ms,
                )
            )
        return result

    async def _invoke(
        self,
        tool: ToolDefinition,
        handler: ToolHandler,
        payload: dict[str, Any],
        started_at: datetime,
    ) -> ToolInvocationResult:
        timeout = tool.timeout_seconds or self.default_timeout_seconds
        error: str | None = None
        outcome: ToolResult | None = None

        with Timer() as timer:
            try:
                argument = (
                    tool.input_schema.model_validate(payload)
                    if tool.input_schema is not None
                    else payload
                )
                raw = handler(argument)
                if inspect.isawaitable(raw):
                    raw = await _await_with_timeout(raw, timeout)
                outcome = _coerce_result(raw)
            except asyncio.TimeoutError:
                error = f"Tool {tool.name} timed out after {timeout:g}s"
            except Exception as exc:  # tool capabilities are externally supplied
                error = str(exc) or exc.__class__.__name__

        if outcome is None:
            logger.warning("tool_execution_failed", tool_id=tool.id, error=error)
            return ToolInvocationResult(
                tool_id=tool.id,
                tool_name=tool.name,
                status=InvocationStatus.FAILED,
                error=error,
                execution_time_ms=timer.elapsed_ms,
                timestamp=started_at,
            )

        status = InvocationStatus.SUCCEEDED if outcome.success else InvocationStatus.FAILED
        if not outcome.success and not outcome.error:
            outcome.error = f"Tool {tool.name} reported a failure"
        logger.info(
            "tool_executed",
            tool_id=tool.id,
            status=status.value,
            latency_ms=round(timer.elapsed_ms, 3),
        )
        return ToolInvocationResult(
            tool_id=tool.id,
            tool_name=tool.name,
            status=status,
            data=outcome.data,
            message=outcome.message,
            error=outcome.error,
            copyable=outcome.copyable,
            execution_time_ms=timer.elapsed_ms,
            timestamp=started_at,
        )


async def _await_with_timeout(awaitable: Awaitable[Any], timeout: float) -> Any:
    # Shielded: a timeout fails the invocation but leaves the task running.
    return await asyncio.wait_for(asyncio.shield(awaitable), timeout)


def _coerce_result(raw: Any) -> ToolResult:
    if isinstance(raw, ToolResult):
        return raw
    if isinstance(raw, Mapping):
        return ToolResult(
            success=bool(raw.get("success", True)),
            data=raw.get("data"),
            message=raw.get("message"),
            error=raw.get("error"),
            copyable=raw.get("copyable"),
        )
    text = "" if raw is None else str(raw)
    return ToolResult(success=True, data=raw, message=text or None, copyable=text or None)
