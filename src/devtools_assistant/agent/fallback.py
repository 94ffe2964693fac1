"""Deterministic replies used when no tool or completion provider answers."""

from __future__ import annotations

from devtools_assistant.agent.registry import CATEGORY_LABELS, ToolRegistry
from devtools_assistant.types import AssistantResponse, Intent

HELP_SUGGESTIONS = (
    "Generate a UUID",
    "Create a password",
    "Encode to Base64",
    "Configure AI Provider",
)

_HELP_TIPS = (
    'Say "generate a UUID" to create unique identifiers',
    'Say "encode hello world to base64" to encode text',
    'Say "open kanban" to navigate to a tool',
    "Just describe what you need, and I'll help!",
)
_TOOLS_PER_CATEGORY = 4


def category_label(category: str) -> str:
    return CATEGORY_LABELS.get(category, category)


def build_help_response(registry: ToolRegistry) -> AssistantResponse:
    """Capability listing grouped by category, most populous first."""
    lines = ["Hello! I'm your developer tools assistant. I can help you with:", ""]
    for category, count in registry.get_categories():
        names = ", ".join(tool.name for tool in registry.get_by_category(category)[:_TOOLS_PER_CATEGORY])
        more = f" (+{count - _TOOLS_PER_CATEGORY} more)" if count > _TOOLS_PER_CATEGORY else ""
        lines.extend([f"**{category_label(category)}**", f"{names}{more}", ""])

    lines.append("**Tips:**")
    lines.extend(f"- {tip}" for tip in _HELP_TIPS)
    return AssistantResponse(text="\n".join(lines), suggestions=list(HELP_SUGGESTIONS))


def build_fallback_text(intent: Intent, registry: ToolRegistry, low_confidence_threshold: int = 20) -> str:
    """Templated reply derived from the parsed intent; never empty."""
    if intent.suggested_tool:
        tool = registry.get(intent.suggested_tool)
        if tool is not None:
            text = f"I found the **{tool.name}** tool that might help. Would you like me to open it?"
            return f"{text}\n\n{tool.description}" if tool.description else text

    if intent.confidence < low_confidence_threshold:
        return (
            "I'm not sure what you need. Try:\n"
            '- "generate uuid" for unique identifiers\n'
            '- "encode [text] to base64"\n'
            '- "help" to see all available tools'
        )

    return (
        f"I understand you want to {intent.label.value}, but I need more details. "
        "Could you be more specific?"
    )
