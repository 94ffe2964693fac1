from devtools_assistant.agent.fallback import build_fallback_text, build_help_response
from devtools_assistant.agent.intent import IntentParser
from devtools_assistant.agent.registry import ToolDefinition, ToolRegistry
from devtools_assistant.agent.tools import register_default_tools
from devtools_assistant.config import DEFAULT_SYSTEM_PROMPT


def _registry() -> ToolRegistry:
    registry = ToolRegistry()
    register_default_tools(registry)
    return registry


def test_system_prompt_describes_tools_and_grounding() -> None:
    assert "developer utilities toolkit" in DEFAULT_SYSTEM_PROMPT
    assert "knowledge base context" in DEFAULT_SYSTEM_PROMPT
    assert "suggest the matching utility" in DEFAULT_SYSTEM_PROMPT


def test_help_response_lists_default_categories() -> None:
    response = build_help_response(_registry())

    assert "**Generators**" in response.text
    assert "UUID Generator" in response.text
    assert "more)" not in response.text
    assert response.suggestions


def test_help_response_caps_tools_per_category() -> None:
    registry = ToolRegistry()
    registry.register_all(
        [ToolDefinition(id=f"gen-{index}", category="generator", route=f"/gen/{index}") for index in range(6)]
    )

    response = build_help_response(registry)

    assert "gen-0, gen-1, gen-2, gen-3 (+2 more)" in response.text


def test_scripted_replies_are_never_empty() -> None:
    parser = IntentParser()
    registry = _registry()
    queries = ["", "asdf", "generate a uuid", "convert this to that", "please do something", "open nowhere"]

    for query in queries:
        assert build_fallback_text(parser.parse(query), registry).strip()


def test_scripted_reply_mentions_suggested_tool() -> None:
    text = build_fallback_text(IntentParser().parse("generate a uuid"), _registry())

    assert "**UUID Generator**" in text
