import pytest

from devtools_assistant.agent.intent import IntentParser
from devtools_assistant.types import IntentLabel


@pytest.fixture()
def parser() -> IntentParser:
    return IntentParser()


def test_generate_uuid_intent(parser: IntentParser) -> None:
    intent = parser.parse("generate a uuid")

    assert intent.label is IntentLabel.GENERATE
    assert intent.confidence == 80
    assert intent.suggested_tool == "uuid-generator"
    assert intent.suggested_category == "generator"
    assert intent.entities.format == "uuid"


def test_gibberish_is_unknown_with_zero_confidence(parser: IntentParser) -> None:
    intent = parser.parse("asdf qwer zxcv")

    assert intent.label is IntentLabel.UNKNOWN
    assert intent.confidence == 0
    assert intent.suggested_tool is None


def test_longer_keyword_breaks_confidence_tie(parser: IntentParser) -> None:
    intent = parser.parse("encode hello to base64")

    assert intent.label is IntentLabel.ENCODE
    assert intent.entities.value == "hello"
    assert intent.entities.target_format == "base64"
    assert intent.suggested_tool == "base64"


def test_navigation_intent(parser: IntentParser) -> None:
    intent = parser.parse("open kanban")

    assert intent.label is IntentLabel.NAVIGATE
    assert intent.suggested_tool == "kanban-board"


def test_keywords_match_whole_words_only(parser: IntentParser) -> None:
    # "tokenize" must not count as the "to" keyword of the convert rule.
    intent = parser.parse("tokenize")

    assert intent.label is IntentLabel.UNKNOWN


def test_confidence_is_capped(parser: IntentParser) -> None:
    intent = parser.parse("generate create make new random generate a thing")

    assert intent.confidence <= 100


@pytest.mark.parametrize(
    ("text", "expected"),
    [("help", True), ("  what can you do  ", True), ("hi", True), ("list all tools", True), ("help me encode", False)],
)
def test_help_predicate(parser: IntentParser, text: str, expected: bool) -> None:
    assert parser.is_help_request(text) is expected


def test_conversational_predicate(parser: IntentParser) -> None:
    assert parser.is_conversational("what is a jwt?")
    assert parser.is_conversational("tell me about grpc streaming")
    assert not parser.is_conversational("generate a uuid")


def test_entity_extraction(parser: IntentParser) -> None:
    password = parser.extract_entities("generate a 24 character password")
    uuids = parser.extract_entities("generate 5 uuids")
    url = parser.extract_entities("test https://api.example.com/health")

    assert password.length == 24
    assert password.quantity is None
    assert password.tool_name == "password"
    assert uuids.quantity == 5
    assert uuids.format == "uuid"
    assert url.url == "https://api.example.com/health"
    assert url.action is None


def test_alias_lookup(parser: IntentParser) -> None:
    assert parser.mentions_tool("please hash this") == "hash-generator"
    assert parser.resolve_alias("GUID") == "uuid-generator"
    assert parser.resolve_alias("unknown") is None


def test_suggestions_for_partial_input(parser: IntentParser) -> None:
    suggestions = parser.suggestions("uuid")

    assert "generate a UUID" in suggestions
    assert "open uuid" in suggestions
    assert len(parser.suggestions("")) == 5


def test_oversized_numbers_leave_entities_unset(parser: IntentParser) -> None:
    quantity = parser.parse("generate " + "9" * 5000 + " uuids")
    length = parser.extract_entities("generate a " + "7" * 5000 + " character password")

    assert quantity.entities.quantity is None
    assert quantity.entities.format == "uuid"
    assert length.length is None
    assert length.tool_name == "password"
