"""Pattern-based intent parsing for user utterances."""

from __future__ import annotations

import re
from dataclasses import dataclass

from devtools_assistant.types import Entities, Intent, IntentLabel


@dataclass(frozen=True, slots=True)
class IntentRule:
    """Keywords and patterns voting for one intent label."""

    label: IntentLabel
    keywords: tuple[str, ...]
    patterns: tuple[re.Pattern[str], ...]


def _compile(*patterns: str) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(pattern, re.IGNORECASE) for pattern in patterns)


KEYWORD_WEIGHT = 30
PATTERN_WEIGHT = 50

INTENT_RULES: tuple[IntentRule, ...] = (
    IntentRule(
        IntentLabel.ENCODE,
        ("encode", "encrypt", "hash", "convert to"),
        _compile(r"encode\s+(.+)\s+(?:to|as|in)\s+(\w+)", r"(?:base64|jwt|hash)\s+encode", r"encrypt\s+(.+)"),
    ),
    IntentRule(
        IntentLabel.DECODE,
        ("decode", "decrypt", "parse", "read"),
        _compile(r"decode\s+(.+)", r"(?:base64|jwt)\s+decode", r"decrypt\s+(.+)", r"parse\s+(?:this\s+)?(\w+)"),
    ),
    IntentRule(
        IntentLabel.GENERATE,
        ("generate", "create", "make", "new", "random"),
        _compile(
            r"generate\s+(?:a\s+)?(?:new\s+)?(\w+)",
            r"create\s+(?:a\s+)?(?:new\s+)?(\w+)",
            r"(?:give|get)\s+(?:me\s+)?(?:a\s+)?(?:new\s+)?(\w+)",
            r"(\d+)\s+(\w+)s?",
        ),
    ),
    IntentRule(
        IntentLabel.CONVERT,
        ("convert", "transform", "change", "to"),
        _compile(r"convert\s+(.+)\s+(?:to|into)\s+(\w+)", r"transform\s+(.+)\s+(?:to|into)\s+(\w+)", r"(\w+)\s+to\s+(\w+)"),
    ),
    IntentRule(
        IntentLabel.TEST,
        ("test", "check", "verify", "validate", "scan", "try"),
        _compile(r"test\s+(.+)", r"check\s+(.+)", r"scan\s+(.+)", r"validate\s+(.+)"),
    ),
    IntentRule(
        IntentLabel.ANALYZE,
        ("analyze", "inspect", "debug", "examine", "look at"),
        _compile(r"analyze\s+(.+)", r"debug\s+(.+)", r"inspect\s+(.+)"),
    ),
    IntentRule(
        IntentLabel.CREATE,
        ("create", "build", "make", "write", "compose"),
        _compile(r"create\s+(?:a\s+)?(.+)", r"build\s+(?:a\s+)?(.+)", r"write\s+(?:a\s+)?(.+)"),
    ),
    IntentRule(
        IntentLabel.HELP,
        ("help", "how", "what", "can you", "show me", "list"),
        _compile(
            r"(?:what\s+)?can\s+you\s+(?:do|help)",
            r"help\s*(?:me)?(?:\s+with)?\s*(.+)?",
            r"how\s+(?:do\s+I|to)\s+(.+)",
            r"show\s+(?:me\s+)?(?:all\s+)?tools",
            r"list\s+(?:all\s+)?(?:available\s+)?tools",
        ),
    ),
    IntentRule(
        IntentLabel.NAVIGATE,
        ("go to", "open", "show", "navigate", "take me"),
        _compile(r"(?:go|navigate)\s+to\s+(.+)", r"open\s+(?:the\s+)?(.+)", r"take\s+me\s+to\s+(.+)"),
    ),
    IntentRule(
        IntentLabel.EXECUTE,
        ("run", "execute", "perform"),
        _compile(r"^run\s+(.+)", r"^execute\s+(.+)", r"^please\s+do\s+(.+)"),
    ),
)

# Order matters: the first matching format wins.
FORMAT_PATTERNS: dict[str, tuple[re.Pattern[str], ...]] = {
    "base64": _compile(r"base\s*64", r"\bb64\b"),
    "jwt": _compile(r"\bjwt\b", r"json\s*web\s*token"),
    "json": _compile(r"\bjson\b"),
    "uuid": _compile(r"\buuids?\b", r"\bguids?\b"),
    "password": _compile(r"password", r"\bpass\b"),
    "otp": _compile(r"\b[t]?otp\b", r"one\s*time"),
    "hash": _compile(r"\bhash", r"\bmd5\b", r"\bsha\d*\b"),
    "timestamp": _compile(r"timestamp", r"unix\s*time", r"\bepoch\b"),
    "qr": _compile(r"qr\s*code", r"\bqr\b"),
    "color": _compile(r"colou?r", r"\bhex\b", r"\brgb\b", r"\bhsl\b"),
    "url": _compile(r"\burl\b", r"\blink\b", r"\bwebsite\b"),
}

TOOL_ALIASES: dict[str, str] = {
    "base64": "base64",
    "b64": "base64",
    "jwt": "jwt-debugger",
    "json": "json-formatter",
    "uuid": "uuid-generator",
    "guid": "uuid-generator",
    "password": "password-generator",
    "otp": "otp-generator",
    "totp": "otp-generator",
    "hash": "hash-generator",
    "md5": "hash-generator",
    "sha": "hash-generator",
    "sha256": "hash-generator",
    "timestamp": "unix-timestamp",
    "unix": "unix-timestamp",
    "epoch": "unix-timestamp",
    "qr code": "qr-code",
    "qr": "qr-code",
    "color": "color-converter",
    "colour": "color-converter",
    "rest": "rest-client",
    "api": "rest-client",
    "websocket": "websocket-client",
    "ws": "websocket-client",
    "grpc": "grpc-client",
    "kanban": "kanban-board",
    "board": "kanban-board",
    "tasks": "kanban-board",
    "sql": "sql-generator",
    "command": "command-book",
    "commands": "command-book",
    "lorem ipsum": "lorem-ipsum",
    "lorem": "lorem-ipsum",
    "character": "character-counter",
    "counter": "character-counter",
}

INTENT_CATEGORIES: dict[IntentLabel, str] = {
    IntentLabel.ENCODE: "encoding",
    IntentLabel.DECODE: "encoding",
    IntentLabel.GENERATE: "generator",
    IntentLabel.CONVERT: "converter",
    IntentLabel.TEST: "api-testing",
}

SUGGESTED_ACTIONS: tuple[str, ...] = (
    "generate a UUID",
    "generate a password",
    "encode to Base64",
    "decode JWT token",
    "convert timestamp",
    "test API endpoint",
    "create QR code",
    "format JSON",
    "hash text with sha256",
)

_HELP_PATTERNS = _compile(
    r"^help$",
    r"what can you do",
    r"show.+tools",
    r"list.+tools",
    r"^hi$",
    r"^hello$",
    r"^hey$",
)
_CONVERSATIONAL_PATTERNS = _compile(
    r"^(do you|can you|will you|would you|could you)\s+(know|think|believe|remember|understand)",
    r"^(who|what|why|how|when|where)\s+(is|are|was|were|do|does|did)\s",
    r"^(tell me about|explain|describe)\s",
    r"\?$",
)
_ACTION_VERBS = ("encode", "decode", "encrypt", "decrypt", "generate", "convert", "navigate", "open", "hash", "create")
_URL_PATTERN = re.compile(r"(https?://\S+)", re.IGNORECASE)
_QUANTITY_PATTERN = re.compile(r"(?<!\d)(\d{1,6})\s+(?:new\s+)?([a-z]+?)s?\b", re.IGNORECASE)
_LENGTH_PATTERN = re.compile(r"(?<!\d)(\d{1,6})[\s-]*(?:characters?|chars?|digits?|length)", re.IGNORECASE)
_QUOTED_PATTERN = re.compile(r"[\"']([^\"']+)[\"']")
_VALUE_TARGET_PATTERN = re.compile(
    r"(?:encode|decode|encrypt|decrypt|hash|convert)\s+(.+?)\s+(?:to|as|into|in)\s+(\w+)\s*$",
    re.IGNORECASE,
)
_VALUE_PATTERN = re.compile(
    r"(?:encode|decode|encrypt|decrypt|hash|convert)\s+[\"']?([^\"'\s]+)[\"']?", re.IGNORECASE
)
_CONNECTIVES = frozenset({"to", "as", "in", "into", "from", "a", "an", "the", "this", "my", "it"})


class IntentParser:
    """Classifies free text into an intent label, entities and a confidence.

    Each rule contributes `KEYWORD_WEIGHT` per keyword found (word-boundary
    match) and `PATTERN_WEIGHT` once if any of its patterns match; the total is
    capped at 100. The best rule wins on confidence, then on the length of its
    longest matched keyword, then on evaluation order.

    Parsing never raises: an utterance nothing matches yields `unknown` with
    confidence 0.
    """

    def __init__(
        self,
        rules: tuple[IntentRule, ...] = INTENT_RULES,
        aliases: dict[str, str] | None = None,
    ) -> None:
        self.rules = rules
        self.aliases = dict(TOOL_ALIASES if aliases is None else aliases)
        self._alias_patterns = {
            alias: re.compile(rf"\b{re.escape(alias)}s?\b", re.IGNORECASE)
            for alias in self.aliases
        }

    def parse(self, raw_query: str) -> Intent:
        normalized = raw_query.strip().lower()
        entities = self.extract_entities(raw_query)

        best_label = IntentLabel.UNKNOWN
        best_rank = (0, 0)
        for rule in self.rules:
            confidence = 0
            specificity = 0
            for keyword in rule.keywords:
                if _contains_phrase(normalized, keyword):
                    confidence += KEYWORD_WEIGHT
                    specificity = max(specificity, len(keyword))
            if any(pattern.search(raw_query) for pattern in rule.patterns):
                confidence += PATTERN_WEIGHT

            rank = (confidence, specificity)
            if confidence > 0 and rank > best_rank:
                best_rank = rank
                best_label = rule.label

        suggested_tool: str | None = None
        if entities.tool_name:
            suggested_tool = self.aliases.get(entities.tool_name.lower(), entities.tool_name)
        elif entities.format:
            suggested_tool = self.aliases.get(entities.format.lower())

        return Intent(
            raw_query=raw_query,
            label=best_label,
            confidence=min(best_rank[0], 100),
            entities=entities,
            suggested_tool=suggested_tool,
            suggested_category=INTENT_CATEGORIES.get(best_label),
        )

    def extract_entities(self, query: str) -> Entities:
        entities = Entities()

        for format_name, patterns in FORMAT_PATTERNS.items():
            if any(pattern.search(query) for pattern in patterns):
                entities.format = format_name
                break

        url_match = _URL_PATTERN.search(query)
        if url_match:
            entities.url = url_match.group(1)

        length_match = _LENGTH_PATTERN.search(query)
        if length_match:
            entities.length = int(length_match.group(1))

        quantity_match = _QUANTITY_PATTERN.search(query)
        if quantity_match and not length_match:
            entities.quantity = int(quantity_match.group(1))
            if entities.format is None:
                entities.format = quantity_match.group(2).lower()

        entities.tool_name = self.mentions_alias(query)

        quoted = _QUOTED_PATTERN.search(query)
        if quoted:
            entities.value = quoted.group(1)

        value_target = _VALUE_TARGET_PATTERN.search(query)
        if value_target:
            if entities.value is None:
                entities.value = value_target.group(1).strip("\"'")
            entities.target_format = value_target.group(2).lower()
        elif entities.value is None:
            value_match = _VALUE_PATTERN.search(query)
            if value_match and value_match.group(1).lower() not in _CONNECTIVES:
                entities.value = value_match.group(1)

        lowered = query.lower()
        for verb in _ACTION_VERBS:
            if _contains_phrase(lowered, verb):
                entities.action = verb
                break

        return entities

    def is_help_request(self, text: str) -> bool:
        stripped = text.strip()
        return any(pattern.search(stripped) for pattern in _HELP_PATTERNS)

    def is_conversational(self, text: str) -> bool:
        """Questions and small talk that should be answered, not dispatched to a tool."""
        stripped = text.strip()
        return any(pattern.search(stripped) for pattern in _CONVERSATIONAL_PATTERNS)

    def mentions_alias(self, text: str) -> str | None:
        """First alias, in table order, mentioned in the text."""
        for alias, pattern in self._alias_patterns.items():
            if pattern.search(text):
                return alias
        return None

    def mentions_tool(self, text: str) -> str | None:
        alias = self.mentions_alias(text)
        return self.aliases[alias] if alias else None

    def resolve_alias(self, alias: str) -> str | None:
        return self.aliases.get(alias.lower())

    def suggestions(self, partial_query: str, limit: int = 5) -> list[str]:
        """Suggested commands for a partial or unrecognised input."""
        lowered = partial_query.strip().lower()
        suggestions = [action for action in SUGGESTED_ACTIONS if lowered in action.lower()]
        for alias in self.aliases:
            candidate = f"open {alias}"
            if lowered in alias and candidate not in suggestions:
                suggestions.append(candidate)
        return suggestions[:limit]


def _contains_phrase(text: str, phrase: str) -> bool:
    return re.search(rf"\b{re.escape(phrase)}\b", text) is not None
