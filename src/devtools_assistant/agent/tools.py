"""Built-in developer utility tools for the assistant."""

from __future__ import annotations

import base64
import binascii
import hashlib
import re
import secrets
import string
import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, Field

from devtools_assistant.agent.registry import ToolDefinition, ToolRegistry
from devtools_assistant.types import ToolResult

_LOREM_WORDS = (
    "lorem ipsum dolor sit amet consectetur adipiscing elit sed do eiusmod tempor "
    "incididunt ut labore et dolore magna aliqua ut enim ad minim veniam quis "
    "nostrud exercitation ullamco laboris nisi ut aliquip ex ea commodo consequat"
).split()


class UuidInput(BaseModel):
    quantity: int = Field(default=1, ge=1, le=100)


class Base64Input(BaseModel):
    value: str | None = None
    action: str = Field(default="encode", pattern="^(encode|decode)$")


class PasswordInput(BaseModel):
    length: int = Field(default=16, ge=4, le=256)
    uppercase: bool = True
    lowercase: bool = True
    numbers: bool = True
    symbols: bool = True


class TimestampInput(BaseModel):
    value: str | None = None


class HashInput(BaseModel):
    value: str | None = None
    algorithm: str = "sha256"


class LoremInput(BaseModel):
    quantity: int = Field(default=1, ge=1, le=20)


class CountInput(BaseModel):
    value: str | None = None


def _generate_uuids(input_data: UuidInput) -> ToolResult:
    uuids = [str(uuid.uuid4()) for _ in range(input_data.quantity)]
    message = (
        f"Generated UUID: {uuids[0]}"
        if len(uuids) == 1
        else f"Generated {len(uuids)} UUIDs:\n" + "\n".join(uuids)
    )
    return ToolResult(success=True, data=uuids, message=message, copyable="\n".join(uuids))


def _base64(input_data: Base64Input) -> ToolResult:
    if not input_data.value:
        return ToolResult(success=False, error="Please provide a value to encode or decode")

    if input_data.action == "encode":
        encoded = base64.b64encode(input_data.value.encode("utf-8")).decode("ascii")
        return ToolResult(
            success=True, data=encoded, message=f"Encoded to Base64: {encoded}", copyable=encoded
        )

    try:
        decoded = base64.b64decode(input_data.value, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as exc:
        return ToolResult(success=False, error=f"Failed to decode: {exc}")
    return ToolResult(
        success=True, data=decoded, message=f"Decoded from Base64: {decoded}", copyable=decoded
    )


def _generate_password(input_data: PasswordInput) -> ToolResult:
    charset = ""
    if input_data.lowercase:
        charset += string.ascii_lowercase
    if input_data.uppercase:
        charset += string.ascii_uppercase
    if input_data.numbers:
        charset += string.digits
    if input_data.symbols:
        charset += "!@#$%^&*()_+-=[]{}|;:,.<>?"
    if not charset:
        return ToolResult(success=False, error="At least one character type must be selected")

    password = "".join(secrets.choice(charset) for _ in range(input_data.length))
    return ToolResult(
        success=True,
        data=password,
        message=f"Generated {input_data.length}-character password: {password}",
        copyable=password,
    )


def _convert_timestamp(input_data: TimestampInput) -> ToolResult:
    if not input_data.value:
        now = datetime.now(timezone.utc)
        seconds = int(now.timestamp())
        return ToolResult(
            success=True,
            data={"timestamp": seconds, "iso": now.isoformat()},
            message=f"Current Unix timestamp: {seconds} ({now.isoformat()})",
            copyable=str(seconds),
        )

    value = input_data.value.strip()
    if re.fullmatch(r"\d{1,13}", value):
        number = int(value)
        # 13 digits are milliseconds.
        seconds = number / 1000 if len(value) > 10 else number
        moment = datetime.fromtimestamp(seconds, tz=timezone.utc)
        return ToolResult(
            success=True,
            data=moment.isoformat(),
            message=f"Timestamp {value} is {moment.isoformat()}",
            copyable=moment.isoformat(),
        )

    try:
        moment = datetime.fromisoformat(value)
    except ValueError:
        return ToolResult(success=False, error=f"Unrecognised date or timestamp: {value}")
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    seconds = int(moment.timestamp())
    return ToolResult(
        success=True,
        data=seconds,
        message=f"{value} is Unix timestamp {seconds}",
        copyable=str(seconds),
    )


def _hash(input_data: HashInput) -> ToolResult:
    if not input_data.value:
        return ToolResult(success=False, error="Please provide a value to hash")
    algorithm = input_data.algorithm.lower().replace("-", "")
    if algorithm not in hashlib.algorithms_available:
        return ToolResult(success=False, error=f"Algorithm {input_data.algorithm} is not supported")

    digest = hashlib.new(algorithm, input_data.value.encode("utf-8")).hexdigest()
    return ToolResult(
        success=True,
        data=digest,
        message=f"{algorithm.upper()} hash: {digest}",
        copyable=digest,
    )


def _lorem(input_data: LoremInput) -> ToolResult:
    paragraphs = []
    for index in range(input_data.quantity):
        offset = index % len(_LOREM_WORDS)
        words = (_LOREM_WORDS[offset:] + _LOREM_WORDS[:offset])[:40]
        paragraphs.append(" ".join(words).capitalize() + ".")
    text = "\n\n".join(paragraphs)
    return ToolResult(
        success=True,
        data=paragraphs,
        message=f"Generated {len(paragraphs)} paragraph(s):\n\n{text}",
        copyable=text,
    )


def _count_characters(input_data: CountInput) -> ToolResult:
    if input_data.value is None:
        return ToolResult(success=False, error="Please provide the text to count")
    text = input_data.value
    stats = {
        "characters": len(text),
        "characters_no_spaces": len(re.sub(r"\s", "", text)),
        "words": len(text.split()),
        "lines": len(text.splitlines()) or (1 if text else 0),
    }
    return ToolResult(
        success=True,
        data=stats,
        message=(
            f"Characters: {stats['characters']}, words: {stats['words']}, "
            f"lines: {stats['lines']}"
        ),
    )


_NAVIGATION_TOOLS: tuple[tuple[str, str, str, str, list[str], str], ...] = (
    ("jwt-debugger", "JWT Debugger", "Decode and inspect JSON Web Tokens", "encoding",
     ["jwt", "json web token", "token", "debug"], "/jwtDebugger"),
    ("json-formatter", "JSON Formatter", "Format, validate and beautify JSON", "converter",
     ["json", "format", "beautify", "validate", "pretty"], "/jsonFormatter"),
    ("otp-generator", "OTP Generator", "Generate time-based one time passwords", "security",
     ["otp", "totp", "one time password", "2fa", "authenticator"], "/otp"),
    ("qr-code", "QR Code Generator", "Create QR codes from text or URLs", "generator",
     ["qr", "qr code", "barcode"], "/qr-code"),
    ("color-converter", "Color Converter", "Convert colours between HEX, RGB and HSL", "converter",
     ["color", "hex", "rgb", "hsl", "palette"], "/color-converter"),
    ("rest-client", "REST Client", "Send HTTP requests to REST APIs", "api-testing",
     ["rest", "api", "http", "request"], "/rest-client"),
    ("websocket-client", "WebSocket Client", "Connect to and test WebSocket servers", "api-testing",
     ["websocket", "ws", "socket", "real-time"], "/websocket-client"),
    ("grpc-client", "gRPC Client", "Call gRPC services", "api-testing",
     ["grpc", "rpc", "protobuf"], "/grpc-client"),
    ("sql-generator", "SQL Generator", "Build SQL queries from a table description", "development",
     ["sql", "query", "database", "select", "insert"], "/sql-generator"),
    ("command-book", "Command Book", "Reference of git, docker and shell commands", "development",
     ["command", "cli", "git", "docker", "bash"], "/command-book"),
    ("kanban-board", "Kanban Board", "Organise tasks on a kanban board", "productivity",
     ["kanban", "board", "tasks", "todo"], "/kanban"),
)


def default_tools() -> list[ToolDefinition]:
    """Default developer utility catalog.

    Executable tools:
    - `uuid-generator`, `password-generator`, `lorem-ipsum`: generators.
    - `base64`: encode/decode text.
    - `unix-timestamp`: convert between epoch seconds and ISO dates.
    - `hash-generator`: hashlib digests.
    - `character-counter`: character, word and line counts.

    The remaining tools are navigation targets backed by dedicated screens.
    """

    tools = [
        ToolDefinition(
            id="uuid-generator",
            name="UUID Generator",
            description="Generate universally unique identifiers (UUIDs)",
            category="generator",
            keywords=["uuid", "guid", "unique id", "identifier"],
            examples=["generate a uuid", "give me a new uuid", "5 uuids please"],
            route="/uuid",
            handler=_generate_uuids,
            input_schema=UuidInput,
        ),
        ToolDefinition(
            id="base64",
            name="Base64 Encoder/Decoder",
            description="Encode text to Base64 or decode Base64 to text",
            category="encoding",
            keywords=["base64", "b64", "encode", "decode"],
            examples=["encode hello world to base64", "decode SGVsbG8gV29ybGQ="],
            route="/base64",
            handler=_base64,
            input_schema=Base64Input,
        ),
        ToolDefinition(
            id="password-generator",
            name="Password Generator",
            description="Generate secure random passwords with customizable options",
            category="generator",
            keywords=["password", "secure", "credentials", "secret"],
            examples=["generate a password", "create 16 character password"],
            route="/password",
            handler=_generate_password,
            input_schema=PasswordInput,
        ),
        ToolDefinition(
            id="unix-timestamp",
            name="Unix Timestamp Converter",
            description="Convert between Unix timestamps and human-readable dates",
            category="converter",
            keywords=["timestamp", "unix", "epoch", "date"],
            examples=["convert timestamp 1700000000", "current unix time"],
            route="/timestamp",
            handler=_convert_timestamp,
            input_schema=TimestampInput,
        ),
        ToolDefinition(
            id="hash-generator",
            name="Hash Generator",
            description="Generate SHA and MD5 hashes of text",
            category="security",
            keywords=["hash", "sha", "sha256", "sha512", "md5", "checksum"],
            examples=["hash 'hello' with sha256"],
            route="/hash",
            handler=_hash,
            input_schema=HashInput,
        ),
        ToolDefinition(
            id="lorem-ipsum",
            name="Lorem Ipsum Generator",
            description="Generate placeholder lorem ipsum text",
            category="generator",
            keywords=["lorem", "ipsum", "placeholder", "dummy text", "filler"],
            examples=["generate 3 paragraphs of lorem ipsum"],
            route="/lorem-ipsum",
            handler=_lorem,
            input_schema=LoremInput,
        ),
        ToolDefinition(
            id="character-counter",
            name="Character Counter",
            description="Count characters, words and lines in text",
            category="productivity",
            keywords=["count", "character", "word", "length"],
            examples=["count characters in 'hello world'"],
            route="/character-counter",
            handler=_count_characters,
            input_schema=CountInput,
        ),
    ]
    for tool_id, name, description, category, keywords, route in _NAVIGATION_TOOLS:
        tools.append(
            ToolDefinition(
                id=tool_id,
                name=name,
                description=description,
                category=category,
                keywords=keywords,
                route=route,
            )
        )
    return tools


def register_default_tools(registry: ToolRegistry) -> None:
    """Register the default tool set used by the orchestrator."""
    registry.register_all(default_tools())
