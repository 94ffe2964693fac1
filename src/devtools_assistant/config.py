"""Configuration models for the assistant."""

from __future__ import annotations

from pydantic import BaseModel, Field

DEFAULT_SYSTEM_PROMPT = """
You are the assistant of a developer utilities toolkit.

Capabilities:
- Generating UUIDs, passwords, hashes and placeholder text
- Encoding/decoding Base64 and inspecting JWT tokens
- Converting timestamps and colours
- Opening API testing clients (REST, WebSocket, gRPC) and other utilities

Guidelines:
1) Be concise but helpful and use markdown for structure.
2) When the user asks for a tool, suggest the matching utility by name.
3) When knowledge base context is provided, ground the answer in it.
4) Ask for clarification when the request is ambiguous.
""".strip()


class CacheConfig(BaseModel):
    """Configures the bounded CAG result cache."""

    max_size: int = Field(default=100, ge=1)
    search_ttl_seconds: float = Field(default=300.0, gt=0.0)


class KnowledgeConfig(BaseModel):
    """Configures keyword derivation and context assembly."""

    max_keywords: int = Field(default=20, ge=1)
    search_limit: int = Field(default=3, ge=1)
    context_length: int = Field(default=2000, ge=100)


class CompletionConfig(BaseModel):
    """Opaque selection of completion endpoint, model and credentials."""

    provider: str = "openai"
    endpoint: str | None = None
    model: str | None = None
    api_key: str | None = None
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=1000, ge=1)
    timeout_seconds: float = Field(default=30.0, gt=0.0, le=600.0)


class AssistantConfig(BaseModel):
    """Configures orchestration thresholds and collaborators."""

    history_window: int = Field(default=10, ge=1)
    tool_confidence_threshold: int = Field(default=40, ge=0, le=100)
    low_confidence_threshold: int = Field(default=20, ge=0, le=100)
    tool_timeout_seconds: float = Field(default=30.0, gt=0.0)
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    log_level: str = "INFO"
    log_json: bool = False
    completion: CompletionConfig = Field(default_factory=CompletionConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    knowledge: KnowledgeConfig = Field(default_factory=KnowledgeConfig)
