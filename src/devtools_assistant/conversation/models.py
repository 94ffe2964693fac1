"""Conversation and message models."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class Message(BaseModel):
    id: str = Field(default_factory=new_id)
    role: MessageRole
    content: str
    timestamp: datetime = Field(default_factory=utcnow)
    tool_result: dict[str, Any] | None = None


class Conversation(BaseModel):
    """A named, append-only message log.

    `id`, `name` and `messages` are required when validating external input,
    which is the minimal shape accepted by imports.
    """

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    messages: list[Message]
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    provider: str | None = None
    model: str | None = None


class ConversationSummary(BaseModel):
    id: str
    name: str
    message_count: int
    created_at: datetime
    updated_at: datetime
    provider: str | None = None
    model: str | None = None

    @property
    def title(self) -> str:
        return f"{self.name} ({self.message_count} messages, {self.created_at.date().isoformat()})"
