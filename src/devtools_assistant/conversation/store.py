"""Multi-conversation message log with persistence and import/export."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import TypeAdapter, ValidationError

from devtools_assistant.conversation.models import (
    Conversation,
    ConversationSummary,
    Message,
    MessageRole,
    new_id,
    utcnow,
)
from devtools_assistant.conversation.storage import KeyValueStore
from devtools_assistant.errors import StorageError
from devtools_assistant.log import get_logger

logger = get_logger(__name__)

STORAGE_KEY = "assistant_conversations"

_PROTECTED_FIELDS = frozenset({"id", "messages", "created_at"})
_ROLE_LABELS = {
    MessageRole.USER: "User",
    MessageRole.ASSISTANT: "Assistant",
    MessageRole.SYSTEM: "System",
}
_conversation_map = TypeAdapter(dict[str, Conversation])


class ConversationStore:
    """CRUD, append and import/export over named conversations.

    The in-memory map is authoritative. When a `KeyValueStore` is supplied it
    is read once at start-up and written after every change; storage failures
    are logged and the store keeps working from memory. Accessors return
    copies, so messages can only be added through `add_message`.
    """

    def __init__(self, storage: KeyValueStore | None = None, *, storage_key: str = STORAGE_KEY) -> None:
        self._storage = storage
        self._storage_key = storage_key
        self._conversations: dict[str, Conversation] = self._load()

    def get_conversations(self) -> list[ConversationSummary]:
        return [
            ConversationSummary(
                id=conversation.id,
                name=conversation.name,
                message_count=len(conversation.messages),
                created_at=conversation.created_at,
                updated_at=conversation.updated_at,
                provider=conversation.provider,
                model=conversation.model,
            )
            for conversation in self._conversations.values()
        ]

    def get_conversation(self, conversation_id: str) -> Conversation | None:
        conversation = self._conversations.get(conversation_id)
        return conversation.model_copy(deep=True) if conversation else None

    def has_conversation(self, conversation_id: str) -> bool:
        return conversation_id in self._conversations

    def create_conversation(
        self, name: str, provider: str | None = None, model: str | None = None
    ) -> Conversation:
        now = utcnow()
        conversation = Conversation(
            id=new_id(),
            name=name,
            messages=[],
            created_at=now,
            updated_at=now,
            provider=provider,
            model=model,
        )
        self._conversations[conversation.id] = conversation
        self._flush()
        logger.info("conversation_created", conversation_id=conversation.id)
        return conversation.model_copy(deep=True)

    def add_message(
        self,
        conversation_id: str,
        role: MessageRole | str,
        content: str,
        tool_result: dict[str, Any] | None = None,
    ) -> Conversation | None:
        conversation = self._conversations.get(conversation_id)
        if conversation is None:
            logger.warning("conversation_not_found", conversation_id=conversation_id)
            return None

        timestamp = utcnow()
        if conversation.messages and conversation.messages[-1].timestamp > timestamp:
            timestamp = conversation.messages[-1].timestamp
        conversation.messages.append(
            Message(role=MessageRole(role), content=content, timestamp=timestamp, tool_result=tool_result)
        )
        conversation.updated_at = _later(conversation.updated_at, timestamp)
        self._flush()
        return conversation.model_copy(deep=True)

    def update_conversation(self, conversation_id: str, updates: dict[str, Any]) -> Conversation | None:
        """Merge `updates` into a conversation.

        `id`, `messages` and `created_at` cannot be changed this way; such keys
        are ignored. Returns None for unknown ids or invalid values.
        """

        conversation = self._conversations.get(conversation_id)
        if conversation is None:
            return None

        ignored = sorted(_PROTECTED_FIELDS & updates.keys())
        if ignored:
            logger.warning("protected_fields_ignored", conversation_id=conversation_id, fields=ignored)
        changes = {key: value for key, value in updates.items() if key not in _PROTECTED_FIELDS}

        try:
            updated = Conversation.model_validate(
                {
                    **conversation.model_dump(),
                    **changes,
                    "updated_at": _later(conversation.updated_at, utcnow()),
                }
            )
        except ValidationError as exc:
            logger.warning("conversation_update_rejected", conversation_id=conversation_id, error=str(exc))
            return None

        self._conversations[conversation_id] = updated
        self._flush()
        return updated.model_copy(deep=True)

    def rename_conversation(self, conversation_id: str, new_name: str) -> bool:
        return self.update_conversation(conversation_id, {"name": new_name}) is not None

    def delete_conversation(self, conversation_id: str) -> bool:
        if self._conversations.pop(conversation_id, None) is None:
            return False
        self._flush()
        logger.info("conversation_deleted", conversation_id=conversation_id)
        return True

    def export_conversation(self, conversation_id: str) -> str | None:
        conversation = self._conversations.get(conversation_id)
        if conversation is None:
            return None
        return conversation.model_dump_json(indent=2)

    def export_conversation_markdown(self, conversation_id: str) -> str | None:
        conversation = self._conversations.get(conversation_id)
        if conversation is None:
            return None

        lines = [
            f"# {conversation.name}",
            "",
            f"**Created:** {_format_time(conversation.created_at)}",
            f"**Updated:** {_format_time(conversation.updated_at)}",
        ]
        if conversation.provider:
            lines.append(f"**Provider:** {conversation.provider}")
        if conversation.model:
            lines.append(f"**Model:** {conversation.model}")
        lines.extend(["", "---", ""])

        for message in conversation.messages:
            lines.extend(
                [
                    f"## {_ROLE_LABELS[message.role]}",
                    f"*{_format_time(message.timestamp)}*",
                    "",
                    message.content,
                    "",
                    "---",
                    "",
                ]
            )
        return "\n".join(lines)

    def import_conversation(self, payload: str) -> Conversation | None:
        """Import an exported conversation under a freshly generated id."""
        try:
            conversation = Conversation.model_validate_json(payload)
        except ValidationError as exc:
            logger.warning("conversation_import_rejected", error=str(exc))
            return None

        conversation.id = new_id()
        conversation.updated_at = _later(conversation.updated_at, utcnow())
        self._conversations[conversation.id] = conversation
        self._flush()
        logger.info("conversation_imported", conversation_id=conversation.id)
        return conversation.model_copy(deep=True)

    def clear_all(self) -> None:
        self._conversations.clear()
        if self._storage is None:
            return
        try:
            self._storage.remove(self._storage_key)
        except StorageError as exc:
            logger.warning("storage_remove_failed", error=str(exc))

    def _load(self) -> dict[str, Conversation]:
        if self._storage is None:
            return {}
        try:
            raw = self._storage.get(self._storage_key)
        except StorageError as exc:
            logger.warning("storage_read_failed", error=str(exc))
            return {}
        if not raw:
            return {}
        try:
            return _conversation_map.validate_json(raw)
        except ValidationError as exc:
            logger.warning("stored_conversations_invalid", error=str(exc))
            return {}

    def _flush(self) -> None:
        if self._storage is None:
            return
        try:
            self._storage.set(
                self._storage_key,
                _conversation_map.dump_json(self._conversations).decode("utf-8"),
            )
        except StorageError as exc:
            logger.warning("storage_write_failed", error=str(exc))


def _later(current: datetime, candidate: datetime) -> datetime:
    return candidate if candidate > current else current


def _format_time(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%d %H:%M:%S %Z").strip()
