"""Exception types raised across collaborator boundaries."""

from __future__ import annotations


class AssistantError(Exception):
    """Base class for assistant errors."""


class CompletionError(AssistantError):
    """The completion provider failed (network, timeout, authorization)."""


class StorageError(AssistantError):
    """Key-value persistence is unavailable or rejected a write."""
