"""Bounded result cache with lazy per-entry TTL (the CAG layer)."""

from __future__ import annotations

import time
from collections import OrderedDict
from collections.abc import Callable
from typing import Any

from devtools_assistant.log import get_logger
from devtools_assistant.types import CacheEntry

logger = get_logger(__name__)


class CAGCache:
    """Insertion-ordered cache that evicts its oldest entry on overflow.

    Expiry is lazy: an entry whose TTL (seconds) has elapsed is removed the
    next time it is read. Nothing sweeps the cache in the background, so
    expired entries that are never read again keep their slot until capacity
    eviction or `clear()` reclaims it.
    """

    def __init__(
        self,
        max_size: int = 100,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._hits = 0
        self._misses = 0

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        if key in self._entries:
            # Overwrites count as a fresh insertion.
            del self._entries[key]
        while len(self._entries) >= self.max_size:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("cache_evicted", key=evicted)

        self._entries[key] = CacheEntry(key=key, value=value, timestamp=self._clock(), ttl=ttl)

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None

        if entry.is_expired(self._clock()):
            del self._entries[key]
            self._misses += 1
            logger.debug("cache_expired", key=key)
            return None

        self._hits += 1
        return entry.value

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def delete_prefixed(self, *prefixes: str) -> int:
        """Drop every entry whose key starts with one of `prefixes`."""
        stale = [key for key in self._entries if key.startswith(prefixes)]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def get_stats(self) -> dict[str, float | int]:
        lookups = self._hits + self._misses
        return {
            "size": len(self._entries),
            "max_size": self.max_size,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": self._hits / lookups if lookups else 0.0,
        }
