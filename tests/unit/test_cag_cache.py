import time

import pytest

from devtools_assistant.knowledge.cache import CAGCache


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_oldest_entry_is_evicted_when_full() -> None:
    cache = CAGCache(max_size=5)
    for index in range(6):
        cache.set(f"key-{index}", index)

    assert cache.get("key-0") is None
    assert cache.get("key-5") == 5
    assert len(cache) == 5


def test_overwrite_counts_as_newest_insertion() -> None:
    cache = CAGCache(max_size=3)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("c", 3)
    cache.set("a", 10)
    cache.set("d", 4)

    assert cache.get("a") == 10
    assert cache.get("b") is None
    assert len(cache) == 3


def test_ttl_expires_lazily_on_read() -> None:
    clock = FakeClock()
    cache = CAGCache(max_size=10, clock=clock)
    cache.set("k", "v", ttl=5.0)

    clock.now += 5.0
    assert cache.get("k") == "v"

    clock.now += 0.5
    assert len(cache) == 1
    assert cache.get("k") is None
    assert len(cache) == 0


def test_entries_without_ttl_never_expire() -> None:
    clock = FakeClock()
    cache = CAGCache(clock=clock)
    cache.set("forever", 1)

    clock.now += 10_000_000
    assert cache.get("forever") == 1


def test_real_clock_ttl() -> None:
    cache = CAGCache()
    cache.set("k", "v", 0.1)

    assert cache.get("k") == "v"
    time.sleep(0.15)
    assert cache.get("k") is None


def test_stats_track_hits_and_misses() -> None:
    cache = CAGCache(max_size=4)
    cache.set("k", "v")
    cache.get("k")
    cache.get("k")
    cache.get("missing")

    stats = cache.get_stats()

    assert stats["size"] == 1
    assert stats["max_size"] == 4
    assert stats["hits"] == 2
    assert stats["misses"] == 1
    assert stats["hit_rate"] == pytest.approx(2 / 3)


def test_delete_and_clear() -> None:
    cache = CAGCache()
    cache.set("a", 1)
    cache.set("b", 2)

    assert cache.delete("a") is True
    assert cache.delete("a") is False
    cache.clear()
    assert len(cache) == 0


def test_max_size_must_be_positive() -> None:
    with pytest.raises(ValueError):
        CAGCache(max_size=0)


def test_delete_prefixed_only_drops_matching_keys() -> None:
    cache = CAGCache()
    cache.set("keyword:redis", (1,))
    cache.set("metadata:{}", ())
    cache.set("raw", 1)

    assert cache.delete_prefixed("keyword:", "metadata:") == 2
    assert len(cache) == 1
    assert cache.get("raw") == 1
