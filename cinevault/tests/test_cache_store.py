"""Cache envelope expiry, sliding TTL, eviction and backend fallback."""

from __future__ import annotations

import json
import logging

from redis.exceptions import RedisError

import cinevault.services.cache_store as cache_store_module
from cinevault.core.config import settings
from cinevault.services.cache_store import DAY_MS, CacheStore, MemoryCacheBackend


class FakeClock:
    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


def _store(clock: FakeClock, **kwargs) -> CacheStore:
    return CacheStore(MemoryCacheBackend(), clock=clock, **kwargs)


def test_cache_round_trip_and_miss() -> None:
    store = _store(FakeClock())
    assert store.get("missing") is None
    store.set("k", [{"Title": "Parasite"}])
    assert store.get("k") == [{"Title": "Parasite"}]


def test_expired_entry_is_purged_on_read() -> None:
    clock = FakeClock()
    store = _store(clock, ttl_ms=10 * DAY_MS)
    store.set("k", "value")

    clock.advance(10 * DAY_MS + 1)
    assert store.get("k") is None
    assert store.backend.get(f"{store.namespace}k") is None


def test_get_slides_the_expiry_window() -> None:
    clock = FakeClock()
    store = _store(clock, ttl_ms=10 * DAY_MS)
    store.set("k", "value")

    clock.advance(9 * DAY_MS)
    assert store.get("k") == "value"
    clock.advance(9 * DAY_MS)
    assert store.get("k") == "value"

    envelope = json.loads(store.backend.get(f"{store.namespace}k"))
    assert envelope["expiresAt"] == clock.now + 10 * DAY_MS
    assert envelope["lastAccessed"] == clock.now


def test_version_mismatch_and_corrupt_entries_are_never_served() -> None:
    clock = FakeClock()
    backend = MemoryCacheBackend()
    old = CacheStore(backend, version="v0", clock=clock)
    old.set("stale", "old-shape")
    backend.set(f"{old.namespace}broken", "{not json")

    store = CacheStore(backend, version="v1", clock=clock)
    # Construction purges both entries.
    assert backend.keys(store.namespace) == []
    assert store.get("stale") is None
    assert store.get("broken") is None


def test_size_bound_evicts_least_recently_accessed() -> None:
    clock = FakeClock()
    store = _store(clock, max_entries=2)
    store.set("a", 1)
    clock.advance(1)
    store.set("b", 2)
    clock.advance(1)
    assert store.get("a") == 1
    clock.advance(1)
    store.set("c", 3)

    assert store.get("b") is None
    assert store.get("a") == 1
    assert store.get("c") == 3
    assert store.stats()["totalEntries"] == 2


def test_corrupt_entries_are_evicted_first() -> None:
    clock = FakeClock()
    store = _store(clock, max_entries=2)
    store.set("a", 1)
    store.backend.set(f"{store.namespace}junk", "not-json")
    clock.advance(1)
    store.set("b", 2)

    assert store.backend.get(f"{store.namespace}junk") is None
    assert store.get("a") == 1
    assert store.get("b") == 2


def test_stats_count_expired_entries_without_purging() -> None:
    clock = FakeClock()
    store = _store(clock, ttl_ms=DAY_MS, max_entries=50)
    store.set("fresh", 1)
    clock.advance(DAY_MS + 1)
    store.set("newer", 2)

    stats = store.stats()
    assert stats == {"totalEntries": 2, "expiredEntries": 1, "maxEntries": 50}

    assert store.evict_expired() == 1
    assert store.stats()["totalEntries"] == 1


def test_clear_only_touches_own_namespace() -> None:
    backend = MemoryCacheBackend()
    backend.set("other:key", "keep")
    store = CacheStore(backend)
    store.set("k", 1)
    store.clear()
    assert store.stats()["totalEntries"] == 0
    assert backend.get("other:key") == "keep"


def test_unserializable_value_is_skipped(caplog) -> None:
    store = _store(FakeClock())
    caplog.set_level(logging.WARNING, logger="cinevault.services.cache")
    store.set("k", {"bad": object()})
    assert store.get("k") is None
    assert "Skipping cache write" in caplog.text


def test_redis_failure_falls_back_to_memory_and_redacts(monkeypatch, caplog) -> None:
    secret_url = "redis://:supersecret@localhost:6379/0"
    monkeypatch.setattr(settings, "redis_url", secret_url)

    class DummyRedis:
        @staticmethod
        def from_url(url: str, **kwargs):
            raise RedisError(f"Connection failed: {url}")

    monkeypatch.setattr(cache_store_module, "Redis", DummyRedis)

    caplog.set_level(logging.WARNING, logger="cinevault.services.cache")
    store = CacheStore.from_settings()

    assert store.backend_name == "memory"
    assert "supersecret" not in caplog.text
    assert "redis://***@localhost:6379/0" in caplog.text


def test_reachable_redis_backend_is_used(monkeypatch) -> None:
    class DummyConnection:
        def __init__(self) -> None:
            self.data: dict[str, str] = {}

        def ping(self) -> bool:
            return True

        def get(self, key: str):
            return self.data.get(key)

        def set(self, key: str, value: str) -> None:
            self.data[key] = value

        def delete(self, key: str) -> None:
            self.data.pop(key, None)

        def scan_iter(self, match: str):
            prefix = match.rstrip("*")
            return [key for key in list(self.data) if key.startswith(prefix)]

    connection = DummyConnection()

    class DummyRedis:
        @staticmethod
        def from_url(url: str, **kwargs):
            assert kwargs["decode_responses"] is True
            return connection

    monkeypatch.setattr(settings, "redis_url", "redis://localhost:6379/0")
    monkeypatch.setattr(cache_store_module, "Redis", DummyRedis)

    store = CacheStore.from_settings()
    store.set("k", {"hits": 1})

    assert store.backend_name == "redis"
    assert store.get("k") == {"hits": 1}
    assert f"{settings.cache_namespace}k" in connection.data


def test_redis_error_after_startup_switches_to_memory(monkeypatch, caplog) -> None:
    class DroppedConnection:
        def ping(self) -> bool:
            return True

        def get(self, *args):
            raise RedisError("Error 111 connecting to redis://:supersecret@cache:6379. Connection refused.")

        set = delete = get

        def scan_iter(self, match: str):
            return []

    class DummyRedis:
        @staticmethod
        def from_url(url: str, **kwargs):
            return DroppedConnection()

    monkeypatch.setattr(settings, "redis_url", "redis://cache:6379/0")
    monkeypatch.setattr(cache_store_module, "Redis", DummyRedis)
    store = CacheStore.from_settings()
    assert store.backend_name == "redis"

    caplog.set_level(logging.WARNING, logger="cinevault.services.cache")
    assert store.get("search:movie:parasite:2019") is None
    assert store.backend_name == "memory"
    assert "supersecret" not in caplog.text

    store.set("search:movie:parasite:2019", [{"title": "Parasite"}])
    assert store.get("search:movie:parasite:2019") == [{"title": "Parasite"}]
