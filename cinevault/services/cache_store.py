"""Versioned key-value cache with sliding TTL and least-recently-accessed eviction.

Invariants:
- An entry whose schema version differs from the store's, whose ``expiresAt``
  has passed, or whose JSON is unreadable is purged on touch and never served.
- Every successful ``get`` pushes ``expiresAt`` out by the full TTL window.
- After ``set`` the namespace holds at most ``max_entries`` entries.

Implementation notes:
- Redis is preferred when configured and reachable; otherwise the store keeps
  entries in an in-process dict. A Redis error after startup swaps the store
  onto a fresh in-process dict and the call is replayed there.
- Timestamps are epoch milliseconds so envelopes stay portable across writers.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable

from redis import Redis
from redis.exceptions import RedisError

from cinevault.core.config import settings
from cinevault.utils.redaction import redact_secrets

logger = logging.getLogger("cinevault.services.cache")

DAY_MS = 24 * 60 * 60 * 1000


def _now_ms() -> float:
    return time.time() * 1000


class MemoryCacheBackend:
    """In-process fallback medium."""

    name = "memory"

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self, prefix: str) -> list[str]:
        return [key for key in self._data if key.startswith(prefix)]


class RedisCacheBackend:
    """Durable medium backed by a Redis connection."""

    name = "redis"

    def __init__(self, connection: Redis) -> None:
        self._connection = connection

    @classmethod
    def connect(cls, url: str) -> "RedisCacheBackend":
        connection = Redis.from_url(url, decode_responses=True)
        connection.ping()
        return cls(connection)

    def get(self, key: str) -> str | None:
        return self._connection.get(key)

    def set(self, key: str, value: str) -> None:
        self._connection.set(key, value)

    def delete(self, key: str) -> None:
        self._connection.delete(key)

    def keys(self, prefix: str) -> list[str]:
        return list(self._connection.scan_iter(match=f"{prefix}*"))


def build_backend(redis_url: str | None) -> MemoryCacheBackend | RedisCacheBackend:
    """Return a Redis backend when reachable, falling back to memory."""
    if not redis_url:
        return MemoryCacheBackend()
    try:
        return RedisCacheBackend.connect(redis_url)
    except Exception as exc:  # noqa: BLE001
        logger.warning(
            "Redis unavailable at %s; caching in memory: %s",
            redact_secrets(redis_url),
            redact_secrets(str(exc)),
        )
        return MemoryCacheBackend()


class CacheStore:
    """Namespaced cache envelope handling over a pluggable backend."""

    def __init__(
        self,
        backend: MemoryCacheBackend | RedisCacheBackend | None = None,
        *,
        namespace: str = "cinestat_cache:",
        version: str = "v1",
        ttl_ms: float = 30 * DAY_MS,
        max_entries: int = 500,
        clock: Callable[[], float] = _now_ms,
    ) -> None:
        self.backend = backend or MemoryCacheBackend()
        self.namespace = namespace
        self.version = version
        self.ttl_ms = ttl_ms
        self.max_entries = max_entries
        self._clock = clock
        self.evict_expired()

    @classmethod
    def from_settings(cls, *, clock: Callable[[], float] = _now_ms) -> "CacheStore":
        return cls(
            build_backend(settings.redis_url),
            namespace=settings.cache_namespace,
            version=settings.cache_schema_version,
            ttl_ms=settings.cache_ttl_days * DAY_MS,
            max_entries=settings.cache_max_entries,
            clock=clock,
        )

    def _call(self, operation: str, *args: Any) -> Any:
        try:
            return getattr(self.backend, operation)(*args)
        except RedisError as exc:
            logger.warning(
                "Redis cache %s failed; caching in memory from now on: %s",
                operation,
                redact_secrets(str(exc)),
            )
            self.backend = MemoryCacheBackend()
            return getattr(self.backend, operation)(*args)

    def _key(self, key: str) -> str:
        return f"{self.namespace}{key}"

    def _keys(self) -> list[str]:
        return self._call("keys", self.namespace)

    def _load(self, full_key: str) -> dict[str, Any] | None:
        """Decode one stored envelope; ``None`` for absent or unreadable data."""
        raw = self._call("get", full_key)
        if raw is None:
            return None
        try:
            entry = json.loads(raw)
        except (TypeError, ValueError):
            return None
        return entry if isinstance(entry, dict) else None

    def _is_expired(self, entry: dict[str, Any], now: float) -> bool:
        expires_at = entry.get("expiresAt")
        if not isinstance(expires_at, (int, float)) or isinstance(expires_at, bool):
            return True
        return now > expires_at

    def _is_valid(self, entry: dict[str, Any] | None, now: float) -> bool:
        return entry is not None and entry.get("v") == self.version and not self._is_expired(entry, now)

    def get(self, key: str) -> Any | None:
        full_key = self._key(key)
        entry = self._load(full_key)
        now = self._clock()
        if not self._is_valid(entry, now):
            self._call("delete", full_key)
            return None
        entry["expiresAt"] = now + self.ttl_ms
        entry["lastAccessed"] = now
        self._call("set", full_key, json.dumps(entry))
        return entry.get("value")

    def set(self, key: str, value: Any) -> None:
        now = self._clock()
        entry = {"v": self.version, "value": value, "expiresAt": now + self.ttl_ms, "lastAccessed": now}
        try:
            encoded = json.dumps(entry)
        except (TypeError, ValueError) as exc:
            logger.warning("Skipping cache write for %s: %s", key, exc)
            return
        self._call("set", self._key(key), encoded)
        self.size_bounded_evict()

    def delete(self, key: str) -> None:
        self._call("delete", self._key(key))

    def size_bounded_evict(self) -> int:
        """Drop least-recently-accessed entries until the ceiling holds."""
        keys = self._keys()
        overflow = len(keys) - self.max_entries
        if overflow <= 0:
            return 0
        ranked = sorted(keys, key=self._last_accessed)
        for full_key in ranked[:overflow]:
            self._call("delete", full_key)
        logger.debug("Evicted %s cache entries over the %s-entry ceiling", overflow, self.max_entries)
        return overflow

    def _last_accessed(self, full_key: str) -> float:
        entry = self._load(full_key)
        if not entry:
            return 0
        value = entry.get("lastAccessed")
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return 0
        return value

    def evict_expired(self) -> int:
        """Purge every expired, version-mismatched or unreadable entry."""
        now = self._clock()
        removed = 0
        for full_key in self._keys():
            if not self._is_valid(self._load(full_key), now):
                self._call("delete", full_key)
                removed += 1
        if removed:
            logger.info("Purged %s stale cache entries", removed)
        return removed

    def stats(self) -> dict[str, int]:
        keys = self._keys()
        now = self._clock()
        expired = 0
        for full_key in keys:
            entry = self._load(full_key)
            if entry is None or self._is_expired(entry, now):
                expired += 1
        return {"totalEntries": len(keys), "expiredEntries": expired, "maxEntries": self.max_entries}

    def clear(self) -> None:
        for full_key in self._keys():
            self._call("delete", full_key)

    @property
    def backend_name(self) -> str:
        return self.backend.name
