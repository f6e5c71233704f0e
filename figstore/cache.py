"""
Cache tier abstraction.

Supports an in-memory fallback for tests/local runs and a Redis-backed
implementation for production. Entries always carry an expiry; the tier
enforces it, callers never check timestamps themselves.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol

import redis
from redis import exceptions as redis_exceptions

from figstore.errors import CacheMiss, CacheUnavailable


class CacheClient(Protocol):
    """Minimal key/value interface with per-key expiry."""

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        ...

    def get(self, key: str) -> str:
        """Return the cached value or raise ``CacheMiss``."""
        ...


@dataclass
class InMemoryCacheClient:
    """Dict-backed cache for testing/dev. Expired entries read as misses."""

    clock: Callable[[], float] = time.monotonic
    entries: dict[str, tuple[str, float]] = field(default_factory=dict)

    def __post_init__(self):
        self._lock = threading.Lock()

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        with self._lock:
            self.entries[key] = (value, self.clock() + ttl_seconds)

    def get(self, key: str) -> str:
        with self._lock:
            entry = self.entries.get(key)
            if entry is None:
                raise CacheMiss(key)
            value, expires_at = entry
            if self.clock() >= expires_at:
                del self.entries[key]
                raise CacheMiss(key)
            return value

    def reset(self) -> None:
        """Drop every entry (useful in tests)."""
        with self._lock:
            self.entries.clear()


@dataclass
class RedisCacheClient:
    """Redis-backed cache over a blocking connection pool."""

    host: str
    port: int = 6379
    max_connections: int = 20
    socket_timeout: Optional[float] = 5.0

    def __post_init__(self):
        # Blocks callers when every connection is checked out instead of
        # raising, so bursts queue up behind the pool.
        self.pool = redis.BlockingConnectionPool(
            host=self.host,
            port=self.port,
            max_connections=self.max_connections,
            socket_timeout=self.socket_timeout,
            socket_connect_timeout=self.socket_timeout,
            decode_responses=True,
        )
        self.client = redis.Redis(connection_pool=self.pool)

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            self.client.set(key, value, ex=ttl_seconds)
        except redis_exceptions.RedisError as exc:
            raise CacheUnavailable(f"Redis SET failed for '{key}': {exc}") from exc

    def get(self, key: str) -> str:
        try:
            value = self.client.get(key)
        except redis_exceptions.RedisError as exc:
            raise CacheUnavailable(f"Redis GET failed for '{key}': {exc}") from exc
        if value is None:
            raise CacheMiss(key)
        return value

    def close(self) -> None:
        self.pool.disconnect()
