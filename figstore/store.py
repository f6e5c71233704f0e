"""
Tiered figure store.

Composes an optional cache tier and an optional durable tier into a single
get/put interface. The durable tier is the source of truth whenever it is
configured; the cache only accelerates reads in front of it.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Optional

from figstore.cache import CacheClient
from figstore.db import DurableClient
from figstore.errors import (
    CacheError,
    CacheMiss,
    CacheWriteFailed,
    DurableError,
    DurableReadFailed,
    DurableWriteFailed,
    NoStorageAvailable,
    NotFound,
    RecordNotFound,
)

logger = logging.getLogger(__name__)

CACHE_TTL_SECONDS = 20


def placeholder_message(name: str) -> str:
    return f"Hi, I'm {name}. Temporary. Don't count on me~"


class StorageMode(enum.Enum):
    EPHEMERAL = "ephemeral"
    CACHE_ONLY = "cache_only"
    DURABLE_ONLY = "durable_only"
    FULL = "full"

    @classmethod
    def for_tiers(
        cls, cache: Optional[CacheClient], durable: Optional[DurableClient]
    ) -> "StorageMode":
        if cache is None and durable is None:
            return cls.EPHEMERAL
        if durable is None:
            return cls.CACHE_ONLY
        if cache is None:
            return cls.DURABLE_ONLY
        return cls.FULL


@dataclass(frozen=True)
class Lookup:
    """Result of a successful ``FigureStore.get``."""

    message: str
    cache_hit: bool
    # True when no tier exists and ``message`` was made up from the name.
    synthesized: bool = False


@dataclass(frozen=True)
class BestEffortCacheWrite:
    """
    A cache write issued after the durable tier already answered.

    Its outcome is discarded by contract: failures are logged and never
    reach the caller, since the durable tier still holds the value.
    """

    cache: CacheClient
    name: str
    message: str
    reason: str

    def __call__(self) -> None:
        try:
            self.cache.set(self.name, self.message, CACHE_TTL_SECONDS)
        except CacheError as exc:
            logger.warning(
                "Best-effort cache %s failed for figure %r: %s",
                self.reason,
                self.name,
                exc,
            )


class FigureStore:
    """Read-through / write-through store over the configured tiers."""

    def __init__(
        self,
        cache: Optional[CacheClient] = None,
        durable: Optional[DurableClient] = None,
        mode: Optional[StorageMode] = None,
    ):
        derived = StorageMode.for_tiers(cache, durable)
        if mode is not None and mode != derived:
            raise ValueError(
                f"Storage mode {mode.name} does not match the configured tiers ({derived.name})"
            )
        self.cache = cache
        self.durable = durable
        self.mode = derived

    def put(self, name: str, message: str) -> None:
        if self.mode is StorageMode.EPHEMERAL:
            raise NoStorageAvailable()

        if self.mode is StorageMode.CACHE_ONLY:
            logger.warning("Durable tier is not used; saving figure %r to cache", name)
            try:
                self.cache.set(name, message, CACHE_TTL_SECONDS)
            except CacheError as exc:
                raise CacheWriteFailed(f"Failed to save to cache: {exc}") from exc
            return

        try:
            self.durable.upsert(name, message)
        except DurableError as exc:
            raise DurableWriteFailed(f"Failed to save to db: {exc}") from exc

        if self.mode is StorageMode.FULL:
            BestEffortCacheWrite(self.cache, name, message, reason="write-behind")()

    def get(self, name: str) -> Lookup:
        if self.mode is StorageMode.EPHEMERAL:
            return Lookup(placeholder_message(name), cache_hit=False, synthesized=True)

        if self.cache is not None:
            cached = self._read_cache(name)
            if cached:
                return Lookup(cached, cache_hit=True)
            if self.mode is StorageMode.CACHE_ONLY:
                raise NotFound(name)

        try:
            message = self.durable.get(name)
        except RecordNotFound as exc:
            raise NotFound(name) from exc
        except DurableError as exc:
            raise DurableReadFailed(f"DB error: {exc}") from exc

        if self.mode is StorageMode.FULL:
            BestEffortCacheWrite(self.cache, name, message, reason="repopulation")()
        return Lookup(message, cache_hit=False)

    def _read_cache(self, name: str) -> Optional[str]:
        # Connectivity errors are treated exactly like misses.
        try:
            return self.cache.get(name)
        except CacheMiss:
            return None
        except CacheError as exc:
            logger.warning("Cache error reading figure %r: %s", name, exc)
            return None
