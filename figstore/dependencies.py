"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging
import threading

from figstore.cache import CacheClient, InMemoryCacheClient, RedisCacheClient
from figstore.config import Settings, get_settings
from figstore.db import (
    DurableClient,
    InMemoryDurableClient,
    SqlDurableClient,
    build_database_url,
)
from figstore.store import FigureStore

logger = logging.getLogger(__name__)

_cache_client: CacheClient | None = None
_durable_client: DurableClient | None = None
_figure_store: FigureStore | None = None
_store_lock = threading.Lock()


def build_cache_client(settings: Settings) -> CacheClient | None:
    if settings.use_in_memory_backends:
        return InMemoryCacheClient()
    if not settings.cache_configured:
        return None
    return RedisCacheClient(
        host=settings.redis_host,
        port=settings.redis_port,
        max_connections=settings.redis_max_connections,
        socket_timeout=settings.redis_socket_timeout,
    )


def build_durable_client(settings: Settings) -> DurableClient | None:
    if settings.use_in_memory_backends:
        return InMemoryDurableClient()
    if not settings.durable_configured:
        return None
    url = settings.database_url or build_database_url(
        settings.db_name,
        user=settings.db_user,
        password=settings.db_pass,
        socket=settings.db_socket,
    )
    return SqlDurableClient(url)


def get_figure_store() -> FigureStore:
    """
    Return a singleton store so tier connection pools are shared by every request.
    """
    global _cache_client, _durable_client, _figure_store
    if _figure_store:
        return _figure_store

    with _store_lock:
        if _figure_store:
            return _figure_store
        settings = get_settings()
        _cache_client = build_cache_client(settings)
        _durable_client = build_durable_client(settings)
        _figure_store = FigureStore(cache=_cache_client, durable=_durable_client)
        logger.info("Figure store running in %s mode", _figure_store.mode.name)
        return _figure_store


def reset_figure_store() -> None:
    """Forget the singleton and release its pools (used at shutdown and in tests)."""
    global _cache_client, _durable_client, _figure_store
    with _store_lock:
        for client in (_cache_client, _durable_client):
            close = getattr(client, "close", None)
            if close:
                close()
        _cache_client = None
        _durable_client = None
        _figure_store = None
