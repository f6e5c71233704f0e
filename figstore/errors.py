"""
Exceptions raised by the figure store and its tier adapters.

Adapter errors describe what went wrong talking to a single tier. The
``FigureStoreError`` family describes the outcome of a store operation and
is what the HTTP layer maps to status codes.
"""

from __future__ import annotations


class FigureStoreError(Exception):
    """Base class for store operation failures."""


class NoStorageAvailable(FigureStoreError):
    """Raised when a write is attempted with no tier configured."""

    def __init__(self, message: str = "No persistent store available"):
        super().__init__(message)


class CacheWriteFailed(FigureStoreError):
    pass


class DurableWriteFailed(FigureStoreError):
    pass


class DurableReadFailed(FigureStoreError):
    pass


class NotFound(FigureStoreError):
    """Raised when no tier holds a figure for the requested name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No figure found for '{name}'")


class CacheError(Exception):
    """Base class for cache tier failures."""


class CacheMiss(CacheError):
    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Cache miss for '{key}'")


class CacheUnavailable(CacheError):
    pass


class DurableError(Exception):
    """Base class for durable tier failures."""


class RecordNotFound(DurableError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No record for '{name}'")


class DurableUnavailable(DurableError):
    pass


class RenderError(Exception):
    """Raised when text cannot be rendered into a figure."""
