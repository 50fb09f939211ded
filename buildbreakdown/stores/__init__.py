"""Persistent stores used by buildbreakdown."""

from .composition_cache import (
    CompositionCache,
    CompositionCacheEntry,
    PersistenceFailure,
    cache_path_for,
)

__all__ = [
    "CompositionCache",
    "CompositionCacheEntry",
    "PersistenceFailure",
    "cache_path_for",
]
