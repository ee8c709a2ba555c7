"""Caching infrastructure.

In-process caching for catalog tables read from disk.
"""

from .memory_cache import CacheEntry, MemoryCache

__all__ = [
    "CacheEntry",
    "MemoryCache",
]
