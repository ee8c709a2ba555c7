from __future__ import annotations

from collections.abc import Callable, Hashable
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CacheEntry[T]:
    value: T
    stamp: Hashable = None

    def is_current(self, stamp: Hashable) -> bool:
        return self.stamp == stamp


class MemoryCache[T]:
    """Keyed in-memory cache whose entries are tied to a version stamp.

    A lookup with a stamp other than the one the entry was stored with is a
    miss and drops the entry. Callers use the source file's modification time
    so an edited file is re-read.
    """

    def __init__(self) -> None:
        super().__init__()
        self._entries: dict[str, CacheEntry[T]] = {}

    def get(self, key: str, stamp: Hashable = None) -> T | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not entry.is_current(stamp):
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: str, value: T, *, stamp: Hashable = None) -> None:
        self._entries[key] = CacheEntry(value=value, stamp=stamp)

    def get_or_load(self, key: str, loader: Callable[[], T], *, stamp: Hashable = None) -> T:
        """Return the cached value for ``key`` at ``stamp``, calling ``loader`` on a miss."""
        cached = self.get(key, stamp)
        if cached is not None:
            return cached
        value = loader()
        self.set(key, value, stamp=stamp)
        return value

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
