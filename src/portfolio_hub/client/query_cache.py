"""In-memory query cache keyed by tuples.

Keys are hierarchical tuples such as ``("projects", "detail", 7)``, so any
prefix names a group of entries: ``invalidate(("projects", "list"))`` marks
every cached project list stale and ``remove(("projects", "detail", 7))``
drops that project together with anything nested under it.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

QueryKey = tuple[Any, ...]

DEFAULT_GC_SECONDS = 10 * 60


@dataclass
class CacheEntry:
    data: Any
    updated_at: float
    last_used: float
    invalidated: bool = False


def _matches(key: QueryKey, prefix: QueryKey) -> bool:
    return key[: len(prefix)] == prefix


class QueryCache:
    """Stale-while-refetch cache.

    Args:
        gc_seconds: Entries unused for longer than this are dropped by
            ``collect_garbage``.
        clock: Time source in seconds, injectable for tests.
    """

    def __init__(
        self,
        gc_seconds: float = DEFAULT_GC_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.gc_seconds = gc_seconds
        self._clock = clock
        self._entries: dict[QueryKey, CacheEntry] = {}
        self._lock = threading.RLock()

    def __contains__(self, key: QueryKey) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self) -> Iterator[QueryKey]:
        return iter(list(self._entries))

    def get(self, key: QueryKey) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            entry.last_used = self._clock()
            return entry.data

    def set(self, key: QueryKey, data: Any) -> None:
        now = self._clock()
        with self._lock:
            self._entries[key] = CacheEntry(data=data, updated_at=now, last_used=now)

    def is_stale(self, key: QueryKey, stale_seconds: float) -> bool:
        """True when the entry is missing, invalidated or older than ``stale_seconds``."""
        entry = self._entries.get(key)
        if entry is None or entry.invalidated:
            return True
        return self._clock() - entry.updated_at >= stale_seconds

    def fetch(self, key: QueryKey, fetcher: Callable[[], Any], stale_seconds: float) -> Any:
        """Return cached data while fresh; otherwise call ``fetcher`` and cache the result.

        A failing fetch leaves any existing entry untouched and propagates.
        """
        with self._lock:
            if not self.is_stale(key, stale_seconds):
                return self.get(key)
        data = fetcher()
        self.set(key, data)
        return data

    def invalidate(self, prefix: QueryKey) -> int:
        """Mark entries under ``prefix`` stale; they refetch on next ``fetch``."""
        count = 0
        with self._lock:
            for key, entry in self._entries.items():
                if _matches(key, prefix):
                    entry.invalidated = True
                    count += 1
        return count

    def remove(self, prefix: QueryKey) -> int:
        with self._lock:
            doomed = [key for key in self._entries if _matches(key, prefix)]
            for key in doomed:
                del self._entries[key]
        return len(doomed)

    def collect_garbage(self) -> int:
        cutoff = self._clock() - self.gc_seconds
        with self._lock:
            doomed = [key for key, entry in self._entries.items() if entry.last_used < cutoff]
            for key in doomed:
                del self._entries[key]
        return len(doomed)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
