"""Bounded in-process cache of finished levels.

Entries are written once and read many times; when the cache grows past its
capacity the oldest inserted key is evicted. Thread-safe with a lock because
Flask-SocketIO workers may interleave generation requests.
"""

from __future__ import annotations

import threading
from typing import Any, Hashable, List, Optional


class LevelCache:
    def __init__(self, capacity: int = 5):
        if capacity < 1:
            raise ValueError("cache capacity must be >= 1")
        self.capacity = capacity
        self._entries = {}  # insertion ordered
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> Optional[Any]:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: Hashable, value: Any) -> Any:
        """Insert ``value`` under ``key`` and return the stored entry.

        A key that is already present keeps its first value (no update in place).
        """
        with self._lock:
            existing = self._entries.get(key)
            if existing is not None:
                return existing
            self._entries[key] = value
            while len(self._entries) > self.capacity:
                oldest = next(iter(self._entries))
                self._entries.pop(oldest, None)
            return value

    def keys(self) -> List[Hashable]:
        with self._lock:
            return list(self._entries.keys())

    def clear(self) -> int:
        with self._lock:
            n = len(self._entries)
            self._entries.clear()
            return n

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = ["LevelCache"]
