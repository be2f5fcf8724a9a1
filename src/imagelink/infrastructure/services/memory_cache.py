"""L1: LRU in-memory image cache."""

from __future__ import annotations

import threading
from collections import OrderedDict

from imagelink.models.types import CachedImage


class MemoryImageCache:
    """L1: LRU memory cache of decoded images, bounded by entry count.

    Evicts the least-recently-used entry when *capacity* would be exceeded.
    All public methods are protected by a lock so grid cells loading on
    worker threads can share one instance.
    """

    def __init__(self, capacity: int = 100):
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self._cache: OrderedDict[str, CachedImage] = OrderedDict()
        self._capacity = capacity
        self._lock = threading.Lock()

    def get(self, key: str) -> CachedImage | None:
        with self._lock:
            entry = self._cache.get(key)
            if entry is not None:
                self._cache.move_to_end(key)
            return entry

    def put(self, key: str, value: CachedImage) -> None:
        with self._lock:
            if key in self._cache:
                self._cache.move_to_end(key)
            elif len(self._cache) >= self._capacity:
                self._cache.popitem(last=False)  # evict oldest
            self._cache[key] = value

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._cache.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._cache

    @property
    def size(self) -> int:
        with self._lock:
            return len(self._cache)

    @property
    def capacity(self) -> int:
        return self._capacity
