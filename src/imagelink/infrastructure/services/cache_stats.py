"""Hit/miss counters for the image tiers and the network fallback.

Tier names are free-form; :class:`ImageLoadingService` uses
``"<kind>.<tier>"`` such as ``"image.memory"`` or ``"thumbnail.disk"``.
Network fetches are counted separately because they are neither a hit nor a
miss of any cache.
"""

from __future__ import annotations

import threading
from collections import Counter
from dataclasses import dataclass


@dataclass(frozen=True)
class CacheStats:
    """Immutable snapshot of one tier's counters."""

    hits: int = 0
    misses: int = 0

    @property
    def total(self) -> int:
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        """Hit rate as a float in [0.0, 1.0]; 0.0 when no requests."""
        if self.total == 0:
            return 0.0
        return self.hits / self.total


class CacheStatsCollector:
    """Thread-safe collector shared by both image kinds."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._hits: Counter[str] = Counter()
        self._misses: Counter[str] = Counter()
        self._fetches = 0
        self._fetch_failures = 0

    def record_hit(self, tier: str) -> None:
        with self._lock:
            self._hits[tier] += 1

    def record_miss(self, tier: str) -> None:
        with self._lock:
            self._misses[tier] += 1

    def record_fetch(self, *, ok: bool) -> None:
        with self._lock:
            self._fetches += 1
            if not ok:
                self._fetch_failures += 1

    @property
    def fetches(self) -> int:
        with self._lock:
            return self._fetches

    @property
    def fetch_failures(self) -> int:
        with self._lock:
            return self._fetch_failures

    def get(self, tier: str) -> CacheStats:
        with self._lock:
            return CacheStats(hits=self._hits[tier], misses=self._misses[tier])

    def all(self) -> dict[str, CacheStats]:
        """Return snapshots for every tier that has recorded data."""
        with self._lock:
            names = set(self._hits) | set(self._misses)
            return {
                name: CacheStats(hits=self._hits[name], misses=self._misses[name])
                for name in sorted(names)
            }

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()
            self._misses.clear()
            self._fetches = 0
            self._fetch_failures = 0
