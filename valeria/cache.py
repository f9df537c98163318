"""
Cache - In-memory TTL cache for aggregated feed results.

Entries are keyed by provider scope ("all" or a provider name) and are
replaced wholesale, so readers always see either the old or the new list.
"""

import time
from dataclasses import dataclass
from typing import Callable, Iterator

from .models import FeedItem

ALL_PROVIDERS = "all"


@dataclass
class CacheEntry:
    key: str
    items: list[FeedItem]
    fetched_at: float  # clock() value taken when the fetch completed


class ItemCache:
    """Feed results with a time-to-live."""

    def __init__(self, ttl: float, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> CacheEntry | None:
        """Return the entry for key if it is still fresh."""
        entry = self._entries.get(key)
        if entry is None:
            return None

        if self._clock() - entry.fetched_at >= self.ttl:
            return None

        return entry

    def set(self, key: str, items: list[FeedItem]) -> CacheEntry:
        entry = CacheEntry(key=key, items=items, fetched_at=self._clock())
        self._entries[key] = entry
        return entry

    def clear(self) -> None:
        self._entries.clear()

    def entries(self) -> Iterator[CacheEntry]:
        """All entries, fresh or stale."""
        return iter(list(self._entries.values()))
