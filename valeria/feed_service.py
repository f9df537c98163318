"""
Feed service: merges items from all active providers into one timeline.

Results are cached per provider scope for the configured TTL. Provider
failures are logged and treated as empty results; they never reach callers.
"""

import asyncio
import logging
import time
from typing import Callable

from .cache import ALL_PROVIDERS, ItemCache
from .models import FeedItem
from .providers import ContentProvider

logger = logging.getLogger(__name__)

# Items requested from each provider per fetch
FETCH_LIMIT = 100


class FeedService:
    """Aggregation cache over a fixed set of providers."""

    def __init__(
        self,
        providers: dict[str, ContentProvider],
        cache_ttl: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.providers = providers
        self.cache = ItemCache(ttl=cache_ttl, clock=clock)

    # ─────────────────────────────────────────────────────────────
    # Reading
    # ─────────────────────────────────────────────────────────────

    async def get_items(
        self,
        provider: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[FeedItem]:
        """
        Get a page of items, newest first.

        Args:
            provider: Restrict to one provider (None for all)
            limit: Maximum items to return
            offset: Number of items to skip

        Returns:
            Items in [offset, offset + limit) of the merged timeline
        """
        key = provider or ALL_PROVIDERS
        if provider and provider not in self.providers:
            logger.warning(f"Unknown provider requested: {provider}")
            return []

        entry = self.cache.get(key)
        if entry is None:
            items = await self._fetch(provider)
            entry = self.cache.set(key, items)

        return entry.items[offset:offset + limit]

    async def get_item(self, item_id: str) -> FeedItem | None:
        """Find an item in the cache, falling back to its provider."""
        for entry in self.cache.entries():
            for item in entry.items:
                if item.id == item_id:
                    return item

        provider = self._owner(item_id)
        if provider is None or not provider.capabilities.supports_get_item:
            return None

        try:
            return await provider.get_item(item_id)
        except Exception as e:
            logger.error(f"Provider {provider.name} failed to get {item_id}: {e}")
            return None

    def get_providers(self) -> list[dict]:
        """Active providers."""
        return [{"name": name, "enabled": True} for name in self.providers]

    async def test_connections(self) -> dict[str, bool]:
        """Connectivity check for every provider."""
        names = list(self.providers)
        results = await asyncio.gather(
            *(self.providers[name].test_connection() for name in names)
        )
        return dict(zip(names, results))

    # ─────────────────────────────────────────────────────────────
    # Read state and invalidation
    # ─────────────────────────────────────────────────────────────

    async def mark_as_read(self, item_id: str) -> None:
        """
        Mark an item read at its provider and in every cached copy.

        The provider call is best-effort; a failure is logged and the cached
        copies are still updated.
        """
        provider = self._owner(item_id)
        if provider is not None and provider.capabilities.supports_mark_read:
            try:
                await provider.mark_as_read(item_id)
            except Exception as e:
                logger.error(f"Provider {provider.name} failed to mark {item_id} read: {e}")

        # "all" and per-provider entries hold separate copies
        for entry in self.cache.entries():
            for item in entry.items:
                if item.id == item_id:
                    item.read = True

    def refresh(self) -> None:
        """Invalidate all cached results. The next get_items refetches."""
        self.cache.clear()
        logger.info("Feed cache cleared")

    # ─────────────────────────────────────────────────────────────
    # Fetching
    # ─────────────────────────────────────────────────────────────

    def _owner(self, item_id: str) -> ContentProvider | None:
        for provider in self.providers.values():
            if provider.owns(item_id):
                return provider
        return None

    async def _fetch(self, provider_name: str | None) -> list[FeedItem]:
        if provider_name:
            selected = [self.providers[provider_name]]
        else:
            selected = list(self.providers.values())

        results = await asyncio.gather(*(self._fetch_safe(p) for p in selected))

        seen: set[str] = set()
        items = []
        for batch in results:
            for item in batch:
                if item.id in seen:
                    continue
                seen.add(item.id)
                items.append(item)

        items.sort(key=lambda item: item.published_at, reverse=True)
        return items

    async def _fetch_safe(self, provider: ContentProvider) -> list[FeedItem]:
        """Fetch from one provider, returning [] on failure."""
        try:
            return await provider.fetch_items(FETCH_LIMIT)
        except Exception as e:
            logger.error(f"Provider {provider.name} failed: {e}")
            return []
