"""
RSS/Atom provider.

Fetches a fixed list of feed URLs concurrently. A failing feed is logged and
skipped; the others still contribute items.
"""

import asyncio
import logging
from datetime import datetime, timezone

import aiohttp

from ..exceptions import ConfigurationError, ProviderError
from ..feed_parser import Feed, hash_string, parse_feed
from ..models import FeedItem
from .base import ContentProvider, ProviderCapabilities

logger = logging.getLogger(__name__)

USER_AGENT = "Valeria/1.0 (+https://github.com/valeria-reader)"


class RSSProvider(ContentProvider):
    """Items from a set of RSS/Atom feeds."""

    def __init__(
        self,
        feeds: list[str] | None = None,
        timeout: int = 10,
        **kwargs,
    ):
        if not feeds:
            raise ConfigurationError("At least one RSS feed URL is required")
        self.feeds = list(feeds)
        self.timeout = timeout
        # Read state lives only as long as this instance
        self._read_items: set[str] = set()

    @property
    def name(self) -> str:
        return "rss"

    @property
    def capabilities(self) -> ProviderCapabilities:
        return ProviderCapabilities(supports_get_item=False, supports_mark_read=True)

    async def fetch_items(self, limit: int) -> list[FeedItem]:
        results = await asyncio.gather(*(self._fetch_safe(url) for url in self.feeds))

        items: list[FeedItem] = []
        for url, result in zip(self.feeds, results):
            if isinstance(result, Exception):
                logger.error(f"Failed to fetch feed {url}: {result}")
                continue
            items.extend(self._to_items(result))

        items.sort(key=lambda item: item.published_at, reverse=True)
        return items[:limit]

    async def mark_as_read(self, item_id: str) -> None:
        self._read_items.add(item_id)

    async def test_connection(self) -> bool:
        try:
            await self.fetch_feed(self.feeds[0])
            return True
        except Exception as e:
            logger.warning(f"RSS connection test failed: {e}")
            return False

    async def fetch_feed(self, url: str) -> Feed:
        """Fetch and parse a single feed URL."""
        headers = {"User-Agent": USER_AGENT}

        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    url,
                    headers=headers,
                    timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as resp:
                    resp.raise_for_status()
                    body = await resp.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ProviderError(self.name, f"{url}: {e}") from e

        try:
            return parse_feed(body, url, fetched_at=datetime.now(timezone.utc))
        except ValueError as e:
            raise ProviderError(self.name, f"{url}: {e}") from e

    async def _fetch_safe(self, url: str) -> Feed | Exception:
        """Fetch a feed, returning the exception on failure instead of raising."""
        try:
            return await self.fetch_feed(url)
        except Exception as e:
            return e

    def _to_items(self, feed: Feed) -> list[FeedItem]:
        items = []
        for entry in feed.entries:
            item_id = f"{self.name}:{hash_string(entry.key)}"
            items.append(FeedItem(
                id=item_id,
                title=entry.title,
                url=entry.url,
                source=feed.title,
                summary=entry.summary,
                content=entry.content,
                author=entry.author,
                published_at=entry.published,
                read=item_id in self._read_items,
                tags=[],
                provider_id=self.name,
            ))
        return items
