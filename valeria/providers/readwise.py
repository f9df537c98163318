"""
Readwise Reader provider.

Uses the Reader v3 API (documents list/update) with token auth.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any

import aiohttp

from ..exceptions import ConfigurationError, ProviderError
from ..models import FeedItem
from .base import ContentProvider, ProviderCapabilities

logger = logging.getLogger(__name__)

BASE_URL = "https://readwise.io/api/v3"
AUTH_URL = "https://readwise.io/api/v2/auth/"


def _parse_date(value: Any) -> datetime | None:
    """Parse an ISO-8601 string or epoch-milliseconds number."""
    if value is None or value == "":
        return None
    try:
        if isinstance(value, (int, float)):
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except (ValueError, OverflowError, OSError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _tag_names(tags: Any) -> list[str]:
    """Readwise returns tags as {key: {"name": ...}}; older payloads use a list."""
    if not tags:
        return []
    if isinstance(tags, dict):
        return [
            (value.get("name") if isinstance(value, dict) else None) or key
            for key, value in tags.items()
        ]
    return [t.get("name", "") if isinstance(t, dict) else str(t) for t in tags]


class ReadwiseProvider(ContentProvider):
    """Items saved to Readwise Reader."""

    def __init__(
        self,
        token: str | None = None,
        location: str | None = None,
        category: str | None = None,
        timeout: int = 30,
        **kwargs,
    ):
        if not token:
            raise ConfigurationError("Readwise token is required")
        self.token = token
        self.location = location
        self.category = category
        self.timeout = timeout

    @property
    def name(self) -> str:
        return "readwise"

    @property
    def capabilities(self) -> ProviderCapabilities:
        return ProviderCapabilities(supports_get_item=True, supports_mark_read=True)

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Token {self.token}",
            "Content-Type": "application/json",
        }

    async def _list(self, params: dict[str, str]) -> list[dict]:
        """Call the documents list endpoint and return its results."""
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    f"{BASE_URL}/list/",
                    params=params,
                    headers=self.headers,
                    timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as resp:
                    if resp.status >= 400:
                        raise ProviderError(self.name, f"Readwise API error: {resp.status}")
                    data = await resp.json()
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise ProviderError(self.name, str(e)) from e

        return data.get("results") or []

    async def fetch_items(self, limit: int) -> list[FeedItem]:
        params = {"limit": str(limit)}
        if self.location:
            params["location"] = self.location
        if self.category:
            params["category"] = self.category

        documents = await self._list(params)

        items = []
        for doc in documents:
            if not doc.get("id"):
                logger.warning(f"Skipping Readwise document without an id: {doc.get('title')!r}")
                continue
            items.append(self.transform_document(doc))
        return items

    async def get_item(self, item_id: str) -> FeedItem | None:
        try:
            documents = await self._list({"id": self.local_id(item_id)})
        except ProviderError as e:
            logger.warning(f"Readwise lookup failed for {item_id}: {e}")
            return None
        if not documents:
            return None
        return self.transform_document(documents[0])

    async def mark_as_read(self, item_id: str) -> None:
        doc_id = self.local_id(item_id)
        try:
            async with aiohttp.ClientSession() as session:
                async with session.patch(
                    f"{BASE_URL}/update/{doc_id}/",
                    json={"seen": True},
                    headers=self.headers,
                    timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as resp:
                    if resp.status >= 400:
                        raise ProviderError(self.name, f"Mark read failed: {resp.status}")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ProviderError(self.name, str(e)) from e

    async def test_connection(self) -> bool:
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    AUTH_URL,
                    headers=self.headers,
                    timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as resp:
                    return resp.status == 204
        except Exception as e:
            logger.warning(f"Readwise connection test failed: {e}")
            return False

    def transform_document(self, doc: dict) -> FeedItem:
        """Map a Reader document to a FeedItem."""
        published = (
            _parse_date(doc.get("published_date"))
            or _parse_date(doc.get("created_at"))
            or datetime.now(timezone.utc)
        )

        return FeedItem(
            id=f"{self.name}:{doc['id']}",
            title=doc.get("title") or "Untitled",
            url=doc.get("source_url") or doc.get("url") or "",
            source=doc.get("site_name") or "Readwise",
            summary=doc.get("summary"),
            content=doc.get("content"),
            author=doc.get("author"),
            published_at=published,
            read=doc.get("first_opened_at") is not None,
            tags=_tag_names(doc.get("tags")),
            image_url=doc.get("image_url"),
            provider_id=self.name,
        )
