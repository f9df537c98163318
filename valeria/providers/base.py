"""
Base content provider interface.

Defines the abstract interface that all provider implementations must follow.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ..models import FeedItem


@dataclass
class ProviderCapabilities:
    """Describes which optional operations a provider supports."""
    supports_get_item: bool = False
    supports_mark_read: bool = False


class ContentProvider(ABC):
    """
    Abstract base class for content providers.

    Every item a provider returns has an id of the form "<name>:<local id>",
    which is how FeedService routes mark-as-read calls back to the owner.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the provider name (e.g., 'readwise', 'rss')."""
        pass

    @property
    def capabilities(self) -> ProviderCapabilities:
        """Return the provider's capabilities."""
        return ProviderCapabilities()

    @abstractmethod
    async def fetch_items(self, limit: int) -> list[FeedItem]:
        """
        Fetch up to `limit` items from the source.

        Raises:
            ProviderError: On network, HTTP or parse failure
        """
        pass

    async def get_item(self, item_id: str) -> FeedItem | None:
        """Fetch a single item by id. Only called if supports_get_item."""
        return None

    async def mark_as_read(self, item_id: str) -> None:
        """Mark an item as read at the source. Only called if supports_mark_read."""
        pass

    @abstractmethod
    async def test_connection(self) -> bool:
        """Check that the source is reachable. Never raises."""
        pass

    def owns(self, item_id: str) -> bool:
        """Whether an item id was produced by this provider."""
        return item_id.startswith(f"{self.name}:")

    def local_id(self, item_id: str) -> str:
        """Strip the provider prefix from an item id."""
        prefix = f"{self.name}:"
        return item_id[len(prefix):] if item_id.startswith(prefix) else item_id
