"""
Pytest fixtures for Valeria tests.
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from valeria.config import state
from valeria.exceptions import ProviderError
from valeria.feed_service import FeedService
from valeria.models import FeedItem
from valeria.notifications import NotificationHub
from valeria.providers import ContentProvider, ProviderCapabilities
from valeria.server import app

BASE_TIME = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def make_item(provider: str, local_id: str, hours_ago: float, **kwargs) -> FeedItem:
    """Build a FeedItem published `hours_ago` before BASE_TIME."""
    return FeedItem(
        id=f"{provider}:{local_id}",
        title=kwargs.pop("title", f"{provider} item {local_id}"),
        url=kwargs.pop("url", f"https://example.com/{provider}/{local_id}"),
        source=kwargs.pop("source", provider.title()),
        published_at=BASE_TIME - timedelta(hours=hours_ago),
        provider_id=provider,
        **kwargs,
    )


class FakeProvider(ContentProvider):
    """In-memory provider that records calls."""

    def __init__(
        self,
        name: str,
        items: list[tuple[str, float]] | None = None,
        fail: bool = False,
        supports_mark_read: bool = True,
        supports_get_item: bool = False,
    ):
        self._name = name
        self.entries = items or []
        self.fail = fail
        self.fail_mark_read = False
        self._capabilities = ProviderCapabilities(
            supports_get_item=supports_get_item,
            supports_mark_read=supports_mark_read,
        )
        self.fetch_count = 0
        self.marked: list[str] = []
        self.connected = True

    @property
    def name(self) -> str:
        return self._name

    @property
    def capabilities(self) -> ProviderCapabilities:
        return self._capabilities

    async def fetch_items(self, limit: int) -> list[FeedItem]:
        self.fetch_count += 1
        if self.fail:
            raise ProviderError(self.name, "connection refused")
        # New objects on every fetch, as real providers produce
        return [make_item(self.name, local_id, hours) for local_id, hours in self.entries][:limit]

    async def get_item(self, item_id: str) -> FeedItem | None:
        for local_id, hours in self.entries:
            if f"{self.name}:{local_id}" == item_id:
                return make_item(self.name, local_id, hours)
        return None

    async def mark_as_read(self, item_id: str) -> None:
        self.marked.append(item_id)
        if self.fail_mark_read:
            raise ProviderError(self.name, "update rejected")

    async def test_connection(self) -> bool:
        return self.connected


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def providers():
    """Two providers with interleaved publish times."""
    return {
        "alpha": FakeProvider("alpha", [("1", 1), ("2", 3), ("3", 5)]),
        "beta": FakeProvider("beta", [("1", 2), ("2", 4)], supports_get_item=True),
    }


@pytest.fixture
def feed_service(providers, clock):
    return FeedService(providers, cache_ttl=60, clock=clock)


@pytest.fixture
def hub():
    return NotificationHub()


@pytest.fixture
def client(feed_service, hub):
    """Create a test client wired to fake providers."""
    # Store original state
    original_feed_service = state.feed_service
    original_notifications = state.notifications

    state.feed_service = feed_service
    state.notifications = hub

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client

    # Restore original state
    state.feed_service = original_feed_service
    state.notifications = original_notifications
