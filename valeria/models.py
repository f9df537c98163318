"""
Core data types shared by providers, the feed service and the notification hub.
"""

import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass
class FeedItem:
    """A normalized entry from any provider."""
    id: str  # "<provider_name>:<provider_local_id>"
    title: str
    url: str
    source: str
    published_at: datetime
    provider_id: str
    summary: str | None = None
    content: str | None = None
    author: str | None = None
    read: bool = False
    tags: list[str] = field(default_factory=list)
    image_url: str | None = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FeedItem):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


@dataclass
class NotificationEvent:
    """An event pushed to every connected client."""
    type: str
    event: str | None = None
    timestamp: int = field(default_factory=now_ms)
    payload: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.type, "timestamp": self.timestamp}
        if self.event is not None:
            data["event"] = self.event
        data.update(self.payload)
        return data
