"""
Pydantic models for API request/response validation.
"""

from pydantic import BaseModel

from .models import FeedItem


# ─────────────────────────────────────────────────────────────
# Feed Schemas
# ─────────────────────────────────────────────────────────────

class FeedItemResponse(BaseModel):
    """One item in the merged timeline."""
    id: str
    title: str
    url: str
    source: str
    summary: str | None = None
    content: str | None = None
    author: str | None = None
    published_at: str
    read: bool
    tags: list[str] = []
    image_url: str | None = None
    provider_id: str

    @classmethod
    def from_item(cls, item: FeedItem) -> "FeedItemResponse":
        return cls(
            id=item.id,
            title=item.title,
            url=item.url,
            source=item.source,
            summary=item.summary,
            content=item.content,
            author=item.author,
            published_at=item.published_at.isoformat(),
            read=item.read,
            tags=list(item.tags),
            image_url=item.image_url,
            provider_id=item.provider_id,
        )


class FeedResponse(BaseModel):
    """A page of the merged timeline."""
    items: list[FeedItemResponse]
    has_more: bool


class ProviderInfo(BaseModel):
    name: str
    enabled: bool


class ProvidersResponse(BaseModel):
    providers: list[ProviderInfo]


# ─────────────────────────────────────────────────────────────
# Notification Schemas
# ─────────────────────────────────────────────────────────────

class ClaudeReadyRequest(BaseModel):
    """Payload posted by the Claude Code hook."""
    event: str | None = None
    cwd: str | None = None


class SuccessResponse(BaseModel):
    success: bool = True
