"""
API routes: feed listing, read state, refresh, providers, Claude hook.
"""

import logging
from pathlib import PurePath
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from pydantic import ValidationError

from ..config import get_feed_service, get_notification_hub
from ..exceptions import require_item
from ..feed_service import FeedService
from ..models import NotificationEvent
from ..notifications import NotificationHub
from ..schemas import (
    ClaudeReadyRequest,
    FeedItemResponse,
    FeedResponse,
    ProviderInfo,
    ProvidersResponse,
    SuccessResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["api"])


# ─────────────────────────────────────────────────────────────
# Claude Code Hook
# ─────────────────────────────────────────────────────────────

def project_name(cwd: str | None) -> str | None:
    """Last path segment of a working directory."""
    if not cwd:
        return None
    return PurePath(cwd.rstrip("/\\")).name or None


@router.post("/claude-ready")
async def claude_ready(
    request: Request,
    hub: Annotated[NotificationHub, Depends(get_notification_hub)]
) -> SuccessResponse:
    """Receive a hook event and broadcast it to all connected clients."""
    # Hooks may post an empty or non-JSON body
    try:
        payload = ClaudeReadyRequest.model_validate(await request.json())
    except (ValueError, ValidationError):
        payload = ClaudeReadyRequest()

    extra = {}
    if payload.cwd:
        extra["cwd"] = payload.cwd
        extra["project"] = project_name(payload.cwd)

    event = NotificationEvent(
        type="claude_ready",
        event=payload.event or "ready",
        payload=extra,
    )
    await hub.broadcast(event)

    logger.info(f"Claude notification: {event.event} ({hub.get_client_count()} clients)")
    return SuccessResponse()


# ─────────────────────────────────────────────────────────────
# Feed
# ─────────────────────────────────────────────────────────────

@router.get("/feed")
async def get_feed(
    service: Annotated[FeedService, Depends(get_feed_service)],
    provider: str | None = None,
    limit: int = Query(default=20, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
) -> FeedResponse:
    """List merged feed items, newest first."""
    items = await service.get_items(provider=provider, limit=limit, offset=offset)
    return FeedResponse(
        items=[FeedItemResponse.from_item(i) for i in items],
        has_more=len(items) == limit,
    )


@router.post("/feed/refresh")
async def refresh_feed(
    service: Annotated[FeedService, Depends(get_feed_service)]
) -> SuccessResponse:
    """Drop cached results so the next listing refetches."""
    service.refresh()
    return SuccessResponse()


@router.get("/feed/{item_id}")
async def get_feed_item(
    item_id: str,
    service: Annotated[FeedService, Depends(get_feed_service)]
) -> FeedItemResponse:
    """Get a single item by id."""
    item = require_item(await service.get_item(item_id))
    return FeedItemResponse.from_item(item)


@router.post("/feed/{item_id}/read")
async def mark_item_read(
    item_id: str,
    service: Annotated[FeedService, Depends(get_feed_service)]
) -> SuccessResponse:
    """Mark an item as read."""
    await service.mark_as_read(item_id)
    return SuccessResponse()


# ─────────────────────────────────────────────────────────────
# Providers
# ─────────────────────────────────────────────────────────────

@router.get("/providers")
async def list_providers(
    service: Annotated[FeedService, Depends(get_feed_service)]
) -> ProvidersResponse:
    """List active providers."""
    return ProvidersResponse(
        providers=[ProviderInfo(**p) for p in service.get_providers()]
    )


@router.get("/providers/status")
async def provider_status(
    service: Annotated[FeedService, Depends(get_feed_service)]
) -> dict[str, bool]:
    """Check connectivity of every active provider."""
    return await service.test_connections()
