"""
Server-Sent Events route.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from ..config import config, get_notification_hub
from ..notifications import NotificationHub
from ..streaming import SSE_HEADERS, EventChannel

router = APIRouter(tags=["events"])


@router.get("/events")
async def events(
    request: Request,
    hub: Annotated[NotificationHub, Depends(get_notification_hub)]
) -> StreamingResponse:
    """Open a persistent event stream for this client."""
    channel = EventChannel(hub, heartbeat_interval=config.HEARTBEAT_INTERVAL)
    return StreamingResponse(
        channel.stream(request.is_disconnected),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
