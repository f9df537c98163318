"""
Server-Sent Events transport.

Each client connection owns an EventChannel: an outbound queue registered
with the NotificationHub, plus a heartbeat. The channel moves through
OPEN -> ACTIVE -> CLOSED; closing always removes the hub registration, and
the heartbeat is a deadline checked by the queue read inside the stream, so
nothing outlives the connection.
"""

import asyncio
import json
import logging
import uuid
from enum import Enum
from typing import Any, AsyncIterator, Awaitable, Callable

from .exceptions import SubscriberDeliveryError
from .models import NotificationEvent, now_ms
from .notifications import NotificationHub

logger = logging.getLogger(__name__)

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def format_sse(event: str, data: Any) -> str:
    """Encode one SSE message."""
    payload = json.dumps(data, default=str)
    lines = [f"event: {event}"]
    lines.extend(f"data: {line}" for line in payload.splitlines() or [""])
    return "\n".join(lines) + "\n\n"


class ChannelState(Enum):
    OPEN = "open"
    ACTIVE = "active"
    CLOSED = "closed"


class EventChannel:
    """One client's event stream."""

    def __init__(
        self,
        hub: NotificationHub,
        heartbeat_interval: float = 30.0,
        client_id: str | None = None,
        max_pending: int = 100,
    ):
        self.hub = hub
        self.heartbeat_interval = heartbeat_interval
        self.client_id = client_id or str(uuid.uuid4())
        self.state = ChannelState.OPEN
        self._queue: asyncio.Queue[str] = asyncio.Queue(maxsize=max_pending)
        self._unsubscribe: Callable[[], None] | None = None

    async def push(self, event: NotificationEvent) -> None:
        """Queue an event for this client (the hub's push callback)."""
        if self.state is ChannelState.CLOSED:
            raise SubscriberDeliveryError(f"Channel {self.client_id} is closed")
        try:
            self._queue.put_nowait(format_sse(event.type, event.to_dict()))
        except asyncio.QueueFull:
            raise SubscriberDeliveryError(f"Channel {self.client_id} is not draining")

    def activate(self) -> None:
        if self.state is not ChannelState.OPEN:
            return
        self._unsubscribe = self.hub.subscribe(self.client_id, self.push)
        self.state = ChannelState.ACTIVE
        logger.info(f"Client connected: {self.client_id} ({self.hub.get_client_count()} clients)")

    def close(self) -> None:
        if self.state is ChannelState.CLOSED:
            return
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None
        self.state = ChannelState.CLOSED
        logger.info(f"Client disconnected: {self.client_id} ({self.hub.get_client_count()} clients)")

    async def stream(
        self,
        is_disconnected: Callable[[], Awaitable[bool]] | None = None,
    ) -> AsyncIterator[str]:
        """
        Yield SSE messages until the client goes away.

        Sends "connected" first, then queued events, with a "heartbeat"
        every heartbeat_interval seconds regardless of event traffic.
        """
        self.activate()
        loop = asyncio.get_running_loop()
        try:
            yield format_sse("connected", {"client_id": self.client_id, "timestamp": now_ms()})
            next_heartbeat = loop.time() + self.heartbeat_interval

            while self.state is ChannelState.ACTIVE:
                now = loop.time()
                if now >= next_heartbeat:
                    message = format_sse("heartbeat", {"timestamp": now_ms()})
                    next_heartbeat = now + self.heartbeat_interval
                else:
                    try:
                        message = await asyncio.wait_for(self._queue.get(), timeout=next_heartbeat - now)
                    except asyncio.TimeoutError:
                        continue

                if is_disconnected is not None and await is_disconnected():
                    break

                yield message
        finally:
            self.close()
