"""
Notification hub - fans events out to every connected client.

Subscribers register an async push callback under a client id. A broadcast
calls every callback concurrently; a failing callback is logged and left
registered (removal happens only through the unsubscribe function, which the
streaming transport calls when the connection closes).
"""

import asyncio
import logging
from typing import Awaitable, Callable

from .models import NotificationEvent

logger = logging.getLogger(__name__)

PushCallback = Callable[[NotificationEvent], Awaitable[None]]


class NotificationHub:
    """Registry of live subscribers."""

    def __init__(self):
        self._subscribers: dict[str, PushCallback] = {}

    def subscribe(self, client_id: str, callback: PushCallback) -> Callable[[], None]:
        """
        Register a client.

        Returns a function that removes this registration. Calling it more
        than once is harmless.
        """
        self._subscribers[client_id] = callback
        logger.debug(f"Client {client_id} subscribed ({len(self._subscribers)} total)")

        def unsubscribe() -> None:
            if self._subscribers.get(client_id) is callback:
                del self._subscribers[client_id]
                logger.debug(f"Client {client_id} unsubscribed ({len(self._subscribers)} total)")

        return unsubscribe

    async def broadcast(self, event: NotificationEvent) -> None:
        """Deliver an event to every current subscriber."""
        targets = list(self._subscribers.items())
        if not targets:
            return

        await asyncio.gather(*(self._deliver(cid, cb, event) for cid, cb in targets))

    async def _deliver(self, client_id: str, callback: PushCallback, event: NotificationEvent) -> None:
        try:
            await callback(event)
        except Exception as e:
            logger.warning(f"Failed to deliver {event.type} to client {client_id}: {e}")

    def get_client_count(self) -> int:
        return len(self._subscribers)
