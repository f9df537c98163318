"""
Client-side notification coalescing.

Claude Code hooks often fire several events in quick succession. The
coalescer waits for a short quiet period, then shows a single notification
for the most important event seen in that window.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from enum import IntEnum

logger = logging.getLogger(__name__)

DEBOUNCE_SECONDS = 2.0
AUTO_DISMISS_SECONDS = 10.0


class EventKind(IntEnum):
    """Readiness event sub-kinds, ordered by precedence."""
    DEFAULT = 0
    ATTENTION_NEEDED = 1
    STOP = 2


MESSAGES = {
    EventKind.STOP: "Claude is ready!",
    EventKind.ATTENTION_NEEDED: "Claude needs your attention",
    EventKind.DEFAULT: "Claude notification",
}


def classify(event: str | None) -> EventKind:
    """Map a hook event name to its kind."""
    if not event:
        return EventKind.DEFAULT
    name = event.lower()
    if name == "stop":
        return EventKind.STOP
    if name in ("notification", "attention_needed"):
        return EventKind.ATTENTION_NEEDED
    return EventKind.DEFAULT


class NotificationDisplay(ABC):
    """Where coalesced notifications are rendered."""

    @abstractmethod
    def show(self, message: str) -> None:
        pass

    @abstractmethod
    def dismiss(self) -> None:
        pass

    @abstractmethod
    def play_sound(self) -> None:
        pass

    @abstractmethod
    def notify_system(self, message: str) -> None:
        """Raise an OS-level notification."""
        pass

    @abstractmethod
    def is_focused(self) -> bool:
        pass


class NotificationCoalescer:
    """
    Debounces readiness events into single notifications.

    Must be used from within a running event loop.
    """

    def __init__(
        self,
        display: NotificationDisplay,
        debounce: float = DEBOUNCE_SECONDS,
        auto_dismiss: float = AUTO_DISMISS_SECONDS,
        sound_enabled: bool = True,
    ):
        self.display = display
        self.debounce = debounce
        self.auto_dismiss = auto_dismiss
        self.sound_enabled = sound_enabled
        self._pending: EventKind | None = None
        self._debounce_handle: asyncio.TimerHandle | None = None
        self._dismiss_handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> EventKind | None:
        return self._pending

    @property
    def visible(self) -> bool:
        return self._dismiss_handle is not None

    def push(self, event: str | None) -> None:
        """Record an event and restart the debounce window."""
        kind = classify(event)
        if self._pending is None or kind > self._pending:
            self._pending = kind

        if self._debounce_handle:
            self._debounce_handle.cancel()
        loop = asyncio.get_running_loop()
        self._debounce_handle = loop.call_later(self.debounce, self._flush)

    def _flush(self) -> None:
        self._debounce_handle = None
        kind = self._pending
        self._pending = None
        if kind is None:
            return

        message = MESSAGES[kind]

        # A newer notification replaces the visible one
        if self._dismiss_handle:
            self._dismiss_handle.cancel()

        self.display.show(message)

        if self.sound_enabled:
            try:
                self.display.play_sound()
            except Exception as e:
                logger.debug(f"Sound not available: {e}")

        if not self.display.is_focused():
            try:
                self.display.notify_system(message)
            except Exception as e:
                logger.debug(f"System notification failed: {e}")

        loop = asyncio.get_running_loop()
        self._dismiss_handle = loop.call_later(self.auto_dismiss, self._dismiss)

    def _dismiss(self) -> None:
        self._dismiss_handle = None
        self.display.dismiss()

    def close(self) -> None:
        """Cancel pending timers without showing anything."""
        for handle in (self._debounce_handle, self._dismiss_handle):
            if handle:
                handle.cancel()
        self._debounce_handle = None
        self._dismiss_handle = None
        self._pending = None
