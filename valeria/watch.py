"""
Terminal client for the /events stream.

Usage:
    python -m valeria.watch [--url http://127.0.0.1:3847/events] [--no-sound]

Prints a line per coalesced Claude notification and rings the terminal bell.
With --system-notify, also raises a desktop notification (notify-send or
osascript, whichever is installed).
"""

import argparse
import asyncio
import json
import logging
import shutil
import subprocess
import sys
from dataclasses import dataclass
from datetime import datetime

import aiohttp

from .coalescer import NotificationCoalescer, NotificationDisplay
from .config import config

logger = logging.getLogger(__name__)

RECONNECT_DELAY = 5.0


@dataclass
class ServerSentEvent:
    event: str
    data: str

    def json(self) -> dict:
        return json.loads(self.data) if self.data else {}


class SSEParser:
    """Incremental parser for text/event-stream lines."""

    def __init__(self):
        self._event = ""
        self._data: list[str] = []

    def feed_line(self, line: str) -> ServerSentEvent | None:
        """Consume one line (without its newline); return an event on dispatch."""
        if line == "":
            if not self._data and not self._event:
                return None
            event = ServerSentEvent(event=self._event or "message", data="\n".join(self._data))
            self._event = ""
            self._data = []
            return event

        if line.startswith(":"):
            return None

        field, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]

        if field == "event":
            self._event = value
        elif field == "data":
            self._data.append(value)
        return None


class TerminalDisplay(NotificationDisplay):
    """Renders notifications on stdout."""

    def __init__(self, system_notify: bool = False):
        self.system_notify = system_notify

    def show(self, message: str) -> None:
        print(f"[{datetime.now():%H:%M:%S}] {message}", flush=True)

    def dismiss(self) -> None:
        pass

    def play_sound(self) -> None:
        sys.stdout.write("\a")
        sys.stdout.flush()

    def notify_system(self, message: str) -> None:
        if shutil.which("notify-send"):
            subprocess.Popen(["notify-send", "Valeria", message])
        elif shutil.which("osascript"):
            script = f'display notification "{message}" with title "Valeria"'
            subprocess.Popen(["osascript", "-e", script])

    def is_focused(self) -> bool:
        # A terminal cannot tell; treat it as unfocused only when asked to
        return not self.system_notify


async def watch(url: str, coalescer: NotificationCoalescer) -> None:
    """Follow the event stream, reconnecting after failures."""
    while True:
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(url, timeout=aiohttp.ClientTimeout(total=None)) as resp:
                    resp.raise_for_status()
                    parser = SSEParser()
                    async for raw in resp.content:
                        dispatch_line(parser, raw, coalescer)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(f"Disconnected from {url}: {e}")
        await asyncio.sleep(RECONNECT_DELAY)


def dispatch_line(parser: SSEParser, raw: bytes, coalescer: NotificationCoalescer) -> None:
    """Feed one raw stream line to the parser, skipping malformed frames."""
    try:
        event = parser.feed_line(raw.decode("utf-8").rstrip("\r\n"))
        if event is not None:
            handle_event(event, coalescer)
    except ValueError as e:
        logger.warning(f"Skipping malformed event: {e}")


def handle_event(event: ServerSentEvent, coalescer: NotificationCoalescer) -> None:
    if event.event == "connected":
        logger.info(f"Connected: {event.json().get('client_id')}")
    elif event.event == "claude_ready":
        coalescer.push(event.json().get("event"))


async def _run(args: argparse.Namespace) -> None:
    coalescer = NotificationCoalescer(
        TerminalDisplay(system_notify=args.system_notify),
        sound_enabled=not args.no_sound,
    )
    try:
        await watch(args.url, coalescer)
    finally:
        coalescer.close()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Show Claude notifications in the terminal.")
    parser.add_argument("--url", default=f"http://{config.host}:{config.port}/events")
    parser.add_argument("--no-sound", action="store_true", help="Do not ring the bell")
    parser.add_argument("--system-notify", action="store_true", help="Also raise desktop notifications")
    args = parser.parse_args(argv)

    logging.basicConfig(level=config.LOG_LEVEL)
    try:
        asyncio.run(_run(args))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
