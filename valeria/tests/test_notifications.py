"""
Tests for the notification hub.
"""

import asyncio

import pytest

from valeria.models import NotificationEvent


def recorder(received: list):
    async def callback(event):
        received.append(event)
    return callback


class TestSubscribe:

    def test_client_count(self, hub):
        assert hub.get_client_count() == 0
        unsubscribe = hub.subscribe("a", recorder([]))
        hub.subscribe("b", recorder([]))
        assert hub.get_client_count() == 2

        unsubscribe()
        assert hub.get_client_count() == 1

    def test_unsubscribe_twice_is_harmless(self, hub):
        unsubscribe = hub.subscribe("a", recorder([]))
        unsubscribe()
        unsubscribe()
        assert hub.get_client_count() == 0

    def test_stale_unsubscribe_keeps_newer_registration(self, hub):
        old_unsubscribe = hub.subscribe("a", recorder([]))
        hub.subscribe("a", recorder([]))

        old_unsubscribe()
        assert hub.get_client_count() == 1


class TestBroadcast:

    @pytest.mark.asyncio
    async def test_reaches_all_subscribers(self, hub):
        received_a, received_b = [], []
        hub.subscribe("a", recorder(received_a))
        hub.subscribe("b", recorder(received_b))

        event = NotificationEvent(type="claude_ready", event="stop")
        await hub.broadcast(event)

        assert received_a == [event]
        assert received_b == [event]

    @pytest.mark.asyncio
    async def test_failing_subscriber_does_not_block_others(self, hub):
        received_a, received_c = [], []

        async def broken(event):
            raise ConnectionResetError("client went away")

        hub.subscribe("a", recorder(received_a))
        hub.subscribe("b", broken)
        hub.subscribe("c", recorder(received_c))

        await hub.broadcast(NotificationEvent(type="claude_ready"))

        assert len(received_a) == 1
        assert len(received_c) == 1

    @pytest.mark.asyncio
    async def test_failing_subscriber_stays_registered(self, hub):
        async def broken(event):
            raise RuntimeError("boom")

        hub.subscribe("b", broken)
        await hub.broadcast(NotificationEvent(type="claude_ready"))

        assert hub.get_client_count() == 1

    @pytest.mark.asyncio
    async def test_delivers_concurrently(self, hub):
        """A slow subscriber must not hold up the rest."""
        released = asyncio.Event()

        async def waits(event):
            await asyncio.wait_for(released.wait(), timeout=1)

        async def releases(event):
            released.set()

        hub.subscribe("slow", waits)
        hub.subscribe("fast", releases)

        await asyncio.wait_for(hub.broadcast(NotificationEvent(type="claude_ready")), timeout=2)
        assert released.is_set()

    @pytest.mark.asyncio
    async def test_no_subscribers(self, hub):
        await hub.broadcast(NotificationEvent(type="claude_ready"))

    @pytest.mark.asyncio
    async def test_unsubscribed_client_receives_nothing(self, hub):
        received = []
        unsubscribe = hub.subscribe("a", recorder(received))
        unsubscribe()

        await hub.broadcast(NotificationEvent(type="claude_ready"))
        assert received == []


class TestNotificationEvent:

    def test_to_dict_flattens_payload(self):
        event = NotificationEvent(
            type="claude_ready",
            event="stop",
            timestamp=123,
            payload={"cwd": "/home/me/proj", "project": "proj"},
        )
        assert event.to_dict() == {
            "type": "claude_ready",
            "event": "stop",
            "timestamp": 123,
            "cwd": "/home/me/proj",
            "project": "proj",
        }

    def test_to_dict_omits_missing_event(self):
        assert "event" not in NotificationEvent(type="ping", timestamp=1).to_dict()
