"""
Tests for the HTTP API.
"""

import pytest

from valeria.routes.api import project_name


class TestHealthCheck:
    """Tests for /health endpoint."""

    def test_health_check_returns_ok(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert isinstance(data["timestamp"], int)


class TestGetFeed:
    """Tests for GET /api/feed."""

    def test_returns_merged_items(self, client):
        response = client.get("/api/feed")
        assert response.status_code == 200
        data = response.json()
        assert [i["id"] for i in data["items"]] == ["alpha:1", "beta:1", "alpha:2", "beta:2", "alpha:3"]
        assert data["has_more"] is False

    def test_item_has_required_fields(self, client):
        item = client.get("/api/feed").json()["items"][0]
        for field in ("id", "title", "url", "source", "summary", "author",
                      "published_at", "read", "tags", "provider_id"):
            assert field in item
        assert item["published_at"].startswith("2024-06-01T11:00:00")

    def test_limit_and_offset(self, client):
        data = client.get("/api/feed?limit=2&offset=1").json()
        assert [i["id"] for i in data["items"]] == ["beta:1", "alpha:2"]
        assert data["has_more"] is True

    def test_provider_filter(self, client):
        data = client.get("/api/feed?provider=beta").json()
        assert [i["id"] for i in data["items"]] == ["beta:1", "beta:2"]

    def test_unknown_provider_is_empty(self, client):
        data = client.get("/api/feed?provider=nope").json()
        assert data == {"items": [], "has_more": False}

    def test_failing_provider_still_returns_others(self, client, providers):
        providers["alpha"].fail = True
        data = client.get("/api/feed").json()
        assert [i["id"] for i in data["items"]] == ["beta:1", "beta:2"]

    def test_rejects_negative_offset(self, client):
        response = client.get("/api/feed?offset=-1")
        assert response.status_code == 422


class TestGetFeedItem:
    """Tests for GET /api/feed/{id}."""

    def test_returns_item(self, client):
        client.get("/api/feed")
        response = client.get("/api/feed/alpha:2")
        assert response.status_code == 200
        assert response.json()["id"] == "alpha:2"

    def test_not_found(self, client):
        response = client.get("/api/feed/alpha:999")
        assert response.status_code == 404
        assert response.json()["detail"] == "Not found"


class TestMarkRead:
    """Tests for POST /api/feed/{id}/read."""

    def test_marks_item_read(self, client, providers):
        client.get("/api/feed")

        response = client.post("/api/feed/alpha:1/read")
        assert response.status_code == 200
        assert response.json() == {"success": True}

        items = {i["id"]: i for i in client.get("/api/feed").json()["items"]}
        assert items["alpha:1"]["read"] is True
        assert items["beta:1"]["read"] is False
        assert providers["alpha"].marked == ["alpha:1"]

    def test_twice_is_ok(self, client):
        assert client.post("/api/feed/beta:1/read").status_code == 200
        assert client.post("/api/feed/beta:1/read").status_code == 200

    def test_provider_failure_is_hidden(self, client, providers):
        providers["alpha"].fail_mark_read = True
        response = client.post("/api/feed/alpha:1/read")
        assert response.status_code == 200


class TestRefresh:
    """Tests for POST /api/feed/refresh."""

    def test_refresh_refetches(self, client, providers):
        client.get("/api/feed")
        client.get("/api/feed")
        assert providers["alpha"].fetch_count == 1

        response = client.post("/api/feed/refresh")
        assert response.status_code == 200
        assert response.json() == {"success": True}

        client.get("/api/feed")
        assert providers["alpha"].fetch_count == 2


class TestProviders:
    """Tests for provider listing."""

    def test_lists_providers(self, client):
        response = client.get("/api/providers")
        assert response.status_code == 200
        assert response.json() == {
            "providers": [
                {"name": "alpha", "enabled": True},
                {"name": "beta", "enabled": True},
            ]
        }

    def test_provider_status(self, client, providers):
        providers["alpha"].connected = False
        response = client.get("/api/providers/status")
        assert response.json() == {"alpha": False, "beta": True}


class TestClaudeReady:
    """Tests for POST /api/claude-ready."""

    @pytest.fixture
    def received(self, hub):
        received = []

        async def callback(event):
            received.append(event)

        hub.subscribe("test-client", callback)
        return received

    def test_broadcasts_event(self, client, received):
        response = client.post("/api/claude-ready", json={"event": "stop"})
        assert response.status_code == 200
        assert response.json() == {"success": True}

        assert len(received) == 1
        data = received[0].to_dict()
        assert data["type"] == "claude_ready"
        assert data["event"] == "stop"
        assert isinstance(data["timestamp"], int)

    def test_extracts_project_from_cwd(self, client, received):
        client.post("/api/claude-ready", json={"event": "attention_needed", "cwd": "/home/me/code/valeria"})

        data = received[0].to_dict()
        assert data["cwd"] == "/home/me/code/valeria"
        assert data["project"] == "valeria"

    def test_empty_body_defaults_to_ready(self, client, received):
        response = client.post("/api/claude-ready")
        assert response.status_code == 200
        assert received[0].event == "ready"

    def test_invalid_body_defaults_to_ready(self, client, received):
        response = client.post(
            "/api/claude-ready",
            content=b"not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 200
        assert received[0].event == "ready"

    def test_broken_subscriber_does_not_fail_request(self, client, hub):
        async def broken(event):
            raise RuntimeError("socket closed")

        hub.subscribe("broken", broken)
        response = client.post("/api/claude-ready", json={"event": "stop"})
        assert response.status_code == 200


class TestProjectName:

    @pytest.mark.parametrize("cwd,expected", [
        ("/home/me/code/valeria", "valeria"),
        ("/home/me/code/valeria/", "valeria"),
        ("relative/dir", "dir"),
        ("", None),
        (None, None),
    ])
    def test_last_segment(self, cwd, expected):
        assert project_name(cwd) == expected
