"""Integration tests for the mailbox HTTP API."""

import re

import pytest
from fastapi.testclient import TestClient

from src.constants import DOMAINS
from src.core.config import Settings

ADDRESS = "abc12345@1secmail.com"
ADDRESS_RE = re.compile(
    r"^[a-z0-9]{4,8}@(" + "|".join(re.escape(d) for d in DOMAINS) + r")$"
)


@pytest.mark.integration
class TestCreateEmail:
    """Tests for POST /api/create-email."""

    def test_create_with_prefix_and_count(self, client, fake_provider):
        """Test prefix and count are honoured without a provider call."""
        response = client.post("/api/create-email", json={"prefix": "abc", "count": 2})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert len(data["emails"]) == 2
        for email in data["emails"]:
            assert ADDRESS_RE.match(email)
            assert email.startswith("abc")
        assert data["message"] == "Successfully generated 2 temporary email(s)"
        assert fake_provider.list_calls == []

    def test_create_without_body(self, client):
        """Test a bare POST creates one address."""
        response = client.post("/api/create-email")

        assert response.status_code == 200
        assert len(response.json()["emails"]) == 1

    @pytest.mark.parametrize("count", [0, 51, "many"])
    def test_create_invalid_count(self, client, count):
        """Test invalid counts are rejected with 400."""
        response = client.post("/api/create-email", json={"count": count})

        assert response.status_code == 400
        assert response.json()["success"] is False


@pytest.mark.integration
class TestGetMessages:
    """Tests for GET /api/get-messages/{email}."""

    def test_messages_newest_first(self, client, fake_provider):
        """Test messages, count and OTP in the response."""
        fake_provider.add_message(ADDRESS, id=1, textBody="Welcome")
        fake_provider.add_message(ADDRESS, id=2, textBody="Your code is 482913")

        response = client.get(f"/api/get-messages/{ADDRESS}")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["email"] == ADDRESS
        assert data["count"] == 2
        assert [m["id"] for m in data["messages"]] == [2, 1]
        assert data["messages"][0]["otp"] == "482913"
        assert data["messages"][1]["otp"] is None
        assert isinstance(data["timestamp"], int)

    def test_invalid_email(self, client):
        """Test addresses without @ are rejected before any provider call."""
        response = client.get("/api/get-messages/nobody")

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid email address"

    def test_provider_down_gives_empty_inbox(self, client, fake_provider):
        """Test upstream failure degrades to no messages."""
        fake_provider.unreachable.add(ADDRESS)

        response = client.get(f"/api/get-messages/{ADDRESS}")

        assert response.status_code == 200
        assert response.json()["count"] == 0


@pytest.mark.integration
class TestCheckEmails:
    """Tests for POST /api/check-emails."""

    def test_mixed_batch(self, client, fake_provider):
        """Test results keep request order and isolate bad entries."""
        fake_provider.add_message(ADDRESS, textBody="OTP: 5521")

        response = client.post("/api/check-emails", json={"emails": [ADDRESS, "broken"]})

        assert response.status_code == 200
        results = response.json()["results"]
        assert results[0]["email"] == ADDRESS
        assert results[0]["hasOTP"] is True
        assert results[0]["count"] == 1
        assert results[1]["email"] == "broken"
        assert results[1]["error"] == "Invalid email address"
        assert results[1]["count"] == 0

    def test_non_string_entry(self, client, fake_provider):
        """Test a non-string entry does not fail the batch."""
        fake_provider.add_message(ADDRESS, textBody="OTP: 5521")

        response = client.post("/api/check-emails", json={"emails": [ADDRESS, 123]})

        assert response.status_code == 200
        results = response.json()["results"]
        assert results[0]["count"] == 1
        assert results[1] == {
            "email": 123,
            "error": "Invalid email address",
            "messages": [],
            "count": 0,
        }

    @pytest.mark.parametrize("body", [{"emails": []}, {}, {"emails": "abc@1secmail.com"}])
    def test_bad_body(self, client, body):
        """Test empty or non-array emails are rejected with 400."""
        response = client.post("/api/check-emails", json=body)

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_empty_list_message(self, client):
        """Test the empty-list error text."""
        response = client.post("/api/check-emails", json={"emails": []})
        assert response.json()["error"] == "No emails provided"


@pytest.mark.integration
class TestVerifyEmail:
    """Tests for GET /api/verify-email/{email}."""

    def test_valid(self, client):
        """Test reachable pool address."""
        response = client.get(f"/api/verify-email/{ADDRESS}")

        assert response.json() == {
            "success": True,
            "valid": True,
            "message": "Email is valid and active",
        }

    def test_invalid_domain(self, client):
        """Test a domain outside the pool."""
        response = client.get("/api/verify-email/someone@gmail.com")

        assert response.status_code == 200
        assert response.json() == {"success": False, "valid": False, "message": "Invalid domain"}

    def test_unreachable(self, client, fake_provider):
        """Test provider failure."""
        fake_provider.unreachable.add(ADDRESS)

        response = client.get(f"/api/verify-email/{ADDRESS}")

        assert response.json()["valid"] is False
        assert response.json()["message"] == "Email does not exist or is not accessible"


@pytest.mark.integration
class TestRealtimeLifecycle:
    """Tests for start-realtime, delete-email and stats."""

    def test_start_stats_delete(self, client):
        """Test tracking shows up in stats and goes away after delete."""
        response = client.post("/api/start-realtime", json={"email": ADDRESS, "clientId": "x"})
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Real-time checking started"}

        stats = client.get("/api/stats").json()["stats"]
        assert stats["activeAccounts"] == 1

        response = client.delete(f"/api/delete-email/{ADDRESS}")
        assert response.json() == {
            "success": True,
            "message": f"Stopped checking emails for {ADDRESS}",
        }
        assert client.get("/api/stats").json()["stats"]["activeAccounts"] == 0

    def test_start_twice_single_tracking(self, client):
        """Test repeated start keeps one tracked entry."""
        client.post("/api/start-realtime", json={"email": ADDRESS})
        client.post("/api/start-realtime", json={"email": ADDRESS})

        assert client.get("/api/stats").json()["stats"]["activeAccounts"] == 1

    def test_delete_untracked(self, client):
        """Test delete is idempotent."""
        response = client.delete("/api/delete-email/never123@esiix.com")
        assert response.status_code == 200
        assert response.json()["success"] is True

    def test_start_requires_email(self, client):
        """Test missing email is a 400."""
        response = client.post("/api/start-realtime", json={"clientId": "abc"})

        assert response.status_code == 400
        assert response.json()["error"] == "Email is required"

    def test_start_rejects_invalid_email(self, client):
        """Test malformed email is a 400."""
        response = client.post("/api/start-realtime", json={"email": "not-an-email"})
        assert response.status_code == 400

    def test_stats_shape(self, client):
        """Test stats fields."""
        data = client.get("/api/stats").json()

        assert data["success"] is True
        stats = data["stats"]
        assert stats["domainsAvailable"] == 7
        assert stats["checkInterval"] == "3600 seconds"
        assert stats["activeConnections"] == 0
        assert "serverTime" in stats


@pytest.mark.integration
class TestServiceEndpoints:
    """Tests for health and cross-cutting behaviour."""

    def test_health(self, client):
        """Test health reports component state."""
        data = client.get("/health").json()

        assert data["status"] == "healthy"
        assert data["version"]
        assert data["components"]["scheduler"] == "running"
        assert data["components"]["connections"] == 0
        assert data["components"]["tracked"] == 0

    def test_request_id_header(self, client):
        """Test every response carries X-Request-ID."""
        response = client.get("/api/stats", headers={"X-Request-ID": "abc-123"})
        assert response.headers["X-Request-ID"] == "abc-123"

    def test_shutdown_closes_provider(self, test_app, fake_provider):
        """Test leaving the lifespan stops polling and closes the provider."""
        with TestClient(test_app) as client:
            client.post("/api/start-realtime", json={"email": ADDRESS})

        assert fake_provider.closed
        assert len(test_app.state.coordinator.scheduler) == 0


@pytest.mark.integration
class TestRateLimit:
    """Tests for slowapi limits on batch endpoints."""

    def test_create_email_rate_limited(self, monkeypatch, fake_provider):
        """Test requests over the limit get a 429 envelope."""
        from web.app import create_app
        from web.routes.mailbox import limiter

        monkeypatch.setenv("RATE_LIMIT", "2/minute")
        monkeypatch.setenv("RATE_LIMIT_ENABLED", "true")
        settings = Settings(env="testing", check_interval=3600)
        app = create_app(settings=settings, provider_client=fake_provider)
        limiter.reset()

        try:
            with TestClient(app) as client:
                statuses = [client.post("/api/create-email").status_code for _ in range(3)]
                response = client.post("/api/create-email")
        finally:
            limiter.reset()
            limiter.enabled = False

        assert statuses == [200, 200, 429]
        assert response.status_code == 429
        assert response.json()["success"] is False
