from unittest.mock import patch

from modules.core.models import OutboxEvent


class TestHealthCheck:
    def test_healthy_when_database_and_cache_up(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "timestamp" in data
        for service in ("database", "cache"):
            assert data["services"][service]["status"] == "up"
            assert "response_time_ms" in data["services"][service]

    def test_reports_outbox_backlog(self, client):
        OutboxEvent.objects.create(
            topic="orders", event_type="OrderPlaced", aggregate_id="1", payload={}
        )

        data = client.get("/health").json()

        assert data["services"]["outbox"]["pending"] == 1

    def test_cache_failure_returns_503(self, client):
        with patch("modules.core.views.cache") as cache:
            cache.set.side_effect = ConnectionError("down")
            response = client.get("/health")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "unhealthy"
        assert data["services"]["cache"]["status"] == "down"
        assert data["services"]["database"]["status"] == "up"

    def test_database_failure_skips_outbox(self, client):
        with patch("modules.core.views.connections") as conns:
            conns.__getitem__.return_value.ensure_connection.side_effect = Exception("gone")
            response = client.get("/health")

        assert response.status_code == 503
        data = response.json()
        assert data["services"]["database"]["status"] == "down"
        assert "outbox" not in data["services"]
