"""Tests for health, startup and error handling."""

from fastapi.testclient import TestClient

from forgez.db import jobs_repository
from forgez.web.api import create_app


class TestHealthEndpoint:
    """Tests for GET /api/health."""

    def test_health_check(self, client):
        """Health endpoint returns ok."""
        response = client.get("/api/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["version"] == "0.1.0"
        assert "timestamp" in data


class TestStartup:
    """Tests for the application lifespan."""

    def test_startup_creates_database(self, workspace):
        """Startup creates the database."""
        with TestClient(create_app()) as client:
            assert client.get("/api/health").status_code == 200
        assert (workspace / "db" / "forgez.db").exists()


class TestErrorHandling:
    """Tests for the global exception handlers."""

    def test_unexpected_error_is_500(self, workspace, monkeypatch):
        """Unexpected errors return a generic 500."""
        def boom(**kwargs):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(jobs_repository, "list_companies", boom)
        client = TestClient(create_app(), raise_server_exceptions=False)

        response = client.get("/api/companies")
        assert response.status_code == 500
        # Internal details are not leaked
        assert response.json() == {"detail": "Internal server error"}

    def test_unknown_route(self, client):
        """Unknown routes return 404."""
        assert client.get("/api/nothing-here").status_code == 404
