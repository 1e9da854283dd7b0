"""Tests for the career role and hackathon catalogs."""

import pytest

from forgez.core import catalog
from forgez.core.errors import NotFoundError, ValidationError
from forgez.db import catalog_repository


class TestRoles:
    """Tests for /api/roles."""

    def test_lists_by_demand(self, client, seeded):
        """Roles come highest demand first."""
        data = client.get("/api/roles").json()
        assert data["count"] == 4
        assert data["roles"][0]["slug"] == "ml-engineer"
        assert data["roles"][0]["salary_range"]["currency"] == "PLN"
        assert data["roles"][0]["remote_friendly"] is True
        demand = [r["market_demand"] for r in data["roles"]]
        assert demand == sorted(demand, reverse=True)

    def test_filters(self, client, seeded):
        """Industry and level filters combine."""
        space = client.get("/api/roles", params={"industry": "space"}).json()
        assert [r["slug"] for r in space["roles"]] == ["mission-analyst"]

        entry = client.get("/api/roles", params={"level": "entry"}).json()
        assert entry["count"] == 2

        none = client.get("/api/roles", params={"industry": "space", "level": "mid"}).json()
        assert none == {"roles": [], "count": 0}

    def test_get_role(self, client, seeded):
        """Single role by id."""
        response = client.get("/api/roles/fz-role-robotics-technician")
        assert response.status_code == 200
        assert response.json()["role"]["required_skills"] == ["Robotics", "Control Systems"]
        assert client.get("/api/roles/missing").status_code == 404


class TestHackathons:
    """Tests for /api/hackathons."""

    def test_lists_by_start_date(self, client, seeded):
        """Hackathons come soonest first with their sponsor."""
        data = client.get("/api/hackathons").json()
        assert data["count"] == 2
        assert [h["slug"] for h in data["hackathons"]] == ["smart-grid-sprint", "cubesat-challenge"]
        cubesat = data["hackathons"][1]
        assert cubesat["sponsor_company"] == {
            "id": "fz-orbitforge",
            "name": "OrbitForge",
            "logo_url": None,
        }
        assert data["hackathons"][0]["sponsor_company"] is None

    def test_status_filter(self, client, seeded):
        """Status filter applies and is validated."""
        upcoming = client.get("/api/hackathons", params={"status": "upcoming"}).json()
        assert [h["slug"] for h in upcoming["hackathons"]] == ["cubesat-challenge"]

        bad = client.get("/api/hackathons", params={"status": "cancelled"})
        assert bad.status_code == 400
        assert "upcoming" in bad.json()["detail"]

    def test_get_hackathon(self, client, seeded):
        """Single hackathon by id."""
        response = client.get("/api/hackathons/fz-hack-grid")
        assert response.json()["hackathon"]["skills_tested"] == ["Machine Learning", "Renewable Energy"]
        assert client.get("/api/hackathons/missing").status_code == 404


class TestCatalogService:
    """Tests for the catalog service."""

    def test_hackathon_without_sponsor(self, seeded):
        """Hackathons default to upcoming with no sponsor."""
        catalog_repository.insert_hackathon(
            slug="solo-jam",
            title="Solo Jam",
            start_date="2027-01-01",
            end_date="2027-01-02",
            hackathon_id="jam",
        )
        assert catalog.get_hackathon("jam").sponsor_company is None
        assert catalog.get_hackathon("jam").status == "upcoming"

    def test_unknown_ids_raise(self, seeded):
        """Unknown ids raise NotFoundError."""
        with pytest.raises(NotFoundError):
            catalog.get_role("missing")
        with pytest.raises(NotFoundError):
            catalog.get_hackathon("missing")

    def test_invalid_status_raises(self, seeded):
        """Unknown status filter raises ValidationError."""
        with pytest.raises(ValidationError) as exc:
            catalog.list_hackathons(status="paused")
        assert exc.value.field == "status"
