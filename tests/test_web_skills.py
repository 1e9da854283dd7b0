"""Tests for skills bank endpoints."""

import pytest


@pytest.fixture
def ada_python(client, seeded, auth):
    """Ada has Python on her profile. Returns the user skill id."""
    response = client.post(
        "/api/skills/user",
        json={"skill_id": "fz-python", "proficiency_level": 3, "is_primary": True},
        headers=auth("ada"),
    )
    return response.json()["skill"]["id"]


class TestTaxonomy:
    """Tests for GET /api/skills/taxonomy."""

    def test_lists_seeded_skills(self, client, seeded):
        """Lists the seeded taxonomy."""
        response = client.get("/api/skills/taxonomy")
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 12
        assert data["limit"] == 50

    def test_search_by_name(self, client, seeded):
        """Search matches skill names."""
        data = client.get("/api/skills/taxonomy", params={"search": "pyth"}).json()
        assert [s["id"] for s in data["skills"]] == ["fz-python"]

    def test_limit_is_capped(self, client, seeded):
        """Limit is capped at 100."""
        data = client.get("/api/skills/taxonomy", params={"limit": 500}).json()
        assert data["limit"] == 100

    def test_category_filter(self, client, seeded):
        """Category filter applies and is validated."""
        data = client.get("/api/skills/taxonomy", params={"category": "TRANSVERSAL"}).json()
        assert data["total"] == 2
        bad = client.get("/api/skills/taxonomy", params={"category": "MAGIC"})
        assert bad.status_code == 400


class TestUserSkills:
    """Tests for /api/skills/user."""

    def test_add_skill(self, client, seeded, auth):
        """Adding a skill self-assesses it."""
        response = client.post(
            "/api/skills/user", json={"skill_id": "fz-robotics"}, headers=auth("ada")
        )
        assert response.status_code == 201
        data = response.json()
        assert data["skill"]["verification_level"] == "SELF_ASSESSED"
        assert data["skill"]["proficiency_level"] == 1
        progress = {p["achievement_id"]: p for p in data["achievements"]["progress"]}
        assert progress["port_skill_collector"]["current"] == 1

    def test_add_skill_errors(self, client, ada_python, auth):
        """Duplicate, unknown and invalid skills fail."""
        duplicate = client.post(
            "/api/skills/user", json={"skill_id": "fz-python"}, headers=auth("ada")
        )
        unknown = client.post("/api/skills/user", json={"skill_id": "fz-magic"}, headers=auth("ada"))
        bad_level = client.post(
            "/api/skills/user",
            json={"skill_id": "fz-ml", "proficiency_level": 9},
            headers=auth("ada"),
        )
        missing = client.post("/api/skills/user", json={}, headers=auth("ada"))

        assert duplicate.status_code == 400
        assert unknown.status_code == 404
        assert bad_level.status_code == 400
        assert missing.status_code == 400

    def test_list_own_skills(self, client, ada_python, auth):
        """Owner lists their skills."""
        data = client.get("/api/skills/user", headers=auth("ada")).json()
        assert data["count"] == 1
        assert data["skills"][0]["skill"]["name"] == "Python"

    def test_other_users_private_skills(self, client, ada_python, auth):
        """Private skills return 403 to others."""
        response = client.get("/api/skills/user", params={"userId": "ada"}, headers=auth("bob"))
        assert response.status_code == 403

    def test_other_users_public_skills(self, client, ada_python, auth):
        """Public skills are visible to others."""
        client.patch(
            "/api/user",
            json={"show_skills_publicly": True, "profile_visibility": "public"},
            headers=auth("ada"),
        )
        response = client.get("/api/skills/user", params={"userId": "ada"}, headers=auth("bob"))
        assert response.status_code == 200
        assert response.json()["count"] == 1

    def test_update_and_delete(self, client, ada_python, auth):
        """Owner can update and delete a skill."""
        updated = client.put(
            f"/api/skills/user/{ada_python}", json={"proficiency_level": 4}, headers=auth("ada")
        )
        assert updated.status_code == 200
        assert updated.json()["skill"]["proficiency_level"] == 4

        forbidden = client.delete(f"/api/skills/user/{ada_python}", headers=auth("bob"))
        assert forbidden.status_code == 403

        deleted = client.delete(f"/api/skills/user/{ada_python}", headers=auth("ada"))
        assert deleted.json() == {"success": True}
        assert client.get("/api/skills/user", headers=auth("ada")).json()["count"] == 0

    @pytest.mark.parametrize("field", ["proficiency_level", "is_primary"])
    def test_null_for_required_field(self, client, ada_python, auth, field):
        """Explicit null for a required field returns 400."""
        response = client.put(
            f"/api/skills/user/{ada_python}", json={field: None}, headers=auth("ada")
        )
        assert response.status_code == 400
        assert response.json()["detail"] == f"{field} cannot be null"

    def test_owner_cannot_set_verification(self, client, ada_python, auth):
        """Verification level is ignored in owner updates."""
        response = client.put(
            f"/api/skills/user/{ada_python}",
            json={"verification_level": "CERTIFICATION_VERIFIED", "notes": "Certified, honest"},
            headers=auth("ada"),
        )
        assert response.status_code == 200
        assert response.json()["skill"]["verification_level"] == "SELF_ASSESSED"
        assert response.json()["skill"]["notes"] == "Certified, honest"

        summary = client.get("/api/skills/summary", headers=auth("ada")).json()
        assert summary["verified"] == 0

    def test_summary(self, client, ada_python, auth):
        """Summary aggregates by category."""
        client.post("/api/skills/user", json={"skill_id": "fz-teamwork"}, headers=auth("ada"))
        data = client.get("/api/skills/summary", headers=auth("ada")).json()
        assert data["total"] == 2
        assert data["primary"] == 1
        assert data["average_proficiency"] == 2.0
        assert data["by_category"] == {"SKILL": 1, "TRANSVERSAL": 1}


class TestEndorsements:
    """Tests for /api/skills/endorsements."""

    def test_endorse_credits_endorser(self, client, ada_python, auth):
        """Endorsing credits the endorser."""
        response = client.post(
            "/api/skills/endorsements",
            json={"user_skill_id": ada_python, "relationship": "colleague"},
            headers=auth("bob"),
        )
        assert response.status_code == 201
        data = response.json()
        assert data["skill"]["evidence_count"] == 1
        # 15 XP for the review plus the Helpful Peer achievement
        assert data["progression"]["xp_awarded"] == 40

    def test_self_and_duplicate_endorsements(self, client, ada_python, auth):
        """Self and repeat endorsements fail."""
        own = client.post(
            "/api/skills/endorsements", json={"user_skill_id": ada_python}, headers=auth("ada")
        )
        assert own.status_code == 400

        client.post(
            "/api/skills/endorsements", json={"user_skill_id": ada_python}, headers=auth("bob")
        )
        again = client.post(
            "/api/skills/endorsements", json={"user_skill_id": ada_python}, headers=auth("bob")
        )
        assert again.status_code == 400

    def test_three_endorsements_promote_skill(self, client, ada_python, auth):
        """Three endorsements promote verification."""
        for endorser in ("bob", "cyd", "dan"):
            response = client.post(
                "/api/skills/endorsements",
                json={"user_skill_id": ada_python},
                headers=auth(endorser),
            )
        skill = response.json()["skill"]
        assert skill["verification_level"] == "PEER_ENDORSED"
        assert skill["evidence_count"] == 3

    def test_remove_endorsement(self, client, ada_python, auth):
        """Only the endorser can remove an endorsement."""
        endorsement = client.post(
            "/api/skills/endorsements", json={"user_skill_id": ada_python}, headers=auth("bob")
        ).json()["endorsement"]

        forbidden = client.delete(
            f"/api/skills/endorsements/{endorsement['id']}", headers=auth("ada")
        )
        assert forbidden.status_code == 403

        removed = client.delete(f"/api/skills/endorsements/{endorsement['id']}", headers=auth("bob"))
        assert removed.status_code == 200

    def test_unknown_user_skill(self, client, seeded, auth):
        """Unknown user skill returns 404."""
        response = client.post(
            "/api/skills/endorsements", json={"user_skill_id": "missing"}, headers=auth("bob")
        )
        assert response.status_code == 404
