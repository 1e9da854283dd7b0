"""Tests for user profile, onboarding, archetype and preference endpoints."""

from datetime import date

import pytest

ARCHETYPE_ANSWERS = {
    "archetype": "BUILDER",
    "game_preference": "sandbox",
    "domain_interest": "space",
    "focus_area": "how_build",
}


class TestAuthentication:
    """Tests for the caller identity header."""

    def test_missing_header_is_unauthorized(self, client):
        """Missing identity returns 401."""
        response = client.get("/api/user")
        assert response.status_code == 401
        assert response.json()["detail"] == "Unauthorized"

    def test_malformed_user_id(self, client, auth):
        """Malformed identity returns 400."""
        response = client.get("/api/user", headers=auth("../../etc"))
        assert response.status_code == 400


class TestProfile:
    """Tests for GET/PATCH /api/user."""

    def test_profile_created_on_first_access(self, client, auth):
        """Profile is created on first access."""
        response = client.get("/api/user", headers=auth("ada"))
        assert response.status_code == 200
        data = response.json()
        assert data["user"]["id"] == "ada"
        assert data["profile_complete"] is False
        assert data["early_adopter"] is False
        assert data["progression"]["total_xp"] == 0
        assert data["progression"]["current_quest"] == 1

    def test_patch_updates_only_sent_fields(self, client, auth):
        """PATCH keeps fields not sent."""
        client.patch("/api/user", json={"headline": "Engineer"}, headers=auth("ada"))
        response = client.patch("/api/user", json={"bio": "Builds rockets"}, headers=auth("ada"))

        assert response.status_code == 200
        user = response.json()["user"]
        assert user["headline"] == "Engineer"
        assert user["bio"] == "Builds rockets"
        assert response.json()["achievements"] is None

    def test_patch_without_fields(self, client, auth):
        """Empty PATCH returns 400."""
        response = client.patch("/api/user", json={}, headers=auth("ada"))
        assert response.status_code == 400
        assert response.json()["detail"] == "No valid fields to update"

    @pytest.mark.parametrize(
        "field", ["dark_mode", "timezone", "profile_visibility", "show_skills_publicly"]
    )
    def test_patch_null_for_required_field(self, client, auth, field):
        """Explicit null for a required field returns 400."""
        response = client.patch("/api/user", json={field: None}, headers=auth("ada"))
        assert response.status_code == 400
        assert response.json()["detail"] == f"{field} cannot be null"

    def test_patch_null_clears_optional_field(self, client, auth):
        """Null clears an optional field."""
        client.patch("/api/user", json={"headline": "Engineer"}, headers=auth("ada"))
        response = client.patch("/api/user", json={"headline": None}, headers=auth("ada"))
        assert response.status_code == 200
        assert response.json()["user"]["headline"] is None

    def test_patch_invalid_visibility(self, client, auth):
        """Unknown visibility returns 400."""
        response = client.patch(
            "/api/user", json={"profile_visibility": "everyone"}, headers=auth("ada")
        )
        assert response.status_code == 400

    def test_complete_profile_fires_trigger(self, client, auth):
        """Completing the profile fires its trigger."""
        response = client.patch(
            "/api/user",
            json={
                "first_name": "Ada",
                "last_name": "Lovelace",
                "headline": "Engineer",
                "bio": "Analytical engines",
            },
            headers=auth("ada"),
        )
        assert response.status_code == 200
        assert response.json()["achievements"] is not None

        profile = client.get("/api/user", headers=auth("ada")).json()
        assert profile["profile_complete"] is True


class TestOnboarding:
    """Tests for POST /api/user/onboarding."""

    def test_onboarding_success(self, client, auth):
        """Onboarding records consent."""
        response = client.post(
            "/api/user/onboarding",
            json={"first_name": "Ada", "last_name": "Lovelace", "birthday": "2000-01-01"},
            headers=auth("ada"),
        )
        assert response.status_code == 200
        data = response.json()
        assert data["user"]["onboarding_completed"] is True
        assert data["user"]["tos_agreed_at"] is not None
        assert data["user"]["marketing_agreed_at"] is None
        assert data["early_adopter"] is False
        assert data["achievements"]["unlocked"] == []

    def test_onboarding_missing_fields(self, client, auth):
        """Missing fields return 400."""
        response = client.post(
            "/api/user/onboarding", json={"first_name": "Ada"}, headers=auth("ada")
        )
        assert response.status_code == 400
        assert "required" in response.json()["detail"]

    def test_onboarding_too_young(self, client, auth):
        """Users under 13 are rejected."""
        birthday = f"{date.today().year - 5}-01-01"
        response = client.post(
            "/api/user/onboarding",
            json={"first_name": "Kid", "last_name": "Doe", "birthday": birthday},
            headers=auth("kid"),
        )
        assert response.status_code == 400
        assert "13" in response.json()["detail"]

    def test_onboarding_invalid_birthday(self, client, auth):
        """Unparseable birthday returns 400."""
        response = client.post(
            "/api/user/onboarding",
            json={"first_name": "Ada", "last_name": "L", "birthday": "yesterday"},
            headers=auth("ada"),
        )
        assert response.status_code == 400

    def test_early_adopter_unlocks_pioneer(self, client, auth, workspace):
        """Configured early adopters unlock Pioneer."""
        config = workspace / "data" / "config" / "forgez_config_v1.yaml"
        config.parent.mkdir(parents=True)
        config.write_text("progression:\n  early_adopter_user_ids: [ada]\n")

        response = client.post(
            "/api/user/onboarding",
            json={"first_name": "Ada", "last_name": "Lovelace", "birthday": "2000-01-01"},
            headers=auth("ada"),
        )
        data = response.json()
        assert data["early_adopter"] is True
        unlocked = [u["achievement"]["id"] for u in data["achievements"]["unlocked"]]
        assert "pioneer_early_adopter" in unlocked


class TestArchetype:
    """Tests for GET/POST /api/user/archetype."""

    def test_no_archetype_yet(self, client, auth):
        """Fresh user has no archetype."""
        response = client.get("/api/user/archetype", headers=auth("ada"))
        assert response.status_code == 200
        assert response.json() == {"archetype": None}

    def test_save_archetype_completes_first_quest(self, client, auth):
        """Saving an archetype completes quest 1."""
        response = client.post("/api/user/archetype", json=ARCHETYPE_ANSWERS, headers=auth("ada"))
        assert response.status_code == 200
        data = response.json()
        assert data["archetype"]["archetype"] == "BUILDER"
        assert data["progression"]["xp_awarded"] == 325

        quests = client.get("/api/quests", headers=auth("ada")).json()
        assert quests["quests"][0]["status"] == "completed"
        assert quests["current_quest"] == 2

        stored = client.get("/api/user/archetype", headers=auth("ada")).json()
        assert stored["domain_interest"] == "space"
        assert stored["details"]["name"] == "The Builder"

    def test_retaking_quiz_does_not_repeat_quest_xp(self, client, auth):
        """Retaking the quiz skips quest XP."""
        client.post("/api/user/archetype", json=ARCHETYPE_ANSWERS, headers=auth("ada"))
        retake = {**ARCHETYPE_ANSWERS, "archetype": "EXPLORER", "game_preference": "adventure"}
        response = client.post("/api/user/archetype", json=retake, headers=auth("ada"))

        progression = response.json()["progression"]
        unlocked = {u["achievement"]["id"] for u in progression["unlocked"]}
        # 425 XP reaches level 2 on the way
        assert unlocked == {"xp_rising_star", "arch_explorer"}
        assert progression["xp_awarded"] == 100 + 25 + 50

    def test_invalid_domain(self, client, auth):
        """Unknown domain returns 400."""
        response = client.post(
            "/api/user/archetype",
            json={**ARCHETYPE_ANSWERS, "domain_interest": "cooking"},
            headers=auth("ada"),
        )
        assert response.status_code == 400

    def test_missing_answers(self, client, auth):
        """Incomplete answers return 400."""
        response = client.post(
            "/api/user/archetype", json={"archetype": "BUILDER"}, headers=auth("ada")
        )
        assert response.status_code == 400


class TestPreferences:
    """Tests for GET/PUT /api/user/preferences."""

    def test_defaults(self, client, auth):
        """Default preferences."""
        response = client.get("/api/user/preferences", headers=auth("ada"))
        assert response.json() == {"locale": "en", "world": "forgez"}

    def test_update_locale(self, client, auth):
        """Locale can be changed."""
        response = client.put("/api/user/preferences", json={"locale": "pl"}, headers=auth("ada"))
        assert response.status_code == 200
        assert response.json() == {"locale": "pl", "world": "forgez"}

    def test_unsupported_locale(self, client, auth):
        """Unsupported locale returns 400."""
        response = client.put("/api/user/preferences", json={"locale": "de"}, headers=auth("ada"))
        assert response.status_code == 400

    def test_other_world_rejected(self, client, auth):
        """Only the forgez world is accepted."""
        response = client.put(
            "/api/user/preferences", json={"world": "fantasy"}, headers=auth("ada")
        )
        assert response.status_code == 400
