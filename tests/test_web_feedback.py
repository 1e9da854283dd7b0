"""Tests for 360-degree feedback endpoints."""

from datetime import datetime, timedelta, timezone

import pytest

from forgez.db import get_db

RESPONDENTS = [
    {"email": "mentor@example.com", "name": "Grace", "relationship": "mentor"},
    {"email": "peer@example.com", "name": "Alan", "relationship": "peer"},
    {"email": "lead@example.com", "name": "Linus", "relationship": "manager"},
]

TEXT_ANSWER = {"feedback_type": "TEXT", "content": "Great at explaining hard ideas."}


@pytest.fixture
def create_request(client, auth):
    def _create(**fields):
        body = {
            "title": "How do I work in a team?",
            "prompt_questions": ["What should I keep doing?", "What should I change?"],
            "respondents": RESPONDENTS,
            **fields,
        }
        response = client.post("/api/feedback/requests", json=body, headers=auth("ada"))
        assert response.status_code == 201
        return response.json()["request"]

    return _create


def tokens(request):
    return [r["access_token"] for r in request["respondents"]]


class TestRequests:
    """Tests for /api/feedback/requests."""

    def test_create_request(self, create_request):
        """Create returns respondents with tokens."""
        request = create_request()
        assert request["status"] == "PENDING"
        assert request["is_anonymous"] is True
        assert len(request["respondents"]) == 3
        assert all(len(token) == 64 for token in tokens(request))
        assert request["responses"] == []

    @pytest.mark.parametrize(
        "fields",
        [
            {"title": "  "},
            {"prompt_questions": []},
            {"respondents": RESPONDENTS[:2]},
            {"respondents": [*RESPONDENTS[:2], {"email": "not-an-email"}]},
            {"min_respondents": 5, "max_respondents": 4},
        ],
    )
    def test_invalid_request(self, client, auth, fields):
        """Invalid requests are rejected with 400."""
        body = {
            "title": "Feedback",
            "prompt_questions": ["Anything?"],
            "respondents": RESPONDENTS,
            **fields,
        }
        response = client.post("/api/feedback/requests", json=body, headers=auth("ada"))
        assert response.status_code == 400

    def test_respondents_keep_invitation_order(self, client, auth, create_request):
        """Respondents are listed in the order they were invited."""
        request = create_request()
        assert [r["respondent_name"] for r in request["respondents"]] == ["Grace", "Alan", "Linus"]

        detail = client.get(f"/api/feedback/requests/{request['id']}", headers=auth("ada")).json()
        assert [r["relationship"] for r in detail["request"]["respondents"]] == [
            "mentor",
            "peer",
            "manager",
        ]

    def test_extra_respondents_are_dropped(self, create_request):
        """Respondents beyond the maximum are dropped."""
        request = create_request(min_respondents=2, max_respondents=2)
        assert len(request["respondents"]) == 2

    def test_list_with_stats(self, client, auth, create_request):
        """Listing includes aggregate stats."""
        create_request()
        create_request()
        data = client.get("/api/feedback/requests", headers=auth("ada")).json()

        assert len(data["requests"]) == 2
        assert data["stats"]["total"] == 2
        assert data["stats"]["pending"] == 2
        assert data["stats"]["total_respondents"] == 6
        assert data["stats"]["response_rate"] == 0
        # Tokens are only shown in the request detail
        assert "access_token" not in data["requests"][0]["respondents"][0]

    def test_owner_only(self, client, auth, create_request):
        """Only the owner can read a request."""
        request = create_request()
        assert client.get(
            f"/api/feedback/requests/{request['id']}", headers=auth("bob")
        ).status_code == 403
        assert client.get("/api/feedback/requests/missing", headers=auth("ada")).status_code == 404

    def test_update_and_delete(self, client, auth, create_request):
        """Owner can close and delete a request."""
        request = create_request()
        updated = client.put(
            f"/api/feedback/requests/{request['id']}",
            json={"status": "COMPLETED"},
            headers=auth("ada"),
        ).json()["request"]
        assert updated["status"] == "COMPLETED"
        assert updated["completed_at"] is not None

        bad = client.put(
            f"/api/feedback/requests/{request['id']}",
            json={"status": "ARCHIVED"},
            headers=auth("ada"),
        )
        assert bad.status_code == 400

        deleted = client.delete(f"/api/feedback/requests/{request['id']}", headers=auth("ada"))
        assert deleted.json() == {"success": True}
        assert client.get(
            f"/api/feedback/requests/{request['id']}", headers=auth("ada")
        ).status_code == 404


class TestResponding:
    """Tests for /api/feedback/respond/{token}."""

    def test_invitation_view_needs_no_auth(self, client, create_request):
        """Invitation is readable with the token alone."""
        request = create_request()
        response = client.get(f"/api/feedback/respond/{tokens(request)[0]}")
        assert response.status_code == 200
        data = response.json()
        assert data["request"]["title"] == "How do I work in a team?"
        assert data["respondent"]["name"] == "Grace"

    def test_unknown_token(self, client, seeded):
        """Unknown token returns 404."""
        assert client.get("/api/feedback/respond/nope").status_code == 404

    def test_submit_moves_request_in_progress(self, client, auth, create_request):
        """First answer moves the request in progress."""
        request = create_request()
        response = client.post(f"/api/feedback/respond/{tokens(request)[0]}", json=TEXT_ANSWER)
        assert response.status_code == 201
        assert response.json()["request_status"] == "IN_PROGRESS"

        detail = client.get(
            f"/api/feedback/requests/{request['id']}", headers=auth("ada")
        ).json()["request"]
        assert len(detail["responses"]) == 1
        # Anonymous requests hide who answered
        assert detail["responses"][0]["respondent"] == {"relationship": "mentor"}

    def test_named_request_shows_respondent(self, client, auth, create_request):
        """Named requests show who answered."""
        request = create_request(is_anonymous=False)
        client.post(f"/api/feedback/respond/{tokens(request)[1]}", json=TEXT_ANSWER)
        detail = client.get(
            f"/api/feedback/requests/{request['id']}", headers=auth("ada")
        ).json()["request"]
        assert detail["responses"][0]["respondent"]["email"] == "peer@example.com"

    def test_second_answer_conflicts(self, client, create_request):
        """Answering twice returns 409."""
        token = tokens(create_request())[0]
        client.post(f"/api/feedback/respond/{token}", json=TEXT_ANSWER)
        again = client.post(f"/api/feedback/respond/{token}", json=TEXT_ANSWER)
        assert again.status_code == 409
        assert client.get(f"/api/feedback/respond/{token}").status_code == 409

    def test_all_answers_complete_request(self, client, create_request):
        """Last answer completes the request."""
        request = create_request(max_respondents=3)
        for token in tokens(request):
            response = client.post(f"/api/feedback/respond/{token}", json=TEXT_ANSWER)
        assert response.json()["request_status"] == "COMPLETED"

    def test_closed_request_is_gone(self, client, auth, create_request):
        """Closed requests return 410."""
        request = create_request()
        client.put(
            f"/api/feedback/requests/{request['id']}",
            json={"status": "COMPLETED"},
            headers=auth("ada"),
        )
        response = client.post(f"/api/feedback/respond/{tokens(request)[0]}", json=TEXT_ANSWER)
        assert response.status_code == 410

    def test_expired_request_is_gone(self, client, auth, create_request):
        """Expired requests return 410 and are marked expired."""
        request = create_request()
        past = (datetime.now(timezone.utc) - timedelta(days=1)).isoformat()
        with get_db() as conn:
            conn.execute(
                "UPDATE feedback_requests SET expires_at = ? WHERE id = ?", (past, request["id"])
            )

        response = client.get(f"/api/feedback/respond/{tokens(request)[0]}")
        assert response.status_code == 410

        detail = client.get(
            f"/api/feedback/requests/{request['id']}", headers=auth("ada")
        ).json()["request"]
        assert detail["status"] == "EXPIRED"

    @pytest.mark.parametrize(
        "body",
        [
            {"feedback_type": "POEM", "content": "Roses are red, violets are blue"},
            {"feedback_type": "TEXT", "content": "Too short"},
            {"feedback_type": "VOICE"},
            {"feedback_type": "VIDEO", "content": "See attached video"},
        ],
    )
    def test_invalid_answers(self, client, create_request, body):
        """Answers missing content for their type are rejected."""
        token = tokens(create_request())[0]
        response = client.post(f"/api/feedback/respond/{token}", json=body)
        assert response.status_code == 400

    def test_voice_answer(self, client, create_request):
        """Voice answers store their clip."""
        token = tokens(create_request())[0]
        response = client.post(
            f"/api/feedback/respond/{token}",
            json={"feedback_type": "VOICE", "audio_url": "ada/clip.webm", "duration_seconds": 42},
        )
        assert response.status_code == 201
        assert response.json()["response"]["duration_seconds"] == 42
