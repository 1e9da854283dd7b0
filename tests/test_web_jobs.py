"""Tests for job posting and company directory endpoints."""

import pytest

from forgez.db import users_repository

JOB = {
    "title": "Avionics Intern",
    "description": "Help test flight software on real hardware.",
    "employment_type": "INTERNSHIP",
    "location": "Gdansk",
}


@pytest.fixture
def employer(seeded):
    """Make 'hr' an employer posting for the sample company."""
    users_repository.ensure_user("hr")
    users_repository.update_user("hr", {"is_employer": True, "employer_company_id": "fz-orbitforge"})
    return "hr"


@pytest.fixture
def post_job(client, auth, employer):
    def _post(**fields):
        response = client.post("/api/jobs", json={**JOB, **fields}, headers=auth(employer))
        assert response.status_code == 201
        return response.json()["job"]

    return _post


class TestCreateJob:
    """Tests for POST /api/jobs."""

    def test_draft_by_default(self, post_job):
        """New jobs are drafts."""
        job = post_job()
        assert job["status"] == "DRAFT"
        assert job["posted_at"] is None
        assert job["salary_currency"] == "EUR"
        assert job["company"]["name"] == "OrbitForge"

    def test_active_job_is_posted(self, post_job):
        """Active jobs get a posting date."""
        job = post_job(status="ACTIVE")
        assert job["posted_at"] is not None

    def test_non_employer_forbidden(self, client, seeded, auth):
        """Non-employers cannot post jobs."""
        response = client.post("/api/jobs", json=JOB, headers=auth("ada"))
        assert response.status_code == 403

    @pytest.mark.parametrize(
        "fields",
        [
            {"title": ""},
            {"description": None},
            {"employment_type": "GIG"},
            {"status": "OPEN"},
        ],
    )
    def test_invalid_job(self, client, auth, employer, fields):
        """Invalid jobs are rejected with 400."""
        response = client.post("/api/jobs", json={**JOB, **fields}, headers=auth(employer))
        assert response.status_code == 400


class TestListAndView:
    """Tests for GET /api/jobs."""

    def test_lists_active_only(self, client, post_job):
        """Only active jobs are listed."""
        active = post_job(status="ACTIVE")
        post_job()

        data = client.get("/api/jobs").json()
        assert [j["id"] for j in data["jobs"]] == [active["id"]]
        assert data["total"] == 1
        assert data["has_more"] is False

    def test_filters(self, client, post_job):
        """Type, remote and search filters apply."""
        post_job(status="ACTIVE", title="Remote Dev", employment_type="FULL_TIME", is_remote=True)
        post_job(status="ACTIVE")

        by_type = client.get("/api/jobs", params={"types": "FULL_TIME,CONTRACT"}).json()
        assert [j["title"] for j in by_type["jobs"]] == ["Remote Dev"]

        remote = client.get("/api/jobs", params={"remote": True}).json()
        assert remote["total"] == 1

        by_search = client.get("/api/jobs", params={"search": "gdansk"}).json()
        assert by_search["total"] == 2

    def test_invalid_type_filter(self, client, seeded):
        """Unknown employment type returns 400."""
        assert client.get("/api/jobs", params={"types": "GIG"}).status_code == 400

    def test_pagination(self, client, post_job):
        """Pagination reports has_more."""
        for _ in range(3):
            post_job(status="ACTIVE")
        data = client.get("/api/jobs", params={"limit": 2}).json()
        assert len(data["jobs"]) == 2
        assert data["total"] == 3
        assert data["has_more"] is True

    def test_view_counts(self, client, post_job):
        """Each view increments the counter."""
        job = post_job(status="ACTIVE")
        client.get(f"/api/jobs/{job['id']}")
        data = client.get(f"/api/jobs/{job['id']}").json()
        assert data["job"]["view_count"] == 2

    def test_unknown_job(self, client, seeded):
        """Unknown job returns 404."""
        assert client.get("/api/jobs/missing").status_code == 404


class TestUpdateAndDelete:
    """Tests for PUT/DELETE /api/jobs/{id}."""

    def test_publishing_sets_posted_at(self, client, auth, employer, post_job):
        """Publishing a draft sets the posting date."""
        job = post_job()
        response = client.put(
            f"/api/jobs/{job['id']}", json={"status": "ACTIVE"}, headers=auth(employer)
        )
        assert response.status_code == 200
        assert response.json()["job"]["posted_at"] is not None

    def test_invalid_status(self, client, auth, employer, post_job):
        """Unknown status returns 400."""
        job = post_job()
        response = client.put(
            f"/api/jobs/{job['id']}", json={"status": "ARCHIVED"}, headers=auth(employer)
        )
        assert response.status_code == 400

    @pytest.mark.parametrize("field", ["title", "description", "status", "is_remote"])
    def test_null_for_required_field(self, client, auth, employer, post_job, field):
        """Explicit null for a required field returns 400."""
        job = post_job()
        response = client.put(
            f"/api/jobs/{job['id']}", json={field: None}, headers=auth(employer)
        )
        assert response.status_code == 400
        assert response.json()["detail"] == f"{field} cannot be null"

    def test_other_company_forbidden(self, client, auth, post_job):
        """Other companies cannot modify the job."""
        job = post_job()
        users_repository.ensure_user("rival")
        users_repository.update_user(
            "rival", {"is_employer": True, "employer_company_id": "rival-co"}
        )
        update = client.put(f"/api/jobs/{job['id']}", json={"title": "x"}, headers=auth("rival"))
        delete = client.delete(f"/api/jobs/{job['id']}", headers=auth("rival"))
        assert update.status_code == 403
        assert delete.status_code == 403

    def test_delete(self, client, auth, employer, post_job):
        """Owner company can delete the job."""
        job = post_job()
        response = client.delete(f"/api/jobs/{job['id']}", headers=auth(employer))
        assert response.json() == {"success": True}
        assert client.get(f"/api/jobs/{job['id']}").status_code == 404


class TestCompanies:
    """Tests for /api/companies."""

    def test_list(self, client, seeded):
        """Lists the seeded company."""
        data = client.get("/api/companies").json()
        assert data["count"] == 1
        assert data["companies"][0]["id"] == "fz-orbitforge"
        assert data["companies"][0]["tech_stack"] == ["Python", "C++", "CAD Modeling"]

    def test_filters(self, client, seeded):
        """Industry, country and featured filters apply."""
        assert client.get("/api/companies", params={"industry": "space"}).json()["count"] == 1
        assert client.get("/api/companies", params={"country": "DE"}).json()["count"] == 0
        assert client.get("/api/companies", params={"featured": True}).json()["count"] == 1

    def test_view_awards_xp(self, client, seeded, auth):
        """Viewing a company awards XP."""
        response = client.post("/api/companies/fz-orbitforge/view", headers=auth("ada"))
        assert response.status_code == 200
        assert response.json()["progression"]["xp_awarded"] == 5

        progress = client.get("/api/progress", headers=auth("ada")).json()
        assert progress["recent_transactions"][0]["source"] == "company_view"

    def test_view_unknown_company(self, client, seeded, auth):
        """Unknown company returns 404."""
        response = client.post("/api/companies/missing/view", headers=auth("ada"))
        assert response.status_code == 404
