"""Tests for portfolio project endpoints."""

import pytest

from forgez.db import projects_repository

MB = 1024 * 1024


@pytest.fixture
def make_project(client, auth):
    def _make(user_id="ada", **fields):
        body = {"title": "Mars Rover", "project_type": "CODE", **fields}
        response = client.post("/api/projects", json=body, headers=auth(user_id))
        assert response.status_code == 201
        return response.json()["project"]

    return _make


class TestCreateProject:
    """Tests for POST /api/projects."""

    def test_create_credits_upload(self, client, auth):
        """Creating a project awards upload XP."""
        response = client.post(
            "/api/projects",
            json={"title": "  Mars Rover ", "project_type": "CODE", "tags": ["rust", " "]},
            headers=auth("ada"),
        )
        assert response.status_code == 201
        data = response.json()
        assert data["project"]["title"] == "Mars Rover"
        assert data["project"]["visibility"] == "public"
        assert data["project"]["tags"] == ["rust"]
        # 25 upload XP plus the Creator achievement
        assert data["progression"]["xp_awarded"] == 50
        assert data["progression"]["unlocked"][0]["achievement"]["id"] == "port_first_project"

    def test_metadata_is_cleaned(self, make_project):
        """Empty metadata values are dropped."""
        project = make_project(metadata={"stack": ["rust"], "empty": [], "note": None})
        assert project["metadata"] == {"stack": ["rust"]}

    @pytest.mark.parametrize(
        "body",
        [
            {"project_type": "CODE"},
            {"title": "Rover"},
            {"title": "Rover", "project_type": "SCULPTURE"},
            {"title": "Rover", "project_type": "CODE", "visibility": "friends"},
        ],
    )
    def test_invalid_project(self, client, auth, body):
        """Invalid projects are rejected with 400."""
        response = client.post("/api/projects", json=body, headers=auth("ada"))
        assert response.status_code == 400

    def test_third_project_unlocks_builder(self, client, auth, make_project):
        """Third project unlocks the portfolio achievement."""
        make_project()
        make_project()
        response = client.post(
            "/api/projects", json={"title": "Third", "project_type": "DESIGN"}, headers=auth("ada")
        )
        unlocked = [u["achievement"]["id"] for u in response.json()["progression"]["unlocked"]]
        assert "port_three_projects" in unlocked


class TestListAndView:
    """Tests for listing and viewing projects."""

    def test_own_projects(self, client, auth, make_project):
        """Owner lists their own projects."""
        make_project()
        make_project(visibility="private")
        make_project(user_id="bob")

        data = client.get("/api/projects", headers=auth("ada")).json()
        assert data["count"] == 2

        private = client.get(
            "/api/projects", params={"visibility": "private"}, headers=auth("ada")
        ).json()
        assert private["count"] == 1

    def test_gallery_shows_public_only(self, client, make_project):
        """Gallery shows public projects only."""
        public = make_project(tags=["space"])
        make_project(visibility="private")
        make_project(visibility="unlisted")

        data = client.get("/api/projects/gallery").json()
        assert [p["id"] for p in data["projects"]] == [public["id"]]
        assert data["pagination"]["total"] == 1
        assert data["pagination"]["has_more"] is False

    def test_gallery_filters(self, client, make_project):
        """Gallery filters by tag and type."""
        make_project(title="Orbit sim", tags=["space"])
        make_project(title="Solar panel", project_type="DESIGN", tags=["energy"])

        by_tag = client.get("/api/projects/gallery", params={"tags": "energy"}).json()
        assert [p["title"] for p in by_tag["projects"]] == ["Solar panel"]

        by_type = client.get("/api/projects/gallery", params={"type": "CODE"}).json()
        assert [p["title"] for p in by_type["projects"]] == ["Orbit sim"]

    def test_gallery_pagination(self, client, make_project):
        """Gallery pagination reports has_more."""
        for i in range(3):
            make_project(title=f"P{i}")
        data = client.get("/api/projects/gallery", params={"limit": 2}).json()
        assert len(data["projects"]) == 2
        assert data["pagination"]["has_more"] is True

    def test_gallery_sort_order_validated(self, client):
        """Unknown sort order returns 400."""
        response = client.get("/api/projects/gallery", params={"sort_order": "sideways"})
        assert response.status_code == 400

    def test_view_counts_non_owner_views(self, client, auth, make_project):
        """Only non-owner views are counted."""
        project = make_project()

        anonymous = client.get(f"/api/projects/{project['id']}").json()
        assert anonymous["is_owner"] is False
        assert anonymous["project"]["view_count"] == 1

        owner = client.get(f"/api/projects/{project['id']}", headers=auth("ada")).json()
        assert owner["is_owner"] is True
        assert owner["project"]["view_count"] == 1

    def test_private_project_hidden_from_others(self, client, auth, make_project):
        """Private projects return 403 to others."""
        project = make_project(visibility="private")
        assert client.get(f"/api/projects/{project['id']}").status_code == 403
        assert client.get(f"/api/projects/{project['id']}", headers=auth("bob")).status_code == 403

    def test_unknown_project(self, client):
        """Unknown project returns 404."""
        assert client.get("/api/projects/missing").status_code == 404


class TestUpdateAndDelete:
    """Tests for PUT/DELETE /api/projects/{id}."""

    def test_owner_updates(self, client, auth, make_project):
        """Owner can update a project."""
        project = make_project()
        response = client.put(
            f"/api/projects/{project['id']}",
            json={"title": "Lunar Rover", "is_featured": True},
            headers=auth("ada"),
        )
        assert response.status_code == 200
        assert response.json()["project"]["title"] == "Lunar Rover"
        assert response.json()["project"]["is_featured"] is True

    def test_empty_title_rejected(self, client, auth, make_project):
        """Blank title returns 400."""
        project = make_project()
        response = client.put(
            f"/api/projects/{project['id']}", json={"title": "  "}, headers=auth("ada")
        )
        assert response.status_code == 400

    @pytest.mark.parametrize("field", ["is_featured", "is_ongoing", "visibility", "project_type"])
    def test_null_for_required_field(self, client, auth, make_project, field):
        """Explicit null for a required field returns 400."""
        project = make_project()
        response = client.put(
            f"/api/projects/{project['id']}", json={field: None}, headers=auth("ada")
        )
        assert response.status_code == 400
        assert response.json()["detail"] == f"{field} cannot be null"

    def test_other_user_cannot_modify(self, client, auth, make_project):
        """Other users cannot modify the project."""
        project = make_project()
        update = client.put(
            f"/api/projects/{project['id']}", json={"title": "Mine"}, headers=auth("bob")
        )
        delete = client.delete(f"/api/projects/{project['id']}", headers=auth("bob"))
        assert update.status_code == 403
        assert delete.status_code == 403

    def test_delete(self, client, auth, make_project):
        """Owner can delete a project."""
        project = make_project()
        response = client.delete(f"/api/projects/{project['id']}", headers=auth("ada"))
        assert response.json() == {"success": True}
        assert client.get(f"/api/projects/{project['id']}").status_code == 404


class TestUpload:
    """Tests for POST /api/projects/upload."""

    def test_prepare_upload(self, client, auth):
        """Upload path is namespaced by user."""
        response = client.post(
            "/api/projects/upload",
            json={"file_name": "demo video.mp4", "file_size": 5 * MB, "kind": "video"},
            headers=auth("ada"),
        )
        assert response.status_code == 200
        data = response.json()
        assert data["path"].startswith("ada/")
        assert data["path"].endswith("-demo_video.mp4")
        assert data["max_size"] == 100 * MB

    def test_file_too_large(self, client, auth):
        """Oversized files return 400 with the limit."""
        response = client.post(
            "/api/projects/upload",
            json={"file_name": "repo.tar", "file_size": 11 * MB, "kind": "code"},
            headers=auth("ada"),
        )
        assert response.status_code == 400
        assert "10MB" in response.json()["detail"]

    def test_unknown_kind(self, client, auth):
        """Unknown upload kind returns 400."""
        response = client.post(
            "/api/projects/upload",
            json={"file_name": "x.exe", "file_size": 10, "kind": "binary"},
            headers=auth("ada"),
        )
        assert response.status_code == 400


class TestArtifacts:
    """Tests for /api/projects/{id}/artifacts."""

    @pytest.fixture
    def upload_path(self, client, auth):
        response = client.post(
            "/api/projects/upload",
            json={"file_name": "demo.mp4", "file_size": 5 * MB, "kind": "video"},
            headers=auth("ada"),
        )
        return response.json()["path"]

    def _artifact(self, path, **fields):
        return {
            "file_name": "demo.mp4",
            "file_path": path,
            "file_type": "video",
            "file_size": 5 * MB,
            "mime_type": "video/mp4",
            "storage_bucket": "project-files",
            **fields,
        }

    def test_add_and_list(self, client, auth, make_project, upload_path):
        """Owner attaches an uploaded file; public projects list it to anyone."""
        project = make_project()
        response = client.post(
            f"/api/projects/{project['id']}/artifacts",
            json=self._artifact(upload_path, metadata={"duration": 42, "tags": []}),
            headers=auth("ada"),
        )
        assert response.status_code == 201
        artifact = response.json()["artifact"]
        assert artifact["file_path"] == upload_path
        assert artifact["upload_status"] == "COMPLETED"
        assert artifact["analysis_status"] == "PENDING"
        assert artifact["metadata"] == {"duration": 42}

        listed = client.get(f"/api/projects/{project['id']}/artifacts").json()
        assert listed["count"] == 1
        assert listed["artifacts"][0]["id"] == artifact["id"]

    def test_newest_first(self, client, auth, make_project, upload_path):
        """Artifacts are listed newest first."""
        project = make_project()
        for name in ("first.mp4", "second.mp4"):
            client.post(
                f"/api/projects/{project['id']}/artifacts",
                json=self._artifact(upload_path, file_name=name),
                headers=auth("ada"),
            )
        listed = client.get(f"/api/projects/{project['id']}/artifacts").json()
        assert [a["file_name"] for a in listed["artifacts"]] == ["second.mp4", "first.mp4"]

    def test_private_project_artifacts(self, client, auth, make_project):
        """Private project files are hidden from others."""
        project = make_project(visibility="private")
        hidden = client.get(f"/api/projects/{project['id']}/artifacts", headers=auth("bob"))
        own = client.get(f"/api/projects/{project['id']}/artifacts", headers=auth("ada"))
        assert hidden.status_code == 403
        assert own.status_code == 200

    def test_unknown_project(self, client, auth):
        """Unknown project returns 404."""
        assert client.get("/api/projects/missing/artifacts").status_code == 404

    @pytest.mark.parametrize(
        "fields",
        [
            {"storage_bucket": None},
            {"file_name": ""},
            {"file_size": 0},
            {"file_size": 101 * MB},
            {"file_path": "bob/stolen.mp4"},
        ],
    )
    def test_invalid_artifact(self, client, auth, make_project, upload_path, fields):
        """Incomplete, oversized or foreign files return 400."""
        project = make_project()
        response = client.post(
            f"/api/projects/{project['id']}/artifacts",
            json=self._artifact(upload_path, **fields),
            headers=auth("ada"),
        )
        assert response.status_code == 400
        listed = client.get(f"/api/projects/{project['id']}/artifacts").json()
        assert listed["count"] == 0

    def test_other_user_cannot_attach(self, client, auth, make_project):
        """Only the owner can attach files."""
        project = make_project()
        response = client.post(
            f"/api/projects/{project['id']}/artifacts",
            json=self._artifact("bob/demo.mp4"),
            headers=auth("bob"),
        )
        assert response.status_code == 403

    def test_remove(self, client, auth, make_project, upload_path):
        """Owner removes an artifact by id."""
        project = make_project()
        artifact = client.post(
            f"/api/projects/{project['id']}/artifacts",
            json=self._artifact(upload_path),
            headers=auth("ada"),
        ).json()["artifact"]
        url = f"/api/projects/{project['id']}/artifacts"

        missing_id = client.delete(url, headers=auth("ada"))
        unknown = client.delete(url, params={"artifact_id": "nope"}, headers=auth("ada"))
        forbidden = client.delete(url, params={"artifact_id": artifact["id"]}, headers=auth("bob"))
        assert missing_id.status_code == 400
        assert unknown.status_code == 404
        assert forbidden.status_code == 403

        removed = client.delete(url, params={"artifact_id": artifact["id"]}, headers=auth("ada"))
        assert removed.json() == {"success": True}
        assert client.get(url).json()["count"] == 0

    def test_deleting_project_removes_artifacts(self, client, auth, make_project, upload_path):
        """Artifacts go with their project."""
        project = make_project()
        artifact = client.post(
            f"/api/projects/{project['id']}/artifacts",
            json=self._artifact(upload_path),
            headers=auth("ada"),
        ).json()["artifact"]
        client.delete(f"/api/projects/{project['id']}", headers=auth("ada"))

        assert projects_repository.get_artifact(project["id"], artifact["id"]) is None
