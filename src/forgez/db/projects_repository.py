"""Repository functions for projects and project_artifacts tables."""

from __future__ import annotations

import sqlite3
from dataclasses import asdict, dataclass
from typing import Any

import structlog

from forgez.db.database import build_update, from_json, generate_id, get_db, now_iso, to_json

logger = structlog.get_logger(__name__)

UPDATE_FIELDS = {
    "title",
    "description",
    "project_type",
    "thumbnail_url",
    "external_url",
    "repository_url",
    "start_date",
    "end_date",
    "is_ongoing",
    "visibility",
    "is_featured",
    "tags",
    "metadata",
}

NOT_NULL_FIELDS = {"title", "project_type", "visibility", "is_ongoing", "is_featured"}

GALLERY_SORT_COLUMNS = {"created_at", "view_count", "title"}


@dataclass
class ProjectRecord:
    """Portfolio project record from database."""

    id: str
    user_id: str
    title: str
    description: str | None
    project_type: str
    thumbnail_url: str | None
    external_url: str | None
    repository_url: str | None
    start_date: str | None
    end_date: str | None
    is_ongoing: bool
    visibility: str
    is_featured: bool
    view_count: int
    tags: list[str]
    metadata: dict[str, Any]
    created_at: str
    updated_at: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _row_to_record(row: sqlite3.Row) -> ProjectRecord:
    data = dict(row)
    data["is_ongoing"] = bool(data["is_ongoing"])
    data["is_featured"] = bool(data["is_featured"])
    data["tags"] = from_json(data["tags"], [])
    data["metadata"] = from_json(data["metadata"], {})
    return ProjectRecord(**data)


def insert_project(
    user_id: str,
    title: str,
    project_type: str,
    description: str | None = None,
    visibility: str = "public",
    tags: list[str] | None = None,
    metadata: dict[str, Any] | None = None,
    thumbnail_url: str | None = None,
    external_url: str | None = None,
    repository_url: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    is_ongoing: bool = False,
    is_featured: bool = False,
) -> ProjectRecord:
    """Insert a new project and return it."""
    project_id = generate_id()
    now = now_iso()
    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO projects (
                id, user_id, title, description, project_type,
                thumbnail_url, external_url, repository_url,
                start_date, end_date, is_ongoing, visibility, is_featured,
                tags, metadata, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                project_id,
                user_id,
                title,
                description,
                project_type,
                thumbnail_url,
                external_url,
                repository_url,
                start_date,
                end_date,
                int(is_ongoing),
                visibility,
                int(is_featured),
                to_json(tags or []),
                to_json(metadata or {}),
                now,
                now,
            ),
        )

    logger.debug("projects.inserted", project_id=project_id, user_id=user_id)
    return get_project(project_id)


def get_project(project_id: str) -> ProjectRecord | None:
    with get_db() as conn:
        row = conn.execute("SELECT * FROM projects WHERE id = ?", (project_id,)).fetchone()

    if row is None:
        return None
    return _row_to_record(row)


def list_user_projects(
    user_id: str,
    visibility: str | None = None,
    project_type: str | None = None,
    featured: bool | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[ProjectRecord]:
    """List a user's own projects, newest first."""
    where = ["user_id = ?"]
    params: list[Any] = [user_id]
    if visibility:
        where.append("visibility = ?")
        params.append(visibility)
    if project_type:
        where.append("project_type = ?")
        params.append(project_type)
    if featured is not None:
        where.append("is_featured = ?")
        params.append(int(featured))

    with get_db() as conn:
        rows = conn.execute(
            f"""
            SELECT * FROM projects WHERE {" AND ".join(where)}
            ORDER BY created_at DESC LIMIT ? OFFSET ?
            """,
            (*params, limit, offset),
        ).fetchall()
    return [_row_to_record(r) for r in rows]


def count_user_projects(user_id: str) -> int:
    with get_db() as conn:
        return conn.execute(
            "SELECT COUNT(*) FROM projects WHERE user_id = ?", (user_id,)
        ).fetchone()[0]


def search_gallery(
    search: str | None = None,
    project_type: str | None = None,
    tags: list[str] | None = None,
    user_id: str | None = None,
    sort_by: str = "created_at",
    sort_order: str = "desc",
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[ProjectRecord], int]:
    """Search public projects.

    Returns:
        Tuple of (page of projects, total matching count)
    """
    where = ["visibility = 'public'"]
    params: list[Any] = []
    if search:
        where.append("(LOWER(title) LIKE ? OR LOWER(COALESCE(description, '')) LIKE ?)")
        pattern = f"%{search.lower()}%"
        params.extend([pattern, pattern])
    if project_type:
        where.append("project_type = ?")
        params.append(project_type)
    for tag in tags or []:
        where.append("EXISTS (SELECT 1 FROM json_each(projects.tags) WHERE value = ?)")
        params.append(tag)
    if user_id:
        where.append("user_id = ?")
        params.append(user_id)

    column = sort_by if sort_by in GALLERY_SORT_COLUMNS else "created_at"
    direction = "ASC" if sort_order.lower() == "asc" else "DESC"
    clause = " AND ".join(where)

    with get_db() as conn:
        total = conn.execute(
            f"SELECT COUNT(*) FROM projects WHERE {clause}", params
        ).fetchone()[0]
        rows = conn.execute(
            f"""
            SELECT * FROM projects WHERE {clause}
            ORDER BY {column} {direction}, id LIMIT ? OFFSET ?
            """,
            (*params, limit, offset),
        ).fetchall()

    return [_row_to_record(r) for r in rows], total


def update_project(project_id: str, fields: dict[str, Any]) -> ProjectRecord | None:
    clause, values = build_update(
        fields,
        UPDATE_FIELDS,
        json_columns={"tags", "metadata"},
        bool_columns={"is_ongoing", "is_featured"},
    )
    if clause:
        with get_db() as conn:
            conn.execute(
                f"UPDATE projects SET {clause}, updated_at = ? WHERE id = ?",
                (*values, now_iso(), project_id),
            )
        logger.debug("projects.updated", project_id=project_id)
    return get_project(project_id)


def increment_view_count(project_id: str) -> None:
    with get_db() as conn:
        conn.execute(
            "UPDATE projects SET view_count = view_count + 1 WHERE id = ?", (project_id,)
        )


def delete_project(project_id: str) -> bool:
    with get_db() as conn:
        cursor = conn.execute("DELETE FROM projects WHERE id = ?", (project_id,))

    deleted = cursor.rowcount > 0
    if deleted:
        logger.debug("projects.deleted", project_id=project_id)
    return deleted


# =============================================================================
# ARTIFACTS
# =============================================================================


@dataclass
class ArtifactRecord:
    """File attached to a project."""

    id: str
    project_id: str
    file_name: str
    file_path: str
    file_type: str
    file_size: int
    mime_type: str | None
    storage_bucket: str
    upload_status: str
    analysis_status: str
    analysis_result: dict[str, Any] | None
    metadata: dict[str, Any] | None
    created_at: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _row_to_artifact(row: sqlite3.Row) -> ArtifactRecord:
    data = dict(row)
    data["analysis_result"] = from_json(data["analysis_result"])
    data["metadata"] = from_json(data["metadata"])
    return ArtifactRecord(**data)


def insert_artifact(
    project_id: str,
    file_name: str,
    file_path: str,
    file_type: str,
    file_size: int,
    storage_bucket: str,
    mime_type: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> ArtifactRecord:
    """Record an uploaded file. Analysis starts as PENDING."""
    artifact_id = generate_id()
    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO project_artifacts (
                id, project_id, file_name, file_path, file_type, file_size,
                mime_type, storage_bucket, upload_status, analysis_status,
                metadata, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, 'COMPLETED', 'PENDING', ?, ?)
            """,
            (
                artifact_id,
                project_id,
                file_name,
                file_path,
                file_type,
                file_size,
                mime_type,
                storage_bucket,
                to_json(metadata),
                now_iso(),
            ),
        )

    logger.debug("project_artifacts.inserted", artifact_id=artifact_id, project_id=project_id)
    return get_artifact(project_id, artifact_id)


def get_artifact(project_id: str, artifact_id: str) -> ArtifactRecord | None:
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM project_artifacts WHERE id = ? AND project_id = ?",
            (artifact_id, project_id),
        ).fetchone()

    if row is None:
        return None
    return _row_to_artifact(row)


def list_artifacts(project_id: str) -> list[ArtifactRecord]:
    """Artifacts of a project, newest first."""
    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT * FROM project_artifacts WHERE project_id = ?
            ORDER BY created_at DESC, rowid DESC
            """,
            (project_id,),
        ).fetchall()
    return [_row_to_artifact(r) for r in rows]


def delete_artifact(artifact_id: str) -> bool:
    with get_db() as conn:
        cursor = conn.execute("DELETE FROM project_artifacts WHERE id = ?", (artifact_id,))

    deleted = cursor.rowcount > 0
    if deleted:
        logger.debug("project_artifacts.deleted", artifact_id=artifact_id)
    return deleted
