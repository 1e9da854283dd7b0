"""Portfolio projects: validation, ownership, artifacts and the public gallery."""

from __future__ import annotations

import re
import uuid
from enum import Enum
from typing import Any

import structlog

from forgez.config.app_config import get_upload_limit
from forgez.core.errors import NotFoundError, PermissionDeniedError, ValidationError
from forgez.db import projects_repository
from forgez.db.projects_repository import ArtifactRecord, ProjectRecord
from forgez.utils.validators import null_fields

logger = structlog.get_logger(__name__)

SAFE_FILENAME = re.compile(r"[^A-Za-z0-9._-]+")


class ProjectType(str, Enum):
    CODE = "CODE"
    DOCUMENT = "DOCUMENT"
    VIDEO = "VIDEO"
    AUDIO = "AUDIO"
    DESIGN = "DESIGN"
    MODEL_3D = "MODEL_3D"
    PRESENTATION = "PRESENTATION"
    CERTIFICATION = "CERTIFICATION"
    OTHER = "OTHER"


class Visibility(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"
    UNLISTED = "unlisted"


def clean_metadata(metadata: dict[str, Any] | None) -> dict[str, Any]:
    """Drop None values and empty lists."""
    if not metadata:
        return {}
    return {
        key: value
        for key, value in metadata.items()
        if value is not None and not (isinstance(value, list) and len(value) == 0)
    }


def _validate_type(project_type: str | None) -> None:
    try:
        ProjectType(project_type)
    except ValueError:
        raise ValidationError(f"Invalid project type '{project_type}'", field="project_type")


def _validate_visibility(visibility: str | None) -> None:
    try:
        Visibility(visibility)
    except ValueError:
        raise ValidationError(f"Invalid visibility '{visibility}'", field="visibility")


def create_project(user_id: str, data: dict[str, Any]) -> ProjectRecord:
    """Create a project owned by user_id.

    Raises:
        ValidationError: Missing title or type, or invalid enum values
    """
    title = (data.get("title") or "").strip()
    project_type = data.get("project_type")
    if not title or not project_type:
        raise ValidationError("Title and project type are required")
    _validate_type(project_type)

    visibility = data.get("visibility") or Visibility.PUBLIC.value
    _validate_visibility(visibility)

    record = projects_repository.insert_project(
        user_id=user_id,
        title=title,
        project_type=project_type,
        description=data.get("description"),
        visibility=visibility,
        tags=[t.strip() for t in data.get("tags") or [] if t and t.strip()],
        metadata=clean_metadata(data.get("metadata")),
        thumbnail_url=data.get("thumbnail_url"),
        external_url=data.get("external_url"),
        repository_url=data.get("repository_url"),
        start_date=data.get("start_date"),
        end_date=data.get("end_date"),
        is_ongoing=bool(data.get("is_ongoing", False)),
        is_featured=bool(data.get("is_featured", False)),
    )
    logger.info("projects.created", project_id=record.id, user_id=user_id)
    return record


def view_project(project_id: str, viewer_id: str | None) -> tuple[ProjectRecord, bool]:
    """Fetch a project for a viewer, counting views by non-owners.

    Returns:
        Tuple of (project, is_owner)

    Raises:
        NotFoundError: Project does not exist
        PermissionDeniedError: Project is not public and viewer is not the owner
    """
    record = projects_repository.get_project(project_id)
    if record is None:
        raise NotFoundError("Project", project_id)

    is_owner = viewer_id is not None and record.user_id == viewer_id
    if not is_owner and record.visibility != Visibility.PUBLIC.value:
        raise PermissionDeniedError("You do not have access to this project")

    if not is_owner:
        projects_repository.increment_view_count(project_id)
        record.view_count += 1

    return record, is_owner


def _owned_project(user_id: str, project_id: str) -> ProjectRecord:
    record = projects_repository.get_project(project_id)
    if record is None:
        raise NotFoundError("Project", project_id)
    if record.user_id != user_id:
        raise PermissionDeniedError("You can only modify your own projects")
    return record


def update_project(user_id: str, project_id: str, updates: dict[str, Any]) -> ProjectRecord:
    _owned_project(user_id, project_id)

    updates = dict(updates)
    nulls = null_fields(updates, projects_repository.NOT_NULL_FIELDS - {"title"})
    if nulls:
        raise ValidationError(f"{nulls[0]} cannot be null", field=nulls[0])
    if "title" in updates:
        updates["title"] = (updates["title"] or "").strip()
        if not updates["title"]:
            raise ValidationError("Title cannot be empty", field="title")
    if "project_type" in updates:
        _validate_type(updates["project_type"])
    if "visibility" in updates:
        _validate_visibility(updates["visibility"])
    if "metadata" in updates:
        updates["metadata"] = clean_metadata(updates["metadata"])

    return projects_repository.update_project(project_id, updates)


def delete_project(user_id: str, project_id: str) -> None:
    _owned_project(user_id, project_id)
    projects_repository.delete_project(project_id)
    logger.info("projects.deleted", project_id=project_id, user_id=user_id)


def gallery(
    search: str | None = None,
    project_type: str | None = None,
    tags: list[str] | None = None,
    user_id: str | None = None,
    sort_by: str = "created_at",
    sort_order: str = "desc",
    limit: int = 20,
    offset: int = 0,
) -> dict[str, Any]:
    """Public project gallery page with pagination info."""
    if project_type:
        _validate_type(project_type)
    if sort_by not in projects_repository.GALLERY_SORT_COLUMNS:
        raise ValidationError(f"Invalid sort_by '{sort_by}'", field="sort_by")

    projects, total = projects_repository.search_gallery(
        search=search,
        project_type=project_type,
        tags=tags,
        user_id=user_id,
        sort_by=sort_by,
        sort_order=sort_order,
        limit=limit,
        offset=offset,
    )
    return {
        "projects": [p.to_dict() for p in projects],
        "pagination": {
            "offset": offset,
            "limit": limit,
            "total": total,
            "has_more": offset + len(projects) < total,
        },
    }


def prepare_upload(user_id: str, file_name: str | None, file_size: int | None, kind: str | None) -> dict[str, Any]:
    """Validate an upload request and reserve a storage path.

    Raises:
        ValidationError: Missing fields, unknown kind or file too large
    """
    if not file_name or file_size is None or not kind:
        raise ValidationError("file_name, file_size and kind are required")

    limit = get_upload_limit(kind)
    if limit is None:
        raise ValidationError(f"Unsupported upload kind '{kind}'", field="kind")
    if file_size <= 0:
        raise ValidationError("file_size must be positive", field="file_size")
    if file_size > limit:
        raise ValidationError(
            f"File too large. Maximum size for {kind} is {limit // (1024 * 1024)}MB",
            field="file_size",
        )

    safe_name = SAFE_FILENAME.sub("_", file_name).strip("_") or "file"
    path = f"{user_id}/{uuid.uuid4().hex}-{safe_name}"
    logger.debug("projects.upload_prepared", user_id=user_id, kind=kind, size=file_size)
    return {"path": path, "kind": kind, "max_size": limit}


# =============================================================================
# ARTIFACTS
# =============================================================================

ARTIFACT_REQUIRED_FIELDS = ("file_name", "file_path", "file_type", "file_size", "storage_bucket")


def list_artifacts(project_id: str, viewer_id: str | None) -> list[ArtifactRecord]:
    """List a project's files. Non-public projects are visible to their owner only.

    Raises:
        NotFoundError: Project does not exist
        PermissionDeniedError: Viewer may not see the project
    """
    record = projects_repository.get_project(project_id)
    if record is None:
        raise NotFoundError("Project", project_id)
    if record.user_id != viewer_id and record.visibility != Visibility.PUBLIC.value:
        raise PermissionDeniedError("You do not have access to this project")
    return projects_repository.list_artifacts(project_id)


def add_artifact(user_id: str, project_id: str, data: dict[str, Any]) -> ArtifactRecord:
    """Attach an uploaded file to the caller's project.

    The file must sit in the caller's upload folder, as reserved by
    prepare_upload. Known upload kinds are held to their size limit.

    Raises:
        NotFoundError: Project does not exist
        PermissionDeniedError: Caller does not own the project
        ValidationError: Missing fields, bad size or foreign file path
    """
    _owned_project(user_id, project_id)

    if any(not data.get(name) for name in ARTIFACT_REQUIRED_FIELDS):
        raise ValidationError(f"Missing required fields: {', '.join(ARTIFACT_REQUIRED_FIELDS)}")

    file_size = data["file_size"]
    if file_size <= 0:
        raise ValidationError("file_size must be positive", field="file_size")
    limit = get_upload_limit(data["file_type"])
    if limit is not None and file_size > limit:
        raise ValidationError(
            f"File too large. Maximum size for {data['file_type']} is {limit // (1024 * 1024)}MB",
            field="file_size",
        )
    if not data["file_path"].startswith(f"{user_id}/"):
        raise ValidationError("file_path must be inside your upload folder", field="file_path")

    artifact = projects_repository.insert_artifact(
        project_id=project_id,
        file_name=data["file_name"],
        file_path=data["file_path"],
        file_type=data["file_type"],
        file_size=file_size,
        storage_bucket=data["storage_bucket"],
        mime_type=data.get("mime_type"),
        metadata=clean_metadata(data.get("metadata")) or None,
    )
    logger.info("projects.artifact_added", project_id=project_id, artifact_id=artifact.id)
    return artifact


def remove_artifact(user_id: str, project_id: str, artifact_id: str | None) -> None:
    """Delete a file record from the caller's project.

    Raises:
        ValidationError: No artifact id given
        NotFoundError: Project or artifact does not exist
        PermissionDeniedError: Caller does not own the project
    """
    if not artifact_id:
        raise ValidationError("artifact_id is required", field="artifact_id")
    _owned_project(user_id, project_id)

    if projects_repository.get_artifact(project_id, artifact_id) is None:
        raise NotFoundError("Artifact", artifact_id)
    projects_repository.delete_artifact(artifact_id)
    logger.info("projects.artifact_removed", project_id=project_id, artifact_id=artifact_id)
