"""Portfolio project endpoints."""

from typing import Any

from fastapi import APIRouter, Depends, Query, status

from forgez.config.app_config import load_app_config
from forgez.core import projects as projects_service
from forgez.core.achievements import AchievementTrigger
from forgez.core.progression import PROJECT_UPLOAD_XP
from forgez.core.xp import XPSource
from forgez.db import projects_repository, skills_repository
from forgez.utils.validators import clamp_limit, parse_csv
from forgez.web.deps import get_current_user_id, get_optional_user_id
from forgez.web.progression import get_progression_manager
from forgez.web.schemas import ArtifactCreate, ProjectCreate, ProjectUpdate, UploadRequest

router = APIRouter(prefix="/api/projects", tags=["projects"])

OWN_PROJECTS_LIMIT = 50


@router.get("")
async def list_projects(
    visibility: str | None = None,
    project_type: str | None = Query(default=None, alias="type"),
    featured: bool | None = None,
    limit: int | None = None,
    offset: int = Query(default=0, ge=0),
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    """List the caller's own projects, newest first."""
    limit = clamp_limit(limit, OWN_PROJECTS_LIMIT, OWN_PROJECTS_LIMIT)
    projects = projects_repository.list_user_projects(
        user_id,
        visibility=visibility,
        project_type=project_type,
        featured=featured,
        limit=limit,
        offset=offset,
    )
    return {"projects": [p.to_dict() for p in projects], "count": len(projects)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_project(
    body: ProjectCreate, user_id: str = Depends(get_current_user_id)
) -> dict[str, Any]:
    """Create a project and credit the upload."""
    project = projects_service.create_project(user_id, body.model_dump())

    data = {
        "projectCount": projects_repository.count_user_projects(user_id),
        "skillCount": skills_repository.count_user_skills(user_id),
    }
    async with get_progression_manager().update(user_id) as progress:
        outcome = progress.award_xp(
            PROJECT_UPLOAD_XP,
            XPSource.PROJECT_UPLOAD,
            source_id=project.id,
            description=f"Project uploaded: {project.title}",
        )
        outcome.merge(progress.trigger(AchievementTrigger.PROJECT_UPLOAD, data))

    return {"project": project.to_dict(), "progression": outcome.to_dict()}


@router.get("/gallery")
async def project_gallery(
    search: str | None = None,
    project_type: str | None = Query(default=None, alias="type"),
    tags: str | None = None,
    owner_id: str | None = Query(default=None, alias="userId"),
    sort_by: str = "created_at",
    sort_order: str = Query(default="desc", pattern="^(asc|desc)$"),
    limit: int | None = None,
    offset: int = Query(default=0, ge=0),
) -> dict[str, Any]:
    """Browse public projects."""
    pagination = load_app_config().pagination
    limit = clamp_limit(limit, pagination.default_limit, pagination.max_limit)
    return projects_service.gallery(
        search=search,
        project_type=project_type,
        tags=parse_csv(tags),
        user_id=owner_id,
        sort_by=sort_by,
        sort_order=sort_order,
        limit=limit,
        offset=offset,
    )


@router.post("/upload")
async def prepare_upload(
    body: UploadRequest, user_id: str = Depends(get_current_user_id)
) -> dict[str, Any]:
    """Validate an upload and return its storage path."""
    return projects_service.prepare_upload(user_id, body.file_name, body.file_size, body.kind)


@router.get("/{project_id}")
async def get_project(
    project_id: str, user_id: str | None = Depends(get_optional_user_id)
) -> dict[str, Any]:
    project, is_owner = projects_service.view_project(project_id, user_id)
    return {"project": project.to_dict(), "is_owner": is_owner}


@router.put("/{project_id}")
async def update_project(
    project_id: str,
    body: ProjectUpdate,
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    project = projects_service.update_project(
        user_id, project_id, body.model_dump(exclude_unset=True)
    )
    return {"project": project.to_dict()}


@router.delete("/{project_id}")
async def delete_project(
    project_id: str, user_id: str = Depends(get_current_user_id)
) -> dict[str, bool]:
    projects_service.delete_project(user_id, project_id)
    return {"success": True}


@router.get("/{project_id}/artifacts")
async def list_artifacts(
    project_id: str, user_id: str | None = Depends(get_optional_user_id)
) -> dict[str, Any]:
    artifacts = projects_service.list_artifacts(project_id, user_id)
    return {"artifacts": [a.to_dict() for a in artifacts], "count": len(artifacts)}


@router.post("/{project_id}/artifacts", status_code=status.HTTP_201_CREATED)
async def add_artifact(
    project_id: str,
    body: ArtifactCreate,
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    """Attach an uploaded file to a project."""
    artifact = projects_service.add_artifact(user_id, project_id, body.model_dump())
    return {"artifact": artifact.to_dict()}


@router.delete("/{project_id}/artifacts")
async def remove_artifact(
    project_id: str,
    artifact_id: str | None = None,
    user_id: str = Depends(get_current_user_id),
) -> dict[str, bool]:
    projects_service.remove_artifact(user_id, project_id, artifact_id)
    return {"success": True}
