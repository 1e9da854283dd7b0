"""Job posting endpoints."""

from typing import Any

from fastapi import APIRouter, Depends, status

from forgez.config.app_config import load_app_config
from forgez.core import jobs as jobs_service
from forgez.utils.validators import clamp_limit, parse_csv
from forgez.web.deps import get_current_user_id
from forgez.web.schemas import JobCreate, JobUpdate

router = APIRouter(prefix="/api/jobs", tags=["jobs"])


@router.get("")
async def list_jobs(
    search: str | None = None,
    types: str | None = None,
    remote: bool = False,
    limit: int | None = None,
    offset: int = 0,
) -> dict[str, Any]:
    """List active job postings, most recently posted first."""
    pagination = load_app_config().pagination
    limit = clamp_limit(limit, pagination.default_limit, pagination.max_limit)
    offset = max(offset, 0)

    jobs, total = jobs_service.list_jobs(
        search=search,
        employment_types=parse_csv(types),
        remote_only=remote,
        limit=limit,
        offset=offset,
    )
    return {
        "jobs": [j.to_dict() for j in jobs],
        "total": total,
        "limit": limit,
        "offset": offset,
        "has_more": offset + len(jobs) < total,
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_job(body: JobCreate, user_id: str = Depends(get_current_user_id)) -> dict[str, Any]:
    """Create a posting for the caller's company."""
    job = jobs_service.create_job(user_id, body.model_dump())
    return {"job": job.to_dict()}


@router.get("/{job_id}")
async def get_job(job_id: str) -> dict[str, Any]:
    job = jobs_service.view_job(job_id)
    return {"job": job.to_dict()}


@router.put("/{job_id}")
async def update_job(
    job_id: str, body: JobUpdate, user_id: str = Depends(get_current_user_id)
) -> dict[str, Any]:
    job = jobs_service.update_job(user_id, job_id, body.model_dump(exclude_unset=True))
    return {"job": job.to_dict()}


@router.delete("/{job_id}")
async def delete_job(job_id: str, user_id: str = Depends(get_current_user_id)) -> dict[str, bool]:
    jobs_service.delete_job(user_id, job_id)
    return {"success": True}
