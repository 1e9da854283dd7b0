"""Job postings and the company directory."""

from __future__ import annotations

from enum import Enum
from typing import Any

import structlog

from forgez.core.errors import NotFoundError, PermissionDeniedError, ValidationError
from forgez.db import jobs_repository, users_repository
from forgez.db.jobs_repository import CompanyRecord, JobRecord
from forgez.utils.validators import null_fields, utc_now

logger = structlog.get_logger(__name__)

DEFAULT_CURRENCY = "EUR"


class EmploymentType(str, Enum):
    FULL_TIME = "FULL_TIME"
    PART_TIME = "PART_TIME"
    CONTRACT = "CONTRACT"
    INTERNSHIP = "INTERNSHIP"
    FREELANCE = "FREELANCE"
    APPRENTICESHIP = "APPRENTICESHIP"


class JobStatus(str, Enum):
    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    CLOSED = "CLOSED"
    FILLED = "FILLED"


def _check_employment_type(value: str) -> None:
    try:
        EmploymentType(value)
    except ValueError:
        raise ValidationError(f"Invalid employment type '{value}'", field="employment_type")


def _check_status(value: str) -> None:
    try:
        JobStatus(value)
    except ValueError:
        raise ValidationError(f"Invalid status '{value}'", field="status")


def employer_company_id(user_id: str) -> str:
    """Company the user posts for.

    Raises:
        PermissionDeniedError: User is not an employer
    """
    user = users_repository.get_user(user_id)
    if user is None or not user.is_employer or not user.employer_company_id:
        raise PermissionDeniedError("Only employers can manage job postings")
    return user.employer_company_id


def list_jobs(
    search: str | None = None,
    employment_types: list[str] | None = None,
    remote_only: bool = False,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[JobRecord], int]:
    for employment_type in employment_types or []:
        _check_employment_type(employment_type)
    return jobs_repository.list_active_jobs(
        search=search,
        employment_types=employment_types,
        remote_only=remote_only,
        limit=limit,
        offset=offset,
    )


def create_job(user_id: str, data: dict[str, Any]) -> JobRecord:
    """Create a posting for the employer's company.

    Raises:
        PermissionDeniedError: User is not an employer
        ValidationError: Missing required fields or invalid enum values
    """
    company_id = employer_company_id(user_id)

    title = (data.get("title") or "").strip()
    description = (data.get("description") or "").strip()
    employment_type = data.get("employment_type")
    if not title or not description or not employment_type:
        raise ValidationError("Title, description, and employment type are required")
    _check_employment_type(employment_type)

    status = data.get("status") or JobStatus.DRAFT.value
    _check_status(status)

    job = jobs_repository.insert_job(
        company_id=company_id,
        title=title,
        description=description,
        employment_type=employment_type,
        created_by=user_id,
        location=data.get("location"),
        is_remote=bool(data.get("is_remote", False)),
        salary_min=data.get("salary_min"),
        salary_max=data.get("salary_max"),
        salary_currency=data.get("salary_currency") or DEFAULT_CURRENCY,
        required_skills=data.get("required_skills"),
        preferred_skills=data.get("preferred_skills"),
        requirements=data.get("requirements"),
        experience_level=data.get("experience_level"),
        status=status,
        posted_at=utc_now() if status == JobStatus.ACTIVE.value else None,
    )
    logger.info("jobs.created", job_id=job.id, company_id=company_id, status=status)
    return job


def view_job(job_id: str) -> JobRecord:
    job = jobs_repository.get_job(job_id)
    if job is None:
        raise NotFoundError("Job", job_id)
    jobs_repository.increment_view_count(job_id)
    job.view_count += 1
    return job


def _owned_job(user_id: str, job_id: str) -> JobRecord:
    job = jobs_repository.get_job(job_id)
    if job is None:
        raise NotFoundError("Job", job_id)
    user = users_repository.get_user(user_id)
    if user is None or not user.is_employer or user.employer_company_id != job.company_id:
        raise PermissionDeniedError("You can only manage your company's job postings")
    return job


def update_job(user_id: str, job_id: str, updates: dict[str, Any]) -> JobRecord:
    job = _owned_job(user_id, job_id)

    fields = dict(updates)
    nulls = null_fields(fields, jobs_repository.JOB_NOT_NULL_FIELDS)
    if nulls:
        raise ValidationError(f"{nulls[0]} cannot be null", field=nulls[0])
    if fields.get("employment_type") is not None:
        _check_employment_type(fields["employment_type"])
    status = fields.get("status")
    if status is not None:
        _check_status(status)
        if status == JobStatus.ACTIVE.value and not job.posted_at:
            fields["posted_at"] = utc_now()

    return jobs_repository.update_job(job_id, fields)


def delete_job(user_id: str, job_id: str) -> None:
    _owned_job(user_id, job_id)
    jobs_repository.delete_job(job_id)
    logger.info("jobs.deleted", job_id=job_id)


def get_company(company_id: str) -> CompanyRecord:
    company = jobs_repository.get_company(company_id)
    if company is None:
        raise NotFoundError("Company", company_id)
    return company
