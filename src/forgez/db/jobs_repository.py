"""Repository functions for companies and job_postings tables."""

from __future__ import annotations

import sqlite3
from dataclasses import asdict, dataclass
from typing import Any

import structlog

from forgez.db.database import build_update, from_json, generate_id, get_db, now_iso, to_json

logger = structlog.get_logger(__name__)

JOB_UPDATE_FIELDS = {
    "title",
    "description",
    "requirements",
    "employment_type",
    "location",
    "is_remote",
    "salary_min",
    "salary_max",
    "salary_currency",
    "required_skills",
    "preferred_skills",
    "experience_level",
    "status",
    "posted_at",
    "expires_at",
}

JOB_NOT_NULL_FIELDS = {
    "title",
    "description",
    "employment_type",
    "is_remote",
    "salary_currency",
    "status",
}


@dataclass
class CompanyRecord:
    id: str
    name: str
    slug: str
    description: str | None
    logo_url: str | None
    website_url: str | None
    industry: str | None
    company_size: str | None
    headquarters_location: str | None
    country: str | None
    tech_stack: list[str]
    is_verified: bool
    is_featured: bool
    is_active: bool
    created_at: str
    updated_at: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class JobRecord:
    """Job posting, optionally with its company."""

    id: str
    company_id: str
    title: str
    description: str
    requirements: str | None
    employment_type: str
    location: str | None
    is_remote: bool
    salary_min: int | None
    salary_max: int | None
    salary_currency: str
    required_skills: list[Any]
    preferred_skills: list[Any]
    experience_level: str | None
    status: str
    view_count: int
    application_count: int
    posted_at: str | None
    expires_at: str | None
    created_by: str | None
    created_at: str
    updated_at: str
    company: CompanyRecord | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["company"] = self.company.to_dict() if self.company else None
        return data


def _row_to_company(row: sqlite3.Row) -> CompanyRecord:
    data = dict(row)
    data["tech_stack"] = from_json(data["tech_stack"], [])
    for key in ("is_verified", "is_featured", "is_active"):
        data[key] = bool(data[key])
    return CompanyRecord(**data)


def _row_to_job(row: sqlite3.Row) -> JobRecord:
    data = dict(row)
    data["is_remote"] = bool(data["is_remote"])
    data["required_skills"] = from_json(data["required_skills"], [])
    data["preferred_skills"] = from_json(data["preferred_skills"], [])
    return JobRecord(**data)


# =============================================================================
# COMPANIES
# =============================================================================


def insert_company(
    name: str,
    slug: str,
    description: str | None = None,
    industry: str | None = None,
    company_size: str | None = None,
    headquarters_location: str | None = None,
    country: str | None = None,
    website_url: str | None = None,
    tech_stack: list[str] | None = None,
    is_featured: bool = False,
    company_id: str | None = None,
) -> CompanyRecord:
    """Insert a company.

    Raises:
        sqlite3.IntegrityError: If the slug already exists
    """
    company_id = company_id or generate_id()
    now = now_iso()
    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO companies (
                id, name, slug, description, website_url, industry,
                company_size, headquarters_location, country, tech_stack,
                is_featured, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                company_id,
                name,
                slug,
                description,
                website_url,
                industry,
                company_size,
                headquarters_location,
                country,
                to_json(tech_stack or []),
                int(is_featured),
                now,
                now,
            ),
        )

    logger.debug("companies.inserted", company_id=company_id, slug=slug)
    return get_company(company_id)


def get_company(company_id: str) -> CompanyRecord | None:
    with get_db() as conn:
        row = conn.execute("SELECT * FROM companies WHERE id = ?", (company_id,)).fetchone()

    if row is None:
        return None
    return _row_to_company(row)


def list_companies(
    industry: str | None = None,
    country: str | None = None,
    featured: bool = False,
) -> list[CompanyRecord]:
    """Active companies, featured first, then by name."""
    where = ["is_active = 1"]
    params: list[Any] = []
    if industry:
        where.append("industry = ?")
        params.append(industry)
    if country:
        where.append("country = ?")
        params.append(country)
    if featured:
        where.append("is_featured = 1")

    with get_db() as conn:
        rows = conn.execute(
            f"""
            SELECT * FROM companies WHERE {" AND ".join(where)}
            ORDER BY is_featured DESC, name ASC
            """,
            params,
        ).fetchall()
    return [_row_to_company(r) for r in rows]


# =============================================================================
# JOBS
# =============================================================================


def insert_job(
    company_id: str,
    title: str,
    description: str,
    employment_type: str,
    created_by: str | None = None,
    location: str | None = None,
    is_remote: bool = False,
    salary_min: int | None = None,
    salary_max: int | None = None,
    salary_currency: str = "EUR",
    required_skills: list[Any] | None = None,
    preferred_skills: list[Any] | None = None,
    requirements: str | None = None,
    experience_level: str | None = None,
    status: str = "DRAFT",
    posted_at: str | None = None,
) -> JobRecord:
    job_id = generate_id()
    now = now_iso()
    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO job_postings (
                id, company_id, title, description, requirements,
                employment_type, location, is_remote, salary_min, salary_max,
                salary_currency, required_skills, preferred_skills,
                experience_level, status, posted_at, created_by,
                created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                job_id,
                company_id,
                title,
                description,
                requirements,
                employment_type,
                location,
                int(is_remote),
                salary_min,
                salary_max,
                salary_currency,
                to_json(required_skills or []),
                to_json(preferred_skills or []),
                experience_level,
                status,
                posted_at,
                created_by,
                now,
                now,
            ),
        )

    logger.debug("job_postings.inserted", job_id=job_id, company_id=company_id)
    return get_job(job_id)


def get_job(job_id: str) -> JobRecord | None:
    with get_db() as conn:
        row = conn.execute("SELECT * FROM job_postings WHERE id = ?", (job_id,)).fetchone()

    if row is None:
        return None

    job = _row_to_job(row)
    job.company = get_company(job.company_id)
    return job


def list_active_jobs(
    search: str | None = None,
    employment_types: list[str] | None = None,
    remote_only: bool = False,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[JobRecord], int]:
    """Active jobs, most recently posted first.

    Returns:
        Tuple of (page of jobs with company, total matching count)
    """
    where = ["status = 'ACTIVE'"]
    params: list[Any] = []
    if search:
        where.append("(LOWER(title) LIKE ? OR LOWER(COALESCE(location, '')) LIKE ?)")
        pattern = f"%{search.lower()}%"
        params.extend([pattern, pattern])
    if employment_types:
        where.append(f"employment_type IN ({', '.join('?' for _ in employment_types)})")
        params.extend(employment_types)
    if remote_only:
        where.append("is_remote = 1")

    clause = " AND ".join(where)
    with get_db() as conn:
        total = conn.execute(
            f"SELECT COUNT(*) FROM job_postings WHERE {clause}", params
        ).fetchone()[0]
        rows = conn.execute(
            f"""
            SELECT * FROM job_postings WHERE {clause}
            ORDER BY posted_at DESC, created_at DESC LIMIT ? OFFSET ?
            """,
            (*params, limit, offset),
        ).fetchall()

    jobs = []
    for row in rows:
        job = _row_to_job(row)
        job.company = get_company(job.company_id)
        jobs.append(job)
    return jobs, total


def update_job(job_id: str, fields: dict[str, Any]) -> JobRecord | None:
    clause, values = build_update(
        fields,
        JOB_UPDATE_FIELDS,
        json_columns={"required_skills", "preferred_skills"},
        bool_columns={"is_remote"},
    )
    if clause:
        with get_db() as conn:
            conn.execute(
                f"UPDATE job_postings SET {clause}, updated_at = ? WHERE id = ?",
                (*values, now_iso(), job_id),
            )
        logger.debug("job_postings.updated", job_id=job_id)
    return get_job(job_id)


def increment_view_count(job_id: str) -> None:
    with get_db() as conn:
        conn.execute(
            "UPDATE job_postings SET view_count = view_count + 1 WHERE id = ?", (job_id,)
        )


def delete_job(job_id: str) -> bool:
    with get_db() as conn:
        cursor = conn.execute("DELETE FROM job_postings WHERE id = ?", (job_id,))
    return cursor.rowcount > 0
