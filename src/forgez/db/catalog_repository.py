"""Repository functions for talent_roles and hackathons tables."""

from __future__ import annotations

import sqlite3
from dataclasses import asdict, dataclass
from typing import Any

import structlog

from forgez.db import jobs_repository
from forgez.db.database import from_json, generate_id, get_db, now_iso, to_json

logger = structlog.get_logger(__name__)


# =============================================================================
# ROLES
# =============================================================================


@dataclass
class RoleRecord:
    """Career role players can explore."""

    id: str
    slug: str
    title: str
    description: str | None
    industry: str | None
    department: str | None
    level: str | None
    salary_range: dict[str, Any] | None
    required_skills: list[str]
    education_requirements: str | None
    market_demand: int
    growth_rate: str | None
    remote_friendly: bool
    created_at: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _row_to_role(row: sqlite3.Row) -> RoleRecord:
    data = dict(row)
    data["salary_range"] = from_json(data["salary_range"])
    data["required_skills"] = from_json(data["required_skills"], [])
    data["remote_friendly"] = bool(data["remote_friendly"])
    return RoleRecord(**data)


def insert_role(
    slug: str,
    title: str,
    description: str | None = None,
    industry: str | None = None,
    department: str | None = None,
    level: str | None = None,
    salary_range: dict[str, Any] | None = None,
    required_skills: list[str] | None = None,
    education_requirements: str | None = None,
    market_demand: int = 0,
    growth_rate: str | None = None,
    remote_friendly: bool = False,
    role_id: str | None = None,
) -> RoleRecord:
    role_id = role_id or generate_id()
    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO talent_roles (
                id, slug, title, description, industry, department, level,
                salary_range, required_skills, education_requirements,
                market_demand, growth_rate, remote_friendly, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                role_id,
                slug,
                title,
                description,
                industry,
                department,
                level,
                to_json(salary_range),
                to_json(required_skills or []),
                education_requirements,
                market_demand,
                growth_rate,
                int(remote_friendly),
                now_iso(),
            ),
        )

    logger.debug("talent_roles.inserted", role_id=role_id)
    return get_role(role_id)


def get_role(role_id: str) -> RoleRecord | None:
    with get_db() as conn:
        row = conn.execute("SELECT * FROM talent_roles WHERE id = ?", (role_id,)).fetchone()

    if row is None:
        return None
    return _row_to_role(row)


def list_roles(industry: str | None = None, level: str | None = None) -> list[RoleRecord]:
    """Roles in highest market demand first."""
    where = ["1 = 1"]
    params: list[Any] = []
    if industry:
        where.append("industry = ?")
        params.append(industry)
    if level:
        where.append("level = ?")
        params.append(level)

    with get_db() as conn:
        rows = conn.execute(
            f"""
            SELECT * FROM talent_roles WHERE {" AND ".join(where)}
            ORDER BY market_demand DESC, title
            """,
            params,
        ).fetchall()
    return [_row_to_role(r) for r in rows]


# =============================================================================
# HACKATHONS
# =============================================================================


@dataclass
class HackathonRecord:
    id: str
    slug: str
    title: str
    description: str | None
    prize_amount: str | None
    prize_type: str | None
    team_size_min: int
    team_size_max: int
    start_date: str
    end_date: str
    skills_tested: list[str]
    status: str
    sponsor_company_id: str | None
    created_at: str
    sponsor_company: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _row_to_hackathon(row: sqlite3.Row) -> HackathonRecord:
    data = dict(row)
    data["skills_tested"] = from_json(data["skills_tested"], [])
    hackathon = HackathonRecord(**data)
    if hackathon.sponsor_company_id:
        company = jobs_repository.get_company(hackathon.sponsor_company_id)
        if company is not None:
            hackathon.sponsor_company = {
                "id": company.id,
                "name": company.name,
                "logo_url": company.logo_url,
            }
    return hackathon


def insert_hackathon(
    slug: str,
    title: str,
    start_date: str,
    end_date: str,
    description: str | None = None,
    prize_amount: str | None = None,
    prize_type: str | None = None,
    team_size_min: int = 1,
    team_size_max: int = 5,
    skills_tested: list[str] | None = None,
    status: str = "upcoming",
    sponsor_company_id: str | None = None,
    hackathon_id: str | None = None,
) -> HackathonRecord:
    hackathon_id = hackathon_id or generate_id()
    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO hackathons (
                id, slug, title, description, prize_amount, prize_type,
                team_size_min, team_size_max, start_date, end_date,
                skills_tested, status, sponsor_company_id, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                hackathon_id,
                slug,
                title,
                description,
                prize_amount,
                prize_type,
                team_size_min,
                team_size_max,
                start_date,
                end_date,
                to_json(skills_tested or []),
                status,
                sponsor_company_id,
                now_iso(),
            ),
        )

    logger.debug("hackathons.inserted", hackathon_id=hackathon_id)
    return get_hackathon(hackathon_id)


def get_hackathon(hackathon_id: str) -> HackathonRecord | None:
    with get_db() as conn:
        row = conn.execute("SELECT * FROM hackathons WHERE id = ?", (hackathon_id,)).fetchone()

    if row is None:
        return None
    return _row_to_hackathon(row)


def list_hackathons(status: str | None = None) -> list[HackathonRecord]:
    """Hackathons by start date, soonest first."""
    with get_db() as conn:
        if status:
            rows = conn.execute(
                "SELECT * FROM hackathons WHERE status = ? ORDER BY start_date, title", (status,)
            ).fetchall()
        else:
            rows = conn.execute("SELECT * FROM hackathons ORDER BY start_date, title").fetchall()
    return [_row_to_hackathon(r) for r in rows]
