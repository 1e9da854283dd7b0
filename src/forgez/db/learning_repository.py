"""Repository functions for learning_resources and user_learning_progress."""

from __future__ import annotations

import sqlite3
from dataclasses import asdict, dataclass
from typing import Any

import structlog

from forgez.db.database import from_json, generate_id, get_db, now_iso, to_json

logger = structlog.get_logger(__name__)


@dataclass
class LearningResourceRecord:
    id: str
    title: str
    provider: str
    description: str | None
    url: str
    duration: str | None
    level: str | None
    industry: str | None
    skill_ids: list[str]
    rating: float | None
    enrollments: str | None
    featured: bool
    created_at: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class LearningProgressRecord:
    id: str
    user_id: str
    resource_id: str
    status: str
    started_at: str
    completed_at: str | None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _row_to_resource(row: sqlite3.Row) -> LearningResourceRecord:
    data = dict(row)
    data["skill_ids"] = from_json(data["skill_ids"], [])
    data["featured"] = bool(data["featured"])
    return LearningResourceRecord(**data)


def insert_resource(
    title: str,
    provider: str,
    url: str,
    description: str | None = None,
    duration: str | None = None,
    level: str | None = None,
    industry: str | None = None,
    skill_ids: list[str] | None = None,
    rating: float | None = None,
    enrollments: str | None = None,
    featured: bool = False,
    resource_id: str | None = None,
) -> LearningResourceRecord:
    resource_id = resource_id or generate_id()
    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO learning_resources (
                id, title, provider, description, url, duration, level,
                industry, skill_ids, rating, enrollments, featured, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                resource_id,
                title,
                provider,
                description,
                url,
                duration,
                level,
                industry,
                to_json(skill_ids or []),
                rating,
                enrollments,
                int(featured),
                now_iso(),
            ),
        )

    logger.debug("learning_resources.inserted", resource_id=resource_id)
    return get_resource(resource_id)


def get_resource(resource_id: str) -> LearningResourceRecord | None:
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM learning_resources WHERE id = ?", (resource_id,)
        ).fetchone()

    if row is None:
        return None
    return _row_to_resource(row)


def list_resources(
    industry: str | None = None,
    level: str | None = None,
    featured: bool = False,
    limit: int = 20,
    offset: int = 0,
) -> list[LearningResourceRecord]:
    """Resources ordered featured first, then by rating (nulls last)."""
    where = ["1 = 1"]
    params: list[Any] = []
    if industry:
        where.append("industry = ?")
        params.append(industry)
    if level:
        where.append("level = ?")
        params.append(level)
    if featured:
        where.append("featured = 1")

    with get_db() as conn:
        rows = conn.execute(
            f"""
            SELECT * FROM learning_resources WHERE {" AND ".join(where)}
            ORDER BY featured DESC, rating IS NULL, rating DESC, title
            LIMIT ? OFFSET ?
            """,
            (*params, limit, offset),
        ).fetchall()
    return [_row_to_resource(r) for r in rows]


# =============================================================================
# PROGRESS
# =============================================================================


def get_progress(user_id: str, resource_id: str) -> LearningProgressRecord | None:
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM user_learning_progress WHERE user_id = ? AND resource_id = ?",
            (user_id, resource_id),
        ).fetchone()

    if row is None:
        return None
    return LearningProgressRecord(**dict(row))


def list_progress(user_id: str) -> list[LearningProgressRecord]:
    with get_db() as conn:
        rows = conn.execute(
            "SELECT * FROM user_learning_progress WHERE user_id = ?", (user_id,)
        ).fetchall()
    return [LearningProgressRecord(**dict(r)) for r in rows]


def set_progress(user_id: str, resource_id: str, status: str) -> LearningProgressRecord:
    """Insert or update a user's status on a resource."""
    now = now_iso()
    completed_at = now if status == "completed" else None
    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO user_learning_progress (
                id, user_id, resource_id, status, started_at, completed_at
            ) VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(user_id, resource_id) DO UPDATE SET
                status = excluded.status,
                completed_at = excluded.completed_at
            """,
            (generate_id(), user_id, resource_id, status, now, completed_at),
        )

    logger.debug("user_learning_progress.set", user_id=user_id, resource_id=resource_id, status=status)
    return get_progress(user_id, resource_id)
