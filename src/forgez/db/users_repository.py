"""Repository functions for users and user_archetypes tables."""

from __future__ import annotations

import sqlite3
from dataclasses import asdict, dataclass
from typing import Any

import structlog

from forgez.db.database import build_update, get_db, now_iso

logger = structlog.get_logger(__name__)

PROFILE_FIELDS = {
    "email",
    "username",
    "first_name",
    "last_name",
    "birthday",
    "phone_number",
    "phone_country_code",
    "avatar_url",
    "timezone",
    "dark_mode",
    "onboarding_completed",
    "privacy_policy_agreed_at",
    "tos_agreed_at",
    "marketing_agreed_at",
    "headline",
    "bio",
    "location",
    "linkedin_url",
    "github_url",
    "portfolio_url",
    "current_role",
    "current_company",
    "years_experience",
    "is_open_to_work",
    "job_search_status",
    "profile_visibility",
    "show_skills_publicly",
    "show_projects_publicly",
    "is_employer",
    "employer_company_id",
    "locale",
    "world",
}

BOOL_FIELDS = {
    "dark_mode",
    "onboarding_completed",
    "is_open_to_work",
    "show_skills_publicly",
    "show_projects_publicly",
    "is_employer",
}

NOT_NULL_FIELDS = BOOL_FIELDS | {"timezone", "profile_visibility", "locale", "world"}


@dataclass
class UserRecord:
    """User record from database."""

    id: str
    email: str | None
    username: str | None
    first_name: str | None
    last_name: str | None
    birthday: str | None
    phone_number: str | None
    phone_country_code: str | None
    avatar_url: str | None
    timezone: str
    dark_mode: bool
    onboarding_completed: bool
    privacy_policy_agreed_at: str | None
    tos_agreed_at: str | None
    marketing_agreed_at: str | None
    headline: str | None
    bio: str | None
    location: str | None
    linkedin_url: str | None
    github_url: str | None
    portfolio_url: str | None
    current_role: str | None
    current_company: str | None
    years_experience: int | None
    is_open_to_work: bool
    job_search_status: str | None
    profile_visibility: str
    show_skills_publicly: bool
    show_projects_publicly: bool
    is_employer: bool
    employer_company_id: str | None
    locale: str
    world: str
    created_at: str
    updated_at: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ArchetypeRecord:
    """Archetype quiz result for a user."""

    user_id: str
    archetype: str
    game_preference: str
    domain_interest: str
    focus_area: str
    created_at: str
    updated_at: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _row_to_user(row: sqlite3.Row) -> UserRecord:
    data = dict(row)
    for key in BOOL_FIELDS:
        data[key] = bool(data[key])
    return UserRecord(**data)


def get_user(user_id: str) -> UserRecord | None:
    """Get user by ID."""
    with get_db() as conn:
        row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()

    if row is None:
        return None
    return _row_to_user(row)


def ensure_user(user_id: str, email: str | None = None) -> UserRecord:
    """Get a user, creating an empty profile row on first access."""
    now = now_iso()
    with get_db() as conn:
        cursor = conn.execute(
            """
            INSERT OR IGNORE INTO users (id, email, created_at, updated_at)
            VALUES (?, ?, ?, ?)
            """,
            (user_id, email, now, now),
        )
        created = cursor.rowcount > 0

    if created:
        logger.info("users.created", user_id=user_id)
    return get_user(user_id)


def update_user(user_id: str, fields: dict[str, Any]) -> UserRecord | None:
    """Update whitelisted profile fields.

    Returns:
        Updated UserRecord, or None if the user does not exist
    """
    clause, values = build_update(fields, PROFILE_FIELDS, bool_columns=BOOL_FIELDS)
    if clause:
        with get_db() as conn:
            conn.execute(
                f"UPDATE users SET {clause}, updated_at = ? WHERE id = ?",
                (*values, now_iso(), user_id),
            )
        logger.debug("users.updated", user_id=user_id, fields=sorted(fields))
    return get_user(user_id)


# =============================================================================
# ARCHETYPES
# =============================================================================


def get_archetype(user_id: str) -> ArchetypeRecord | None:
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM user_archetypes WHERE user_id = ?", (user_id,)
        ).fetchone()

    if row is None:
        return None
    return ArchetypeRecord(**dict(row))


def upsert_archetype(
    user_id: str,
    archetype: str,
    game_preference: str,
    domain_interest: str,
    focus_area: str,
) -> ArchetypeRecord:
    """Insert or replace a user's archetype quiz result."""
    now = now_iso()
    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO user_archetypes (
                user_id, archetype, game_preference, domain_interest,
                focus_area, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                archetype = excluded.archetype,
                game_preference = excluded.game_preference,
                domain_interest = excluded.domain_interest,
                focus_area = excluded.focus_area,
                updated_at = excluded.updated_at
            """,
            (user_id, archetype, game_preference, domain_interest, focus_area, now, now),
        )

    logger.debug("user_archetypes.upserted", user_id=user_id, archetype=archetype)
    return get_archetype(user_id)
