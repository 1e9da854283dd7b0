"""Repository functions for skills_taxonomy, user_skills and skill_endorsements."""

from __future__ import annotations

import sqlite3
from dataclasses import asdict, dataclass, field
from typing import Any

import structlog

from forgez.db.database import build_update, from_json, generate_id, get_db, now_iso, to_json

logger = structlog.get_logger(__name__)

USER_SKILL_UPDATE_FIELDS = {
    "proficiency_level",
    "verification_level",
    "confidence_score",
    "evidence_count",
    "years_experience",
    "last_used_date",
    "is_primary",
    "notes",
}

USER_SKILL_NOT_NULL_FIELDS = {
    "proficiency_level",
    "verification_level",
    "confidence_score",
    "evidence_count",
    "is_primary",
}


@dataclass
class TaxonomySkill:
    """Skill taxonomy entry."""

    id: str
    name: str
    description: str | None
    framework: str
    framework_id: str | None
    category: str
    parent_skill_id: str | None
    alt_labels: list[str]
    is_active: bool
    created_at: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class EndorsementRecord:
    id: str
    user_skill_id: str
    endorser_id: str
    relationship: str | None
    endorsement_text: str | None
    created_at: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class UserSkillRecord:
    """A skill claimed by a user."""

    id: str
    user_id: str
    skill_id: str
    proficiency_level: int
    verification_level: str
    confidence_score: float
    evidence_count: int
    years_experience: float | None
    last_used_date: str | None
    is_primary: bool
    notes: str | None
    created_at: str
    updated_at: str
    skill: TaxonomySkill | None = None
    endorsements: list[EndorsementRecord] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["skill"] = self.skill.to_dict() if self.skill else None
        data["endorsements"] = [e.to_dict() for e in self.endorsements]
        data["endorsement_count"] = len(self.endorsements)
        return data


def _row_to_taxonomy(row: sqlite3.Row) -> TaxonomySkill:
    return TaxonomySkill(
        id=row["id"],
        name=row["name"],
        description=row["description"],
        framework=row["framework"],
        framework_id=row["framework_id"],
        category=row["category"],
        parent_skill_id=row["parent_skill_id"],
        alt_labels=from_json(row["alt_labels"], []),
        is_active=bool(row["is_active"]),
        created_at=row["created_at"],
    )


def _row_to_user_skill(row: sqlite3.Row) -> UserSkillRecord:
    return UserSkillRecord(
        id=row["id"],
        user_id=row["user_id"],
        skill_id=row["skill_id"],
        proficiency_level=row["proficiency_level"],
        verification_level=row["verification_level"],
        confidence_score=row["confidence_score"],
        evidence_count=row["evidence_count"],
        years_experience=row["years_experience"],
        last_used_date=row["last_used_date"],
        is_primary=bool(row["is_primary"]),
        notes=row["notes"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


# =============================================================================
# TAXONOMY
# =============================================================================


def insert_taxonomy_skill(
    name: str,
    framework: str,
    category: str,
    description: str | None = None,
    framework_id: str | None = None,
    parent_skill_id: str | None = None,
    alt_labels: list[str] | None = None,
    skill_id: str | None = None,
) -> TaxonomySkill:
    """Insert a taxonomy entry.

    Raises:
        sqlite3.IntegrityError: If framework/category are invalid or the id exists
    """
    skill_id = skill_id or generate_id()
    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO skills_taxonomy (
                id, name, description, framework, framework_id,
                category, parent_skill_id, alt_labels, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                skill_id,
                name,
                description,
                framework,
                framework_id,
                category,
                parent_skill_id,
                to_json(alt_labels or []),
                now_iso(),
            ),
        )

    logger.debug("skills_taxonomy.inserted", skill_id=skill_id, name=name)
    return get_taxonomy_skill(skill_id)


def get_taxonomy_skill(skill_id: str) -> TaxonomySkill | None:
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM skills_taxonomy WHERE id = ?", (skill_id,)
        ).fetchone()

    if row is None:
        return None
    return _row_to_taxonomy(row)


def search_taxonomy(
    search: str | None = None,
    framework: str | None = None,
    category: str | None = None,
    parent_skill_id: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> tuple[list[TaxonomySkill], int]:
    """Search active taxonomy entries.

    Returns:
        Tuple of (page of skills ordered by name, total matching count)
    """
    where = ["is_active = 1"]
    params: list[Any] = []
    if search:
        where.append("LOWER(name) LIKE ?")
        params.append(f"%{search.lower()}%")
    if framework:
        where.append("framework = ?")
        params.append(framework)
    if category:
        where.append("category = ?")
        params.append(category)
    if parent_skill_id:
        where.append("parent_skill_id = ?")
        params.append(parent_skill_id)

    clause = " AND ".join(where)
    with get_db() as conn:
        total = conn.execute(
            f"SELECT COUNT(*) FROM skills_taxonomy WHERE {clause}", params
        ).fetchone()[0]
        rows = conn.execute(
            f"SELECT * FROM skills_taxonomy WHERE {clause} ORDER BY name LIMIT ? OFFSET ?",
            (*params, limit, offset),
        ).fetchall()

    return [_row_to_taxonomy(r) for r in rows], total


# =============================================================================
# USER SKILLS
# =============================================================================


def insert_user_skill(
    user_id: str,
    skill_id: str,
    proficiency_level: int = 1,
    verification_level: str = "SELF_ASSESSED",
    years_experience: float | None = None,
    last_used_date: str | None = None,
    is_primary: bool = False,
    notes: str | None = None,
) -> UserSkillRecord:
    """Insert a user skill.

    Raises:
        sqlite3.IntegrityError: If the user already has this skill
    """
    user_skill_id = generate_id()
    now = now_iso()
    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO user_skills (
                id, user_id, skill_id, proficiency_level, verification_level,
                years_experience, last_used_date, is_primary, notes,
                created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                user_skill_id,
                user_id,
                skill_id,
                proficiency_level,
                verification_level,
                years_experience,
                last_used_date,
                int(is_primary),
                notes,
                now,
                now,
            ),
        )

    logger.debug("user_skills.inserted", user_id=user_id, skill_id=skill_id)
    return get_user_skill(user_skill_id)


def get_user_skill(user_skill_id: str) -> UserSkillRecord | None:
    """Get a user skill with its taxonomy entry and endorsements."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM user_skills WHERE id = ?", (user_skill_id,)
        ).fetchone()

    if row is None:
        return None

    record = _row_to_user_skill(row)
    record.skill = get_taxonomy_skill(record.skill_id)
    record.endorsements = list_endorsements(record.id)
    return record


def find_user_skill(user_id: str, skill_id: str) -> UserSkillRecord | None:
    with get_db() as conn:
        row = conn.execute(
            "SELECT id FROM user_skills WHERE user_id = ? AND skill_id = ?",
            (user_id, skill_id),
        ).fetchone()

    if row is None:
        return None
    return get_user_skill(row["id"])


def list_user_skills(user_id: str) -> list[UserSkillRecord]:
    """All skills of a user, primary first, then by proficiency."""
    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT * FROM user_skills WHERE user_id = ?
            ORDER BY is_primary DESC, proficiency_level DESC, created_at
            """,
            (user_id,),
        ).fetchall()

    records = []
    for row in rows:
        record = _row_to_user_skill(row)
        record.skill = get_taxonomy_skill(record.skill_id)
        record.endorsements = list_endorsements(record.id)
        records.append(record)
    return records


def count_user_skills(user_id: str) -> int:
    with get_db() as conn:
        return conn.execute(
            "SELECT COUNT(*) FROM user_skills WHERE user_id = ?", (user_id,)
        ).fetchone()[0]


def update_user_skill(user_skill_id: str, fields: dict[str, Any]) -> UserSkillRecord | None:
    clause, values = build_update(
        fields, USER_SKILL_UPDATE_FIELDS, bool_columns={"is_primary"}
    )
    if clause:
        with get_db() as conn:
            conn.execute(
                f"UPDATE user_skills SET {clause}, updated_at = ? WHERE id = ?",
                (*values, now_iso(), user_skill_id),
            )
        logger.debug("user_skills.updated", user_skill_id=user_skill_id)
    return get_user_skill(user_skill_id)


def delete_user_skill(user_skill_id: str) -> bool:
    with get_db() as conn:
        cursor = conn.execute("DELETE FROM user_skills WHERE id = ?", (user_skill_id,))

    deleted = cursor.rowcount > 0
    if deleted:
        logger.debug("user_skills.deleted", user_skill_id=user_skill_id)
    return deleted


# =============================================================================
# ENDORSEMENTS
# =============================================================================


def insert_endorsement(
    user_skill_id: str,
    endorser_id: str,
    relationship: str | None = None,
    endorsement_text: str | None = None,
) -> EndorsementRecord:
    """Insert an endorsement.

    Raises:
        sqlite3.IntegrityError: If the endorser already endorsed this skill
    """
    endorsement_id = generate_id()
    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO skill_endorsements (
                id, user_skill_id, endorser_id, relationship,
                endorsement_text, created_at
            ) VALUES (?, ?, ?, ?, ?, ?)
            """,
            (endorsement_id, user_skill_id, endorser_id, relationship, endorsement_text, now_iso()),
        )

    logger.debug("skill_endorsements.inserted", user_skill_id=user_skill_id)
    return get_endorsement(endorsement_id)


def get_endorsement(endorsement_id: str) -> EndorsementRecord | None:
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM skill_endorsements WHERE id = ?", (endorsement_id,)
        ).fetchone()

    if row is None:
        return None
    return EndorsementRecord(**dict(row))


def find_endorsement(user_skill_id: str, endorser_id: str) -> EndorsementRecord | None:
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM skill_endorsements WHERE user_skill_id = ? AND endorser_id = ?",
            (user_skill_id, endorser_id),
        ).fetchone()

    if row is None:
        return None
    return EndorsementRecord(**dict(row))


def list_endorsements(user_skill_id: str) -> list[EndorsementRecord]:
    with get_db() as conn:
        rows = conn.execute(
            "SELECT * FROM skill_endorsements WHERE user_skill_id = ? ORDER BY created_at, rowid",
            (user_skill_id,),
        ).fetchall()
    return [EndorsementRecord(**dict(r)) for r in rows]


def count_endorsements(user_skill_id: str) -> int:
    with get_db() as conn:
        return conn.execute(
            "SELECT COUNT(*) FROM skill_endorsements WHERE user_skill_id = ?",
            (user_skill_id,),
        ).fetchone()[0]


def delete_endorsement(endorsement_id: str) -> bool:
    with get_db() as conn:
        cursor = conn.execute(
            "DELETE FROM skill_endorsements WHERE id = ?", (endorsement_id,)
        )
    return cursor.rowcount > 0
