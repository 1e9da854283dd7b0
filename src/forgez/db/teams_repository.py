"""Repository functions for teams and team_members tables."""

from __future__ import annotations

import sqlite3
from dataclasses import asdict, dataclass, field
from typing import Any

import structlog

from forgez.db.database import build_update, from_json, generate_id, get_db, now_iso, to_json

logger = structlog.get_logger(__name__)

UPDATE_FIELDS = {
    "name",
    "description",
    "purpose",
    "max_members",
    "skill_requirements",
    "is_public",
    "is_active",
}

NOT_NULL_FIELDS = {"name", "max_members", "is_public", "is_active"}


@dataclass
class TeamMemberRecord:
    id: str
    team_id: str
    user_id: str
    role: str
    contribution_area: str | None
    joined_at: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class TeamRecord:
    """Team with its members."""

    id: str
    name: str
    description: str | None
    purpose: str | None
    max_members: int
    skill_requirements: list[str]
    is_public: bool
    is_active: bool
    created_by: str
    created_at: str
    updated_at: str
    members: list[TeamMemberRecord] = field(default_factory=list)

    @property
    def active_members(self) -> list[TeamMemberRecord]:
        return [m for m in self.members if m.role != "PENDING"]

    @property
    def member_count(self) -> int:
        return len(self.active_members)

    @property
    def is_full(self) -> bool:
        return self.member_count >= self.max_members

    def get_member(self, user_id: str) -> TeamMemberRecord | None:
        for member in self.members:
            if member.user_id == user_id:
                return member
        return None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["members"] = [m.to_dict() for m in self.members]
        data["member_count"] = self.member_count
        return data


def _row_to_team(row: sqlite3.Row) -> TeamRecord:
    data = dict(row)
    data["skill_requirements"] = from_json(data["skill_requirements"], [])
    data["is_public"] = bool(data["is_public"])
    data["is_active"] = bool(data["is_active"])
    return TeamRecord(**data)


def insert_team(
    name: str,
    created_by: str,
    description: str | None = None,
    purpose: str | None = None,
    max_members: int = 5,
    skill_requirements: list[str] | None = None,
    is_public: bool = True,
) -> TeamRecord:
    """Insert a team and add its creator as LEADER."""
    team_id = generate_id()
    now = now_iso()
    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO teams (
                id, name, description, purpose, max_members,
                skill_requirements, is_public, is_active, created_by,
                created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, 1, ?, ?, ?)
            """,
            (
                team_id,
                name,
                description,
                purpose,
                max_members,
                to_json(skill_requirements or []),
                int(is_public),
                created_by,
                now,
                now,
            ),
        )
        conn.execute(
            """
            INSERT INTO team_members (id, team_id, user_id, role, joined_at)
            VALUES (?, ?, ?, 'LEADER', ?)
            """,
            (generate_id(), team_id, created_by, now),
        )

    logger.debug("teams.inserted", team_id=team_id, created_by=created_by)
    return get_team(team_id)


def get_team(team_id: str) -> TeamRecord | None:
    with get_db() as conn:
        row = conn.execute("SELECT * FROM teams WHERE id = ?", (team_id,)).fetchone()

    if row is None:
        return None

    team = _row_to_team(row)
    team.members = list_members(team_id)
    return team


def list_teams(
    public_only: bool = True,
    member_id: str | None = None,
    search: str | None = None,
    skill: str | None = None,
    limit: int = 20,
    offset: int = 0,
) -> list[TeamRecord]:
    """List active teams, newest first.

    Args:
        public_only: Only public teams (ignored when member_id is set)
        member_id: Only teams this user belongs to
        search: Case-insensitive match on name or description
        skill: Required skill name (case-insensitive)
    """
    where = ["t.is_active = 1"]
    params: list[Any] = []
    if member_id:
        where.append("EXISTS (SELECT 1 FROM team_members m WHERE m.team_id = t.id AND m.user_id = ?)")
        params.append(member_id)
    elif public_only:
        where.append("t.is_public = 1")
    if search:
        where.append("(LOWER(t.name) LIKE ? OR LOWER(COALESCE(t.description, '')) LIKE ?)")
        pattern = f"%{search.lower()}%"
        params.extend([pattern, pattern])
    if skill:
        where.append(
            "EXISTS (SELECT 1 FROM json_each(t.skill_requirements) WHERE LOWER(value) = ?)"
        )
        params.append(skill.lower())

    with get_db() as conn:
        rows = conn.execute(
            f"""
            SELECT t.* FROM teams t WHERE {" AND ".join(where)}
            ORDER BY t.created_at DESC LIMIT ? OFFSET ?
            """,
            (*params, limit, offset),
        ).fetchall()

    teams = []
    for row in rows:
        team = _row_to_team(row)
        team.members = list_members(team.id)
        teams.append(team)
    return teams


def update_team(team_id: str, fields: dict[str, Any]) -> TeamRecord | None:
    fields = dict(fields)
    if "skill_requirements" in fields:
        fields["skill_requirements"] = to_json(fields["skill_requirements"] or [])
    clause, values = build_update(fields, UPDATE_FIELDS, bool_columns={"is_public", "is_active"})
    if clause:
        with get_db() as conn:
            conn.execute(
                f"UPDATE teams SET {clause}, updated_at = ? WHERE id = ?",
                (*values, now_iso(), team_id),
            )
        logger.debug("teams.updated", team_id=team_id)
    return get_team(team_id)


def delete_team(team_id: str) -> bool:
    with get_db() as conn:
        cursor = conn.execute("DELETE FROM teams WHERE id = ?", (team_id,))
    return cursor.rowcount > 0


# =============================================================================
# MEMBERS
# =============================================================================


def list_members(team_id: str) -> list[TeamMemberRecord]:
    with get_db() as conn:
        rows = conn.execute(
            "SELECT * FROM team_members WHERE team_id = ? ORDER BY joined_at, rowid",
            (team_id,),
        ).fetchall()
    return [TeamMemberRecord(**dict(r)) for r in rows]


def add_member(team_id: str, user_id: str, role: str = "PENDING") -> TeamMemberRecord:
    member_id = generate_id()
    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO team_members (id, team_id, user_id, role, joined_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (member_id, team_id, user_id, role, now_iso()),
        )
        row = conn.execute("SELECT * FROM team_members WHERE id = ?", (member_id,)).fetchone()

    logger.debug("team_members.added", team_id=team_id, user_id=user_id, role=role)
    return TeamMemberRecord(**dict(row))


def update_member(
    team_id: str,
    user_id: str,
    role: str | None = None,
    contribution_area: str | None = None,
) -> None:
    fields: dict[str, Any] = {}
    if role is not None:
        fields["role"] = role
    if contribution_area is not None:
        fields["contribution_area"] = contribution_area
    clause, values = build_update(fields, {"role", "contribution_area"})
    if not clause:
        return
    with get_db() as conn:
        conn.execute(
            f"UPDATE team_members SET {clause} WHERE team_id = ? AND user_id = ?",
            (*values, team_id, user_id),
        )


def remove_member(team_id: str, user_id: str) -> bool:
    with get_db() as conn:
        cursor = conn.execute(
            "DELETE FROM team_members WHERE team_id = ? AND user_id = ?",
            (team_id, user_id),
        )
    return cursor.rowcount > 0


def list_candidate_teams(exclude_user_id: str) -> list[TeamRecord]:
    """Public active teams the user does not belong to."""
    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT t.* FROM teams t
            WHERE t.is_active = 1 AND t.is_public = 1
              AND NOT EXISTS (
                  SELECT 1 FROM team_members m
                  WHERE m.team_id = t.id AND m.user_id = ?
              )
            ORDER BY t.created_at DESC
            """,
            (exclude_user_id,),
        ).fetchall()

    teams = []
    for row in rows:
        team = _row_to_team(row)
        team.members = list_members(team.id)
        teams.append(team)
    return teams
