"""Teams (guilds): creation, membership and leader actions."""

from __future__ import annotations

from enum import Enum
from typing import Any

import structlog

from forgez.config.app_config import load_app_config
from forgez.core.errors import NotFoundError, PermissionDeniedError, ValidationError
from forgez.db import teams_repository
from forgez.db.teams_repository import TeamMemberRecord, TeamRecord
from forgez.utils.validators import clamp, null_fields

logger = structlog.get_logger(__name__)


class TeamRole(str, Enum):
    LEADER = "LEADER"
    MEMBER = "MEMBER"
    ADVISOR = "ADVISOR"
    PENDING = "PENDING"


class MemberAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    REMOVE = "remove"
    UPDATE = "update"


ASSIGNABLE_ROLES = (TeamRole.MEMBER.value, TeamRole.ADVISOR.value)


def team_view(team: TeamRecord, viewer_id: str | None) -> dict[str, Any]:
    data = team.to_dict()
    data["is_member"] = viewer_id is not None and team.get_member(viewer_id) is not None
    return data


def create_team(user_id: str, data: dict[str, Any]) -> TeamRecord:
    """Create a team led by user_id.

    max_members is clamped to the configured range.

    Raises:
        ValidationError: Missing name
    """
    config = load_app_config().teams

    name = (data.get("name") or "").strip()
    if not name:
        raise ValidationError("Team name is required", field="name")

    max_members = data.get("max_members") or config.default_max_members
    max_members = clamp(max_members, config.min_members, config.max_members)

    is_public = data.get("is_public")
    team = teams_repository.insert_team(
        name=name,
        created_by=user_id,
        description=data.get("description"),
        purpose=data.get("purpose"),
        max_members=max_members,
        skill_requirements=data.get("skill_requirements") or [],
        is_public=True if is_public is None else bool(is_public),
    )
    logger.info("teams.created", team_id=team.id, user_id=user_id)
    return team


def list_teams(
    user_id: str | None,
    mine: bool = False,
    search: str | None = None,
    skill: str | None = None,
    limit: int = 20,
    offset: int = 0,
) -> list[TeamRecord]:
    if mine and user_id is None:
        return []
    return teams_repository.list_teams(
        public_only=True,
        member_id=user_id if mine else None,
        search=search,
        skill=skill,
        limit=limit,
        offset=offset,
    )


def _get_team(team_id: str) -> TeamRecord:
    team = teams_repository.get_team(team_id)
    if team is None:
        raise NotFoundError("Team", team_id)
    return team


def get_team_for_viewer(team_id: str, viewer_id: str | None) -> TeamRecord:
    """Raises PermissionDeniedError for private teams the viewer is not in."""
    team = _get_team(team_id)
    if not team.is_public and (viewer_id is None or team.get_member(viewer_id) is None):
        raise PermissionDeniedError("This team is private")
    return team


def _created_team(user_id: str, team_id: str) -> TeamRecord:
    team = _get_team(team_id)
    if team.created_by != user_id:
        raise PermissionDeniedError("Only the team creator can modify this team")
    return team


def update_team(user_id: str, team_id: str, updates: dict[str, Any]) -> TeamRecord:
    _created_team(user_id, team_id)

    config = load_app_config().teams
    fields = dict(updates)
    nulls = null_fields(fields, teams_repository.NOT_NULL_FIELDS - {"name"})
    if nulls:
        raise ValidationError(f"{nulls[0]} cannot be null", field=nulls[0])
    if "name" in fields:
        fields["name"] = (fields["name"] or "").strip()
        if not fields["name"]:
            raise ValidationError("Team name cannot be empty", field="name")
    if fields.get("max_members") is not None:
        fields["max_members"] = clamp(fields["max_members"], config.min_members, config.max_members)

    return teams_repository.update_team(team_id, fields)


def delete_team(user_id: str, team_id: str) -> None:
    _created_team(user_id, team_id)
    teams_repository.delete_team(team_id)
    logger.info("teams.deleted", team_id=team_id)


# =============================================================================
# MEMBERSHIP
# =============================================================================


def request_join(user_id: str, team_id: str) -> TeamMemberRecord:
    """Ask to join a team. The membership starts as PENDING.

    Raises:
        NotFoundError: Team does not exist
        ValidationError: Team inactive, already a member, or full
        PermissionDeniedError: Team is private
    """
    team = _get_team(team_id)
    if not team.is_active:
        raise ValidationError("This team is no longer active")
    if not team.is_public:
        raise PermissionDeniedError("This team is private")
    if team.get_member(user_id) is not None:
        raise ValidationError("You are already a member of this team")
    if team.is_full:
        raise ValidationError("This team is full")

    member = teams_repository.add_member(team_id, user_id, role=TeamRole.PENDING.value)
    logger.info("teams.join_requested", team_id=team_id, user_id=user_id)
    return member


def leave_team(user_id: str, team_id: str) -> None:
    team = _get_team(team_id)
    if team.created_by == user_id:
        raise ValidationError("Team creator cannot leave. Delete the team instead.")
    if team.get_member(user_id) is None:
        raise NotFoundError("Team membership")
    teams_repository.remove_member(team_id, user_id)
    logger.info("teams.left", team_id=team_id, user_id=user_id)


def manage_member(
    leader_id: str,
    team_id: str,
    member_user_id: str | None,
    action: str | None,
    role: str | None = None,
    contribution_area: str | None = None,
) -> str:
    """Apply a leader action to a member.

    Returns:
        The action performed

    Raises:
        ValidationError: Bad input, self-modification, or a rule violation
        PermissionDeniedError: Caller is not the team leader
        NotFoundError: Team or member does not exist
    """
    if not member_user_id or not action:
        raise ValidationError("user_id and action are required")

    team = _get_team(team_id)
    leader = team.get_member(leader_id)
    if leader is None or leader.role != TeamRole.LEADER.value:
        raise PermissionDeniedError("Only the team leader can manage members")
    if member_user_id == leader_id:
        raise ValidationError("You cannot modify your own membership")

    member = team.get_member(member_user_id)
    if member is None:
        raise NotFoundError("Team member", member_user_id)

    if action == MemberAction.APPROVE.value:
        if member.role != TeamRole.PENDING.value:
            raise ValidationError("Member is not pending approval")
        if team.is_full:
            raise ValidationError("This team is full")
        teams_repository.update_member(team_id, member_user_id, role=TeamRole.MEMBER.value)
    elif action in (MemberAction.REJECT.value, MemberAction.REMOVE.value):
        teams_repository.remove_member(team_id, member_user_id)
    elif action == MemberAction.UPDATE.value:
        if role is not None and role not in ASSIGNABLE_ROLES:
            raise ValidationError("Role must be MEMBER or ADVISOR", field="role")
        teams_repository.update_member(
            team_id, member_user_id, role=role, contribution_area=contribution_area
        )
    else:
        raise ValidationError(f"Invalid action '{action}'", field="action")

    logger.info("teams.member_updated", team_id=team_id, user_id=member_user_id, action=action)
    return action
