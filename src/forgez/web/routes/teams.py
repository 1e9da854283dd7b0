"""Team (guild) endpoints."""

from typing import Any

from fastapi import APIRouter, Depends, status

from forgez.config.app_config import load_app_config
from forgez.core import team_matching
from forgez.core import teams as teams_service
from forgez.core.achievements import AchievementTrigger
from forgez.db import skills_repository, teams_repository, users_repository
from forgez.utils.validators import clamp_limit
from forgez.web.deps import get_current_user_id, get_optional_user_id
from forgez.web.progression import get_progression_manager
from forgez.web.schemas import MemberActionRequest, TeamCreate, TeamUpdate

router = APIRouter(prefix="/api/teams", tags=["teams"])


@router.get("")
async def list_teams(
    my: bool = False,
    search: str | None = None,
    skill: str | None = None,
    limit: int | None = None,
    offset: int = 0,
    user_id: str | None = Depends(get_optional_user_id),
) -> dict[str, Any]:
    """List public teams, or the caller's teams with my=true."""
    pagination = load_app_config().pagination
    teams = teams_service.list_teams(
        user_id,
        mine=my,
        search=search,
        skill=skill,
        limit=clamp_limit(limit, pagination.default_limit, pagination.max_limit),
        offset=max(offset, 0),
    )
    return {
        "teams": [teams_service.team_view(t, user_id) for t in teams],
        "count": len(teams),
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_team(
    body: TeamCreate, user_id: str = Depends(get_current_user_id)
) -> dict[str, Any]:
    """Create a team led by the caller."""
    team = teams_service.create_team(user_id, body.model_dump())

    async with get_progression_manager().update(user_id) as progress:
        outcome = progress.record_event(AchievementTrigger.GUILD_JOIN, {"sourceId": team.id})

    return {"team": teams_service.team_view(team, user_id), "progression": outcome.to_dict()}


@router.get("/match")
async def match_teams(
    limit: int = team_matching.DEFAULT_MATCH_LIMIT,
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    """Rank open teams against the caller's skills and interests."""
    skill_names = [
        s.skill.name for s in skills_repository.list_user_skills(user_id) if s.skill is not None
    ]
    archetype = users_repository.get_archetype(user_id)
    domain = archetype.domain_interest if archetype else None

    matches = team_matching.match_teams(
        teams_repository.list_candidate_teams(user_id),
        skill_names,
        domain,
        limit=max(limit, 1),
    )
    result: dict[str, Any] = {
        "teams": [m.to_dict() for m in matches],
        "count": len(matches),
    }
    if not skill_names:
        result["message"] = team_matching.NO_SKILLS_HINT
    return result


@router.get("/{team_id}")
async def get_team(
    team_id: str, user_id: str | None = Depends(get_optional_user_id)
) -> dict[str, Any]:
    team = teams_service.get_team_for_viewer(team_id, user_id)
    return {"team": teams_service.team_view(team, user_id)}


@router.put("/{team_id}")
async def update_team(
    team_id: str, body: TeamUpdate, user_id: str = Depends(get_current_user_id)
) -> dict[str, Any]:
    team = teams_service.update_team(user_id, team_id, body.model_dump(exclude_unset=True))
    return {"team": teams_service.team_view(team, user_id)}


@router.delete("/{team_id}")
async def delete_team(team_id: str, user_id: str = Depends(get_current_user_id)) -> dict[str, bool]:
    teams_service.delete_team(user_id, team_id)
    return {"success": True}


# =============================================================================
# MEMBERSHIP
# =============================================================================


@router.post("/{team_id}/join", status_code=status.HTTP_201_CREATED)
async def join_team(team_id: str, user_id: str = Depends(get_current_user_id)) -> dict[str, Any]:
    """Request to join a team."""
    member = teams_service.request_join(user_id, team_id)
    return {"status": "pending_approval", "member": member.to_dict()}


@router.delete("/{team_id}/join")
async def leave_team(team_id: str, user_id: str = Depends(get_current_user_id)) -> dict[str, str]:
    teams_service.leave_team(user_id, team_id)
    return {"status": "left"}


@router.put("/{team_id}/members")
async def manage_member(
    team_id: str,
    body: MemberActionRequest,
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    """Approve, reject, remove or update a member (leader only)."""
    action = teams_service.manage_member(
        user_id,
        team_id,
        body.user_id,
        body.action,
        role=body.role,
        contribution_area=body.contribution_area,
    )

    if action == teams_service.MemberAction.APPROVE.value:
        async with get_progression_manager().update(body.user_id) as progress:
            progress.record_event(AchievementTrigger.GUILD_JOIN, {"sourceId": team_id})

    team = teams_repository.get_team(team_id)
    return {"status": action, "team": teams_service.team_view(team, user_id)}
