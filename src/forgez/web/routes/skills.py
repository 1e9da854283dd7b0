"""Skills bank endpoints: taxonomy, user skills and endorsements."""

from typing import Any

from fastapi import APIRouter, Depends, Query, status

from forgez.core import skills as skills_service
from forgez.core.achievements import AchievementTrigger
from forgez.db import skills_repository
from forgez.utils.validators import clamp_limit
from forgez.web.deps import get_current_user_id
from forgez.web.progression import get_progression_manager
from forgez.web.schemas import EndorsementCreate, UserSkillCreate, UserSkillUpdate

router = APIRouter(prefix="/api/skills", tags=["skills"])

TAXONOMY_DEFAULT_LIMIT = 50
TAXONOMY_MAX_LIMIT = 100


@router.get("/taxonomy")
async def search_taxonomy(
    search: str | None = None,
    framework: str | None = None,
    category: str | None = None,
    parent_id: str | None = Query(default=None, alias="parentId"),
    limit: int | None = None,
    offset: int = Query(default=0, ge=0),
) -> dict[str, Any]:
    """Search the skills taxonomy."""
    limit = clamp_limit(limit, TAXONOMY_DEFAULT_LIMIT, TAXONOMY_MAX_LIMIT)
    skills, total = skills_service.search_taxonomy(
        search=search,
        framework=framework,
        category=category,
        parent_skill_id=parent_id,
        limit=limit,
        offset=offset,
    )
    return {
        "skills": [s.to_dict() for s in skills],
        "total": total,
        "limit": limit,
        "offset": offset,
    }


@router.get("/user")
async def list_user_skills(
    owner_id: str | None = Query(default=None, alias="userId"),
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    """List the caller's skills, or another user's public skills."""
    skills = skills_service.list_skills_for_viewer(owner_id or user_id, user_id)
    return {"skills": [s.to_dict() for s in skills], "count": len(skills)}


@router.post("/user", status_code=status.HTTP_201_CREATED)
async def add_user_skill(
    body: UserSkillCreate, user_id: str = Depends(get_current_user_id)
) -> dict[str, Any]:
    """Add a taxonomy skill to the caller's profile."""
    record = skills_service.add_user_skill(
        user_id,
        body.skill_id,
        proficiency_level=body.proficiency_level,
        years_experience=body.years_experience,
        last_used_date=body.last_used_date,
        is_primary=body.is_primary,
        notes=body.notes,
    )

    skill_count = skills_repository.count_user_skills(user_id)
    async with get_progression_manager().update(user_id) as progress:
        outcome = progress.trigger(AchievementTrigger.SKILL_ADD, {"skillCount": skill_count})

    return {"skill": record.to_dict(), "achievements": outcome.to_dict()}


@router.put("/user/{user_skill_id}")
async def update_user_skill(
    user_skill_id: str,
    body: UserSkillUpdate,
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    record = skills_service.update_user_skill(
        user_id, user_skill_id, body.model_dump(exclude_unset=True)
    )
    return {"skill": record.to_dict()}


@router.delete("/user/{user_skill_id}")
async def remove_user_skill(
    user_skill_id: str, user_id: str = Depends(get_current_user_id)
) -> dict[str, bool]:
    skills_service.remove_user_skill(user_id, user_skill_id)
    return {"success": True}


@router.get("/summary")
async def skills_summary(user_id: str = Depends(get_current_user_id)) -> dict[str, Any]:
    """Aggregate stats over the caller's skills."""
    return skills_service.skills_summary(skills_repository.list_user_skills(user_id))


# =============================================================================
# ENDORSEMENTS
# =============================================================================


@router.post("/endorsements", status_code=status.HTTP_201_CREATED)
async def endorse_skill(
    body: EndorsementCreate, user_id: str = Depends(get_current_user_id)
) -> dict[str, Any]:
    """Endorse another user's skill."""
    endorsement, record = skills_service.endorse_skill(
        user_id,
        body.user_skill_id,
        relationship=body.relationship,
        endorsement_text=body.endorsement_text,
    )

    async with get_progression_manager().update(user_id) as progress:
        outcome = progress.record_event(
            AchievementTrigger.FEEDBACK_GIVE, {"sourceId": endorsement.id}
        )

    return {
        "endorsement": endorsement.to_dict(),
        "skill": record.to_dict(),
        "progression": outcome.to_dict(),
    }


@router.delete("/endorsements/{endorsement_id}")
async def remove_endorsement(
    endorsement_id: str, user_id: str = Depends(get_current_user_id)
) -> dict[str, bool]:
    skills_service.remove_endorsement(user_id, endorsement_id)
    return {"success": True}
