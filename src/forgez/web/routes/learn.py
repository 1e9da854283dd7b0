"""Learning recommendation endpoints."""

from typing import Any

from fastapi import APIRouter, Depends

from forgez.config.app_config import load_app_config
from forgez.core import recommendations
from forgez.core.achievements import AchievementTrigger
from forgez.core.progression import ProgressOutcome
from forgez.utils.validators import clamp_limit
from forgez.web.deps import get_current_user_id, get_optional_user_id
from forgez.web.progression import get_progression_manager
from forgez.web.schemas import LearningProgressRequest

router = APIRouter(prefix="/api/learn", tags=["learn"])


@router.get("/recommendations")
async def get_recommendations(
    industry: str | None = None,
    level: str | None = None,
    featured: bool = False,
    limit: int | None = None,
    offset: int = 0,
    user_id: str | None = Depends(get_optional_user_id),
) -> dict[str, Any]:
    """Recommend learning resources, personalized when the caller is known."""
    pagination = load_app_config().pagination
    return recommendations.recommend(
        user_id,
        industry=industry,
        level=level,
        featured=featured,
        limit=clamp_limit(limit, pagination.default_limit, pagination.max_limit),
        offset=max(offset, 0),
    )


@router.post("/{resource_id}/progress")
async def update_learning_progress(
    resource_id: str,
    body: LearningProgressRequest,
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    """Start or complete a learning resource."""
    record, changed = recommendations.set_learning_progress(user_id, resource_id, body.status)

    outcome: ProgressOutcome | None = None
    if changed:
        async with get_progression_manager().update(user_id) as progress:
            if record.status == recommendations.LearningStatus.IN_PROGRESS.value:
                outcome = progress.record_event(
                    AchievementTrigger.COURSE_START, {"sourceId": resource_id}
                )
            else:
                outcome = progress.trigger(
                    AchievementTrigger.COURSE_COMPLETE, {"sourceId": resource_id}
                )

    return {
        "progress": record.to_dict(),
        "progression": outcome.to_dict() if outcome else None,
    }
