"""Achievement endpoints."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, status

from forgez.core.achievements import (
    ACHIEVEMENTS,
    CATEGORY_LABELS,
    AchievementCategory,
    AchievementRarity,
)
from forgez.web.deps import get_current_user_id
from forgez.web.progression import get_progression_manager
from forgez.web.schemas import TriggerRequest

router = APIRouter(prefix="/api/achievements", tags=["achievements"])


def _parse_filter(enum_cls, value: str | None, name: str):
    if value is None:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {name} '{value}'",
        )


@router.get("")
async def list_achievements(
    category: str | None = None,
    rarity: str | None = None,
    include_secret: bool = False,
) -> dict[str, Any]:
    """List achievement definitions."""
    category_filter = _parse_filter(AchievementCategory, category, "category")
    rarity_filter = _parse_filter(AchievementRarity, rarity, "rarity")

    items = [
        a.to_dict()
        for a in ACHIEVEMENTS
        if (category_filter is None or a.category == category_filter)
        and (rarity_filter is None or a.rarity == rarity_filter)
        and (include_secret or not a.is_secret)
    ]
    return {
        "achievements": items,
        "count": len(items),
        "categories": {c.value: label for c, label in CATEGORY_LABELS.items()},
    }


@router.get("/user")
async def list_user_achievements(
    include_secret: bool = Query(default=False),
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    """List achievements with the caller's unlock status and stats."""
    progress = await get_progression_manager().get(user_id)
    tracker = progress.achievements

    total = len(ACHIEVEMENTS)
    unlocked = tracker.unlocked_count()
    pending = tracker.pending_unlock
    return {
        "achievements": tracker.with_status(include_secret=include_secret),
        "stats": {
            "total": total,
            "unlocked": unlocked,
            "percentage": round(unlocked / total * 100) if total else 0,
            "totalXP": tracker.achievement_xp(),
            "byCategory": tracker.category_counts(),
            "byRarity": tracker.rarity_counts(),
        },
        "pending_unlock": pending.to_dict() if pending else None,
    }


@router.post("/check")
async def check_achievements(
    body: TriggerRequest, user_id: str = Depends(get_current_user_id)
) -> dict[str, Any]:
    """Evaluate a trigger and return new unlocks and progress updates."""
    if not body.trigger:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="trigger is required",
        )

    async with get_progression_manager().update(user_id) as progress:
        outcome = progress.trigger(body.trigger, body.data)
    return outcome.to_dict()


@router.post("/acknowledge")
async def acknowledge_achievement(user_id: str = Depends(get_current_user_id)) -> dict[str, Any]:
    """Dismiss the current unlock notice and surface the next one."""
    async with get_progression_manager().update(user_id) as progress:
        next_unlock = progress.achievements.acknowledge_unlock()
    return {
        "pending_unlock": next_unlock.to_dict() if next_unlock else None,
        "queued": len(progress.achievements.unlock_queue),
    }
