"""Quest endpoints."""

from typing import Any

from fastapi import APIRouter, Body, Depends

from forgez.core.progression import PlayerProgress
from forgez.web.deps import get_current_user_id
from forgez.web.progression import get_progression_manager
from forgez.web.schemas import QuestCompleteRequest

router = APIRouter(prefix="/api/quests", tags=["quests"])


def _quest_state(progress: PlayerProgress) -> dict[str, Any]:
    log = progress.quests
    return {
        "quests": log.to_list(),
        "current_quest": log.current_quest,
        "completed_count": log.completed_count(),
        "total_quest_xp": log.total_quest_xp(),
        "pending_quest_complete": log.pending_quest_complete,
    }


@router.get("")
async def list_quests(user_id: str = Depends(get_current_user_id)) -> dict[str, Any]:
    """List all quests with the caller's progress."""
    progress = await get_progression_manager().get(user_id)
    return _quest_state(progress)


@router.post("/acknowledge")
async def acknowledge_quest_complete(
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    """Dismiss the quest completion notice."""
    async with get_progression_manager().update(user_id) as progress:
        progress.quests.acknowledge_complete()
    return _quest_state(progress)


@router.post("/{quest_number}/start")
async def start_quest(
    quest_number: int, user_id: str = Depends(get_current_user_id)
) -> dict[str, Any]:
    """Mark a quest as in progress."""
    async with get_progression_manager().update(user_id) as progress:
        progress.start_quest(quest_number)
    return _quest_state(progress)


@router.post("/{quest_number}/complete")
async def complete_quest(
    quest_number: int,
    body: QuestCompleteRequest | None = Body(default=None),
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    """Complete a quest and credit its XP."""
    xp_override = body.xp if body is not None else None
    async with get_progression_manager().update(user_id) as progress:
        outcome = progress.complete_quest(quest_number, xp_override)
    return {**_quest_state(progress), "progression": outcome.to_dict()}
