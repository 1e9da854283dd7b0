"""XP and progression endpoints."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from forgez.core.leveling import xp_to_next_level
from forgez.core.progression import PlayerProgress
from forgez.web.deps import get_current_user_id
from forgez.web.progression import get_progression_manager
from forgez.web.schemas import TriggerRequest, XPAwardRequest

router = APIRouter(prefix="/api/progress", tags=["progress"])

RECENT_TRANSACTIONS = 10


def _snapshot(progress: PlayerProgress) -> dict[str, Any]:
    ledger = progress.xp
    pending_unlock = progress.achievements.pending_unlock
    return {
        "user_id": progress.user_id,
        "total_xp": ledger.total_xp,
        "level": ledger.level,
        "level_progress": xp_to_next_level(ledger.total_xp).to_dict(),
        "recent_xp_gain": ledger.recent_xp_gain,
        "pending_level_up": ledger.pending_level_up,
        "recent_transactions": [
            t.to_dict() for t in ledger.recent_transactions(RECENT_TRANSACTIONS)
        ],
        "quests": progress.quests.to_list(),
        "current_quest": progress.quests.current_quest,
        "pending_quest_complete": progress.quests.pending_quest_complete,
        "achievements_unlocked": progress.achievements.unlocked_count(),
        "pending_unlock": pending_unlock.to_dict() if pending_unlock else None,
    }


@router.get("")
async def get_progress(user_id: str = Depends(get_current_user_id)) -> dict[str, Any]:
    """Get the caller's full progression state."""
    progress = await get_progression_manager().get(user_id)
    return _snapshot(progress)


@router.post("/xp")
async def award_xp(
    body: XPAwardRequest, user_id: str = Depends(get_current_user_id)
) -> dict[str, Any]:
    """Credit XP from a client-side source."""
    if body.amount is None or not body.source:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="amount and source are required",
        )

    async with get_progression_manager().update(user_id) as progress:
        outcome = progress.award_xp(
            body.amount, body.source, source_id=body.source_id, description=body.description
        )
    return outcome.to_dict()


@router.post("/events")
async def record_event(
    body: TriggerRequest, user_id: str = Depends(get_current_user_id)
) -> dict[str, Any]:
    """Record a client-side event such as a quiz answer or deep dive."""
    if not body.trigger:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="trigger is required",
        )

    async with get_progression_manager().update(user_id) as progress:
        outcome = progress.record_event(body.trigger, body.data)
    return outcome.to_dict()


@router.post("/acknowledge/level-up")
async def acknowledge_level_up(user_id: str = Depends(get_current_user_id)) -> dict[str, Any]:
    async with get_progression_manager().update(user_id) as progress:
        progress.xp.acknowledge_level_up()
    return {"pending_level_up": None, "level": progress.xp.level}


@router.post("/acknowledge/xp")
async def acknowledge_xp(user_id: str = Depends(get_current_user_id)) -> dict[str, Any]:
    async with get_progression_manager().update(user_id) as progress:
        progress.xp.clear_recent_xp()
    return {"recent_xp_gain": None, "total_xp": progress.xp.total_xp}
