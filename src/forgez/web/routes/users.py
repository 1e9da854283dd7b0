"""User profile, onboarding, archetype and preference endpoints."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from forgez.config.archetypes import get_archetype
from forgez.core import users as users_service
from forgez.core.achievements import AchievementTrigger
from forgez.db import users_repository
from forgez.web.deps import get_current_user_id
from forgez.web.progression import get_progression_manager
from forgez.web.schemas import (
    ArchetypeRequest,
    OnboardingRequest,
    PreferencesUpdate,
    ProfileUpdate,
)

router = APIRouter(prefix="/api/user", tags=["user"])


@router.get("")
async def get_profile(user_id: str = Depends(get_current_user_id)) -> dict[str, Any]:
    """Get the caller's profile, creating it on first access."""
    user = users_repository.ensure_user(user_id)
    progress = await get_progression_manager().get(user_id)
    return {
        "user": user.to_dict(),
        "profile_complete": users_service.is_profile_complete(user),
        "early_adopter": users_service.early_adopter_flag(user),
        "progression": progress.summary(),
    }


@router.patch("")
async def update_profile(
    body: ProfileUpdate, user_id: str = Depends(get_current_user_id)
) -> dict[str, Any]:
    """Update whitelisted profile fields."""
    user = users_service.update_profile(user_id, body.model_dump(exclude_unset=True))

    achievements = None
    if users_service.is_profile_complete(user):
        async with get_progression_manager().update(user_id) as progress:
            achievements = progress.trigger(AchievementTrigger.PROFILE_COMPLETE).to_dict()

    return {"user": user.to_dict(), "achievements": achievements}


@router.post("/onboarding")
async def complete_onboarding(
    body: OnboardingRequest, user_id: str = Depends(get_current_user_id)
) -> dict[str, Any]:
    """Store onboarding data and record the first login."""
    user = users_service.complete_onboarding(
        user_id,
        first_name=body.first_name,
        last_name=body.last_name,
        birthday=body.birthday,
        phone_number=body.phone_number,
        phone_country_code=body.phone_country_code,
        marketing_agreed=body.marketing_agreed,
        email=body.email,
    )

    early_adopter = users_service.early_adopter_flag(user)
    async with get_progression_manager().update(user_id) as progress:
        outcome = progress.trigger(AchievementTrigger.LOGIN, {"earlyAdopter": early_adopter})

    return {
        "user": user.to_dict(),
        "early_adopter": early_adopter,
        "achievements": outcome.to_dict(),
    }


# =============================================================================
# ARCHETYPE
# =============================================================================


@router.get("/archetype")
async def get_user_archetype(user_id: str = Depends(get_current_user_id)) -> dict[str, Any]:
    """Get the caller's archetype quiz result."""
    record = users_repository.get_archetype(user_id)
    if record is None:
        return {"archetype": None}

    archetype = get_archetype(record.archetype)
    return {
        **record.to_dict(),
        "details": archetype.to_dict() if archetype else None,
    }


@router.post("/archetype")
async def save_user_archetype(
    body: ArchetypeRequest, user_id: str = Depends(get_current_user_id)
) -> dict[str, Any]:
    """Store the archetype quiz result and complete the first quest."""
    record = users_service.record_archetype(
        user_id,
        archetype=body.archetype,
        game_preference=body.game_preference,
        domain_interest=body.domain_interest,
        focus_area=body.focus_area,
    )

    async with get_progression_manager().update(user_id) as progress:
        outcome = progress.complete_archetype(record.archetype)

    return {"archetype": record.to_dict(), "progression": outcome.to_dict()}


# =============================================================================
# PREFERENCES
# =============================================================================


@router.get("/preferences")
async def get_preferences(user_id: str = Depends(get_current_user_id)) -> dict[str, str]:
    user = users_repository.ensure_user(user_id)
    return users_service.get_preferences(user)


@router.put("/preferences")
async def update_preferences(
    body: PreferencesUpdate, user_id: str = Depends(get_current_user_id)
) -> dict[str, str]:
    """Update locale. Any world other than forgez is rejected."""
    if body.world is not None and body.world != users_service.DEFAULT_WORLD:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported world '{body.world}'",
        )
    user = users_service.update_preferences(user_id, locale=body.locale)
    return users_service.get_preferences(user)
