"""User profile, onboarding and preference rules."""

from __future__ import annotations

from datetime import date
from typing import Any

import structlog

from forgez.config.app_config import is_early_adopter
from forgez.config.archetypes import (
    DOMAIN_INTERESTS,
    FOCUS_AREAS,
    GAME_PREFERENCES,
    get_archetype,
)
from forgez.core.errors import ValidationError
from forgez.db import users_repository
from forgez.db.users_repository import ArchetypeRecord, UserRecord
from forgez.utils.validators import (
    DEFAULT_LOCALE,
    calculate_age,
    is_supported_locale,
    null_fields,
    parse_iso_date,
    utc_now,
    validate_email,
)

logger = structlog.get_logger(__name__)

MINIMUM_AGE = 13
DEFAULT_WORLD = "forgez"

PROFILE_VISIBILITY = ("public", "private", "connections")

EDITABLE_PROFILE_FIELDS = {
    "username",
    "first_name",
    "last_name",
    "headline",
    "bio",
    "location",
    "linkedin_url",
    "github_url",
    "portfolio_url",
    "current_role",
    "current_company",
    "years_experience",
    "is_open_to_work",
    "job_search_status",
    "profile_visibility",
    "show_skills_publicly",
    "show_projects_publicly",
    "timezone",
    "dark_mode",
    "avatar_url",
}

PROFILE_COMPLETE_FIELDS = ("first_name", "last_name", "headline", "bio")


def update_profile(user_id: str, updates: dict[str, Any]) -> UserRecord:
    """Apply a profile PATCH.

    Args:
        user_id: Authenticated user
        updates: Raw fields from the request; unknown keys are ignored

    Raises:
        ValidationError: Nothing to update or invalid values
    """
    fields = {k: v for k, v in updates.items() if k in EDITABLE_PROFILE_FIELDS}
    if not fields:
        raise ValidationError("No valid fields to update")

    nulls = null_fields(fields, users_repository.NOT_NULL_FIELDS)
    if nulls:
        raise ValidationError(f"{nulls[0]} cannot be null", field=nulls[0])

    visibility = fields.get("profile_visibility")
    if visibility is not None and visibility not in PROFILE_VISIBILITY:
        raise ValidationError(
            f"profile_visibility must be one of: {', '.join(PROFILE_VISIBILITY)}",
            field="profile_visibility",
        )

    years = fields.get("years_experience")
    if years is not None and years < 0:
        raise ValidationError("years_experience cannot be negative", field="years_experience")

    users_repository.ensure_user(user_id)
    return users_repository.update_user(user_id, fields)


def is_profile_complete(user: UserRecord) -> bool:
    return all(getattr(user, name) for name in PROFILE_COMPLETE_FIELDS)


def complete_onboarding(
    user_id: str,
    first_name: str | None,
    last_name: str | None,
    birthday: str | None,
    phone_number: str | None = None,
    phone_country_code: str | None = None,
    marketing_agreed: bool = False,
    email: str | None = None,
    today: date | None = None,
) -> UserRecord:
    """Validate and store onboarding data.

    Raises:
        ValidationError: Missing required fields, invalid birthday, under
            the minimum age, or invalid email
    """
    first_name = (first_name or "").strip()
    last_name = (last_name or "").strip()
    if not first_name or not last_name or not birthday:
        raise ValidationError("First name, last name, and birthday are required")

    try:
        birth_date = parse_iso_date(birthday)
    except ValueError:
        raise ValidationError("Invalid birthday format", field="birthday")

    if calculate_age(birth_date, today) < MINIMUM_AGE:
        raise ValidationError(
            f"You must be at least {MINIMUM_AGE} years old to use FORGE-Z",
            field="birthday",
        )

    if email is not None and not validate_email(email):
        raise ValidationError("Invalid email format", field="email")

    now = utc_now()
    fields: dict[str, Any] = {
        "first_name": first_name,
        "last_name": last_name,
        "birthday": birth_date.isoformat(),
        "phone_number": phone_number or None,
        "phone_country_code": phone_country_code or None,
        "onboarding_completed": True,
        "privacy_policy_agreed_at": now,
        "tos_agreed_at": now,
        "marketing_agreed_at": now if marketing_agreed else None,
    }
    if email is not None:
        fields["email"] = email.strip()

    users_repository.ensure_user(user_id)
    user = users_repository.update_user(user_id, fields)
    logger.info("users.onboarding_completed", user_id=user_id)
    return user


def early_adopter_flag(user: UserRecord) -> bool:
    return is_early_adopter(user.id, user.created_at)


# =============================================================================
# PREFERENCES
# =============================================================================


def get_preferences(user: UserRecord) -> dict[str, str]:
    return {"locale": user.locale or DEFAULT_LOCALE, "world": DEFAULT_WORLD}


def update_preferences(user_id: str, locale: str | None = None) -> UserRecord:
    """Update locale. The world is fixed to forgez.

    Raises:
        ValidationError: Unsupported locale
    """
    fields: dict[str, Any] = {"world": DEFAULT_WORLD}
    if locale is not None:
        if not is_supported_locale(locale):
            raise ValidationError(f"Unsupported locale '{locale}'", field="locale")
        fields["locale"] = locale

    users_repository.ensure_user(user_id)
    return users_repository.update_user(user_id, fields)


# =============================================================================
# ARCHETYPE QUIZ
# =============================================================================


def record_archetype(
    user_id: str,
    archetype: str | None,
    game_preference: str | None,
    domain_interest: str | None,
    focus_area: str | None,
) -> ArchetypeRecord:
    """Store the archetype quiz result.

    Raises:
        ValidationError: Missing answers or values outside the catalog
    """
    if not archetype or not game_preference or not domain_interest or not focus_area:
        raise ValidationError(
            "archetype, game_preference, domain_interest and focus_area are required"
        )

    if get_archetype(archetype) is None:
        raise ValidationError(f"Invalid archetype '{archetype}'", field="archetype")
    if game_preference not in GAME_PREFERENCES:
        raise ValidationError(f"Invalid game_preference '{game_preference}'", field="game_preference")
    if domain_interest not in DOMAIN_INTERESTS:
        raise ValidationError(f"Invalid domain_interest '{domain_interest}'", field="domain_interest")
    if focus_area not in FOCUS_AREAS:
        raise ValidationError(f"Invalid focus_area '{focus_area}'", field="focus_area")

    users_repository.ensure_user(user_id)
    record = users_repository.upsert_archetype(
        user_id, archetype, game_preference, domain_interest, focus_area
    )
    logger.info("users.archetype_recorded", user_id=user_id, archetype=archetype)
    return record
