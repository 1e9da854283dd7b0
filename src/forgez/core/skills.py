"""Skills bank: taxonomy lookup, user skills, endorsements and summary stats."""

from __future__ import annotations

from collections import Counter
from enum import Enum
from typing import Any

import structlog

from forgez.core.errors import NotFoundError, PermissionDeniedError, ValidationError
from forgez.db import skills_repository, users_repository
from forgez.db.skills_repository import EndorsementRecord, TaxonomySkill, UserSkillRecord
from forgez.utils.validators import null_fields

logger = structlog.get_logger(__name__)

ENDORSEMENTS_FOR_PEER_VERIFIED = 3
MIN_PROFICIENCY = 1
MAX_PROFICIENCY = 5

OWNER_EDITABLE_FIELDS = {
    "proficiency_level",
    "years_experience",
    "last_used_date",
    "is_primary",
    "notes",
}


class SkillFramework(str, Enum):
    ESCO = "ESCO"
    SFIA = "SFIA"
    ONET = "ONET"
    FORGEZ = "FORGEZ"
    CUSTOM = "CUSTOM"


class SkillCategory(str, Enum):
    KNOWLEDGE = "KNOWLEDGE"
    SKILL = "SKILL"
    COMPETENCE = "COMPETENCE"
    TRANSVERSAL = "TRANSVERSAL"
    LANGUAGE = "LANGUAGE"


class VerificationLevel(str, Enum):
    SELF_ASSESSED = "SELF_ASSESSED"
    PEER_ENDORSED = "PEER_ENDORSED"
    PROJECT_VERIFIED = "PROJECT_VERIFIED"
    AI_ANALYZED = "AI_ANALYZED"
    ASSESSMENT_PASSED = "ASSESSMENT_PASSED"
    CERTIFICATION_VERIFIED = "CERTIFICATION_VERIFIED"


def _check_enum(enum_cls: type[Enum], value: str | None, field: str) -> None:
    if value is None:
        return
    try:
        enum_cls(value)
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise ValidationError(f"Invalid {field} '{value}'. Allowed: {allowed}", field=field)


def _check_proficiency(value: int | None) -> None:
    if value is not None and not MIN_PROFICIENCY <= value <= MAX_PROFICIENCY:
        raise ValidationError(
            f"proficiency_level must be between {MIN_PROFICIENCY} and {MAX_PROFICIENCY}",
            field="proficiency_level",
        )


# =============================================================================
# TAXONOMY
# =============================================================================


def search_taxonomy(
    search: str | None = None,
    framework: str | None = None,
    category: str | None = None,
    parent_skill_id: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> tuple[list[TaxonomySkill], int]:
    _check_enum(SkillFramework, framework, "framework")
    _check_enum(SkillCategory, category, "category")
    return skills_repository.search_taxonomy(
        search=search,
        framework=framework,
        category=category,
        parent_skill_id=parent_skill_id,
        limit=limit,
        offset=offset,
    )


# =============================================================================
# USER SKILLS
# =============================================================================


def list_skills_for_viewer(owner_id: str, viewer_id: str) -> list[UserSkillRecord]:
    """List a user's skills as seen by viewer_id.

    Raises:
        PermissionDeniedError: Another user's skills are not public
    """
    if owner_id != viewer_id:
        owner = users_repository.get_user(owner_id)
        if owner is None or not owner.show_skills_publicly or owner.profile_visibility != "public":
            raise PermissionDeniedError("This user's skills are not public")
    return skills_repository.list_user_skills(owner_id)


def add_user_skill(
    user_id: str,
    skill_id: str | None,
    proficiency_level: int | None = None,
    years_experience: float | None = None,
    last_used_date: str | None = None,
    is_primary: bool = False,
    notes: str | None = None,
) -> UserSkillRecord:
    """Add a taxonomy skill to a user's profile.

    Raises:
        ValidationError: Missing skill_id, bad proficiency or duplicate
        NotFoundError: Skill is not in the taxonomy
    """
    if not skill_id:
        raise ValidationError("skill_id is required", field="skill_id")
    _check_proficiency(proficiency_level)

    if skills_repository.get_taxonomy_skill(skill_id) is None:
        raise NotFoundError("Skill", skill_id)

    if skills_repository.find_user_skill(user_id, skill_id) is not None:
        raise ValidationError("Skill already added to your profile", field="skill_id")

    record = skills_repository.insert_user_skill(
        user_id=user_id,
        skill_id=skill_id,
        proficiency_level=proficiency_level or MIN_PROFICIENCY,
        verification_level=VerificationLevel.SELF_ASSESSED.value,
        years_experience=years_experience,
        last_used_date=last_used_date,
        is_primary=is_primary,
        notes=notes,
    )
    logger.info("skills.added", user_id=user_id, skill_id=skill_id)
    return record


def _owned_skill(user_id: str, user_skill_id: str) -> UserSkillRecord:
    record = skills_repository.get_user_skill(user_skill_id)
    if record is None:
        raise NotFoundError("User skill", user_skill_id)
    if record.user_id != user_id:
        raise PermissionDeniedError("You can only modify your own skills")
    return record


def update_user_skill(user_id: str, user_skill_id: str, updates: dict[str, Any]) -> UserSkillRecord:
    """Apply an owner edit. Verification only changes through endorsements."""
    _owned_skill(user_id, user_skill_id)

    fields = {k: v for k, v in updates.items() if k in OWNER_EDITABLE_FIELDS}
    nulls = null_fields(fields, skills_repository.USER_SKILL_NOT_NULL_FIELDS)
    if nulls:
        raise ValidationError(f"{nulls[0]} cannot be null", field=nulls[0])
    _check_proficiency(fields.get("proficiency_level"))
    return skills_repository.update_user_skill(user_skill_id, fields)


def remove_user_skill(user_id: str, user_skill_id: str) -> None:
    _owned_skill(user_id, user_skill_id)
    skills_repository.delete_user_skill(user_skill_id)


# =============================================================================
# ENDORSEMENTS
# =============================================================================


def endorse_skill(
    endorser_id: str,
    user_skill_id: str | None,
    relationship: str | None = None,
    endorsement_text: str | None = None,
) -> tuple[EndorsementRecord, UserSkillRecord]:
    """Endorse another user's skill.

    Three endorsements promote a self-assessed skill to PEER_ENDORSED.

    Returns:
        Tuple of (endorsement, updated user skill)

    Raises:
        ValidationError: Missing id, self-endorsement or duplicate
        NotFoundError: User skill does not exist
    """
    if not user_skill_id:
        raise ValidationError("user_skill_id is required", field="user_skill_id")

    record = skills_repository.get_user_skill(user_skill_id)
    if record is None:
        raise NotFoundError("User skill", user_skill_id)
    if record.user_id == endorser_id:
        raise ValidationError("You cannot endorse your own skill")
    if skills_repository.find_endorsement(user_skill_id, endorser_id) is not None:
        raise ValidationError("You have already endorsed this skill")

    endorsement = skills_repository.insert_endorsement(
        user_skill_id, endorser_id, relationship, endorsement_text
    )

    count = skills_repository.count_endorsements(user_skill_id)
    updates: dict[str, Any] = {"evidence_count": count}
    if (
        count >= ENDORSEMENTS_FOR_PEER_VERIFIED
        and record.verification_level == VerificationLevel.SELF_ASSESSED.value
    ):
        updates["verification_level"] = VerificationLevel.PEER_ENDORSED.value
        logger.info("skills.peer_endorsed", user_skill_id=user_skill_id, endorsements=count)

    record = skills_repository.update_user_skill(user_skill_id, updates)
    return endorsement, record


def remove_endorsement(user_id: str, endorsement_id: str) -> None:
    endorsement = skills_repository.get_endorsement(endorsement_id)
    if endorsement is None:
        raise NotFoundError("Endorsement", endorsement_id)
    if endorsement.endorser_id != user_id:
        raise PermissionDeniedError("You can only remove your own endorsements")
    skills_repository.delete_endorsement(endorsement_id)


# =============================================================================
# SUMMARY
# =============================================================================


def skills_summary(skills: list[UserSkillRecord]) -> dict[str, Any]:
    """Aggregate stats over a user's skills."""
    total = len(skills)
    verified = sum(
        1 for s in skills if s.verification_level != VerificationLevel.SELF_ASSESSED.value
    )
    primary = sum(1 for s in skills if s.is_primary)
    average = round(sum(s.proficiency_level for s in skills) / total, 1) if total else 0

    by_category = Counter(s.skill.category for s in skills if s.skill is not None)
    by_verification = Counter(s.verification_level for s in skills)

    return {
        "total": total,
        "verified": verified,
        "primary": primary,
        "average_proficiency": average,
        "by_category": dict(by_category),
        "by_verification": dict(by_verification),
    }
