"""Pydantic schemas for the Web API.

Request bodies keep business fields optional so that missing values are
reported by the domain layer with a 400 and a readable message.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field


# =============================================================================
# HEALTH SCHEMAS
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = "0.1.0"
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


# =============================================================================
# USER SCHEMAS
# =============================================================================


class ArchetypeRequest(BaseModel):
    """Archetype quiz answers."""

    archetype: str | None = None
    game_preference: str | None = None
    domain_interest: str | None = None
    focus_area: str | None = None


class ProfileUpdate(BaseModel):
    """Partial profile update. Only fields that were sent are applied."""

    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    headline: str | None = None
    bio: str | None = None
    location: str | None = None
    linkedin_url: str | None = None
    github_url: str | None = None
    portfolio_url: str | None = None
    current_role: str | None = None
    current_company: str | None = None
    years_experience: int | None = None
    is_open_to_work: bool | None = None
    job_search_status: str | None = None
    profile_visibility: str | None = None
    show_skills_publicly: bool | None = None
    show_projects_publicly: bool | None = None
    timezone: str | None = None
    dark_mode: bool | None = None
    avatar_url: str | None = None


class OnboardingRequest(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    birthday: str | None = None
    phone_number: str | None = None
    phone_country_code: str | None = None
    marketing_agreed: bool = False
    email: str | None = None


class PreferencesUpdate(BaseModel):
    locale: str | None = None
    world: str | None = None


# =============================================================================
# PROGRESSION SCHEMAS
# =============================================================================


class QuestCompleteRequest(BaseModel):
    """Optional XP override when completing a quest."""

    xp: int | None = Field(default=None, gt=0)


class XPAwardRequest(BaseModel):
    amount: int | None = None
    source: str | None = None
    source_id: str | None = None
    description: str | None = None


class TriggerRequest(BaseModel):
    """Achievement trigger or client-side event with its payload."""

    trigger: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)


# =============================================================================
# SKILL SCHEMAS
# =============================================================================


class UserSkillCreate(BaseModel):
    skill_id: str | None = None
    proficiency_level: int | None = None
    years_experience: float | None = None
    last_used_date: str | None = None
    is_primary: bool = False
    notes: str | None = None


class UserSkillUpdate(BaseModel):
    proficiency_level: int | None = None
    years_experience: float | None = None
    last_used_date: str | None = None
    is_primary: bool | None = None
    notes: str | None = None


class EndorsementCreate(BaseModel):
    user_skill_id: str | None = None
    relationship: str | None = None
    endorsement_text: str | None = None


# =============================================================================
# PROJECT SCHEMAS
# =============================================================================


class ProjectCreate(BaseModel):
    title: str | None = None
    project_type: str | None = None
    description: str | None = None
    visibility: str | None = None
    tags: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] | None = None
    thumbnail_url: str | None = None
    external_url: str | None = None
    repository_url: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    is_ongoing: bool = False
    is_featured: bool = False


class ProjectUpdate(BaseModel):
    title: str | None = None
    project_type: str | None = None
    description: str | None = None
    visibility: str | None = None
    tags: list[str] | None = None
    metadata: dict[str, Any] | None = None
    thumbnail_url: str | None = None
    external_url: str | None = None
    repository_url: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    is_ongoing: bool | None = None
    is_featured: bool | None = None


class UploadRequest(BaseModel):
    file_name: str | None = None
    file_size: int | None = None
    kind: str | None = None


class ArtifactCreate(BaseModel):
    """File record for an upload made to a reserved path."""

    file_name: str | None = None
    file_path: str | None = None
    file_type: str | None = None
    file_size: int | None = None
    mime_type: str | None = None
    storage_bucket: str | None = None
    metadata: dict[str, Any] | None = None


# =============================================================================
# FEEDBACK SCHEMAS
# =============================================================================


class RespondentInput(BaseModel):
    email: str | None = None
    name: str | None = None
    relationship: str | None = None


class FeedbackRequestCreate(BaseModel):
    title: str | None = None
    context: str | None = None
    prompt_questions: list[str] | None = None
    respondents: list[RespondentInput] = Field(default_factory=list)
    expires_in_days: int | None = Field(default=None, gt=0)
    min_respondents: int | None = Field(default=None, gt=0)
    max_respondents: int | None = Field(default=None, gt=0)
    is_anonymous: bool | None = None


class FeedbackRequestUpdate(BaseModel):
    title: str | None = None
    context: str | None = None
    status: str | None = None


class FeedbackResponseCreate(BaseModel):
    feedback_type: str | None = None
    content: str | None = None
    audio_url: str | None = None
    video_url: str | None = None
    duration_seconds: int | None = None


# =============================================================================
# TEAM SCHEMAS
# =============================================================================


class TeamCreate(BaseModel):
    name: str | None = None
    description: str | None = None
    purpose: str | None = None
    max_members: int | None = None
    skill_requirements: list[str] = Field(default_factory=list)
    is_public: bool | None = None


class TeamUpdate(BaseModel):
    name: str | None = None
    description: str | None = None
    purpose: str | None = None
    max_members: int | None = None
    skill_requirements: list[str] | None = None
    is_public: bool | None = None
    is_active: bool | None = None


class MemberActionRequest(BaseModel):
    """Leader action on a team member."""

    user_id: str | None = None
    action: str | None = None  # approve | reject | remove | update
    role: str | None = None
    contribution_area: str | None = None


# =============================================================================
# JOB SCHEMAS
# =============================================================================


class JobCreate(BaseModel):
    title: str | None = None
    description: str | None = None
    employment_type: str | None = None
    requirements: str | None = None
    location: str | None = None
    is_remote: bool = False
    salary_min: int | None = None
    salary_max: int | None = None
    salary_currency: str | None = None
    required_skills: list[Any] = Field(default_factory=list)
    preferred_skills: list[Any] = Field(default_factory=list)
    experience_level: str | None = None
    status: str | None = None


class JobUpdate(BaseModel):
    title: str | None = None
    description: str | None = None
    employment_type: str | None = None
    requirements: str | None = None
    location: str | None = None
    is_remote: bool | None = None
    salary_min: int | None = None
    salary_max: int | None = None
    salary_currency: str | None = None
    required_skills: list[Any] | None = None
    preferred_skills: list[Any] | None = None
    experience_level: str | None = None
    status: str | None = None
    expires_at: str | None = None


# =============================================================================
# LEARNING SCHEMAS
# =============================================================================


class LearningProgressRequest(BaseModel):
    status: str | None = None  # in_progress | completed
