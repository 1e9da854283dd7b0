"""Learning resource recommendations."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

import structlog

from forgez.core.errors import NotFoundError, ValidationError
from forgez.db import learning_repository, users_repository
from forgez.db.learning_repository import LearningProgressRecord, LearningResourceRecord

logger = structlog.get_logger(__name__)

BASE_SCORE = 0.5
DOMAIN_BONUS = 0.25
FEATURED_BONUS = 0.1
RATING_BONUS = 0.1
IN_PROGRESS_BONUS = 0.15
HIGH_RATING = 4.5
ANONYMOUS_FEATURED_SCORE = 0.9


class LearningStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass
class Recommendation:
    resource: LearningResourceRecord
    score: float
    reason: str
    status: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data = self.resource.to_dict()
        data["score"] = self.score
        data["reason"] = self.reason
        data["status"] = self.status
        return data


def score_resource(
    resource: LearningResourceRecord,
    domain_interest: str | None,
    status: str | None,
) -> Recommendation:
    score = BASE_SCORE
    reason = "Recommended for your learning journey"

    if domain_interest and resource.industry and resource.industry.lower() == domain_interest.lower():
        score += DOMAIN_BONUS
        reason = f"Matches your interest in {domain_interest}"
    if resource.featured:
        score += FEATURED_BONUS
    if resource.rating is not None and resource.rating >= HIGH_RATING:
        score += RATING_BONUS
    if status == LearningStatus.IN_PROGRESS.value:
        score += IN_PROGRESS_BONUS
        reason = "Continue your learning"

    return Recommendation(resource, round(min(score, 1.0), 2), reason, status)


def recommend(
    user_id: str | None,
    industry: str | None = None,
    level: str | None = None,
    featured: bool = False,
    limit: int = 20,
    offset: int = 0,
) -> dict[str, Any]:
    """Build recommendations for a user, or generic ones for anonymous callers.

    Returns:
        Dict with resources plus userDomain and userArchetype
    """
    resources = learning_repository.list_resources(
        industry=industry, level=level, featured=featured, limit=limit, offset=offset
    )

    if user_id is None:
        recommendations = [
            Recommendation(r, ANONYMOUS_FEATURED_SCORE, "Featured course")
            if r.featured
            else Recommendation(r, BASE_SCORE, "Popular learning resource")
            for r in resources
        ]
        return {
            "resources": [rec.to_dict() for rec in recommendations],
            "userDomain": None,
            "userArchetype": None,
        }

    archetype = users_repository.get_archetype(user_id)
    domain = archetype.domain_interest if archetype else None
    statuses = {p.resource_id: p.status for p in learning_repository.list_progress(user_id)}

    recommendations = [
        score_resource(r, domain, statuses.get(r.id))
        for r in resources
        if statuses.get(r.id) != LearningStatus.COMPLETED.value
    ]
    recommendations.sort(key=lambda rec: rec.score, reverse=True)

    return {
        "resources": [rec.to_dict() for rec in recommendations],
        "userDomain": domain,
        "userArchetype": archetype.archetype if archetype else None,
    }


def set_learning_progress(
    user_id: str, resource_id: str, status: str | None
) -> tuple[LearningProgressRecord, bool]:
    """Record progress on a resource.

    Returns:
        Tuple of (progress, changed) where changed is False when the status
        was already set or the resource is already completed

    Raises:
        ValidationError: Invalid status
        NotFoundError: Resource does not exist
    """
    try:
        LearningStatus(status)
    except ValueError:
        raise ValidationError("status must be in_progress or completed", field="status")

    if learning_repository.get_resource(resource_id) is None:
        raise NotFoundError("Learning resource", resource_id)

    existing = learning_repository.get_progress(user_id, resource_id)
    # Completion is final; only forward moves are recorded
    if existing is not None and status in (existing.status, LearningStatus.IN_PROGRESS.value):
        return existing, False

    progress = learning_repository.set_progress(user_id, resource_id, status)
    logger.info("learning.progress", user_id=user_id, resource_id=resource_id, status=status)
    return progress, True
