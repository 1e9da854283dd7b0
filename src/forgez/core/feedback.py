"""360-degree feedback: requests, token-based responses and stats."""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

import structlog

from forgez.config.app_config import load_app_config
from forgez.core.errors import (
    ConflictError,
    GoneError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from forgez.db import feedback_repository
from forgez.db.feedback_repository import (
    FeedbackRequestRecord,
    RespondentRecord,
    ResponseRecord,
)
from forgez.utils.validators import utc_now, validate_email

logger = structlog.get_logger(__name__)

MIN_TEXT_LENGTH = 10


class FeedbackStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    EXPIRED = "EXPIRED"
    DECLINED = "DECLINED"


class FeedbackType(str, Enum):
    VOICE = "VOICE"
    TEXT = "TEXT"
    VIDEO = "VIDEO"


def generate_access_token() -> str:
    return secrets.token_hex(32)


def is_expired(expires_at: str, now: datetime | None = None) -> bool:
    now = now or datetime.now(timezone.utc)
    expiry = datetime.fromisoformat(expires_at)
    if expiry.tzinfo is None:
        expiry = expiry.replace(tzinfo=timezone.utc)
    return expiry < now


# =============================================================================
# REQUESTS
# =============================================================================


def create_request(user_id: str, data: dict[str, Any]) -> FeedbackRequestRecord:
    """Create a feedback request and invite respondents.

    Respondents beyond max_respondents are dropped.

    Raises:
        ValidationError: Missing title or questions, too few respondents,
            or an invalid respondent email
    """
    config = load_app_config().feedback

    title = (data.get("title") or "").strip()
    if not title:
        raise ValidationError("Title is required", field="title")

    questions = data.get("prompt_questions")
    if not isinstance(questions, list) or len(questions) == 0:
        raise ValidationError("At least one prompt question is required", field="prompt_questions")

    min_respondents = data.get("min_respondents") or config.default_min_respondents
    max_respondents = data.get("max_respondents") or config.default_max_respondents
    if max_respondents < min_respondents:
        raise ValidationError("max_respondents cannot be lower than min_respondents")

    respondents = data.get("respondents") or []
    if len(respondents) < min_respondents:
        raise ValidationError(
            f"At least {min_respondents} respondents are required", field="respondents"
        )

    invites = []
    for respondent in respondents[:max_respondents]:
        email = (respondent.get("email") or "").strip()
        if not validate_email(email):
            raise ValidationError(f"Invalid respondent email '{email}'", field="respondents")
        invites.append(
            {
                "email": email,
                "name": respondent.get("name"),
                "relationship": respondent.get("relationship"),
                "access_token": generate_access_token(),
            }
        )

    expires_in_days = data.get("expires_in_days") or config.default_expires_in_days
    expires_at = (datetime.now(timezone.utc) + timedelta(days=expires_in_days)).isoformat()

    is_anonymous = data.get("is_anonymous")
    record = feedback_repository.insert_request(
        user_id=user_id,
        title=title,
        context=data.get("context"),
        prompt_questions=questions,
        expires_at=expires_at,
        respondents=invites,
        min_respondents=min_respondents,
        max_respondents=max_respondents,
        is_anonymous=True if is_anonymous is None else bool(is_anonymous),
    )
    logger.info("feedback.request_created", request_id=record.id, respondents=len(invites))
    return record


def get_owned_request(user_id: str, request_id: str) -> FeedbackRequestRecord:
    record = feedback_repository.get_request(request_id)
    if record is None:
        raise NotFoundError("Feedback request", request_id)
    if record.user_id != user_id:
        raise PermissionDeniedError("You do not have access to this feedback request")
    return record


def update_request(user_id: str, request_id: str, updates: dict[str, Any]) -> FeedbackRequestRecord:
    get_owned_request(user_id, request_id)

    fields = {k: v for k, v in updates.items() if k in ("title", "context", "status") and v is not None}
    status = fields.get("status")
    if status is not None:
        try:
            FeedbackStatus(status)
        except ValueError:
            raise ValidationError(f"Invalid status '{status}'", field="status")
        if status == FeedbackStatus.COMPLETED.value:
            fields["completed_at"] = utc_now()
    if "title" in fields:
        fields["title"] = fields["title"].strip()
        if not fields["title"]:
            raise ValidationError("Title cannot be empty", field="title")

    return feedback_repository.update_request(request_id, fields)


def delete_request(user_id: str, request_id: str) -> None:
    get_owned_request(user_id, request_id)
    feedback_repository.delete_request(request_id)


def request_detail(record: FeedbackRequestRecord) -> dict[str, Any]:
    """Owner view of a request with its responses.

    Respondents carry their access tokens so the owner can share the
    invitation links. Anonymous requests hide who wrote each response.
    """
    data = record.to_dict()
    data["respondents"] = [r.to_dict(include_token=True) for r in record.respondents]
    responses = []
    for response, respondent in feedback_repository.list_responses(record.id):
        item = response.to_dict()
        if record.is_anonymous:
            item["respondent"] = {"relationship": respondent.relationship}
        else:
            item["respondent"] = {
                "name": respondent.respondent_name,
                "email": respondent.respondent_email,
                "relationship": respondent.relationship,
            }
        responses.append(item)
    data["responses"] = responses
    return data


def request_stats(requests: list[FeedbackRequestRecord]) -> dict[str, Any]:
    total_respondents = sum(len(r.respondents) for r in requests)
    completed_respondents = sum(
        1 for r in requests for p in r.respondents if p.status == FeedbackStatus.COMPLETED.value
    )
    by_status = {s: sum(1 for r in requests if r.status == s.value) for s in FeedbackStatus}
    return {
        "total": len(requests),
        "pending": by_status[FeedbackStatus.PENDING],
        "in_progress": by_status[FeedbackStatus.IN_PROGRESS],
        "completed": by_status[FeedbackStatus.COMPLETED],
        "expired": by_status[FeedbackStatus.EXPIRED],
        "total_respondents": total_respondents,
        "completed_respondents": completed_respondents,
        "response_rate": (
            round(completed_respondents / total_respondents * 100) if total_respondents else 0
        ),
    }


# =============================================================================
# RESPONDING
# =============================================================================


def resolve_token(token: str) -> tuple[RespondentRecord, FeedbackRequestRecord]:
    """Look up an invitation and check it can still be answered.

    Raises:
        NotFoundError: Unknown token (404)
        GoneError: Request expired, completed or closed (410)
        ConflictError: Respondent already answered (409)
    """
    respondent = feedback_repository.get_respondent_by_token(token)
    if respondent is None:
        raise NotFoundError("Feedback invitation")

    request = feedback_repository.get_request(respondent.request_id)
    if request is None:
        raise NotFoundError("Feedback request", respondent.request_id)

    if is_expired(request.expires_at) and request.status != FeedbackStatus.COMPLETED.value:
        if request.status != FeedbackStatus.EXPIRED.value:
            feedback_repository.update_request(request.id, {"status": FeedbackStatus.EXPIRED.value})
            logger.info("feedback.request_expired", request_id=request.id)
        raise GoneError("This feedback request has expired")

    if respondent.status == FeedbackStatus.COMPLETED.value:
        raise ConflictError("You have already submitted feedback")

    if request.status in (FeedbackStatus.COMPLETED.value, FeedbackStatus.EXPIRED.value):
        raise GoneError("This feedback request is no longer accepting responses")

    return respondent, request


def invitation_view(respondent: RespondentRecord, request: FeedbackRequestRecord) -> dict[str, Any]:
    """What a respondent sees before answering."""
    return {
        "request": {
            "id": request.id,
            "title": request.title,
            "context": request.context,
            "prompt_questions": request.prompt_questions,
            "expires_at": request.expires_at,
            "is_anonymous": request.is_anonymous,
        },
        "respondent": {
            "name": respondent.respondent_name,
            "relationship": respondent.relationship,
        },
    }


def submit_response(token: str, data: dict[str, Any]) -> ResponseRecord:
    """Store a respondent's answer.

    Raises:
        ValidationError: Invalid type or missing content for the type
        plus everything resolve_token raises
    """
    respondent, request = resolve_token(token)

    feedback_type = data.get("feedback_type")
    try:
        FeedbackType(feedback_type)
    except ValueError:
        raise ValidationError(
            "feedback_type must be one of: VOICE, TEXT, VIDEO", field="feedback_type"
        )

    content = (data.get("content") or "").strip() or None
    if feedback_type == FeedbackType.TEXT.value and (content is None or len(content) < MIN_TEXT_LENGTH):
        raise ValidationError(
            f"Text feedback must be at least {MIN_TEXT_LENGTH} characters", field="content"
        )
    if feedback_type == FeedbackType.VOICE.value and not data.get("audio_url"):
        raise ValidationError("audio_url is required for voice feedback", field="audio_url")
    if feedback_type == FeedbackType.VIDEO.value and not data.get("video_url"):
        raise ValidationError("video_url is required for video feedback", field="video_url")

    response = feedback_repository.insert_response(
        respondent_id=respondent.id,
        feedback_type=feedback_type,
        content=content,
        audio_url=data.get("audio_url"),
        video_url=data.get("video_url"),
        duration_seconds=data.get("duration_seconds"),
    )

    refreshed = feedback_repository.get_request(request.id)
    completed = sum(1 for r in refreshed.respondents if r.status == FeedbackStatus.COMPLETED.value)
    if completed >= refreshed.max_respondents:
        feedback_repository.update_request(
            request.id,
            {"status": FeedbackStatus.COMPLETED.value, "completed_at": utc_now()},
        )
    elif refreshed.status == FeedbackStatus.PENDING.value:
        feedback_repository.update_request(
            request.id, {"status": FeedbackStatus.IN_PROGRESS.value}
        )

    logger.info("feedback.response_submitted", request_id=request.id, feedback_type=feedback_type)
    return response
