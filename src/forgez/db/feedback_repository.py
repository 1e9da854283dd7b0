"""Repository functions for feedback_requests, feedback_respondents and
feedback_responses tables."""

from __future__ import annotations

import sqlite3
from dataclasses import asdict, dataclass, field
from typing import Any

import structlog

from forgez.db.database import build_update, from_json, generate_id, get_db, now_iso, to_json

logger = structlog.get_logger(__name__)

REQUEST_UPDATE_FIELDS = {"title", "context", "status", "completed_at"}


@dataclass
class RespondentRecord:
    id: str
    request_id: str
    respondent_email: str
    respondent_name: str | None
    relationship: str | None
    access_token: str
    status: str
    invited_at: str
    responded_at: str | None

    def to_dict(self, include_token: bool = False) -> dict[str, Any]:
        data = asdict(self)
        if not include_token:
            data.pop("access_token")
        return data


@dataclass
class ResponseRecord:
    id: str
    respondent_id: str
    feedback_type: str
    content: str | None
    audio_url: str | None
    video_url: str | None
    duration_seconds: int | None
    created_at: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class FeedbackRequestRecord:
    """Feedback request with its respondents."""

    id: str
    user_id: str
    title: str
    context: str | None
    prompt_questions: list[Any]
    status: str
    expires_at: str
    min_respondents: int
    max_respondents: int
    is_anonymous: bool
    created_at: str
    completed_at: str | None
    respondents: list[RespondentRecord] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["respondents"] = [r.to_dict() for r in self.respondents]
        data["respondent_count"] = len(self.respondents)
        data["completed_count"] = sum(1 for r in self.respondents if r.status == "COMPLETED")
        return data


def _row_to_request(row: sqlite3.Row) -> FeedbackRequestRecord:
    data = dict(row)
    data["prompt_questions"] = from_json(data["prompt_questions"], [])
    data["is_anonymous"] = bool(data["is_anonymous"])
    return FeedbackRequestRecord(**data)


def insert_request(
    user_id: str,
    title: str,
    prompt_questions: list[Any],
    expires_at: str,
    respondents: list[dict[str, Any]],
    context: str | None = None,
    min_respondents: int = 3,
    max_respondents: int = 10,
    is_anonymous: bool = True,
) -> FeedbackRequestRecord:
    """Insert a request together with its respondents in one transaction.

    Args:
        respondents: Dicts with email, name, relationship and access_token
    """
    request_id = generate_id()
    now = now_iso()
    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO feedback_requests (
                id, user_id, title, context, prompt_questions, status,
                expires_at, min_respondents, max_respondents, is_anonymous,
                created_at
            ) VALUES (?, ?, ?, ?, ?, 'PENDING', ?, ?, ?, ?, ?)
            """,
            (
                request_id,
                user_id,
                title,
                context,
                to_json(prompt_questions),
                expires_at,
                min_respondents,
                max_respondents,
                int(is_anonymous),
                now,
            ),
        )
        conn.executemany(
            """
            INSERT INTO feedback_respondents (
                id, request_id, respondent_email, respondent_name,
                relationship, access_token, status, invited_at
            ) VALUES (?, ?, ?, ?, ?, ?, 'PENDING', ?)
            """,
            [
                (
                    generate_id(),
                    request_id,
                    r["email"],
                    r.get("name"),
                    r.get("relationship"),
                    r["access_token"],
                    now,
                )
                for r in respondents
            ],
        )

    logger.debug(
        "feedback_requests.inserted", request_id=request_id, respondents=len(respondents)
    )
    return get_request(request_id)


def get_request(request_id: str) -> FeedbackRequestRecord | None:
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM feedback_requests WHERE id = ?", (request_id,)
        ).fetchone()

    if row is None:
        return None

    record = _row_to_request(row)
    record.respondents = list_respondents(request_id)
    return record


def list_requests(user_id: str) -> list[FeedbackRequestRecord]:
    """All requests of a user, newest first."""
    with get_db() as conn:
        rows = conn.execute(
            "SELECT * FROM feedback_requests WHERE user_id = ? ORDER BY created_at DESC",
            (user_id,),
        ).fetchall()

    records = []
    for row in rows:
        record = _row_to_request(row)
        record.respondents = list_respondents(record.id)
        records.append(record)
    return records


def update_request(request_id: str, fields: dict[str, Any]) -> FeedbackRequestRecord | None:
    clause, values = build_update(fields, REQUEST_UPDATE_FIELDS)
    if clause:
        with get_db() as conn:
            conn.execute(
                f"UPDATE feedback_requests SET {clause} WHERE id = ?",
                (*values, request_id),
            )
        logger.debug("feedback_requests.updated", request_id=request_id)
    return get_request(request_id)


def delete_request(request_id: str) -> bool:
    with get_db() as conn:
        cursor = conn.execute("DELETE FROM feedback_requests WHERE id = ?", (request_id,))
    return cursor.rowcount > 0


# =============================================================================
# RESPONDENTS AND RESPONSES
# =============================================================================


def list_respondents(request_id: str) -> list[RespondentRecord]:
    with get_db() as conn:
        rows = conn.execute(
            "SELECT * FROM feedback_respondents WHERE request_id = ? ORDER BY invited_at, rowid",
            (request_id,),
        ).fetchall()
    return [RespondentRecord(**dict(r)) for r in rows]


def get_respondent_by_token(access_token: str) -> RespondentRecord | None:
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM feedback_respondents WHERE access_token = ?", (access_token,)
        ).fetchone()

    if row is None:
        return None
    return RespondentRecord(**dict(row))


def insert_response(
    respondent_id: str,
    feedback_type: str,
    content: str | None = None,
    audio_url: str | None = None,
    video_url: str | None = None,
    duration_seconds: int | None = None,
) -> ResponseRecord:
    """Store a response and mark its respondent as completed."""
    response_id = generate_id()
    now = now_iso()
    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO feedback_responses (
                id, respondent_id, feedback_type, content, audio_url,
                video_url, duration_seconds, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (response_id, respondent_id, feedback_type, content, audio_url,
             video_url, duration_seconds, now),
        )
        conn.execute(
            """
            UPDATE feedback_respondents
            SET status = 'COMPLETED', responded_at = ?
            WHERE id = ?
            """,
            (now, respondent_id),
        )

    logger.debug("feedback_responses.inserted", respondent_id=respondent_id)
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM feedback_responses WHERE id = ?", (response_id,)
        ).fetchone()
    return ResponseRecord(**dict(row))


def list_responses(request_id: str) -> list[tuple[ResponseRecord, RespondentRecord]]:
    """Responses of a request paired with their respondent."""
    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT r.*, p.request_id, p.respondent_email, p.respondent_name,
                   p.relationship, p.access_token, p.status, p.invited_at,
                   p.responded_at
            FROM feedback_responses r
            JOIN feedback_respondents p ON p.id = r.respondent_id
            WHERE p.request_id = ?
            ORDER BY r.created_at, r.rowid
            """,
            (request_id,),
        ).fetchall()

    pairs = []
    for row in rows:
        response = ResponseRecord(
            id=row["id"],
            respondent_id=row["respondent_id"],
            feedback_type=row["feedback_type"],
            content=row["content"],
            audio_url=row["audio_url"],
            video_url=row["video_url"],
            duration_seconds=row["duration_seconds"],
            created_at=row["created_at"],
        )
        respondent = RespondentRecord(
            id=row["respondent_id"],
            request_id=row["request_id"],
            respondent_email=row["respondent_email"],
            respondent_name=row["respondent_name"],
            relationship=row["relationship"],
            access_token=row["access_token"],
            status=row["status"],
            invited_at=row["invited_at"],
            responded_at=row["responded_at"],
        )
        pairs.append((response, respondent))
    return pairs
