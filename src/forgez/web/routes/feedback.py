"""360-degree feedback endpoints.

Request management needs an authenticated owner. The respond endpoints are
public and authorized by the invitation token alone.
"""

from typing import Any

from fastapi import APIRouter, Depends, status

from forgez.core import feedback as feedback_service
from forgez.core.achievements import AchievementTrigger
from forgez.db import feedback_repository
from forgez.web.deps import get_current_user_id
from forgez.web.progression import get_progression_manager
from forgez.web.schemas import (
    FeedbackRequestCreate,
    FeedbackRequestUpdate,
    FeedbackResponseCreate,
)

router = APIRouter(prefix="/api/feedback", tags=["feedback"])


@router.get("/requests")
async def list_requests(user_id: str = Depends(get_current_user_id)) -> dict[str, Any]:
    """List the caller's feedback requests with stats."""
    requests = feedback_repository.list_requests(user_id)
    return {
        "requests": [r.to_dict() for r in requests],
        "stats": feedback_service.request_stats(requests),
    }


@router.post("/requests", status_code=status.HTTP_201_CREATED)
async def create_request(
    body: FeedbackRequestCreate, user_id: str = Depends(get_current_user_id)
) -> dict[str, Any]:
    """Create a feedback request and invite respondents."""
    record = feedback_service.create_request(user_id, body.model_dump())
    return {"request": feedback_service.request_detail(record)}


@router.get("/requests/{request_id}")
async def get_request(
    request_id: str, user_id: str = Depends(get_current_user_id)
) -> dict[str, Any]:
    record = feedback_service.get_owned_request(user_id, request_id)
    return {"request": feedback_service.request_detail(record)}


@router.put("/requests/{request_id}")
async def update_request(
    request_id: str,
    body: FeedbackRequestUpdate,
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    record = feedback_service.update_request(
        user_id, request_id, body.model_dump(exclude_unset=True)
    )
    return {"request": record.to_dict()}


@router.delete("/requests/{request_id}")
async def delete_request(
    request_id: str, user_id: str = Depends(get_current_user_id)
) -> dict[str, bool]:
    feedback_service.delete_request(user_id, request_id)
    return {"success": True}


# =============================================================================
# RESPONDING
# =============================================================================


@router.get("/respond/{token}")
async def get_invitation(token: str) -> dict[str, Any]:
    """Show a respondent the request they were invited to answer."""
    respondent, request = feedback_service.resolve_token(token)
    return feedback_service.invitation_view(respondent, request)


@router.post("/respond/{token}", status_code=status.HTTP_201_CREATED)
async def submit_response(token: str, body: FeedbackResponseCreate) -> dict[str, Any]:
    """Submit feedback for an invitation."""
    response = feedback_service.submit_response(token, body.model_dump())

    respondent = feedback_repository.get_respondent_by_token(token)
    request = feedback_repository.get_request(respondent.request_id)
    async with get_progression_manager().update(request.user_id) as progress:
        progress.trigger(AchievementTrigger.FEEDBACK_RECEIVE, {"requestId": request.id})

    return {"response": response.to_dict(), "request_status": request.status}
