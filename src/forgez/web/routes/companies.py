"""Company directory endpoints."""

from typing import Any

from fastapi import APIRouter, Depends

from forgez.core import jobs as jobs_service
from forgez.core.achievements import AchievementTrigger
from forgez.db import jobs_repository
from forgez.web.deps import get_current_user_id
from forgez.web.progression import get_progression_manager

router = APIRouter(prefix="/api/companies", tags=["companies"])


@router.get("")
async def list_companies(
    industry: str | None = None,
    country: str | None = None,
    featured: bool = False,
) -> dict[str, Any]:
    """List active companies, featured first."""
    companies = jobs_repository.list_companies(industry=industry, country=country, featured=featured)
    return {"companies": [c.to_dict() for c in companies], "count": len(companies)}


@router.post("/{company_id}/view")
async def view_company(
    company_id: str, user_id: str = Depends(get_current_user_id)
) -> dict[str, Any]:
    """Record that the caller viewed a company profile."""
    company = jobs_service.get_company(company_id)
    async with get_progression_manager().update(user_id) as progress:
        outcome = progress.record_event(AchievementTrigger.COMPANY_VIEW, {"sourceId": company.id})
    return {"company": company.to_dict(), "progression": outcome.to_dict()}
