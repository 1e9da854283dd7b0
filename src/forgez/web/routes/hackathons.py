"""Hackathon catalog endpoints."""

from typing import Any

from fastapi import APIRouter

from forgez.core import catalog

router = APIRouter(prefix="/api/hackathons", tags=["hackathons"])


@router.get("")
async def list_hackathons(status: str | None = None) -> dict[str, Any]:
    """List hackathons by start date, with their sponsor."""
    hackathons = catalog.list_hackathons(status=status)
    return {"hackathons": [h.to_dict() for h in hackathons], "count": len(hackathons)}


@router.get("/{hackathon_id}")
async def get_hackathon(hackathon_id: str) -> dict[str, Any]:
    return {"hackathon": catalog.get_hackathon(hackathon_id).to_dict()}
