"""Career role catalog endpoints."""

from typing import Any

from fastapi import APIRouter

from forgez.core import catalog

router = APIRouter(prefix="/api/roles", tags=["roles"])


@router.get("")
async def list_roles(industry: str | None = None, level: str | None = None) -> dict[str, Any]:
    """List career roles, highest market demand first."""
    roles = catalog.list_roles(industry=industry, level=level)
    return {"roles": [r.to_dict() for r in roles], "count": len(roles)}


@router.get("/{role_id}")
async def get_role(role_id: str) -> dict[str, Any]:
    return {"role": catalog.get_role(role_id).to_dict()}
