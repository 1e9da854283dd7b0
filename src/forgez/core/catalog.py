"""Career catalogs: talent roles and hackathons."""

from __future__ import annotations

from enum import Enum

from forgez.core.errors import NotFoundError, ValidationError
from forgez.db import catalog_repository
from forgez.db.catalog_repository import HackathonRecord, RoleRecord


class HackathonStatus(str, Enum):
    UPCOMING = "upcoming"
    ACTIVE = "active"
    COMPLETED = "completed"


def list_roles(industry: str | None = None, level: str | None = None) -> list[RoleRecord]:
    return catalog_repository.list_roles(industry=industry, level=level)


def get_role(role_id: str) -> RoleRecord:
    role = catalog_repository.get_role(role_id)
    if role is None:
        raise NotFoundError("Role", role_id)
    return role


def list_hackathons(status: str | None = None) -> list[HackathonRecord]:
    """Raises ValidationError for an unknown status filter."""
    if status is not None:
        try:
            HackathonStatus(status)
        except ValueError:
            allowed = ", ".join(s.value for s in HackathonStatus)
            raise ValidationError(f"Invalid status '{status}'. Allowed: {allowed}", field="status")
    return catalog_repository.list_hackathons(status=status)


def get_hackathon(hackathon_id: str) -> HackathonRecord:
    hackathon = catalog_repository.get_hackathon(hackathon_id)
    if hackathon is None:
        raise NotFoundError("Hackathon", hackathon_id)
    return hackathon
