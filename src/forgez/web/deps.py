"""Request dependencies shared by the route modules."""

from __future__ import annotations

from fastapi import Header, HTTPException, status

from forgez.config.app_config import load_app_config
from forgez.core.progression import USER_ID_PATTERN
from forgez.db import ensure_db


def ensure_database() -> None:
    """Make sure the configured SQLite schema exists."""
    ensure_db(load_app_config().db_path)


def _clean_user_id(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def get_optional_user_id(x_user_id: str | None = Header(default=None)) -> str | None:
    """Authenticated user id if the caller sent one."""
    user_id = _clean_user_id(x_user_id)
    if user_id is not None and not USER_ID_PATTERN.match(user_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid user id",
        )
    return user_id


def get_current_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """Authenticated user id. Authentication itself happens upstream."""
    user_id = get_optional_user_id(x_user_id)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
    return user_id
