"""Application configuration loader.

Loads centralized configuration from data/config/forgez_config_v1.yaml,
falling back to built-in defaults when the file is missing.

Usage:
    from forgez.config.app_config import load_app_config, get_upload_limit

    config = load_app_config()
    limit = get_upload_limit("audio")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
CONFIG_FILE = Path("data/config/forgez_config_v1.yaml")

MB = 1024 * 1024


@dataclass
class ProgressionConfig:
    """Settings for XP and early adopter detection."""

    early_adopter_until: str | None = None
    early_adopter_user_ids: list[str] = field(default_factory=list)


@dataclass
class FeedbackConfig:
    """Defaults for 360-degree feedback requests."""

    default_expires_in_days: int = 14
    default_min_respondents: int = 3
    default_max_respondents: int = 10


@dataclass
class TeamsConfig:
    """Team size limits."""

    min_members: int = 2
    max_members: int = 10
    default_max_members: int = 5


@dataclass
class PaginationConfig:
    """List endpoint limits."""

    default_limit: int = 20
    max_limit: int = 50


@dataclass
class AppConfig:
    """Application-wide configuration."""

    paths: dict[str, str] = field(default_factory=dict)
    progression: ProgressionConfig = field(default_factory=ProgressionConfig)
    feedback: FeedbackConfig = field(default_factory=FeedbackConfig)
    teams: TeamsConfig = field(default_factory=TeamsConfig)
    pagination: PaginationConfig = field(default_factory=PaginationConfig)
    uploads: dict[str, int] = field(default_factory=dict)

    @property
    def db_path(self) -> Path:
        return Path(self.paths.get("db_path", "db/forgez.db"))

    @property
    def state_dir(self) -> Path:
        return Path(self.paths.get("state_dir", "data/state"))


# Module-level cache
_cached_config: AppConfig | None = None


def _get_defaults() -> dict[str, Any]:
    """Get default configuration values."""
    return {
        "paths": {
            "db_path": "db/forgez.db",
            "state_dir": "data/state",
            "config_dir": "data/config",
        },
        "progression": {
            "early_adopter_until": None,
            "early_adopter_user_ids": [],
        },
        "feedback": {
            "default_expires_in_days": 14,
            "default_min_respondents": 3,
            "default_max_respondents": 10,
        },
        "teams": {
            "min_members": 2,
            "max_members": 10,
            "default_max_members": 5,
        },
        "pagination": {
            "default_limit": 20,
            "max_limit": 50,
        },
        "uploads": {
            "audio": 100 * MB,
            "video": 100 * MB,
            "zip": 100 * MB,
            "code": 10 * MB,
            "document": 50 * MB,
            "pdf": 50 * MB,
            "image": 10 * MB,
        },
    }


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object.

    Missing sections or keys keep their default values.
    """
    defaults = _get_defaults()

    paths = {**defaults["paths"], **(data.get("paths") or {})}

    prog_data = data.get("progression") or {}
    progression = ProgressionConfig(
        early_adopter_until=prog_data.get("early_adopter_until"),
        early_adopter_user_ids=[str(u) for u in prog_data.get("early_adopter_user_ids") or []],
    )

    fb_data = data.get("feedback") or {}
    feedback = FeedbackConfig(
        default_expires_in_days=fb_data.get("default_expires_in_days", 14),
        default_min_respondents=fb_data.get("default_min_respondents", 3),
        default_max_respondents=fb_data.get("default_max_respondents", 10),
    )

    teams_data = data.get("teams") or {}
    teams = TeamsConfig(
        min_members=teams_data.get("min_members", 2),
        max_members=teams_data.get("max_members", 10),
        default_max_members=teams_data.get("default_max_members", 5),
    )

    page_data = data.get("pagination") or {}
    pagination = PaginationConfig(
        default_limit=page_data.get("default_limit", 20),
        max_limit=page_data.get("max_limit", 50),
    )

    uploads = {**defaults["uploads"], **(data.get("uploads") or {})}

    return AppConfig(
        paths=paths,
        progression=progression,
        feedback=feedback,
        teams=teams,
        pagination=pagination,
        uploads=uploads,
    )


def load_app_config(force_reload: bool = False) -> AppConfig:
    """Load application config.

    Args:
        force_reload: If True, ignore cached config and reload from file.

    Returns:
        AppConfig object with all settings.
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    data: dict[str, Any]

    if CONFIG_FILE.exists():
        logger.debug("loading_app_config", source=str(CONFIG_FILE))
        data = yaml.safe_load(CONFIG_FILE.read_text(encoding="utf-8")) or {}
    else:
        logger.info("using_default_config")
        data = _get_defaults()

    _cached_config = _parse_config(data)
    return _cached_config


def get_upload_limit(kind: str) -> int | None:
    """Get the maximum upload size in bytes for an upload kind.

    Args:
        kind: Upload kind (e.g., "audio", "code")

    Returns:
        Size limit in bytes or None if the kind is not allowed.
    """
    return load_app_config().uploads.get(kind)


def is_early_adopter(user_id: str, joined_at: str | None = None) -> bool:
    """Check whether a user qualifies as an early adopter.

    A user qualifies when listed explicitly, or when they joined on or
    before the configured cut-off date.
    """
    progression = load_app_config().progression

    if user_id in progression.early_adopter_user_ids:
        return True

    if not progression.early_adopter_until or not joined_at:
        return False

    cutoff = progression.early_adopter_until
    if isinstance(cutoff, datetime):
        cutoff_date = cutoff.date()
    elif isinstance(cutoff, date):
        cutoff_date = cutoff
    else:
        cutoff_date = date.fromisoformat(str(cutoff)[:10])

    joined = datetime.fromisoformat(joined_at)
    if joined.tzinfo is None:
        joined = joined.replace(tzinfo=timezone.utc)
    return joined.date() <= cutoff_date


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None
