"""Configuration package for FORGE-Z."""

from forgez.config.app_config import (
    AppConfig,
    FeedbackConfig,
    ProgressionConfig,
    TeamsConfig,
    get_upload_limit,
    is_early_adopter,
    load_app_config,
)
from forgez.config.archetypes import (
    Archetype,
    calculate_archetype,
    get_archetype,
    list_archetypes,
    load_archetypes,
)

__all__ = [
    "AppConfig",
    "FeedbackConfig",
    "ProgressionConfig",
    "TeamsConfig",
    "get_upload_limit",
    "is_early_adopter",
    "load_app_config",
    "Archetype",
    "calculate_archetype",
    "get_archetype",
    "list_archetypes",
    "load_archetypes",
]
