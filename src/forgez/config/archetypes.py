"""Archetype catalog loader.

Loads player archetypes from data/config/archetypes_v1.yaml. Game
preferences, domain interests and focus areas are fixed vocabularies
used by the archetype quiz.

Usage:
    from forgez.config.archetypes import get_archetype, calculate_archetype

    archetype_id = calculate_archetype("sandbox")
    archetype = get_archetype(archetype_id)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
ARCHETYPES_FILE = Path("data/config/archetypes_v1.yaml")

DEFAULT_ARCHETYPE = "BUILDER"

GAME_PREFERENCES: dict[str, dict[str, str]] = {
    "sandbox": {
        "label": "Sandbox Games",
        "description": "Minecraft, Factorio, Kerbal Space Program - building and creating",
        "archetype": "BUILDER",
    },
    "strategy": {
        "label": "Strategy Games",
        "description": "Civilization, XCOM, Stellaris - planning and managing",
        "archetype": "STRATEGIST",
    },
    "adventure": {
        "label": "Adventure Games",
        "description": "Zelda, Mass Effect, Outer Wilds - exploring and discovering",
        "archetype": "EXPLORER",
    },
    "esports": {
        "label": "Competitive Games",
        "description": "League of Legends, Valorant, Rocket League - competing and winning",
        "archetype": "COMPETITOR",
    },
}

DOMAIN_INTERESTS: dict[str, str] = {
    "space": "Space & Aerospace",
    "energy": "Energy & Sustainability",
    "robotics": "Robotics & Automation",
    "defense": "Defense & Security",
}

FOCUS_AREAS: dict[str, str] = {
    "how_works": "How It Works",
    "how_build": "How to Build It",
    "who_makes": "Who Makes It",
    "who_operates": "Who Operates It",
}


@dataclass
class Archetype:
    """A player archetype used to personalize content."""

    id: str
    name: str
    tagline: str
    description: str
    traits: list[str] = field(default_factory=list)
    color: str = "#F97316"
    icon: str = "Hammer"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "name": self.name,
            "tagline": self.tagline,
            "description": self.description,
            "traits": list(self.traits),
            "color": self.color,
            "icon": self.icon,
        }


# Module-level cache
_cached_archetypes: dict[str, Archetype] | None = None


def _get_default_archetypes() -> dict[str, Archetype]:
    """Get default archetypes when config file is missing."""
    return {
        "BUILDER": Archetype(
            id="BUILDER",
            name="The Builder",
            tagline="Creating is understanding",
            description=(
                "You learn by doing. Whether it's code, circuits, or spacecraft, "
                "you want to build it with your own hands."
            ),
            traits=["Hands-on", "Creative", "Patient", "Detail-oriented"],
            color="#F97316",
            icon="Hammer",
        ),
        "STRATEGIST": Archetype(
            id="STRATEGIST",
            name="The Strategist",
            tagline="Planning is winning",
            description=(
                "You see the big picture. Complex systems, resource allocation "
                "and long-term planning excite you."
            ),
            traits=["Analytical", "Systematic", "Forward-thinking", "Calculated"],
            color="#3B82F6",
            icon="Lightbulb",
        ),
        "EXPLORER": Archetype(
            id="EXPLORER",
            name="The Explorer",
            tagline="Discovery is the goal",
            description=(
                "The unknown calls to you. New technologies and untested ideas "
                "drive your curiosity."
            ),
            traits=["Curious", "Adventurous", "Open-minded", "Adaptable"],
            color="#22C55E",
            icon="Compass",
        ),
        "COMPETITOR": Archetype(
            id="COMPETITOR",
            name="The Competitor",
            tagline="Excellence through challenge",
            description=(
                "You rise to competition. Benchmarks, leaderboards and measurable "
                "goals drive you to be your best."
            ),
            traits=["Driven", "Focused", "Resilient", "Performance-oriented"],
            color="#EF4444",
            icon="Trophy",
        ),
    }


def load_archetypes(force_reload: bool = False) -> dict[str, Archetype]:
    """Load all archetypes from config file.

    Args:
        force_reload: If True, ignore cache and reload from file.

    Returns:
        Dictionary mapping archetype ID to Archetype object.
    """
    global _cached_archetypes

    if _cached_archetypes is not None and not force_reload:
        return _cached_archetypes

    if not ARCHETYPES_FILE.exists():
        logger.warning("archetypes_file_not_found", path=str(ARCHETYPES_FILE))
        _cached_archetypes = _get_default_archetypes()
        return _cached_archetypes

    try:
        data = yaml.safe_load(ARCHETYPES_FILE.read_text(encoding="utf-8"))
        archetypes_data = data.get("archetypes", {})

        _cached_archetypes = {}
        for aid, adata in archetypes_data.items():
            _cached_archetypes[aid] = Archetype(
                id=adata.get("id", aid),
                name=adata.get("name", aid),
                tagline=adata.get("tagline", ""),
                description=adata.get("description", ""),
                traits=list(adata.get("traits", [])),
                color=adata.get("color", "#F97316"),
                icon=adata.get("icon", "Hammer"),
            )

        if not _cached_archetypes:
            raise ValueError("archetypes catalog is empty")

        logger.debug("loaded_archetypes", count=len(_cached_archetypes))
        return _cached_archetypes

    except Exception as e:
        logger.error("failed_to_load_archetypes", error=str(e))
        _cached_archetypes = _get_default_archetypes()
        return _cached_archetypes


def get_archetype(archetype_id: str) -> Archetype | None:
    """Get a specific archetype by ID.

    Args:
        archetype_id: The archetype identifier (e.g., "BUILDER")

    Returns:
        Archetype object or None if not found.
    """
    return load_archetypes().get(archetype_id)


def list_archetypes() -> list[Archetype]:
    """List all available archetypes."""
    return list(load_archetypes().values())


def calculate_archetype(game_preference: str | None) -> str:
    """Map a game preference to its archetype.

    Unknown or missing preferences fall back to BUILDER.
    """
    if game_preference and game_preference in GAME_PREFERENCES:
        return GAME_PREFERENCES[game_preference]["archetype"]
    return DEFAULT_ARCHETYPE


def clear_archetypes_cache() -> None:
    """Clear the archetypes cache."""
    global _cached_archetypes
    _cached_archetypes = None
