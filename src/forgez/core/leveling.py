"""XP leveling curve.

Level n starts at n * n * 100 XP, so the level for a total is
floor(sqrt(total / 100)), never below 1.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

XP_PER_LEVEL_UNIT = 100


@dataclass
class LevelProgress:
    """Progress toward the next level."""

    level: int
    current: int
    required: int
    progress: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "level": self.level,
            "current": self.current,
            "required": self.required,
            "progress": self.progress,
        }


def calculate_level(total_xp: int) -> int:
    """Return the level reached with total_xp."""
    total_xp = max(0, total_xp)
    return max(1, math.floor(math.sqrt(total_xp / XP_PER_LEVEL_UNIT)))


def xp_for_level(level: int) -> int:
    """Return the total XP at which level starts."""
    return level * level * XP_PER_LEVEL_UNIT


def xp_to_next_level(total_xp: int) -> LevelProgress:
    """Compute progress within the current level.

    Args:
        total_xp: Accumulated XP

    Returns:
        LevelProgress with XP gathered in this level, XP span of the level
        and percentage clamped to 0..100.
    """
    total_xp = max(0, total_xp)
    level = calculate_level(total_xp)
    current_level_xp = xp_for_level(level)
    next_level_xp = xp_for_level(level + 1)

    current = total_xp - current_level_xp
    required = next_level_xp - current_level_xp
    progress = max(0.0, min(100.0, current / required * 100))

    return LevelProgress(
        level=level,
        current=current,
        required=required,
        progress=round(progress, 2),
    )
