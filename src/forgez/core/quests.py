"""Quest catalog and per-player quest log.

Eight narrative quests are unlocked one after another. Completing quest n
unlocks quest n + 1.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

import structlog

from forgez.core.errors import NotFoundError, ValidationError

logger = structlog.get_logger(__name__)


class QuestStatus(str, Enum):
    LOCKED = "locked"
    AVAILABLE = "available"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass(frozen=True)
class Quest:
    """A quest definition."""

    number: int
    title: str
    subtitle: str
    description: str
    xp_reward: int
    icon: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "number": self.number,
            "title": self.title,
            "subtitle": self.subtitle,
            "description": self.description,
            "xp_reward": self.xp_reward,
            "icon": self.icon,
        }


QUESTS: tuple[Quest, ...] = (
    Quest(1, "Character Creation", "Discover Your Archetype",
          "Define your playstyle and discover which career archetype matches your personality.",
          100, "UserCircle"),
    Quest(2, "The Epic Artifact", "Behold Amazing Technology",
          "Explore the technology that defines your chosen industry.",
          25, "Sparkles"),
    Quest(3, "Deep Dive", "Unlock Knowledge",
          "Dive deep into how things work, how they are built, and who makes them happen.",
          75, "BookOpen"),
    Quest(4, "The Guilds", "Discover Companies",
          "Explore real companies across regions. Find your future workplace.",
          10, "Building2"),
    Quest(5, "Talent Hunt", "Explore Career Roles",
          "Discover roles, salaries, and skill requirements for your chosen field.",
          25, "Target"),
    Quest(6, "Leader's Wisdom", "Learn Soft Skills",
          "Gain insights from industry leaders and assess your soft skills.",
          100, "Award"),
    Quest(7, "Skill Forge", "Level Up Your Skills",
          "Find courses and resources to build the skills you need.",
          25, "Flame"),
    Quest(8, "Guild Hall", "Join the Community",
          "Connect with peers, join hackathons, and build your portfolio.",
          100, "Users"),
)

TOTAL_QUESTS = len(QUESTS)


def get_quest(number: int) -> Quest | None:
    """Get a quest definition by number."""
    if 1 <= number <= TOTAL_QUESTS:
        return QUESTS[number - 1]
    return None


@dataclass
class QuestProgress:
    """A player's progress on one quest."""

    quest_number: int
    status: QuestStatus = QuestStatus.LOCKED
    xp_earned: int = 0
    started_at: str | None = None
    completed_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "quest_number": self.quest_number,
            "status": self.status.value,
            "xp_earned": self.xp_earned,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> QuestProgress:
        return cls(
            quest_number=data["quest_number"],
            status=QuestStatus(data.get("status", "locked")),
            xp_earned=data.get("xp_earned", 0),
            started_at=data.get("started_at"),
            completed_at=data.get("completed_at"),
        )


def _initial_progress() -> dict[int, QuestProgress]:
    return {
        q.number: QuestProgress(
            quest_number=q.number,
            status=QuestStatus.AVAILABLE if q.number == 1 else QuestStatus.LOCKED,
        )
        for q in QUESTS
    }


@dataclass
class QuestLog:
    """All quest progress for one player."""

    progress: dict[int, QuestProgress] = field(default_factory=_initial_progress)
    current_quest: int = 1
    pending_quest_complete: int | None = None

    def _get(self, number: int) -> QuestProgress:
        if get_quest(number) is None:
            raise NotFoundError("Quest", number)
        return self.progress[number]

    def status(self, number: int) -> QuestStatus:
        return self._get(number).status

    def start(self, number: int) -> QuestProgress:
        """Mark a quest as in progress.

        Raises:
            NotFoundError: Unknown quest number
            ValidationError: Quest is locked or already completed
        """
        entry = self._get(number)
        if entry.status == QuestStatus.LOCKED:
            raise ValidationError(f"Quest {number} is locked")
        if entry.status == QuestStatus.COMPLETED:
            raise ValidationError(f"Quest {number} is already completed")

        if entry.status == QuestStatus.AVAILABLE:
            entry.status = QuestStatus.IN_PROGRESS
            entry.started_at = datetime.now(timezone.utc).isoformat()
        self.current_quest = number
        return entry

    def complete(self, number: int, xp_earned: int | None = None) -> tuple[QuestProgress, bool]:
        """Mark a quest as completed and unlock the next one.

        Args:
            number: Quest number
            xp_earned: Override for the quest's XP reward

        Returns:
            Tuple of (progress entry, newly_completed). Completing an already
            completed quest returns newly_completed=False and changes nothing.

        Raises:
            NotFoundError: Unknown quest number
            ValidationError: Quest is still locked
        """
        entry = self._get(number)
        if entry.status == QuestStatus.COMPLETED:
            return entry, False
        if entry.status == QuestStatus.LOCKED:
            raise ValidationError(f"Quest {number} is locked")

        quest = get_quest(number)
        now = datetime.now(timezone.utc).isoformat()
        entry.status = QuestStatus.COMPLETED
        entry.xp_earned = xp_earned if xp_earned is not None else quest.xp_reward
        entry.started_at = entry.started_at or now
        entry.completed_at = now

        next_entry = self.progress.get(number + 1)
        if next_entry is not None and next_entry.status == QuestStatus.LOCKED:
            next_entry.status = QuestStatus.AVAILABLE

        self.current_quest = min(number + 1, TOTAL_QUESTS)
        self.pending_quest_complete = number

        logger.info("quest.completed", quest_number=number, xp_earned=entry.xp_earned)
        return entry, True

    def acknowledge_complete(self) -> None:
        self.pending_quest_complete = None

    def completed_count(self) -> int:
        return sum(1 for p in self.progress.values() if p.status == QuestStatus.COMPLETED)

    def total_quest_xp(self) -> int:
        return sum(p.xp_earned for p in self.progress.values() if p.status == QuestStatus.COMPLETED)

    def to_list(self) -> list[dict[str, Any]]:
        """Quest definitions merged with progress, in order."""
        return [
            {**q.to_dict(), **self.progress[q.number].to_dict()}
            for q in QUESTS
        ]

    def to_dict(self) -> dict[str, Any]:
        return {
            "progress": [p.to_dict() for p in self.progress.values()],
            "current_quest": self.current_quest,
            "pending_quest_complete": self.pending_quest_complete,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> QuestLog:
        log = cls()
        for item in data.get("progress", []):
            entry = QuestProgress.from_dict(item)
            if entry.quest_number in log.progress:
                log.progress[entry.quest_number] = entry
        log.current_quest = data.get("current_quest", 1)
        log.pending_quest_complete = data.get("pending_quest_complete")
        return log
