"""Player progression: XP, quests and achievements for one user.

State is persisted per user as JSON under {state_dir}/players/{user_id}.json.
Every XP award re-evaluates the level_up and xp_milestone achievements, and
every achievement unlock credits its XP reward, until nothing new unlocks.
"""

from __future__ import annotations

import json
import os
import re
import tempfile
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import structlog

from forgez.core.achievement_tracker import AchievementTracker, PendingUnlock
from forgez.core.achievements import AchievementTrigger, validate_trigger_data
from forgez.core.errors import ValidationError
from forgez.core.leveling import xp_to_next_level
from forgez.core.quests import QuestLog
from forgez.core.xp import XPAward, XPLedger, XPSource

logger = structlog.get_logger(__name__)

# =============================================================================
# CONSTANTS
# =============================================================================

PROGRESS_SCHEMA = "player_progress_v1"
PLAYERS_DIRNAME = "players"

USER_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")

ARCHETYPE_COMPLETE_XP = 100
PROJECT_UPLOAD_XP = 25

# XP credited when a client-side event is recorded
EVENT_REWARDS: dict[AchievementTrigger, tuple[int, XPSource]] = {
    AchievementTrigger.QUIZ_ANSWER: (10, XPSource.QUIZ_CORRECT),
    AchievementTrigger.DEEP_DIVE_COMPLETE: (50, XPSource.DEEP_DIVE_COMPLETE),
    AchievementTrigger.HACKATHON_JOIN: (25, XPSource.HACKATHON_JOIN),
    AchievementTrigger.HACKATHON_SUBMIT: (100, XPSource.HACKATHON_SUBMIT),
    AchievementTrigger.ROLE_EXPLORE: (5, XPSource.ROLE_EXPLORE),
    AchievementTrigger.COMPANY_VIEW: (5, XPSource.COMPANY_VIEW),
    AchievementTrigger.COURSE_START: (10, XPSource.COURSE_START),
    AchievementTrigger.GUILD_JOIN: (25, XPSource.GUILD_JOIN),
    AchievementTrigger.FEEDBACK_GIVE: (15, XPSource.PEER_REVIEW),
}

# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class ProgressOutcome:
    """Everything that changed while handling one action."""

    xp_awarded: int = 0
    transactions: list[XPAward] = field(default_factory=list)
    unlocks: list[PendingUnlock] = field(default_factory=list)
    progress_updates: list[dict[str, Any]] = field(default_factory=list)
    level_before: int = 1
    level: int = 1
    total_xp: int = 0

    @property
    def leveled_up(self) -> bool:
        return self.level > self.level_before

    def merge(self, other: ProgressOutcome) -> None:
        self.xp_awarded += other.xp_awarded
        self.transactions.extend(other.transactions)
        self.unlocks.extend(other.unlocks)
        self.progress_updates.extend(other.progress_updates)
        self.level = other.level
        self.total_xp = other.total_xp

    def to_dict(self) -> dict[str, Any]:
        return {
            "xp_awarded": self.xp_awarded,
            "total_xp": self.total_xp,
            "level": self.level,
            "leveled_up": self.leveled_up,
            "unlocked": [u.to_dict() for u in self.unlocks],
            "progress": self.progress_updates,
        }


@dataclass
class PlayerProgress:
    """Aggregated progression state for a user."""

    user_id: str
    xp: XPLedger = field(default_factory=XPLedger)
    quests: QuestLog = field(default_factory=QuestLog)
    achievements: AchievementTracker = field(default_factory=AchievementTracker)
    created_at: str = ""
    updated_at: str = ""

    def __post_init__(self):
        now = datetime.now(timezone.utc).isoformat()
        if not self.created_at:
            self.created_at = now
        if not self.updated_at:
            self.updated_at = now

    # -------------------------------------------------------------------------
    # XP and achievements
    # -------------------------------------------------------------------------

    def _new_outcome(self) -> ProgressOutcome:
        return ProgressOutcome(
            level_before=self.xp.level,
            level=self.xp.level,
            total_xp=self.xp.total_xp,
        )

    def _finish(self, outcome: ProgressOutcome) -> ProgressOutcome:
        outcome.level = self.xp.level
        outcome.total_xp = self.xp.total_xp
        self.updated_at = datetime.now(timezone.utc).isoformat()
        return outcome

    def award_xp(
        self,
        amount: int,
        source: XPSource | str,
        source_id: str | None = None,
        description: str | None = None,
    ) -> ProgressOutcome:
        """Credit XP and cascade the XP-driven achievements."""
        outcome = self._new_outcome()
        award = self.xp.add_xp(amount, source, source_id, description)
        outcome.xp_awarded += award.transaction.amount
        outcome.transactions.append(award)
        logger.info(
            "xp.awarded",
            user_id=self.user_id,
            amount=amount,
            source=award.transaction.source,
            total_xp=self.xp.total_xp,
        )
        self._cascade_xp_triggers(outcome)
        return self._finish(outcome)

    def trigger(
        self, trigger: AchievementTrigger | str, data: dict[str, Any] | None = None
    ) -> ProgressOutcome:
        """Evaluate achievements for a trigger and credit their XP."""
        try:
            trigger = AchievementTrigger(trigger)
        except ValueError:
            raise ValidationError(f"Invalid trigger '{trigger}'", field="trigger")
        validate_trigger_data(data or {})

        outcome = self._new_outcome()
        self._evaluate(trigger, data or {}, outcome)
        self._cascade_xp_triggers(outcome)
        return self._finish(outcome)

    def _evaluate(
        self, trigger: AchievementTrigger, data: dict[str, Any], outcome: ProgressOutcome
    ) -> list[PendingUnlock]:
        unlocks, updates = self.achievements.evaluate(trigger, data)
        outcome.unlocks.extend(unlocks)
        outcome.progress_updates.extend(updates)
        for unlock in unlocks:
            award = self.xp.add_xp(
                unlock.xp_awarded,
                XPSource.ACHIEVEMENT_UNLOCK,
                source_id=unlock.achievement_id,
                description=f"Achievement unlocked: {unlock.achievement.name}",
            )
            outcome.xp_awarded += award.transaction.amount
            outcome.transactions.append(award)
        return unlocks

    def _cascade_xp_triggers(self, outcome: ProgressOutcome) -> None:
        while True:
            unlocked = self._evaluate(
                AchievementTrigger.LEVEL_UP, {"level": self.xp.level}, outcome
            )
            unlocked += self._evaluate(
                AchievementTrigger.XP_MILESTONE, {"totalXP": self.xp.total_xp}, outcome
            )
            if not unlocked:
                break

    def record_event(
        self, trigger: AchievementTrigger | str, data: dict[str, Any] | None = None
    ) -> ProgressOutcome:
        """Record a player event: credit its XP reward (if any) and evaluate it."""
        try:
            trigger = AchievementTrigger(trigger)
        except ValueError:
            raise ValidationError(f"Invalid trigger '{trigger}'", field="trigger")
        validate_trigger_data(data or {})

        outcome = self._new_outcome()
        reward = EVENT_REWARDS.get(trigger)
        if reward is not None:
            amount, source = reward
            source_id = (data or {}).get("sourceId")
            outcome.merge(self.award_xp(amount, source, source_id=source_id))
        outcome.merge(self.trigger(trigger, data))
        return self._finish(outcome)

    # -------------------------------------------------------------------------
    # Quests
    # -------------------------------------------------------------------------

    def start_quest(self, number: int) -> None:
        self.quests.start(number)
        self.updated_at = datetime.now(timezone.utc).isoformat()

    def complete_quest(self, number: int, xp_override: int | None = None) -> ProgressOutcome:
        """Complete a quest, credit its XP and fire quest_complete.

        Completing an already completed quest changes nothing.
        """
        outcome = self._new_outcome()
        entry, newly_completed = self.quests.complete(number, xp_override)
        if not newly_completed:
            return self._finish(outcome)

        if entry.xp_earned > 0:
            outcome.merge(
                self.award_xp(
                    entry.xp_earned,
                    XPSource.QUEST_COMPLETION,
                    source_id=str(number),
                    description=f"Quest {number} completed",
                )
            )
        outcome.merge(
            self.trigger(
                AchievementTrigger.QUEST_COMPLETE,
                {"questNumber": number, "completedQuests": self.quests.completed_count()},
            )
        )
        return self._finish(outcome)

    def complete_archetype(self, archetype: str) -> ProgressOutcome:
        """Credit the archetype quiz, complete quest 1 and fire archetype_complete."""
        outcome = self._new_outcome()
        outcome.merge(
            self.award_xp(
                ARCHETYPE_COMPLETE_XP,
                XPSource.ARCHETYPE_COMPLETE,
                description=f"Archetype discovered: {archetype}",
            )
        )
        outcome.merge(self.complete_quest(1))
        outcome.merge(
            self.trigger(AchievementTrigger.ARCHETYPE_COMPLETE, {"archetype": archetype})
        )
        return self._finish(outcome)

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    def reset(self) -> None:
        self.xp.reset()
        self.quests = QuestLog()
        self.achievements.reset()
        self.updated_at = datetime.now(timezone.utc).isoformat()

    def summary(self) -> dict[str, Any]:
        """Compact view for profile responses."""
        return {
            "total_xp": self.xp.total_xp,
            "level": self.xp.level,
            "level_progress": xp_to_next_level(self.xp.total_xp).to_dict(),
            "quests_completed": self.quests.completed_count(),
            "current_quest": self.quests.current_quest,
            "achievements_unlocked": self.achievements.unlocked_count(),
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "$schema": PROGRESS_SCHEMA,
            "user_id": self.user_id,
            "xp": self.xp.to_dict(),
            "quests": self.quests.to_dict(),
            "achievements": self.achievements.to_dict(),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PlayerProgress:
        return cls(
            user_id=data["user_id"],
            xp=XPLedger.from_dict(data.get("xp", {})),
            quests=QuestLog.from_dict(data.get("quests", {})),
            achievements=AchievementTracker.from_dict(data.get("achievements", {})),
            created_at=data.get("created_at", ""),
            updated_at=data.get("updated_at", ""),
        )


# =============================================================================
# PERSISTENCE
# =============================================================================


def _player_path(user_id: str, state_dir: Path) -> Path:
    if not USER_ID_PATTERN.match(user_id):
        raise ValidationError(f"Invalid user id '{user_id}'", field="user_id")
    return state_dir / PLAYERS_DIRNAME / f"{user_id}.json"


def load_player_progress(user_id: str, state_dir: Path | None = None) -> PlayerProgress:
    """Load a player's progression from disk.

    Args:
        user_id: Player identifier
        state_dir: State directory. Defaults to ./data/state

    Returns:
        PlayerProgress. A fresh state if the file is missing or invalid.
    """
    if state_dir is None:
        state_dir = Path("data/state")

    path = _player_path(user_id, state_dir)

    if not path.exists():
        logger.debug("player_progress_not_found", user_id=user_id)
        return PlayerProgress(user_id=user_id)

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("player_progress_unreadable", user_id=user_id, error=str(e))
        return PlayerProgress(user_id=user_id)

    if data.get("$schema") != PROGRESS_SCHEMA:
        logger.warning(
            "player_progress_invalid_schema",
            expected=PROGRESS_SCHEMA,
            got=data.get("$schema"),
        )
        return PlayerProgress(user_id=user_id)

    data["user_id"] = user_id
    return PlayerProgress.from_dict(data)


def save_player_progress(progress: PlayerProgress, state_dir: Path | None = None) -> Path:
    """Save a player's progression atomically.

    Returns:
        Path to the saved file
    """
    if state_dir is None:
        state_dir = Path("data/state")

    path = _player_path(progress.user_id, state_dir)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".tmp-", suffix=".json")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(progress.to_dict(), f, indent=2, ensure_ascii=False)
        os.replace(tmp_name, path)
    except Exception:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise

    logger.debug("player_progress_saved", user_id=progress.user_id, path=str(path))
    return path
