"""Per-player achievement state: unlocks, progress counters and the
pending unlock queue shown to the player one at a time."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import structlog

from forgez.core.achievements import (
    ACHIEVEMENTS,
    AchievementCategory,
    AchievementDefinition,
    AchievementRarity,
    AchievementTrigger,
    check_criteria,
    get_achievement,
)

logger = structlog.get_logger(__name__)


@dataclass
class PendingUnlock:
    """An unlock waiting to be acknowledged by the player."""

    achievement_id: str
    xp_awarded: int
    unlocked_at: str

    @property
    def achievement(self) -> AchievementDefinition:
        return get_achievement(self.achievement_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "achievement": self.achievement.to_dict(),
            "xp_awarded": self.xp_awarded,
            "unlocked_at": self.unlocked_at,
        }

    def to_state(self) -> dict[str, Any]:
        return {
            "achievement_id": self.achievement_id,
            "xp_awarded": self.xp_awarded,
            "unlocked_at": self.unlocked_at,
        }


@dataclass
class AchievementTracker:
    """Unlock and progress bookkeeping for one player."""

    unlocked: dict[str, str] = field(default_factory=dict)  # id -> unlocked_at
    progress: dict[str, int] = field(default_factory=dict)
    pending_unlock: PendingUnlock | None = None
    unlock_queue: list[PendingUnlock] = field(default_factory=list)

    def is_unlocked(self, achievement_id: str) -> bool:
        return achievement_id in self.unlocked

    def evaluate(
        self, trigger: AchievementTrigger | str, data: dict[str, Any] | None = None
    ) -> tuple[list[PendingUnlock], list[dict[str, Any]]]:
        """Run every definition listening to trigger.

        Unlocked achievements are recorded and queued. XP is not awarded
        here; the caller credits each PendingUnlock.xp_awarded.

        Returns:
            Tuple of (new unlocks, progress updates as
            {achievement_id, current, target}).
        """
        trigger = AchievementTrigger(trigger)
        unlocks: list[PendingUnlock] = []
        updates: list[dict[str, Any]] = []

        for definition in ACHIEVEMENTS:
            if definition.trigger != trigger or self.is_unlocked(definition.id):
                continue

            result = check_criteria(
                definition, trigger, data, self.progress.get(definition.id, 0)
            )

            if result.new_progress is not None:
                self.progress[definition.id] = result.new_progress
                updates.append(
                    {
                        "achievement_id": definition.id,
                        "current": result.new_progress,
                        "target": definition.target_value,
                    }
                )

            if result.unlocked:
                unlocks.append(self._unlock(definition))

        return unlocks, updates

    def _unlock(self, definition: AchievementDefinition) -> PendingUnlock:
        now = datetime.now(timezone.utc).isoformat()
        self.unlocked[definition.id] = now
        pending = PendingUnlock(
            achievement_id=definition.id,
            xp_awarded=definition.xp_reward,
            unlocked_at=now,
        )
        if self.pending_unlock is None:
            self.pending_unlock = pending
        else:
            self.unlock_queue.append(pending)

        logger.info(
            "achievement.unlocked",
            achievement_id=definition.id,
            rarity=definition.rarity.value,
            xp=definition.xp_reward,
        )
        return pending

    def acknowledge_unlock(self) -> PendingUnlock | None:
        """Dismiss the current pending unlock and surface the next one."""
        self.pending_unlock = self.unlock_queue.pop(0) if self.unlock_queue else None
        return self.pending_unlock

    def update_progress(self, achievement_id: str, value: int) -> None:
        """Set a progress counter, clamped to the target.

        Ignored for unknown, already unlocked or non-progress achievements.
        """
        definition = get_achievement(achievement_id)
        if definition is None or not definition.has_progress or self.is_unlocked(achievement_id):
            return
        self.progress[achievement_id] = max(0, min(value, definition.target_value))

    def unlocked_count(self) -> int:
        return len(self.unlocked)

    def with_status(self, include_secret: bool = True) -> list[dict[str, Any]]:
        """All definitions merged with this player's status."""
        items = []
        for definition in ACHIEVEMENTS:
            unlocked_at = self.unlocked.get(definition.id)
            if definition.is_secret and unlocked_at is None and not include_secret:
                continue

            item = definition.to_dict()
            item["is_unlocked"] = unlocked_at is not None
            item["unlocked_at"] = unlocked_at
            if definition.has_progress:
                target = definition.target_value
                current = target if unlocked_at else self.progress.get(definition.id, 0)
                item["progress"] = {
                    "current": current,
                    "target": target,
                    "percentage": round(current / target * 100),
                }
            else:
                item["progress"] = None
            items.append(item)
        return items

    def category_counts(self) -> dict[str, dict[str, int]]:
        counts = {c.value: {"total": 0, "unlocked": 0} for c in AchievementCategory}
        for definition in ACHIEVEMENTS:
            counts[definition.category.value]["total"] += 1
            if self.is_unlocked(definition.id):
                counts[definition.category.value]["unlocked"] += 1
        return counts

    def rarity_counts(self) -> dict[str, dict[str, int]]:
        counts = {r.value: {"total": 0, "unlocked": 0} for r in AchievementRarity}
        for definition in ACHIEVEMENTS:
            counts[definition.rarity.value]["total"] += 1
            if self.is_unlocked(definition.id):
                counts[definition.rarity.value]["unlocked"] += 1
        return counts

    def achievement_xp(self) -> int:
        """Total XP earned from unlocked achievements."""
        return sum(
            get_achievement(aid).xp_reward for aid in self.unlocked if get_achievement(aid)
        )

    def reset(self) -> None:
        self.unlocked = {}
        self.progress = {}
        self.pending_unlock = None
        self.unlock_queue = []

    def to_dict(self) -> dict[str, Any]:
        return {
            "unlocked": dict(self.unlocked),
            "progress": dict(self.progress),
            "pending_unlock": self.pending_unlock.to_state() if self.pending_unlock else None,
            "unlock_queue": [p.to_state() for p in self.unlock_queue],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AchievementTracker:
        def _pending(item: dict[str, Any] | None) -> PendingUnlock | None:
            if not item or get_achievement(item.get("achievement_id", "")) is None:
                return None
            return PendingUnlock(
                achievement_id=item["achievement_id"],
                xp_awarded=item.get("xp_awarded", 0),
                unlocked_at=item.get("unlocked_at", ""),
            )

        queue = [p for p in (_pending(i) for i in data.get("unlock_queue", [])) if p]
        return cls(
            unlocked={k: v for k, v in data.get("unlocked", {}).items() if get_achievement(k)},
            progress=dict(data.get("progress", {})),
            pending_unlock=_pending(data.get("pending_unlock")),
            unlock_queue=queue,
        )
