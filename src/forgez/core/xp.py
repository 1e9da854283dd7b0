"""XP ledger: transactions, totals and level-up detection."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

import structlog

from forgez.core.errors import ValidationError
from forgez.core.leveling import calculate_level

logger = structlog.get_logger(__name__)


class XPSource(str, Enum):
    """Where an XP award came from."""

    QUEST_COMPLETION = "quest_completion"
    QUIZ_CORRECT = "quiz_correct"
    PROJECT_UPLOAD = "project_upload"
    PEER_REVIEW = "peer_review"
    HACKATHON_JOIN = "hackathon_join"
    HACKATHON_SUBMIT = "hackathon_submit"
    GUILD_JOIN = "guild_join"
    COMPANY_VIEW = "company_view"
    ROLE_EXPLORE = "role_explore"
    COURSE_START = "course_start"
    DEEP_DIVE_COMPLETE = "deep_dive_complete"
    ARCHETYPE_COMPLETE = "archetype_complete"
    ACHIEVEMENT_UNLOCK = "achievement_unlock"


@dataclass
class XPTransaction:
    """A single XP award."""

    id: str
    amount: int
    source: str
    source_id: str | None = None
    description: str | None = None
    created_at: str = ""

    def __post_init__(self):
        if not self.created_at:
            self.created_at = datetime.now(timezone.utc).isoformat()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "amount": self.amount,
            "source": self.source,
            "source_id": self.source_id,
            "description": self.description,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> XPTransaction:
        return cls(
            id=data["id"],
            amount=data["amount"],
            source=data["source"],
            source_id=data.get("source_id"),
            description=data.get("description"),
            created_at=data.get("created_at", ""),
        )


@dataclass
class XPAward:
    """Result of adding XP."""

    transaction: XPTransaction
    total_xp: int
    previous_level: int
    level: int

    @property
    def leveled_up(self) -> bool:
        return self.level > self.previous_level


@dataclass
class XPLedger:
    """XP totals and history for one player."""

    total_xp: int = 0
    level: int = 1
    transactions: list[XPTransaction] = field(default_factory=list)
    recent_xp_gain: int | None = None
    pending_level_up: dict[str, int] | None = None

    def add_xp(
        self,
        amount: int,
        source: XPSource | str,
        source_id: str | None = None,
        description: str | None = None,
    ) -> XPAward:
        """Record an XP award.

        Args:
            amount: Positive XP amount
            source: XPSource value
            source_id: Optional id of the entity that produced the award
            description: Optional human-readable note

        Returns:
            XPAward with the new total and level

        Raises:
            ValidationError: If amount is not positive or source is unknown
        """
        if amount <= 0:
            raise ValidationError("XP amount must be positive", field="amount")
        try:
            source_value = XPSource(source).value
        except ValueError:
            raise ValidationError(f"Invalid XP source '{source}'", field="source")

        transaction = XPTransaction(
            id=uuid.uuid4().hex,
            amount=amount,
            source=source_value,
            source_id=source_id,
            description=description,
        )

        previous_level = self.level
        self.total_xp += amount
        self.level = calculate_level(self.total_xp)
        self.transactions.append(transaction)
        self.recent_xp_gain = amount

        if self.level > previous_level:
            self.pending_level_up = {"from": previous_level, "to": self.level}
            logger.info("xp.level_up", from_level=previous_level, to_level=self.level)

        return XPAward(
            transaction=transaction,
            total_xp=self.total_xp,
            previous_level=previous_level,
            level=self.level,
        )

    def clear_recent_xp(self) -> None:
        self.recent_xp_gain = None

    def acknowledge_level_up(self) -> None:
        self.pending_level_up = None

    def xp_by_source(self, source: XPSource | str) -> int:
        """Sum of XP earned from one source."""
        value = source.value if isinstance(source, XPSource) else source
        return sum(t.amount for t in self.transactions if t.source == value)

    def recent_transactions(self, limit: int = 10) -> list[XPTransaction]:
        """Newest transactions first."""
        return list(reversed(self.transactions[-limit:]))

    def reset(self) -> None:
        self.total_xp = 0
        self.level = 1
        self.transactions = []
        self.recent_xp_gain = None
        self.pending_level_up = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_xp": self.total_xp,
            "level": self.level,
            "transactions": [t.to_dict() for t in self.transactions],
            "recent_xp_gain": self.recent_xp_gain,
            "pending_level_up": self.pending_level_up,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> XPLedger:
        total_xp = data.get("total_xp", 0)
        return cls(
            total_xp=total_xp,
            level=calculate_level(total_xp),
            transactions=[XPTransaction.from_dict(t) for t in data.get("transactions", [])],
            recent_xp_gain=data.get("recent_xp_gain"),
            pending_level_up=data.get("pending_level_up"),
        )
