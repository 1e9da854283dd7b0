"""Tests for the quest catalog and quest log."""

import pytest

from forgez.core.errors import NotFoundError, ValidationError
from forgez.core.quests import QUESTS, TOTAL_QUESTS, QuestLog, QuestStatus, get_quest


class TestQuestCatalog:
    """Tests for quest definitions."""

    def test_eight_quests_in_order(self):
        """Eight quests numbered in order."""
        assert TOTAL_QUESTS == 8
        assert [q.number for q in QUESTS] == list(range(1, 9))

    def test_rewards(self):
        """Quest rewards match the catalog."""
        assert [q.xp_reward for q in QUESTS] == [100, 25, 75, 10, 25, 100, 25, 100]

    def test_get_quest_out_of_range(self):
        """Out of range quest numbers return None."""
        assert get_quest(0) is None
        assert get_quest(9) is None
        assert get_quest(4).title == "The Guilds"


class TestQuestLog:
    """Tests for QuestLog transitions."""

    def test_initial_state(self):
        """Only the first quest is available."""
        log = QuestLog()
        assert log.status(1) == QuestStatus.AVAILABLE
        assert all(log.status(n) == QuestStatus.LOCKED for n in range(2, 9))
        assert log.current_quest == 1

    def test_start_marks_in_progress(self):
        """Starting an available quest marks it in progress."""
        log = QuestLog()
        entry = log.start(1)
        assert entry.status == QuestStatus.IN_PROGRESS
        assert entry.started_at is not None

    def test_start_locked_quest_fails(self):
        """Locked quests cannot be started."""
        log = QuestLog()
        with pytest.raises(ValidationError):
            log.start(2)

    def test_complete_unlocks_next(self):
        """Completing a quest unlocks the next one."""
        log = QuestLog()
        entry, newly = log.complete(1)

        assert newly is True
        assert entry.status == QuestStatus.COMPLETED
        assert entry.xp_earned == 100
        assert log.status(2) == QuestStatus.AVAILABLE
        assert log.current_quest == 2
        assert log.pending_quest_complete == 1

    def test_complete_with_xp_override(self):
        """XP override replaces the default reward."""
        log = QuestLog()
        entry, _ = log.complete(1, xp_earned=40)
        assert entry.xp_earned == 40
        assert log.total_quest_xp() == 40

    def test_complete_twice_changes_nothing(self):
        """Second completion is a no-op."""
        log = QuestLog()
        first, _ = log.complete(1)
        completed_at = first.completed_at
        log.acknowledge_complete()

        entry, newly = log.complete(1)
        assert newly is False
        assert entry.completed_at == completed_at
        assert log.pending_quest_complete is None

    def test_complete_locked_quest_fails(self):
        """Locked quests cannot be completed."""
        log = QuestLog()
        with pytest.raises(ValidationError):
            log.complete(3)

    def test_unknown_quest(self):
        """Unknown quest numbers raise."""
        log = QuestLog()
        with pytest.raises(NotFoundError):
            log.start(12)

    def test_last_quest_keeps_current_at_eight(self):
        """Current quest stays at eight after the last one."""
        log = QuestLog()
        for n in range(1, 9):
            log.complete(n)
        assert log.completed_count() == 8
        assert log.current_quest == 8

    def test_start_completed_quest_fails(self):
        """Completed quests cannot be restarted."""
        log = QuestLog()
        log.complete(1)
        with pytest.raises(ValidationError):
            log.start(1)


class TestQuestLogSerialization:
    """Tests for to_dict / from_dict."""

    def test_roundtrip_keeps_status(self):
        """Statuses survive serialization."""
        log = QuestLog()
        log.complete(1)
        log.start(2)
        restored = QuestLog.from_dict(log.to_dict())
        assert restored.status(1) == QuestStatus.COMPLETED
        assert restored.status(2) == QuestStatus.IN_PROGRESS
        assert restored.current_quest == 2

    def test_to_list_merges_definitions(self):
        """Listing merges catalog definitions."""
        items = QuestLog().to_list()
        assert len(items) == 8
        assert items[0]["title"] == "Character Creation"
        assert items[0]["status"] == "available"
