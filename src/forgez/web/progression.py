"""Progression state management for the Web API.

Serializes read-modify-write cycles on each player's progression file so
concurrent requests for the same user do not lose XP.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import structlog

from forgez.config.app_config import load_app_config
from forgez.core.progression import (
    PlayerProgress,
    load_player_progress,
    save_player_progress,
)

logger = structlog.get_logger(__name__)


class ProgressionManager:
    """Loads and saves player progression under per-user locks."""

    def __init__(self, state_dir: Path | None = None):
        self._state_dir = state_dir
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock = asyncio.Lock()

    @property
    def state_dir(self) -> Path:
        if self._state_dir is None:
            return load_app_config().state_dir
        return self._state_dir

    async def _user_lock(self, user_id: str) -> asyncio.Lock:
        async with self._lock:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = asyncio.Lock()
                self._locks[user_id] = lock
            return lock

    async def get(self, user_id: str) -> PlayerProgress:
        """Read a player's progression without modifying it."""
        lock = await self._user_lock(user_id)
        async with lock:
            return load_player_progress(user_id, self.state_dir)

    @asynccontextmanager
    async def update(self, user_id: str) -> AsyncIterator[PlayerProgress]:
        """Hold the player's lock, yield their progression and save it on exit.

        Nothing is saved if the block raises.
        """
        lock = await self._user_lock(user_id)
        async with lock:
            progress = load_player_progress(user_id, self.state_dir)
            yield progress
            save_player_progress(progress, self.state_dir)
            logger.debug(
                "progression_saved",
                user_id=user_id,
                total_xp=progress.xp.total_xp,
                level=progress.xp.level,
            )


# Global progression manager instance
_progression_manager: ProgressionManager | None = None


def get_progression_manager() -> ProgressionManager:
    """Get the global progression manager instance."""
    global _progression_manager
    if _progression_manager is None:
        _progression_manager = ProgressionManager()
    return _progression_manager


def reset_progression_manager() -> None:
    """Reset the progression manager (for testing)."""
    global _progression_manager
    _progression_manager = None
