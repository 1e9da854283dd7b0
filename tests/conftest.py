"""Shared fixtures.

Every test runs inside its own tmp_path so the SQLite database and the
player state files never leak between tests.
"""

import pytest
from fastapi.testclient import TestClient

from forgez.config.app_config import clear_config_cache
from forgez.config.archetypes import clear_archetypes_cache
from forgez.db import ensure_db
from forgez.db.seed import seed_defaults
from forgez.web.api import create_app
from forgez.web.progression import reset_progression_manager


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """Isolated working directory with fresh caches."""
    monkeypatch.chdir(tmp_path)
    clear_config_cache()
    clear_archetypes_cache()
    reset_progression_manager()
    yield tmp_path
    clear_config_cache()
    clear_archetypes_cache()
    reset_progression_manager()


@pytest.fixture
def db(workspace):
    """Initialized database in the workspace."""
    ensure_db(workspace / "db" / "forgez.db")
    return workspace / "db" / "forgez.db"


@pytest.fixture
def seeded(db):
    """Database with the default skills, company and courses."""
    seed_defaults()
    return db


@pytest.fixture
def client(workspace):
    """Test client bound to the isolated workspace."""
    return TestClient(create_app())


@pytest.fixture
def auth():
    """Build headers identifying the caller."""

    def _headers(user_id: str) -> dict[str, str]:
        return {"X-User-Id": user_id}

    return _headers
