"""Tests for the application config and archetype catalog."""

from pathlib import Path

import pytest

from forgez.config.app_config import (
    get_upload_limit,
    is_early_adopter,
    load_app_config,
)
from forgez.config.archetypes import (
    DEFAULT_ARCHETYPE,
    calculate_archetype,
    get_archetype,
    list_archetypes,
    load_archetypes,
)


def write_config(root: Path, text: str) -> None:
    path = root / "data" / "config" / "forgez_config_v1.yaml"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)


class TestLoadAppConfig:
    """Tests for load_app_config."""

    def test_defaults_without_file(self, workspace):
        """Built-in defaults apply without a config file."""
        config = load_app_config()
        assert config.db_path == Path("db/forgez.db")
        assert config.state_dir == Path("data/state")
        assert config.feedback.default_min_respondents == 3
        assert config.teams.max_members == 10
        assert config.pagination.max_limit == 50

    def test_file_overrides_and_keeps_missing_keys(self, workspace):
        """File values override defaults section by section."""
        write_config(
            workspace,
            "paths:\n  db_path: tmp/other.db\n"
            "teams:\n  max_members: 6\n"
            "uploads:\n  audio: 1024\n",
        )
        config = load_app_config(force_reload=True)

        assert config.db_path == Path("tmp/other.db")
        assert config.state_dir == Path("data/state")
        assert config.teams.max_members == 6
        assert config.teams.min_members == 2
        assert config.uploads["audio"] == 1024
        assert config.uploads["code"] == 10 * 1024 * 1024

    def test_config_is_cached(self, workspace):
        """Config is loaded once until reloaded."""
        first = load_app_config()
        write_config(workspace, "teams:\n  max_members: 3\n")
        assert load_app_config() is first
        assert load_app_config(force_reload=True).teams.max_members == 3


class TestUploadLimits:
    """Tests for get_upload_limit."""

    @pytest.mark.parametrize(
        "kind, megabytes",
        [("audio", 100), ("video", 100), ("zip", 100), ("code", 10), ("pdf", 50), ("image", 10)],
    )
    def test_default_limits(self, workspace, kind, megabytes):
        """Default upload limits per kind."""
        assert get_upload_limit(kind) == megabytes * 1024 * 1024

    def test_unknown_kind(self, workspace):
        """Unknown upload kind has no limit."""
        assert get_upload_limit("exe") is None


class TestEarlyAdopter:
    """Tests for is_early_adopter."""

    def test_no_cutoff_by_default(self, workspace):
        """Nobody is an early adopter by default."""
        assert is_early_adopter("ada", "2024-01-01T00:00:00+00:00") is False

    def test_cutoff_date(self, workspace):
        """Users created before the cutoff are early adopters."""
        write_config(workspace, "progression:\n  early_adopter_until: '2025-12-31'\n")
        load_app_config(force_reload=True)

        assert is_early_adopter("ada", "2025-12-31T23:00:00+00:00") is True
        assert is_early_adopter("ada", "2026-01-01T00:00:00+00:00") is False
        assert is_early_adopter("ada", None) is False

    def test_unquoted_yaml_date(self, workspace):
        """YAML parses an unquoted date into a date object."""
        write_config(workspace, "progression:\n  early_adopter_until: 2025-06-30\n")
        load_app_config(force_reload=True)
        assert is_early_adopter("ada", "2025-06-01T10:00:00") is True

    def test_listed_user(self, workspace):
        """Listed user ids are early adopters."""
        write_config(workspace, "progression:\n  early_adopter_user_ids: [ada]\n")
        load_app_config(force_reload=True)
        assert is_early_adopter("ada") is True
        assert is_early_adopter("bob") is False


class TestArchetypes:
    """Tests for the archetype catalog."""

    def test_builtin_catalog(self, workspace):
        """Built-in catalog has all archetypes."""
        ids = {a.id for a in list_archetypes()}
        assert ids == {"BUILDER", "STRATEGIST", "EXPLORER", "COMPETITOR"}
        assert get_archetype("EXPLORER").tagline == "Discovery is the goal"
        assert get_archetype("WIZARD") is None

    def test_loads_from_file(self, workspace):
        """Archetypes are read from YAML."""
        path = workspace / "data" / "config" / "archetypes_v1.yaml"
        path.parent.mkdir(parents=True)
        path.write_text(
            "archetypes:\n"
            "  MAKER:\n"
            "    name: The Maker\n"
            "    traits: [Handy]\n"
        )
        archetypes = load_archetypes(force_reload=True)
        assert list(archetypes) == ["MAKER"]
        assert archetypes["MAKER"].traits == ["Handy"]

    def test_broken_file_falls_back_to_builtin(self, workspace):
        """Invalid YAML falls back to the built-in catalog."""
        path = workspace / "data" / "config" / "archetypes_v1.yaml"
        path.parent.mkdir(parents=True)
        path.write_text("archetypes: {}\n")
        assert "BUILDER" in load_archetypes(force_reload=True)

    @pytest.mark.parametrize(
        "preference, archetype",
        [
            ("sandbox", "BUILDER"),
            ("strategy", "STRATEGIST"),
            ("adventure", "EXPLORER"),
            ("esports", "COMPETITOR"),
            ("puzzle", DEFAULT_ARCHETYPE),
            (None, DEFAULT_ARCHETYPE),
        ],
    )
    def test_calculate_archetype(self, preference, archetype):
        """Quiz answers map to an archetype."""
        assert calculate_archetype(preference) == archetype
