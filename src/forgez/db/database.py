"""SQLite database connection and schema management.

Provides connection management and schema initialization for FORGE-Z.
"""

from __future__ import annotations

import json
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Generator

import structlog

logger = structlog.get_logger(__name__)

# Default database location
DEFAULT_DB_PATH = Path("db/forgez.db")

# Current connection target (module-level, set by init_db)
_db_path: Path | None = None

# Resolved paths whose schema has been created in this process
_initialized: set[Path] = set()


def init_db(db_path: Path | None = None) -> None:
    """Initialize database with schema.

    Creates the database file and all required tables if they don't exist.

    Args:
        db_path: Path to database file. Defaults to db/forgez.db
    """
    global _db_path
    _db_path = db_path or DEFAULT_DB_PATH

    # Ensure directory exists
    _db_path.parent.mkdir(parents=True, exist_ok=True)

    with get_db() as conn:
        _create_schema(conn)

    logger.info("database.initialized", path=str(_db_path))


def ensure_db(db_path: Path | None = None) -> None:
    """Point the connection at db_path, creating the schema on first use."""
    global _db_path
    db_path = db_path or DEFAULT_DB_PATH
    resolved = db_path.resolve()
    if resolved in _initialized and resolved.exists():
        _db_path = db_path
        return
    init_db(db_path)
    _initialized.add(resolved)


def get_db_path() -> Path:
    return _db_path or DEFAULT_DB_PATH


@contextmanager
def get_db() -> Generator[sqlite3.Connection, None, None]:
    """Get database connection as context manager.

    Yields:
        SQLite connection with row factory set to sqlite3.Row

    Example:
        with get_db() as conn:
            rows = conn.execute("SELECT * FROM projects").fetchall()
    """
    db_path = get_db_path()

    # Ensure directory exists
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")

    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def generate_id() -> str:
    """New primary key value."""
    return uuid.uuid4().hex


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def to_json(value: Any) -> str | None:
    """Encode a JSON column value; None stays NULL."""
    if value is None:
        return None
    return json.dumps(value, ensure_ascii=False)


def from_json(value: str | None, default: Any = None) -> Any:
    """Decode a JSON column value."""
    if value is None or value == "":
        return default
    return json.loads(value)


def build_update(
    fields: dict[str, Any],
    allowed: set[str],
    json_columns: set[str] = frozenset(),
    bool_columns: set[str] = frozenset(),
) -> tuple[str, list[Any]]:
    """Build a SET clause from whitelisted fields.

    Returns:
        Tuple of ("col1 = ?, col2 = ?", [values]). Empty clause if no
        allowed field is present.
    """
    columns = []
    values: list[Any] = []
    for key, value in fields.items():
        if key not in allowed:
            continue
        if key in json_columns:
            value = to_json(value)
        elif key in bool_columns and value is not None:
            value = int(bool(value))
        columns.append(f"{key} = ?")
        values.append(value)
    return ", ".join(columns), values


def _create_schema(conn: sqlite3.Connection) -> None:
    """Create database schema.

    Uses IF NOT EXISTS for idempotency.
    """
    conn.executescript(
        """
        -- Users: profile, consent and preferences
        CREATE TABLE IF NOT EXISTS users (
            id TEXT PRIMARY KEY,
            email TEXT,
            username TEXT,
            first_name TEXT,
            last_name TEXT,
            birthday TEXT,
            phone_number TEXT,
            phone_country_code TEXT,
            avatar_url TEXT,
            timezone TEXT NOT NULL DEFAULT 'UTC',
            dark_mode INTEGER NOT NULL DEFAULT 0,
            onboarding_completed INTEGER NOT NULL DEFAULT 0,
            privacy_policy_agreed_at TEXT,
            tos_agreed_at TEXT,
            marketing_agreed_at TEXT,
            headline TEXT,
            bio TEXT,
            location TEXT,
            linkedin_url TEXT,
            github_url TEXT,
            portfolio_url TEXT,
            current_role TEXT,
            current_company TEXT,
            years_experience INTEGER,
            is_open_to_work INTEGER NOT NULL DEFAULT 0,
            job_search_status TEXT,
            profile_visibility TEXT NOT NULL DEFAULT 'public'
                CHECK(profile_visibility IN ('public', 'private', 'connections')),
            show_skills_publicly INTEGER NOT NULL DEFAULT 1,
            show_projects_publicly INTEGER NOT NULL DEFAULT 1,
            is_employer INTEGER NOT NULL DEFAULT 0,
            employer_company_id TEXT,
            locale TEXT NOT NULL DEFAULT 'en' CHECK(locale IN ('en', 'pl')),
            world TEXT NOT NULL DEFAULT 'forgez',
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        -- Archetype quiz results (one per user)
        CREATE TABLE IF NOT EXISTS user_archetypes (
            user_id TEXT PRIMARY KEY REFERENCES users(id) ON DELETE CASCADE,
            archetype TEXT NOT NULL,
            game_preference TEXT NOT NULL,
            domain_interest TEXT NOT NULL,
            focus_area TEXT NOT NULL,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        -- Skills taxonomy (ESCO, SFIA, O*NET, FORGEZ, custom)
        CREATE TABLE IF NOT EXISTS skills_taxonomy (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            description TEXT,
            framework TEXT NOT NULL
                CHECK(framework IN ('ESCO', 'SFIA', 'ONET', 'FORGEZ', 'CUSTOM')),
            framework_id TEXT,
            category TEXT NOT NULL
                CHECK(category IN ('KNOWLEDGE', 'SKILL', 'COMPETENCE', 'TRANSVERSAL', 'LANGUAGE')),
            parent_skill_id TEXT REFERENCES skills_taxonomy(id),
            alt_labels TEXT,
            is_active INTEGER NOT NULL DEFAULT 1,
            created_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS user_skills (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            skill_id TEXT NOT NULL REFERENCES skills_taxonomy(id),
            proficiency_level INTEGER NOT NULL DEFAULT 1
                CHECK(proficiency_level BETWEEN 1 AND 5),
            verification_level TEXT NOT NULL DEFAULT 'SELF_ASSESSED',
            confidence_score REAL NOT NULL DEFAULT 0.5,
            evidence_count INTEGER NOT NULL DEFAULT 0,
            years_experience REAL,
            last_used_date TEXT,
            is_primary INTEGER NOT NULL DEFAULT 0,
            notes TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            UNIQUE(user_id, skill_id)
        );

        CREATE TABLE IF NOT EXISTS skill_endorsements (
            id TEXT PRIMARY KEY,
            user_skill_id TEXT NOT NULL REFERENCES user_skills(id) ON DELETE CASCADE,
            endorser_id TEXT NOT NULL,
            relationship TEXT,
            endorsement_text TEXT,
            created_at TEXT NOT NULL,
            UNIQUE(user_skill_id, endorser_id)
        );

        -- Portfolio projects
        CREATE TABLE IF NOT EXISTS projects (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            title TEXT NOT NULL,
            description TEXT,
            project_type TEXT NOT NULL,
            thumbnail_url TEXT,
            external_url TEXT,
            repository_url TEXT,
            start_date TEXT,
            end_date TEXT,
            is_ongoing INTEGER NOT NULL DEFAULT 0,
            visibility TEXT NOT NULL DEFAULT 'public'
                CHECK(visibility IN ('public', 'private', 'unlisted')),
            is_featured INTEGER NOT NULL DEFAULT 0,
            view_count INTEGER NOT NULL DEFAULT 0,
            tags TEXT,
            metadata TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS project_artifacts (
            id TEXT PRIMARY KEY,
            project_id TEXT NOT NULL REFERENCES projects(id) ON DELETE CASCADE,
            file_name TEXT NOT NULL,
            file_path TEXT NOT NULL,
            file_type TEXT NOT NULL,
            file_size INTEGER NOT NULL,
            mime_type TEXT,
            storage_bucket TEXT NOT NULL,
            upload_status TEXT NOT NULL DEFAULT 'COMPLETED'
                CHECK(upload_status IN ('PENDING', 'PROCESSING', 'COMPLETED', 'FAILED')),
            analysis_status TEXT NOT NULL DEFAULT 'PENDING'
                CHECK(analysis_status IN ('PENDING', 'PROCESSING', 'COMPLETED', 'FAILED')),
            analysis_result TEXT,
            metadata TEXT,
            created_at TEXT NOT NULL
        );

        -- 360-degree feedback
        CREATE TABLE IF NOT EXISTS feedback_requests (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            title TEXT NOT NULL,
            context TEXT,
            prompt_questions TEXT NOT NULL,
            status TEXT NOT NULL DEFAULT 'PENDING',
            expires_at TEXT NOT NULL,
            min_respondents INTEGER NOT NULL DEFAULT 3,
            max_respondents INTEGER NOT NULL DEFAULT 10,
            is_anonymous INTEGER NOT NULL DEFAULT 1,
            created_at TEXT NOT NULL,
            completed_at TEXT
        );

        CREATE TABLE IF NOT EXISTS feedback_respondents (
            id TEXT PRIMARY KEY,
            request_id TEXT NOT NULL REFERENCES feedback_requests(id) ON DELETE CASCADE,
            respondent_email TEXT NOT NULL,
            respondent_name TEXT,
            relationship TEXT,
            access_token TEXT NOT NULL UNIQUE,
            status TEXT NOT NULL DEFAULT 'PENDING',
            invited_at TEXT NOT NULL,
            responded_at TEXT
        );

        CREATE TABLE IF NOT EXISTS feedback_responses (
            id TEXT PRIMARY KEY,
            respondent_id TEXT NOT NULL REFERENCES feedback_respondents(id) ON DELETE CASCADE,
            feedback_type TEXT NOT NULL CHECK(feedback_type IN ('VOICE', 'TEXT', 'VIDEO')),
            content TEXT,
            audio_url TEXT,
            video_url TEXT,
            duration_seconds INTEGER,
            created_at TEXT NOT NULL
        );

        -- Teams
        CREATE TABLE IF NOT EXISTS teams (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            description TEXT,
            purpose TEXT,
            max_members INTEGER NOT NULL DEFAULT 5,
            skill_requirements TEXT,
            is_public INTEGER NOT NULL DEFAULT 1,
            is_active INTEGER NOT NULL DEFAULT 1,
            created_by TEXT NOT NULL,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS team_members (
            id TEXT PRIMARY KEY,
            team_id TEXT NOT NULL REFERENCES teams(id) ON DELETE CASCADE,
            user_id TEXT NOT NULL,
            role TEXT NOT NULL CHECK(role IN ('LEADER', 'MEMBER', 'ADVISOR', 'PENDING')),
            contribution_area TEXT,
            joined_at TEXT NOT NULL,
            UNIQUE(team_id, user_id)
        );

        -- Employers and jobs
        CREATE TABLE IF NOT EXISTS companies (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            slug TEXT NOT NULL UNIQUE,
            description TEXT,
            logo_url TEXT,
            website_url TEXT,
            industry TEXT,
            company_size TEXT,
            headquarters_location TEXT,
            country TEXT,
            tech_stack TEXT,
            is_verified INTEGER NOT NULL DEFAULT 0,
            is_featured INTEGER NOT NULL DEFAULT 0,
            is_active INTEGER NOT NULL DEFAULT 1,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS job_postings (
            id TEXT PRIMARY KEY,
            company_id TEXT NOT NULL REFERENCES companies(id) ON DELETE CASCADE,
            title TEXT NOT NULL,
            description TEXT NOT NULL,
            requirements TEXT,
            employment_type TEXT NOT NULL,
            location TEXT,
            is_remote INTEGER NOT NULL DEFAULT 0,
            salary_min INTEGER,
            salary_max INTEGER,
            salary_currency TEXT NOT NULL DEFAULT 'EUR',
            required_skills TEXT,
            preferred_skills TEXT,
            experience_level TEXT,
            status TEXT NOT NULL DEFAULT 'DRAFT',
            view_count INTEGER NOT NULL DEFAULT 0,
            application_count INTEGER NOT NULL DEFAULT 0,
            posted_at TEXT,
            expires_at TEXT,
            created_by TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        -- Career catalogs: roles to explore and hackathons to join
        CREATE TABLE IF NOT EXISTS talent_roles (
            id TEXT PRIMARY KEY,
            slug TEXT NOT NULL UNIQUE,
            title TEXT NOT NULL,
            description TEXT,
            industry TEXT,
            department TEXT,
            level TEXT,
            salary_range TEXT,
            required_skills TEXT,
            education_requirements TEXT,
            market_demand INTEGER NOT NULL DEFAULT 0,
            growth_rate TEXT,
            remote_friendly INTEGER NOT NULL DEFAULT 0,
            created_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS hackathons (
            id TEXT PRIMARY KEY,
            slug TEXT NOT NULL UNIQUE,
            title TEXT NOT NULL,
            description TEXT,
            prize_amount TEXT,
            prize_type TEXT,
            team_size_min INTEGER NOT NULL DEFAULT 1,
            team_size_max INTEGER NOT NULL DEFAULT 5,
            start_date TEXT NOT NULL,
            end_date TEXT NOT NULL,
            skills_tested TEXT,
            status TEXT NOT NULL DEFAULT 'upcoming'
                CHECK(status IN ('upcoming', 'active', 'completed')),
            sponsor_company_id TEXT REFERENCES companies(id) ON DELETE SET NULL,
            created_at TEXT NOT NULL
        );

        -- Learning resources
        CREATE TABLE IF NOT EXISTS learning_resources (
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            provider TEXT NOT NULL,
            description TEXT,
            url TEXT NOT NULL,
            duration TEXT,
            level TEXT,
            industry TEXT,
            skill_ids TEXT,
            rating REAL,
            enrollments TEXT,
            featured INTEGER NOT NULL DEFAULT 0,
            created_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS user_learning_progress (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            resource_id TEXT NOT NULL REFERENCES learning_resources(id) ON DELETE CASCADE,
            status TEXT NOT NULL CHECK(status IN ('in_progress', 'completed')),
            started_at TEXT NOT NULL,
            completed_at TEXT,
            UNIQUE(user_id, resource_id)
        );

        -- Indexes
        CREATE INDEX IF NOT EXISTS idx_user_skills_user ON user_skills(user_id);
        CREATE INDEX IF NOT EXISTS idx_projects_user ON projects(user_id);
        CREATE INDEX IF NOT EXISTS idx_projects_visibility ON projects(visibility);
        CREATE INDEX IF NOT EXISTS idx_project_artifacts_project ON project_artifacts(project_id);
        CREATE INDEX IF NOT EXISTS idx_feedback_requests_user ON feedback_requests(user_id);
        CREATE INDEX IF NOT EXISTS idx_team_members_user ON team_members(user_id);
        CREATE INDEX IF NOT EXISTS idx_jobs_status ON job_postings(status);
        """
    )
