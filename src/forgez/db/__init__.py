"""Database module for SQLite persistence.

Provides:
- Database connection management
- Schema initialization
- Repository modules per aggregate (users, skills, projects, feedback,
  teams, jobs, learning, role and hackathon catalogs)
"""

from forgez.db.database import ensure_db, get_db, init_db

__all__ = ["ensure_db", "get_db", "init_db"]
