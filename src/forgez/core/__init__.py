"""Core business logic for FORGE-Z.

Progression (pure, persisted as per-user JSON):
- leveling: XP to level curve
- xp: XP ledger and sources
- quests: the eight-quest storyline
- achievements: definitions and unlock criteria
- achievement_tracker: per-player unlock and progress state
- progression: player state, triggers and persistence

Domain services (SQLite-backed):
- users, skills, projects, feedback, teams, team_matching, jobs,
  recommendations
"""

__all__ = [
    "leveling",
    "xp",
    "quests",
    "achievements",
    "achievement_tracker",
    "progression",
    "users",
    "skills",
    "projects",
    "feedback",
    "teams",
    "team_matching",
    "jobs",
    "recommendations",
]
