"""Score teams against a user's skills and domain interest."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from forgez.db.teams_repository import TeamRecord

SKILL_MATCH_POINTS = 20
OPEN_SPOTS_POINTS = 10
DOMAIN_MATCH_POINTS = 15
DESCRIPTION_POINTS = 5
PURPOSE_POINTS = 5
MAX_SCORE = 100
DETAILED_DESCRIPTION_LENGTH = 50
DEFAULT_MATCH_LIMIT = 10

NO_SKILLS_HINT = "Add skills to your profile to get better team matches"


@dataclass
class TeamMatch:
    team: TeamRecord
    score: int
    reasons: list[str] = field(default_factory=list)
    matching_skills: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data = self.team.to_dict()
        data["match_score"] = self.score
        data["match_reasons"] = self.reasons
        data["matching_skills"] = self.matching_skills
        return data


def score_team(team: TeamRecord, skill_names: set[str], domain_interest: str | None) -> TeamMatch:
    """Score a single team.

    Args:
        team: Candidate team
        skill_names: Lowercased names of the user's skills
        domain_interest: Archetype domain interest, if any
    """
    score = 0
    reasons: list[str] = []

    matching = [s for s in team.skill_requirements if s.lower() in skill_names]
    if matching:
        score += SKILL_MATCH_POINTS * len(matching)
        reasons.append(f"You have {len(matching)} required skill(s)")

    if team.member_count < team.max_members - 1:
        score += OPEN_SPOTS_POINTS
        reasons.append("Has open spots")

    description = team.description or ""
    if domain_interest and domain_interest.lower() in description.lower():
        score += DOMAIN_MATCH_POINTS
        reasons.append(f"Matches your interest in {domain_interest}")

    if len(description) > DETAILED_DESCRIPTION_LENGTH:
        score += DESCRIPTION_POINTS
    if team.purpose:
        score += PURPOSE_POINTS

    return TeamMatch(team=team, score=min(score, MAX_SCORE), reasons=reasons, matching_skills=matching)


def match_teams(
    candidates: list[TeamRecord],
    skill_names: list[str],
    domain_interest: str | None,
    limit: int = DEFAULT_MATCH_LIMIT,
) -> list[TeamMatch]:
    """Rank open candidate teams, best first. Full teams are skipped."""
    names = {name.lower() for name in skill_names}
    matches = [
        score_team(team, names, domain_interest) for team in candidates if not team.is_full
    ]
    matches.sort(key=lambda m: m.score, reverse=True)
    return matches[:limit]
