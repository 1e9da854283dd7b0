"""Achievement definitions and unlock criteria.

Each achievement listens to one trigger. It unlocks either as soon as its
conditions hold, or once its progress counter reaches a target value.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from forgez.core.errors import ValidationError


class AchievementRarity(str, Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


RARITY_XP_MULTIPLIERS: dict[AchievementRarity, float] = {
    AchievementRarity.COMMON: 1,
    AchievementRarity.UNCOMMON: 1.5,
    AchievementRarity.RARE: 2,
    AchievementRarity.EPIC: 3,
    AchievementRarity.LEGENDARY: 5,
}


class AchievementCategory(str, Enum):
    QUEST_MASTER = "quest_master"
    XP_LEGEND = "xp_legend"
    KNOWLEDGE_SEEKER = "knowledge_seeker"
    PORTFOLIO_ARTISAN = "portfolio_artisan"
    COMMUNITY_CHAMPION = "community_champion"
    ARCHETYPE_SPECIALIST = "archetype_specialist"
    PIONEER = "pioneer"


CATEGORY_LABELS: dict[AchievementCategory, str] = {
    AchievementCategory.QUEST_MASTER: "Quest Master",
    AchievementCategory.XP_LEGEND: "XP Legend",
    AchievementCategory.KNOWLEDGE_SEEKER: "Knowledge Seeker",
    AchievementCategory.PORTFOLIO_ARTISAN: "Portfolio Artisan",
    AchievementCategory.COMMUNITY_CHAMPION: "Community Champion",
    AchievementCategory.ARCHETYPE_SPECIALIST: "Archetype Specialist",
    AchievementCategory.PIONEER: "Pioneer",
}


class AchievementTrigger(str, Enum):
    QUEST_COMPLETE = "quest_complete"
    LEVEL_UP = "level_up"
    XP_MILESTONE = "xp_milestone"
    QUIZ_ANSWER = "quiz_answer"
    PROJECT_UPLOAD = "project_upload"
    SKILL_ADD = "skill_add"
    FEEDBACK_GIVE = "feedback_give"
    FEEDBACK_RECEIVE = "feedback_receive"
    HACKATHON_JOIN = "hackathon_join"
    HACKATHON_SUBMIT = "hackathon_submit"
    GUILD_JOIN = "guild_join"
    COMPANY_VIEW = "company_view"
    ROLE_EXPLORE = "role_explore"
    COURSE_START = "course_start"
    COURSE_COMPLETE = "course_complete"
    DEEP_DIVE_COMPLETE = "deep_dive_complete"
    ARCHETYPE_COMPLETE = "archetype_complete"
    LOGIN = "login"
    PROFILE_COMPLETE = "profile_complete"


@dataclass(frozen=True)
class AchievementDefinition:
    """Static description of an achievement."""

    id: str
    name: str
    description: str
    icon: str
    category: AchievementCategory
    rarity: AchievementRarity
    xp_reward: int
    trigger: AchievementTrigger
    conditions: dict[str, Any] = field(default_factory=dict)
    target_value: int | None = None
    is_secret: bool = False

    @property
    def has_progress(self) -> bool:
        return self.target_value is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "icon": self.icon,
            "category": self.category.value,
            "category_label": CATEGORY_LABELS[self.category],
            "rarity": self.rarity.value,
            "xp_reward": self.xp_reward,
            "trigger": self.trigger.value,
            "conditions": dict(self.conditions),
            "target_value": self.target_value,
            "has_progress": self.has_progress,
            "is_secret": self.is_secret,
        }


def _define(
    id: str,
    name: str,
    description: str,
    icon: str,
    category: AchievementCategory,
    rarity: AchievementRarity,
    xp_reward: int,
    trigger: AchievementTrigger,
    conditions: dict[str, Any] | None = None,
    target: int | None = None,
    secret: bool = False,
) -> AchievementDefinition:
    return AchievementDefinition(
        id=id,
        name=name,
        description=description,
        icon=icon,
        category=category,
        rarity=rarity,
        xp_reward=xp_reward,
        trigger=trigger,
        conditions=conditions or {},
        target_value=target,
        is_secret=secret,
    )


_C = AchievementCategory
_R = AchievementRarity
_T = AchievementTrigger

ACHIEVEMENTS: tuple[AchievementDefinition, ...] = (
    # =========================================================================
    # QUEST MASTER
    # =========================================================================
    _define("quest_first_step", "First Step", "Complete your first quest and begin your FORGE-Z journey",
            "Footprints", _C.QUEST_MASTER, _R.COMMON, 25, _T.QUEST_COMPLETE, {"questNumber": 1}),
    _define("quest_artifact_seeker", "Artifact Seeker", "Discover your first epic technology artifact",
            "Gem", _C.QUEST_MASTER, _R.COMMON, 25, _T.QUEST_COMPLETE, {"questNumber": 2}),
    _define("quest_deep_diver", "Deep Diver", "Complete the Deep Dive quest and unlock knowledge",
            "Anchor", _C.QUEST_MASTER, _R.UNCOMMON, 50, _T.QUEST_COMPLETE, {"questNumber": 3}),
    _define("quest_guild_explorer", "Guild Explorer", "Explore companies and guilds across regions",
            "Building2", _C.QUEST_MASTER, _R.UNCOMMON, 50, _T.QUEST_COMPLETE, {"questNumber": 4}),
    _define("quest_talent_hunter", "Talent Hunter", "Complete the Talent Hunt and discover career roles",
            "Target", _C.QUEST_MASTER, _R.UNCOMMON, 50, _T.QUEST_COMPLETE, {"questNumber": 5}),
    _define("quest_wisdom_seeker", "Wisdom Seeker", "Learn from the leaders and assess your soft skills",
            "Brain", _C.QUEST_MASTER, _R.RARE, 75, _T.QUEST_COMPLETE, {"questNumber": 6}),
    _define("quest_skill_forger", "Skill Forger", "Visit the Skill Forge and start your learning path",
            "Flame", _C.QUEST_MASTER, _R.RARE, 75, _T.QUEST_COMPLETE, {"questNumber": 7}),
    _define("quest_champion", "Quest Champion", "Complete all 8 quests and master the FORGE-Z journey",
            "Crown", _C.QUEST_MASTER, _R.EPIC, 250, _T.QUEST_COMPLETE, target=8),
    # =========================================================================
    # XP LEGEND
    # =========================================================================
    _define("xp_first_hundred", "First Hundred", "Earn your first 100 XP",
            "Sparkles", _C.XP_LEGEND, _R.COMMON, 25, _T.XP_MILESTONE, {"xpThreshold": 100}),
    _define("xp_rising_star", "Rising Star", "Reach Level 2 and prove your dedication",
            "Star", _C.XP_LEGEND, _R.COMMON, 25, _T.LEVEL_UP, {"level": 2}),
    _define("xp_adventurer", "Adventurer", "Reach Level 5 and establish yourself",
            "Compass", _C.XP_LEGEND, _R.UNCOMMON, 50, _T.LEVEL_UP, {"level": 5}),
    _define("xp_veteran", "Veteran", "Reach Level 10 and become a seasoned explorer",
            "Shield", _C.XP_LEGEND, _R.UNCOMMON, 75, _T.LEVEL_UP, {"level": 10}),
    _define("xp_elite", "Elite", "Reach Level 20 and join the elite ranks",
            "Medal", _C.XP_LEGEND, _R.RARE, 100, _T.LEVEL_UP, {"level": 20}),
    _define("xp_master", "Master", "Reach Level 35 and achieve mastery",
            "Award", _C.XP_LEGEND, _R.EPIC, 200, _T.LEVEL_UP, {"level": 35}),
    _define("xp_grandmaster", "Grandmaster", "Reach the legendary Level 50",
            "Trophy", _C.XP_LEGEND, _R.LEGENDARY, 500, _T.LEVEL_UP, {"level": 50}),
    # =========================================================================
    # KNOWLEDGE SEEKER
    # =========================================================================
    _define("know_first_correct", "Quick Learner", "Answer your first quiz question correctly",
            "CheckCircle", _C.KNOWLEDGE_SEEKER, _R.COMMON, 25, _T.QUIZ_ANSWER, target=1),
    _define("know_quiz_ace", "Quiz Ace", "Answer 5 quiz questions correctly",
            "GraduationCap", _C.KNOWLEDGE_SEEKER, _R.COMMON, 25, _T.QUIZ_ANSWER, target=5),
    _define("know_quiz_master", "Quiz Master", "Answer 20 quiz questions correctly",
            "Lightbulb", _C.KNOWLEDGE_SEEKER, _R.UNCOMMON, 50, _T.QUIZ_ANSWER, target=20),
    _define("know_deep_dive_first", "Deep Knowledge", "Complete your first deep dive content",
            "BookOpen", _C.KNOWLEDGE_SEEKER, _R.UNCOMMON, 50, _T.DEEP_DIVE_COMPLETE, target=1),
    _define("know_course_starter", "Course Starter", "Start your first learning course",
            "Play", _C.KNOWLEDGE_SEEKER, _R.COMMON, 25, _T.COURSE_START, target=1),
    _define("know_scholar", "Scholar", "Complete 5 deep dive content paths",
            "Library", _C.KNOWLEDGE_SEEKER, _R.RARE, 100, _T.DEEP_DIVE_COMPLETE, target=5),
    # =========================================================================
    # PORTFOLIO ARTISAN
    # =========================================================================
    _define("port_first_project", "Creator", "Upload your first project to your portfolio",
            "Plus", _C.PORTFOLIO_ARTISAN, _R.COMMON, 25, _T.PROJECT_UPLOAD, target=1),
    _define("port_three_projects", "Builder", "Build a portfolio with 3 projects",
            "Layers", _C.PORTFOLIO_ARTISAN, _R.COMMON, 25, _T.PROJECT_UPLOAD, target=3),
    _define("port_five_projects", "Craftsman", "Expand your portfolio to 5 projects",
            "Hammer", _C.PORTFOLIO_ARTISAN, _R.UNCOMMON, 50, _T.PROJECT_UPLOAD, target=5),
    _define("port_ten_projects", "Master Artisan", "Showcase 10 projects in your portfolio",
            "Palette", _C.PORTFOLIO_ARTISAN, _R.RARE, 100, _T.PROJECT_UPLOAD, target=10),
    _define("port_skill_collector", "Skill Collector", "Add 10 different skills to your profile",
            "Tags", _C.PORTFOLIO_ARTISAN, _R.UNCOMMON, 50, _T.SKILL_ADD, target=10),
    _define("port_master_artisan", "Portfolio Legend", "Have 15+ projects with 25+ total skills",
            "Gem", _C.PORTFOLIO_ARTISAN, _R.EPIC, 250, _T.PROJECT_UPLOAD,
            {"minProjects": 15, "minSkills": 25}),
    # =========================================================================
    # COMMUNITY CHAMPION
    # =========================================================================
    _define("comm_first_feedback", "Helpful Peer", "Give your first peer feedback",
            "MessageCircle", _C.COMMUNITY_CHAMPION, _R.COMMON, 25, _T.FEEDBACK_GIVE, target=1),
    _define("comm_feedback_giver", "Feedback Champion", "Give 5 peer feedback reviews",
            "MessagesSquare", _C.COMMUNITY_CHAMPION, _R.UNCOMMON, 50, _T.FEEDBACK_GIVE, target=5),
    _define("comm_hackathon_joiner", "Hackathon Rookie", "Join your first hackathon",
            "Rocket", _C.COMMUNITY_CHAMPION, _R.UNCOMMON, 50, _T.HACKATHON_JOIN, target=1),
    _define("comm_hackathon_submitter", "Hackathon Hero", "Submit your first hackathon project",
            "Trophy", _C.COMMUNITY_CHAMPION, _R.RARE, 100, _T.HACKATHON_SUBMIT, target=1),
    _define("comm_guild_member", "Guild Member", "Join a community guild",
            "Users", _C.COMMUNITY_CHAMPION, _R.COMMON, 25, _T.GUILD_JOIN, target=1),
    _define("comm_mentor", "Mentor", "Give 10 peer feedback reviews and help others grow",
            "HeartHandshake", _C.COMMUNITY_CHAMPION, _R.RARE, 100, _T.FEEDBACK_GIVE, target=10),
    # =========================================================================
    # ARCHETYPE SPECIALIST
    # =========================================================================
    _define("arch_discovered", "Identity Found", "Discover your career archetype",
            "User", _C.ARCHETYPE_SPECIALIST, _R.COMMON, 25, _T.ARCHETYPE_COMPLETE),
    _define("arch_builder", "The Builder", "Embrace the Builder archetype - creating is understanding",
            "Wrench", _C.ARCHETYPE_SPECIALIST, _R.UNCOMMON, 50, _T.ARCHETYPE_COMPLETE,
            {"archetype": "BUILDER"}, secret=True),
    _define("arch_strategist", "The Strategist", "Embrace the Strategist archetype - planning is winning",
            "Map", _C.ARCHETYPE_SPECIALIST, _R.UNCOMMON, 50, _T.ARCHETYPE_COMPLETE,
            {"archetype": "STRATEGIST"}, secret=True),
    _define("arch_explorer", "The Explorer", "Embrace the Explorer archetype - discovery is the goal",
            "Compass", _C.ARCHETYPE_SPECIALIST, _R.UNCOMMON, 50, _T.ARCHETYPE_COMPLETE,
            {"archetype": "EXPLORER"}, secret=True),
    # =========================================================================
    # PIONEER
    # =========================================================================
    _define("pioneer_early_adopter", "Early Adopter", "Be among the first to join FORGE-Z",
            "Rocket", _C.PIONEER, _R.RARE, 100, _T.LOGIN, {"earlyAdopter": True}, secret=True),
    _define("pioneer_company_explorer", "Industry Scout", "Explore 10 different companies",
            "Building", _C.PIONEER, _R.UNCOMMON, 50, _T.COMPANY_VIEW, target=10),
    _define("pioneer_role_explorer", "Career Explorer", "Explore 10 different career roles",
            "Briefcase", _C.PIONEER, _R.UNCOMMON, 50, _T.ROLE_EXPLORE, target=10),
)

_BY_ID: dict[str, AchievementDefinition] = {a.id: a for a in ACHIEVEMENTS}


def get_achievement(achievement_id: str) -> AchievementDefinition | None:
    return _BY_ID.get(achievement_id)


def achievements_by_category(category: AchievementCategory | str) -> list[AchievementDefinition]:
    category = AchievementCategory(category)
    return [a for a in ACHIEVEMENTS if a.category == category]


def achievements_by_rarity(rarity: AchievementRarity | str) -> list[AchievementDefinition]:
    rarity = AchievementRarity(rarity)
    return [a for a in ACHIEVEMENTS if a.rarity == rarity]


def achievements_by_trigger(trigger: AchievementTrigger | str) -> list[AchievementDefinition]:
    trigger = AchievementTrigger(trigger)
    return [a for a in ACHIEVEMENTS if a.trigger == trigger]


# =============================================================================
# CRITERIA
# =============================================================================


@dataclass
class CriteriaResult:
    """Outcome of evaluating one definition against a trigger."""

    unlocked: bool
    new_progress: int | None = None


NUMERIC_DATA_KEYS = ("level", "totalXP", "projectCount", "skillCount", "completedQuests")


def validate_trigger_data(data: dict[str, Any]) -> None:
    """Check the numeric keys of a trigger payload.

    Raises:
        ValidationError: A count is not a number, or incrementBy is not a
            positive integer
    """
    for key in NUMERIC_DATA_KEYS:
        value = data.get(key)
        if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float))):
            raise ValidationError(f"{key} must be a number", field=key)

    if "incrementBy" in data:
        increment = data["incrementBy"]
        if isinstance(increment, bool) or not isinstance(increment, int) or increment < 1:
            raise ValidationError("incrementBy must be a positive integer", field="incrementBy")


def _conditions_met(conditions: dict[str, Any], data: dict[str, Any]) -> bool:
    """Check every condition of a definition against trigger data."""
    for key, expected in conditions.items():
        if key == "questNumber":
            if data.get("questNumber") != expected:
                return False
        elif key == "level":
            if (data.get("level") or 0) < expected:
                return False
        elif key == "xpThreshold":
            if (data.get("totalXP") or 0) < expected:
                return False
        elif key == "archetype":
            if data.get("archetype") != expected:
                return False
        elif key == "earlyAdopter":
            if not data.get("earlyAdopter"):
                return False
        elif key == "minProjects":
            if (data.get("projectCount") or 0) < expected:
                return False
        elif key == "minSkills":
            if (data.get("skillCount") or 0) < expected:
                return False
    return True


def check_criteria(
    definition: AchievementDefinition,
    trigger: AchievementTrigger | str,
    data: dict[str, Any] | None = None,
    current_progress: int = 0,
) -> CriteriaResult:
    """Evaluate whether a trigger unlocks or advances an achievement.

    Args:
        definition: Achievement to evaluate
        trigger: Trigger that fired
        data: Trigger payload (questNumber, level, totalXP, archetype,
            earlyAdopter, projectCount, skillCount, completedQuests, incrementBy)
        current_progress: Progress counter stored for this achievement

    Returns:
        CriteriaResult. new_progress is set for progress-based definitions.

    Raises:
        ValidationError: Malformed trigger data
    """
    data = data or {}
    validate_trigger_data(data)
    if definition.trigger != AchievementTrigger(trigger):
        return CriteriaResult(unlocked=False)

    if not _conditions_met(definition.conditions, data):
        return CriteriaResult(unlocked=False)

    target = definition.target_value
    if target is None:
        return CriteriaResult(unlocked=True)

    if definition.trigger == AchievementTrigger.QUEST_COMPLETE:
        completed = int(data.get("completedQuests") or 0)
        return CriteriaResult(unlocked=completed >= target, new_progress=min(completed, target))

    increment = int(data.get("incrementBy", 1))
    new_value = current_progress + increment
    return CriteriaResult(unlocked=new_value >= target, new_progress=min(new_value, target))
