"""Route handlers for the Web API."""

from forgez.web.routes.health import router as health_router
from forgez.web.routes.users import router as users_router
from forgez.web.routes.quests import router as quests_router
from forgez.web.routes.progress import router as progress_router
from forgez.web.routes.achievements import router as achievements_router
from forgez.web.routes.skills import router as skills_router
from forgez.web.routes.projects import router as projects_router
from forgez.web.routes.feedback import router as feedback_router
from forgez.web.routes.teams import router as teams_router
from forgez.web.routes.jobs import router as jobs_router
from forgez.web.routes.companies import router as companies_router
from forgez.web.routes.learn import router as learn_router
from forgez.web.routes.roles import router as roles_router
from forgez.web.routes.hackathons import router as hackathons_router

__all__ = [
    "health_router",
    "users_router",
    "quests_router",
    "progress_router",
    "achievements_router",
    "skills_router",
    "projects_router",
    "feedback_router",
    "teams_router",
    "jobs_router",
    "companies_router",
    "learn_router",
    "roles_router",
    "hackathons_router",
]
