"""Default reference data: skills taxonomy, a sample company, courses,
career roles and hackathons.

Seeding uses fixed ids so running it twice inserts nothing new.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from forgez.db import catalog_repository, jobs_repository, learning_repository, skills_repository

logger = structlog.get_logger(__name__)

# (id, name, category, description)
DEFAULT_SKILLS: list[tuple[str, str, str, str]] = [
    ("fz-python", "Python", "SKILL", "General-purpose programming in Python"),
    ("fz-cad", "CAD Modeling", "SKILL", "3D mechanical design with CAD tools"),
    ("fz-embedded", "Embedded Systems", "KNOWLEDGE", "Microcontrollers and firmware"),
    ("fz-control", "Control Systems", "KNOWLEDGE", "Feedback control and system dynamics"),
    ("fz-orbital", "Orbital Mechanics", "KNOWLEDGE", "Trajectories and mission design"),
    ("fz-robotics", "Robotics", "SKILL", "Robot kinematics, sensing and actuation"),
    ("fz-ml", "Machine Learning", "SKILL", "Supervised and unsupervised learning"),
    ("fz-energy", "Renewable Energy", "KNOWLEDGE", "Solar, wind and storage systems"),
    ("fz-security", "Cybersecurity", "SKILL", "Securing systems and networks"),
    ("fz-teamwork", "Teamwork", "TRANSVERSAL", "Working effectively in a team"),
    ("fz-communication", "Communication", "TRANSVERSAL", "Clear written and spoken communication"),
    ("fz-english", "English", "LANGUAGE", "Professional English"),
]

SAMPLE_COMPANY = {
    "company_id": "fz-orbitforge",
    "name": "OrbitForge",
    "slug": "orbitforge",
    "description": "Small-satellite manufacturer building propulsion and avionics",
    "industry": "space",
    "company_size": "51-200",
    "headquarters_location": "Gdansk",
    "country": "PL",
    "website_url": "https://orbitforge.example.com",
    "tech_stack": ["Python", "C++", "CAD Modeling"],
    "is_featured": True,
}

DEFAULT_RESOURCES: list[dict] = [
    {
        "resource_id": "fz-learn-ml",
        "title": "Introduction to Machine Learning",
        "provider": "Coursera",
        "description": "Fundamentals of machine learning and neural networks with hands-on projects",
        "url": "https://coursera.org",
        "duration": "4 weeks",
        "level": "Beginner",
        "industry": "software",
        "skill_ids": ["fz-ml", "fz-python"],
        "rating": 4.8,
        "enrollments": "250K+",
        "featured": True,
    },
    {
        "resource_id": "fz-learn-orbital",
        "title": "Orbital Mechanics and Space Mission Design",
        "provider": "MIT OpenCourseWare",
        "description": "Orbital mechanics, trajectory design and space mission planning",
        "url": "https://ocw.mit.edu",
        "duration": "12 weeks",
        "level": "Advanced",
        "industry": "space",
        "skill_ids": ["fz-orbital"],
        "rating": 4.9,
        "enrollments": "50K+",
        "featured": True,
    },
    {
        "resource_id": "fz-learn-robotics",
        "title": "Industrial Robotics and Automation",
        "provider": "edX",
        "description": "Kinematics, control systems and factory automation",
        "url": "https://edx.org",
        "duration": "8 weeks",
        "level": "Intermediate",
        "industry": "robotics",
        "skill_ids": ["fz-robotics", "fz-control"],
        "rating": 4.7,
        "enrollments": "75K+",
        "featured": False,
    },
    {
        "resource_id": "fz-learn-energy",
        "title": "Renewable Energy Systems",
        "provider": "Khan Academy",
        "description": "Solar, wind and battery storage technologies",
        "url": "https://khanacademy.org",
        "duration": "6 weeks",
        "level": "Beginner",
        "industry": "energy",
        "skill_ids": ["fz-energy"],
        "rating": 4.6,
        "enrollments": "120K+",
        "featured": True,
    },
]

DEFAULT_ROLES: list[dict] = [
    {
        "role_id": "fz-role-ml-engineer",
        "slug": "ml-engineer",
        "title": "Machine Learning Engineer",
        "description": "Builds and deploys models that learn from data",
        "industry": "software",
        "department": "Engineering",
        "level": "mid",
        "salary_range": {"min": 14000, "max": 24000, "currency": "PLN"},
        "required_skills": ["Python", "Machine Learning"],
        "education_requirements": "BSc in Computer Science or equivalent experience",
        "market_demand": 95,
        "growth_rate": "+40%",
        "remote_friendly": True,
    },
    {
        "role_id": "fz-role-mission-analyst",
        "slug": "mission-analyst",
        "title": "Space Mission Analyst",
        "description": "Plans trajectories and mission timelines for satellites",
        "industry": "space",
        "department": "Mission Design",
        "level": "entry",
        "salary_range": {"min": 9000, "max": 15000, "currency": "PLN"},
        "required_skills": ["Orbital Mechanics", "Python"],
        "education_requirements": "BSc in Aerospace Engineering",
        "market_demand": 70,
        "growth_rate": "+18%",
        "remote_friendly": False,
    },
    {
        "role_id": "fz-role-robotics-technician",
        "slug": "robotics-technician",
        "title": "Robotics Technician",
        "description": "Installs, programs and maintains industrial robots",
        "industry": "robotics",
        "department": "Operations",
        "level": "entry",
        "salary_range": {"min": 7000, "max": 11000, "currency": "PLN"},
        "required_skills": ["Robotics", "Control Systems"],
        "education_requirements": "Technical school diploma",
        "market_demand": 80,
        "growth_rate": "+22%",
        "remote_friendly": False,
    },
    {
        "role_id": "fz-role-energy-engineer",
        "slug": "energy-engineer",
        "title": "Renewable Energy Engineer",
        "description": "Designs solar, wind and storage installations",
        "industry": "energy",
        "department": "Engineering",
        "level": "mid",
        "salary_range": {"min": 11000, "max": 18000, "currency": "PLN"},
        "required_skills": ["Renewable Energy", "CAD Modeling"],
        "education_requirements": "BSc in Electrical or Energy Engineering",
        "market_demand": 85,
        "growth_rate": "+30%",
        "remote_friendly": False,
    },
]

DEFAULT_HACKATHONS: list[dict] = [
    {
        "hackathon_id": "fz-hack-cubesat",
        "slug": "cubesat-challenge",
        "title": "CubeSat Challenge",
        "description": "Design the avionics stack for a 1U CubeSat in 48 hours",
        "prize_amount": "10000 PLN",
        "prize_type": "cash",
        "team_size_min": 2,
        "team_size_max": 5,
        "start_date": "2026-11-14",
        "end_date": "2026-11-16",
        "skills_tested": ["Embedded Systems", "Orbital Mechanics"],
        "status": "upcoming",
        "sponsor_company_id": "fz-orbitforge",
    },
    {
        "hackathon_id": "fz-hack-grid",
        "slug": "smart-grid-sprint",
        "title": "Smart Grid Sprint",
        "description": "Forecast household energy demand from open meter data",
        "prize_amount": "Internship offer",
        "prize_type": "internship",
        "team_size_min": 1,
        "team_size_max": 4,
        "start_date": "2026-09-05",
        "end_date": "2026-09-07",
        "skills_tested": ["Machine Learning", "Renewable Energy"],
        "status": "completed",
        "sponsor_company_id": None,
    },
]


@dataclass
class SeedResult:
    skills: int = 0
    companies: int = 0
    resources: int = 0
    roles: int = 0
    hackathons: int = 0

    @property
    def total(self) -> int:
        return self.skills + self.companies + self.resources + self.roles + self.hackathons


def seed_defaults() -> SeedResult:
    """Insert the default reference data that is not present yet.

    Returns:
        SeedResult with the number of rows inserted per table
    """
    result = SeedResult()

    for skill_id, name, category, description in DEFAULT_SKILLS:
        if skills_repository.get_taxonomy_skill(skill_id) is None:
            skills_repository.insert_taxonomy_skill(
                name=name,
                framework="FORGEZ",
                category=category,
                description=description,
                skill_id=skill_id,
            )
            result.skills += 1

    if jobs_repository.get_company(SAMPLE_COMPANY["company_id"]) is None:
        jobs_repository.insert_company(**SAMPLE_COMPANY)
        result.companies += 1

    for resource in DEFAULT_RESOURCES:
        if learning_repository.get_resource(resource["resource_id"]) is None:
            learning_repository.insert_resource(**resource)
            result.resources += 1

    for role in DEFAULT_ROLES:
        if catalog_repository.get_role(role["role_id"]) is None:
            catalog_repository.insert_role(**role)
            result.roles += 1

    for hackathon in DEFAULT_HACKATHONS:
        if catalog_repository.get_hackathon(hackathon["hackathon_id"]) is None:
            catalog_repository.insert_hackathon(**hackathon)
            result.hackathons += 1

    logger.info(
        "seed.completed",
        skills=result.skills,
        companies=result.companies,
        resources=result.resources,
        roles=result.roles,
        hackathons=result.hackathons,
    )
    return result
