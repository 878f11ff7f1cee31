"""
Seed the configured storage with a sample portfolio.

Usage (from backend/src):
    python -m storage.seed            # insert the sample profile
    python -m storage.seed --reset    # delete every profile first
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Dict, List, Optional

from config.settings import load_settings
from services.errors import ConflictError, ValidationError
from services.profile_service import ProfileService
from services.validation import require_valid, validate_full_profile
from storage import build_repository
from storage.repository import ProfileRepository

logger = logging.getLogger(__name__)

SAMPLE_PROFILE: Dict[str, Any] = {
    "name": "Anil Kumar Meena",
    "email": "anil.meena@example.com",
    "summary": (
        "Electrical Engineering student (AI/ML minor) building full-stack and "
        "cross-platform products. Focused on scalable systems, real-time apps, "
        "and polished user experiences."
    ),
    "education": [
        {
            "school": "National Institute of Technology Delhi",
            "degree": "Bachelor of Technology",
            "area": "Electrical Engineering (Minor in AI/ML)",
            "startYear": "2023",
            "endYear": "2027",
        },
        {
            "school": "Alwar Public School, Alwar",
            "degree": "Senior Secondary Education",
            "startYear": "2021",
            "endYear": "2022",
        },
    ],
    "skills": [
        "C++",
        "Python",
        "JavaScript",
        "SQL",
        "Next.js",
        "React",
        "Tailwind CSS",
        "Node.js",
        "Express.js",
        "MongoDB",
        "WebSockets",
        "React Native",
        "Git",
        "Supabase",
    ],
    "links": {
        "github": "https://github.com/example-anil",
        "linkedin": "https://www.linkedin.com/in/example-anil",
        "portfolio": None,
        "other": [],
    },
    "projects": [
        {
            "title": "Realtime Chat",
            "description": "Group chat with presence indicators and typing status over WebSockets.",
            "links": {"repo": "https://github.com/example-anil/realtime-chat"},
            "skills": ["React", "Node.js", "WebSockets", "MongoDB"],
        },
        {
            "title": "Expense Tracker",
            "description": "Cross-platform expense tracker with offline sync.",
            "links": {"repo": "https://github.com/example-anil/expense-tracker"},
            "skills": ["React Native", "Supabase", "JavaScript"],
        },
        {
            "title": "Load Forecasting",
            "description": "Short-term electrical load forecasting with gradient boosted trees.",
            "links": {},
            "skills": ["Python", "SQL"],
        },
    ],
    "work": [
        {
            "role": "Full Stack Developer Intern",
            "company": "Acme Labs",
            "location": "Remote",
            "startDate": "2025-05",
            "endDate": "2025-07",
            "summary": "Built internal dashboards and REST APIs.",
            "highlights": [
                {"bullet": "Shipped a Next.js admin console used by 40+ staff"},
                {"bullet": "Cut API p95 latency by 35% with query batching"},
            ],
        }
    ],
}


def reset(repository: ProfileRepository) -> int:
    """Delete every profile (children cascade); returns how many were removed."""
    removed = 0
    for profile in repository.list_profiles():
        if repository.delete_profile(profile["id"]):
            removed += 1
    return removed


def seed(repository: ProfileRepository, payload: Optional[Dict[str, Any]] = None):
    """Insert ``payload`` (the sample by default) through the profile service."""
    data = require_valid(validate_full_profile(payload or SAMPLE_PROFILE))
    return ProfileService(repository).create_profile(data)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Seed the portfolio database")
    parser.add_argument("--reset", action="store_true", help="delete existing profiles first")
    args = parser.parse_args(argv)

    settings = load_settings()
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(message)s")

    repository = build_repository(settings)
    try:
        if args.reset:
            logger.info("Removed %d existing profiles", reset(repository))
        profile = seed(repository)
    except ConflictError as exc:
        logger.error("Seed skipped: %s (run with --reset to replace it)", exc.message)
        return 1
    except ValidationError as exc:
        logger.error("Sample profile is invalid: %s", exc.message)
        return 1
    finally:
        repository.close()

    logger.info(
        "Seeded profile %s with %d projects and %d work experiences",
        profile.id,
        len(profile.projects),
        len(profile.work),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
