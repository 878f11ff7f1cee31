"""
Search and Aggregation Service Module

Keyword search across profiles, projects and work experiences, the project
skill filter, and the weighted top-skills ranking.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Iterable, List, Optional

from api.models.search_models import (
    ProfileHit,
    ProjectHit,
    ProjectListItem,
    ProjectListResponse,
    SearchCounts,
    SearchResponse,
    SearchResults,
    TopSkill,
    TopSkillsResponse,
    WorkHit,
)
from services.errors import InternalError, NotFoundError, ValidationError
from services.profile_service import PROFILE_NOT_FOUND, is_uuid
from storage.errors import StorageError
from storage.repository import ProfileRepository

logger = logging.getLogger(__name__)

DEFAULT_TOP_SKILLS = 10
PROFILE_SKILL_WEIGHT = 2
PROJECT_SKILL_WEIGHT = 1
MISSING_QUERY = "Query parameter 'q' is required"


def skill_label(key: str) -> str:
    """Display form of a lower-cased skill key: only the first letter is upper-cased."""
    return key[:1].upper() + key[1:]


def rank_skills(
    profile_skills: Iterable[Iterable[str]],
    project_skills: Iterable[Iterable[str]],
    limit: int = DEFAULT_TOP_SKILLS,
) -> TopSkillsResponse:
    """Tally skills case-insensitively and keep the ``limit`` most frequent.

    Profile listings weigh ``PROFILE_SKILL_WEIGHT``; every occurrence on a
    project weighs ``PROJECT_SKILL_WEIGHT``. Equal counts keep first-seen
    order (profile skills before project skills), so the ranking is reproducible.
    """
    counts: Counter = Counter()
    for skills in profile_skills:
        for skill in skills:
            counts[skill.lower()] += PROFILE_SKILL_WEIGHT
    for skills in project_skills:
        for skill in skills:
            counts[skill.lower()] += PROJECT_SKILL_WEIGHT

    # sorted() is stable and Counter keeps insertion order.
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)[:limit]
    return TopSkillsResponse(
        top_skills=[TopSkill(skill=skill_label(key), count=count) for key, count in ranked],
        total_unique_skills=len(counts),
    )


class SearchService:
    """Read-only queries over stored profiles; nothing is cached between calls."""

    def __init__(self, repository: ProfileRepository) -> None:
        self.repository = repository

    def _scope(self, profile_id: Optional[str]) -> Optional[List[str]]:
        """Profile ids to restrict to, or ``None`` for everything."""
        if profile_id is None:
            return None
        if not is_uuid(profile_id) or self.repository.get_profile(profile_id) is None:
            raise NotFoundError(PROFILE_NOT_FOUND)
        return [profile_id]

    def search(self, query: Optional[str]) -> SearchResponse:
        """Case-insensitive substring search; each entity type is counted on its own.

        Whitespace only decides whether the query is empty; a non-empty query is
        matched exactly as given, surrounding spaces included.
        """
        if not (query or "").strip():
            raise ValidationError(MISSING_QUERY)
        term = query

        try:
            profiles = self.repository.search_profiles(term)
            projects = self.repository.search_projects(term)
            work = self.repository.search_work_experiences(term)
        except StorageError as exc:
            logger.error("Search for %r failed: %s", term, exc)
            raise InternalError() from exc

        logger.debug(
            "Search %r matched %d profiles, %d projects, %d work experiences",
            term,
            len(profiles),
            len(projects),
            len(work),
        )
        return SearchResponse(
            query=query,
            results=SearchResults(
                profiles=[ProfileHit.model_validate(row) for row in profiles],
                projects=[ProjectHit.model_validate(row) for row in projects],
                work=[WorkHit.model_validate(row) for row in work],
            ),
            counts=SearchCounts(
                profiles=len(profiles),
                projects=len(projects),
                work=len(work),
                total=len(profiles) + len(projects) + len(work),
            ),
        )

    def projects_by_skill(
        self,
        skill: Optional[str] = None,
        profile_id: Optional[str] = None,
    ) -> ProjectListResponse:
        """Projects listing ``skill`` (exact match, any case), or all projects."""
        wanted = (skill or "").strip() or None
        try:
            scope = self._scope(profile_id)
            if wanted:
                rows = self.repository.projects_with_skill(wanted, scope)
            else:
                rows = self.repository.list_projects(scope)
        except StorageError as exc:
            logger.error("Project listing (skill=%r) failed: %s", wanted, exc)
            raise InternalError() from exc

        return ProjectListResponse(
            count=len(rows),
            skill=wanted,
            projects=[ProjectListItem.model_validate(row) for row in rows],
        )

    def top_skills(
        self,
        limit: int = DEFAULT_TOP_SKILLS,
        profile_id: Optional[str] = None,
    ) -> TopSkillsResponse:
        """Weighted skill ranking.

        Unscoped, the primary (earliest) profile's skills carry the profile
        weight and every project in the directory adds its skills. With
        ``profile_id``, only that profile and its own projects are counted.
        """
        if limit < 1:
            raise ValidationError("limit must be a positive integer")
        try:
            scope = self._scope(profile_id)
            if scope is None:
                profile = self.repository.get_first_profile()
            else:
                profile = self.repository.get_profile(profile_id)
            projects = self.repository.list_projects(scope)
        except StorageError as exc:
            logger.error("Top skills aggregation failed: %s", exc)
            raise InternalError() from exc

        return rank_skills(
            [profile.get("skills") or []] if profile is not None else [],
            (project.get("skills") or [] for project in projects),
            limit=limit,
        )
