"""
Search routes
Implements keyword search and the top-skills ranking
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_search_service, get_settings
from api.models.profile_models import ErrorResponse
from api.models.search_models import SearchResponse, TopSkillsResponse
from config.settings import Settings
from services.search_service import SearchService

router = APIRouter(tags=["Search"])


@router.get(
    "/search",
    response_model=SearchResponse,
    responses={400: {"model": ErrorResponse, "description": "Missing query"}},
)
def search(
    q: Optional[str] = Query(None, description="Keyword matched as a case-insensitive substring"),
    service: SearchService = Depends(get_search_service),
):
    """
    Search profiles (name, summary, skills), projects (title, description,
    skills) and work experiences (role, company, summary).
    """
    return service.search(q)


@router.get(
    "/skills/top",
    response_model=TopSkillsResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid limit"},
        404: {"model": ErrorResponse, "description": "Profile not found"},
    },
)
def top_skills(
    limit: Optional[int] = Query(None),
    profile_id: Optional[str] = Query(None, alias="profileId"),
    service: SearchService = Depends(get_search_service),
    settings: Settings = Depends(get_settings),
):
    """Most frequent skills; profile listings count double."""
    if limit is None:
        limit = settings.top_skills_limit
    return service.top_skills(limit=limit, profile_id=profile_id)
