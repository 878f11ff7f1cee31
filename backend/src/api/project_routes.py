# Project listing routes
# GET /projects?skill=python returns projects tagged with a skill (any case)

from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_search_service
from api.models.profile_models import ErrorResponse
from api.models.search_models import ProjectListResponse
from services.search_service import SearchService

router = APIRouter(prefix="/projects", tags=["Projects"])


@router.get(
    "",
    response_model=ProjectListResponse,
    responses={404: {"model": ErrorResponse, "description": "Profile not found"}},
)
def list_projects(
    skill: Optional[str] = Query(None, description="Exact skill name, case-insensitive"),
    profile_id: Optional[str] = Query(None, alias="profileId"),
    service: SearchService = Depends(get_search_service),
):
    return service.projects_by_skill(skill=skill, profile_id=profile_id)
