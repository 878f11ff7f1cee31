from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from api.models.profile_models import CamelModel, ProjectLinks


class ProjectListItem(CamelModel):
    id: str
    profile_id: str
    title: str
    description: str
    links: ProjectLinks = Field(default_factory=ProjectLinks)
    skills: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None


class ProjectListResponse(CamelModel):
    count: int
    skill: Optional[str] = None
    projects: List[ProjectListItem]


class ProfileHit(CamelModel):
    id: str
    name: str
    email: str
    summary: Optional[str] = None
    skills: List[str] = Field(default_factory=list)


class ProjectHit(CamelModel):
    id: str
    profile_id: str
    title: str
    description: str
    skills: List[str] = Field(default_factory=list)


class WorkHit(CamelModel):
    id: str
    profile_id: str
    role: str
    company: str
    summary: Optional[str] = None


class SearchResults(CamelModel):
    profiles: List[ProfileHit] = Field(default_factory=list)
    projects: List[ProjectHit] = Field(default_factory=list)
    work: List[WorkHit] = Field(default_factory=list)


class SearchCounts(CamelModel):
    profiles: int = 0
    projects: int = 0
    work: int = 0
    total: int = 0


class SearchResponse(CamelModel):
    query: str
    results: SearchResults
    counts: SearchCounts


class TopSkill(CamelModel):
    skill: str
    count: int


class TopSkillsResponse(CamelModel):
    top_skills: List[TopSkill]
    total_unique_skills: int
