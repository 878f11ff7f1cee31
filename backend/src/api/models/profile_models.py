from __future__ import annotations

from datetime import datetime
from typing import Annotated, List, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import (
    AfterValidator,
    AnyUrl,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

_URL_ADAPTER = TypeAdapter(AnyUrl)


def _check_url(value: str) -> str:
    try:
        _URL_ADAPTER.validate_python(value)
    except ValidationError:
        raise PydanticCustomError("invalid_url", "Invalid url")
    # Keep the caller's spelling; AnyUrl would normalise it.
    return value


def _check_email(value: str) -> str:
    try:
        checked = validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        raise PydanticCustomError("invalid_email", "Invalid email")
    # Top-level domains are at least two letters.
    if len(checked.ascii_domain.rsplit(".", 1)[-1]) < 2:
        raise PydanticCustomError("invalid_email", "Invalid email")
    return value


Url = Annotated[str, AfterValidator(_check_url)]
Email = Annotated[str, AfterValidator(_check_email)]
NonEmptyStr = Annotated[str, Field(min_length=1)]


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys while keeping snake_case attributes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Nested JSON documents
# ---------------------------------------------------------------------------

class EducationEntry(CamelModel):
    school: NonEmptyStr
    degree: Optional[str] = None
    area: Optional[str] = None
    start_year: Optional[str] = None
    end_year: Optional[str] = None


class ProfileLinks(CamelModel):
    github: Optional[Url] = None
    linkedin: Optional[Url] = None
    portfolio: Optional[Url] = None
    other: List[Url] = Field(default_factory=list)


class ProjectLinks(CamelModel):
    demo: Optional[Url] = None
    repo: Optional[Url] = None
    docs: Optional[Url] = None
    other: List[Url] = Field(default_factory=list)


class WorkHighlight(CamelModel):
    bullet: NonEmptyStr


# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------

class ProjectCreate(CamelModel):
    title: NonEmptyStr
    description: NonEmptyStr
    links: ProjectLinks = Field(default_factory=ProjectLinks)
    skills: List[str] = Field(default_factory=list)


class WorkExperienceCreate(CamelModel):
    role: NonEmptyStr
    company: NonEmptyStr
    location: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    summary: Optional[str] = None
    highlights: List[WorkHighlight] = Field(default_factory=list)


class ProfileCreate(CamelModel):
    name: NonEmptyStr
    email: Email
    summary: Optional[str] = None
    education: List[EducationEntry] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)
    links: ProfileLinks = Field(default_factory=ProfileLinks)


class FullProfileCreate(ProfileCreate):
    projects: List[ProjectCreate] = Field(default_factory=list)
    work: List[WorkExperienceCreate] = Field(default_factory=list)


class ProfileUpdate(CamelModel):
    """Partial profile patch; only keys present in the payload are applied."""

    name: Optional[NonEmptyStr] = None
    email: Optional[Email] = None
    summary: Optional[str] = None
    education: Optional[List[EducationEntry]] = None
    skills: Optional[List[str]] = None
    links: Optional[ProfileLinks] = None

    @field_validator("name", "email", "education", "skills", "links", mode="before")
    @classmethod
    def _reject_null(cls, value, info):
        if value is None:
            raise PydanticCustomError(
                "null_not_allowed", "{field} cannot be null", {"field": info.field_name}
            )
        return value


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class ProjectView(CamelModel):
    id: str
    title: str
    description: str
    links: ProjectLinks = Field(default_factory=ProjectLinks)
    skills: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class WorkExperienceView(CamelModel):
    id: str
    role: str
    company: str
    location: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    summary: Optional[str] = None
    highlights: List[WorkHighlight] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProfileView(CamelModel):
    id: str
    name: str
    email: str
    summary: Optional[str] = None
    education: List[EducationEntry] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)
    links: ProfileLinks = Field(default_factory=ProfileLinks)
    projects: List[ProjectView] = Field(default_factory=list)
    work: List[WorkExperienceView] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class ProfileListResponse(CamelModel):
    profiles: List[ProfileView]
    count: int


class ErrorResponse(BaseModel):
    error: str
