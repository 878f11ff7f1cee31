"""Payload validation returning tagged results instead of raising.

Every ``validate_*`` function takes an untyped payload (usually decoded JSON)
and returns either ``Valid`` holding the typed pydantic model or ``Invalid``
holding field-level messages in schema order. Nested projects and work
experiences are validated through the parent model, so one bad item rejects
the whole submission.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Sequence, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from api.models.profile_models import (
    FullProfileCreate,
    ProfileCreate,
    ProfileUpdate,
    ProjectCreate,
    WorkExperienceCreate,
)
from services.errors import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)

NOT_AN_OBJECT = "Request body must be a JSON object"

_REQUIRED_MESSAGES = {
    "name": "Name is required",
    "email": "Email is required",
    "school": "School is required",
    "title": "Title is required",
    "description": "Description is required",
    "role": "Role is required",
    "company": "Company is required",
    "bullet": "Bullet is required",
}
_REQUIRED_TYPES = {"missing", "string_too_short", "null_not_allowed"}
_VERBATIM_TYPES = {"invalid_email"}
_COLLECTIONS = {"projects", "work"}


@dataclass(frozen=True)
class Valid(Generic[ModelT]):
    value: ModelT
    ok: bool = field(default=True, init=False)


@dataclass(frozen=True)
class Invalid:
    errors: List[str]
    ok: bool = field(default=False, init=False)

    @property
    def first_error(self) -> str:
        return self.errors[0]


ValidationResult = Union[Valid[ModelT], Invalid]


def _render_loc(loc: Sequence[Union[str, int]]) -> str:
    rendered = ""
    for part in loc:
        if isinstance(part, int):
            rendered += f"[{part}]"
        else:
            rendered += f".{part}" if rendered else str(part)
    return rendered


def _format_error(error: Dict[str, Any]) -> str:
    loc = tuple(error.get("loc", ()))
    leaf = next((part for part in reversed(loc) if isinstance(part, str)), None)
    error_type = error.get("type", "")

    if error_type in _REQUIRED_TYPES and leaf in _REQUIRED_MESSAGES:
        message = _REQUIRED_MESSAGES[leaf]
    elif error_type in _VERBATIM_TYPES:
        message = error["msg"]
    else:
        return f"{_render_loc(loc)}: {error['msg']}" if loc else error["msg"]

    if len(loc) >= 2 and loc[0] in _COLLECTIONS and isinstance(loc[1], int):
        return f"{loc[0]}[{loc[1]}]: {message}"
    return message


def _validate(model: Type[ModelT], payload: Any) -> ValidationResult:
    if not isinstance(payload, dict):
        return Invalid([NOT_AN_OBJECT])
    try:
        return Valid(model.model_validate(payload))
    except PydanticValidationError as exc:
        return Invalid([_format_error(err) for err in exc.errors()])


def validate_profile_create(payload: Any) -> ValidationResult:
    return _validate(ProfileCreate, payload)


def validate_profile_update(payload: Any) -> ValidationResult:
    return _validate(ProfileUpdate, payload)


def validate_project(payload: Any) -> ValidationResult:
    return _validate(ProjectCreate, payload)


def validate_work_experience(payload: Any) -> ValidationResult:
    return _validate(WorkExperienceCreate, payload)


def validate_full_profile(payload: Any) -> ValidationResult:
    return _validate(FullProfileCreate, payload)


def require_valid(result: ValidationResult) -> Any:
    """Unwrap a result, raising the first message as a ``ValidationError``."""
    if not result.ok:
        raise ValidationError(result.first_error)
    return result.value
