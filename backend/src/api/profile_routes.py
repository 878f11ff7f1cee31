"""Profile endpoints: directory CRUD plus the account-scoped ``/profile/me`` variant."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Response, status

from api.dependencies import (
    AuthContext,
    get_auth_context,
    get_profile_service,
    require_write_token,
)
from api.models.profile_models import ErrorResponse, ProfileListResponse, ProfileView
from services.profile_service import ProfileService
from services.validation import (
    require_valid,
    validate_full_profile,
    validate_profile_update,
)

router = APIRouter(prefix="/profile", tags=["profile"])

_ERRORS = {
    400: {"model": ErrorResponse, "description": "Validation failed"},
    404: {"model": ErrorResponse, "description": "Profile not found"},
    409: {"model": ErrorResponse, "description": "Email already in use"},
}


# ---------------------------------------------------------------------------
# Directory
# ---------------------------------------------------------------------------

@router.get("", response_model=ProfileListResponse)
def list_profiles(service: ProfileService = Depends(get_profile_service)):
    """All profiles, newest first, each with its projects and work history."""
    profiles = service.list_profiles()
    return ProfileListResponse(profiles=profiles, count=len(profiles))


@router.post(
    "",
    response_model=ProfileView,
    status_code=status.HTTP_201_CREATED,
    responses=_ERRORS,
    dependencies=[Depends(require_write_token)],
)
def create_profile(
    payload: Any = Body(default=None),
    service: ProfileService = Depends(get_profile_service),
):
    """Create a profile, optionally with nested ``projects`` and ``work`` arrays."""
    data = require_valid(validate_full_profile(payload))
    return service.create_profile(data)


@router.put(
    "",
    response_model=ProfileView,
    responses=_ERRORS,
    dependencies=[Depends(require_write_token)],
)
def update_primary_profile(
    payload: Any = Body(default=None),
    service: ProfileService = Depends(get_profile_service),
):
    """Patch the earliest-created profile (single-portfolio deployments)."""
    patch = require_valid(validate_profile_update(payload))
    return service.update_primary_profile(patch)


# ---------------------------------------------------------------------------
# Account-scoped (declared before /{profile_id} so "me" is not taken as an id)
# ---------------------------------------------------------------------------

@router.get("/me", response_model=ProfileView, responses=_ERRORS)
def get_my_profile(
    auth: AuthContext = Depends(get_auth_context),
    service: ProfileService = Depends(get_profile_service),
):
    return service.get_profile_for_user(auth.user_id)


@router.post(
    "/me",
    response_model=ProfileView,
    status_code=status.HTTP_201_CREATED,
    responses=_ERRORS,
)
def create_my_profile(
    payload: Any = Body(default=None),
    auth: AuthContext = Depends(get_auth_context),
    service: ProfileService = Depends(get_profile_service),
):
    """Create the caller's profile; an account may own at most one."""
    data = require_valid(validate_full_profile(payload))
    return service.create_profile(data, user_id=auth.user_id)


@router.put("/me", response_model=ProfileView, responses=_ERRORS)
def update_my_profile(
    payload: Any = Body(default=None),
    auth: AuthContext = Depends(get_auth_context),
    service: ProfileService = Depends(get_profile_service),
):
    patch = require_valid(validate_profile_update(payload))
    return service.update_profile_for_user(auth.user_id, patch)


# ---------------------------------------------------------------------------
# Single profile by id
# ---------------------------------------------------------------------------

@router.get("/{profile_id}", response_model=ProfileView, responses=_ERRORS)
def get_profile(profile_id: str, service: ProfileService = Depends(get_profile_service)):
    return service.get_profile(profile_id)


@router.put(
    "/{profile_id}",
    response_model=ProfileView,
    responses=_ERRORS,
    dependencies=[Depends(require_write_token)],
)
def update_profile(
    profile_id: str,
    payload: Any = Body(default=None),
    service: ProfileService = Depends(get_profile_service),
):
    """Partial update: only the keys present in the body change."""
    patch = require_valid(validate_profile_update(payload))
    return service.update_profile(profile_id, patch)


@router.delete(
    "/{profile_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={404: _ERRORS[404]},
    dependencies=[Depends(require_write_token)],
)
def delete_profile(profile_id: str, service: ProfileService = Depends(get_profile_service)):
    """Delete a profile and, by cascade, its projects and work experiences."""
    service.delete_profile(profile_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
