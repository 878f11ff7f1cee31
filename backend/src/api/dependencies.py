from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx
from fastapi import Depends, Header, Request, status

from config.settings import Settings
from services.errors import (
    ForbiddenError,
    InternalError,
    UnauthorizedError,
    UpstreamError,
)
from services.profile_service import ProfileService
from services.search_service import SearchService
from storage.repository import ProfileRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthContext:
    user_id: str
    access_token: str
    email: Optional[str] = None


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_repository(request: Request) -> ProfileRepository:
    return request.app.state.repository


def get_profile_service(repository: ProfileRepository = Depends(get_repository)) -> ProfileService:
    return ProfileService(repository)


def get_search_service(repository: ProfileRepository = Depends(get_repository)) -> SearchService:
    return SearchService(repository)


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1].strip() or None


def require_write_token(
    authorization: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    """Guard directory writes with the shared ``API_TOKEN`` when one is configured."""
    if not settings.write_protection_enabled:
        return
    if not authorization:
        raise UnauthorizedError("Authorization header required")
    parts = authorization.split()
    if len(parts) != 2 or parts[0] != "Bearer" or parts[1] != settings.api_token:
        raise ForbiddenError("Invalid authorization token")


async def _fetch_user(access_token: str, settings: Settings) -> Dict[str, Any]:
    if not settings.supabase_url or not settings.supabase_key:
        logger.error("Account routes need SUPABASE_URL and a Supabase key")
        raise InternalError()

    headers = {
        "Authorization": f"Bearer {access_token}",
        "apikey": settings.supabase_key,
        "Content-Type": "application/json",
    }
    try:
        async with httpx.AsyncClient(timeout=10) as client:
            response = await client.get(f"{settings.supabase_url}/auth/v1/user", headers=headers)
    except httpx.HTTPError as exc:
        logger.error("Supabase Auth request failed: %s", exc)
        raise UpstreamError("Failed to validate access token") from exc

    if response.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN):
        raise UnauthorizedError("Invalid or expired access token")
    if response.status_code >= 400:
        raise UpstreamError("Failed to validate access token")

    payload = response.json()
    if not payload.get("id"):
        raise UnauthorizedError("Access token missing user id")
    return payload


async def get_auth_context(
    authorization: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> AuthContext:
    """Resolve the caller through Supabase Auth for the account-scoped routes."""
    if not authorization:
        raise UnauthorizedError("Authorization header missing")

    access_token = _bearer_token(authorization)
    if access_token is None:
        raise UnauthorizedError("Authorization header must be Bearer token")

    user = await _fetch_user(access_token, settings)
    return AuthContext(
        user_id=user["id"],
        access_token=access_token,
        email=user.get("email"),
    )
