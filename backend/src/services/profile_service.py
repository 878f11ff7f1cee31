from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from api.models.profile_models import (
    FullProfileCreate,
    ProfileUpdate,
    ProfileView,
    ProjectCreate,
    WorkExperienceCreate,
)
from services.errors import ConflictError, InternalError, NotFoundError
from storage.errors import DuplicateAccountError, DuplicateEmailError, StorageError
from storage.repository import ProfileRepository, Row

logger = logging.getLogger(__name__)

EMAIL_CONFLICT = "A profile with this email already exists."
ACCOUNT_CONFLICT = "This account already has a profile."
PROFILE_NOT_FOUND = "Profile not found"


def is_uuid(value: str) -> bool:
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


def _as_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def next_timestamp(previous: Any) -> datetime:
    """Current UTC time, nudged past ``previous`` so ``updated_at`` strictly increases."""
    now = datetime.now(timezone.utc)
    last = _as_datetime(previous)
    if last is not None:
        if last.tzinfo is None:
            last = last.replace(tzinfo=timezone.utc)
        if now <= last:
            now = last + timedelta(microseconds=1)
    return now


def _project_row(project: ProjectCreate) -> Row:
    return {
        "title": project.title,
        "description": project.description,
        "links": project.links.model_dump(by_alias=True, exclude_none=True),
        "skills": list(project.skills),
    }


def _work_row(work: WorkExperienceCreate) -> Row:
    return {
        "role": work.role,
        "company": work.company,
        "location": work.location,
        "start_date": work.start_date,
        "end_date": work.end_date,
        "summary": work.summary,
        "highlights": [highlight.model_dump(by_alias=True) for highlight in work.highlights],
    }


class ProfileService:
    """Create, read, update and delete profile aggregates.

    An aggregate is a profile row plus its projects and work experiences.
    Writes always re-read the aggregate so generated ids and timestamps are
    part of the response.
    """

    def __init__(self, repository: ProfileRepository) -> None:
        self.repository = repository

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _storage_failure(self, action: str, exc: StorageError) -> InternalError:
        logger.error("Storage failure while trying to %s: %s", action, exc)
        return InternalError()

    def _assemble(self, profile: Row, projects: List[Row], work: List[Row]) -> ProfileView:
        return ProfileView.model_validate({**profile, "projects": projects, "work": work})

    def _load_aggregate(self, profile: Row) -> ProfileView:
        profile_ids = [profile["id"]]
        projects = self.repository.list_projects(profile_ids)
        work = self.repository.list_work_experiences(profile_ids)
        return self._assemble(profile, projects, work)

    def _require_profile(self, profile_id: str) -> Row:
        profile = self.repository.get_profile(profile_id) if is_uuid(profile_id) else None
        if profile is None:
            raise NotFoundError(PROFILE_NOT_FOUND)
        return profile

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_profile(self, profile_id: str) -> ProfileView:
        try:
            return self._load_aggregate(self._require_profile(profile_id))
        except StorageError as exc:
            raise self._storage_failure(f"read profile {profile_id}", exc) from exc

    def get_profile_for_user(self, user_id: str) -> ProfileView:
        try:
            profile = self.repository.get_profile_by_user(user_id)
            if profile is None:
                raise NotFoundError(PROFILE_NOT_FOUND)
            return self._load_aggregate(profile)
        except StorageError as exc:
            raise self._storage_failure(f"read profile for user {user_id}", exc) from exc

    def get_primary_profile(self) -> ProfileView:
        try:
            profile = self.repository.get_first_profile()
            if profile is None:
                raise NotFoundError(PROFILE_NOT_FOUND)
            return self._load_aggregate(profile)
        except StorageError as exc:
            raise self._storage_failure("read primary profile", exc) from exc

    def list_profiles(self) -> List[ProfileView]:
        """All profiles newest-first, children fetched in one query per table."""
        try:
            profiles = self.repository.list_profiles()
            if not profiles:
                return []
            profile_ids = [profile["id"] for profile in profiles]
            projects: Dict[str, List[Row]] = defaultdict(list)
            for row in self.repository.list_projects(profile_ids):
                projects[row["profile_id"]].append(row)
            work: Dict[str, List[Row]] = defaultdict(list)
            for row in self.repository.list_work_experiences(profile_ids):
                work[row["profile_id"]].append(row)
        except StorageError as exc:
            raise self._storage_failure("list profiles", exc) from exc

        return [
            self._assemble(profile, projects[profile["id"]], work[profile["id"]])
            for profile in profiles
        ]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_profile(self, data: FullProfileCreate, user_id: Optional[str] = None) -> ProfileView:
        """Persist a profile with its nested projects and work experiences.

        Raises:
            ConflictError: the email is taken, or ``user_id`` already owns a profile.
        """
        try:
            if user_id is not None and self.repository.get_profile_by_user(user_id) is not None:
                logger.info("Rejected profile create: account %s already has one", user_id)
                raise ConflictError(ACCOUNT_CONFLICT)
            if self.repository.get_profile_by_email(data.email) is not None:
                logger.info("Rejected profile create: email already in use")
                raise ConflictError(EMAIL_CONFLICT)

            profile_row = data.model_dump(exclude={"projects", "work"})
            profile_row["links"] = data.links.model_dump(by_alias=True, exclude_none=True)
            profile_row["education"] = [
                entry.model_dump(by_alias=True, exclude_none=True) for entry in data.education
            ]
            if user_id is not None:
                profile_row["user_id"] = user_id

            # The pre-checks above can lose a race against a concurrent create.
            try:
                profile = self.repository.insert_profile(profile_row)
            except DuplicateAccountError as exc:
                logger.info("Profile insert hit unique account constraint: %s", exc)
                raise ConflictError(ACCOUNT_CONFLICT) from exc
            except DuplicateEmailError as exc:
                logger.info("Profile insert hit unique email constraint: %s", exc)
                raise ConflictError(EMAIL_CONFLICT) from exc

            profile_id = profile["id"]
            if data.projects:
                self.repository.insert_projects(profile_id, [_project_row(p) for p in data.projects])
            if data.work:
                self.repository.insert_work_experiences(profile_id, [_work_row(w) for w in data.work])

            logger.info(
                "Created profile %s with %d projects and %d work experiences",
                profile_id,
                len(data.projects),
                len(data.work),
            )
            return self._load_aggregate(self._require_profile(profile_id))
        except StorageError as exc:
            raise self._storage_failure("create profile", exc) from exc

    def _apply_update(self, profile: Row, patch: ProfileUpdate) -> ProfileView:
        profile_id = profile["id"]
        changes = patch.model_dump(exclude_unset=True)
        if "links" in changes:
            changes["links"] = patch.links.model_dump(by_alias=True, exclude_none=True)
        if "education" in changes:
            changes["education"] = [
                entry.model_dump(by_alias=True, exclude_none=True) for entry in patch.education
            ]

        email = changes.get("email")
        if email is not None and self.repository.get_profile_by_email(email, exclude_id=profile_id):
            logger.info("Rejected update of profile %s: email already in use", profile_id)
            raise ConflictError(EMAIL_CONFLICT)

        changes["updated_at"] = next_timestamp(profile.get("updated_at")).isoformat()
        try:
            updated = self.repository.update_profile(profile_id, changes)
        except DuplicateEmailError as exc:
            raise ConflictError(EMAIL_CONFLICT) from exc
        if updated is None:
            # Deleted between the read and the write.
            raise NotFoundError(PROFILE_NOT_FOUND)

        logger.info("Updated profile %s fields: %s", profile_id, ", ".join(sorted(changes)))
        return self._load_aggregate(updated)

    def update_profile(self, profile_id: str, patch: ProfileUpdate) -> ProfileView:
        try:
            return self._apply_update(self._require_profile(profile_id), patch)
        except StorageError as exc:
            raise self._storage_failure(f"update profile {profile_id}", exc) from exc

    def update_primary_profile(self, patch: ProfileUpdate) -> ProfileView:
        try:
            profile = self.repository.get_first_profile()
            if profile is None:
                raise NotFoundError(PROFILE_NOT_FOUND)
            return self._apply_update(profile, patch)
        except StorageError as exc:
            raise self._storage_failure("update primary profile", exc) from exc

    def update_profile_for_user(self, user_id: str, patch: ProfileUpdate) -> ProfileView:
        try:
            profile = self.repository.get_profile_by_user(user_id)
            if profile is None:
                raise NotFoundError(PROFILE_NOT_FOUND)
            return self._apply_update(profile, patch)
        except StorageError as exc:
            raise self._storage_failure(f"update profile for user {user_id}", exc) from exc

    def delete_profile(self, profile_id: str) -> None:
        """Delete a profile; its projects and work experiences go with it."""
        try:
            if not is_uuid(profile_id) or not self.repository.delete_profile(profile_id):
                raise NotFoundError(PROFILE_NOT_FOUND)
        except StorageError as exc:
            raise self._storage_failure(f"delete profile {profile_id}", exc) from exc
        logger.info("Deleted profile %s", profile_id)
