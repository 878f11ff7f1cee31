"""In-process storage backend used for local development and tests."""

from __future__ import annotations

import copy
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from .errors import DuplicateAccountError, DuplicateEmailError
from .repository import ProfileRepository, Row


def _contains(value: Optional[str], term: str) -> bool:
    return value is not None and term in value.lower()


def _any_contains(values: Optional[Iterable[str]], term: str) -> bool:
    return any(_contains(value, term) for value in values or [])


class InMemoryProfileRepository(ProfileRepository):
    """Dictionary-backed tables mirroring ``db/schema.sql``.

    Rows are copied on the way in and out so callers never share state with
    the store. A lock serialises access because FastAPI runs sync
    dependencies on a threadpool.
    """

    name = "memory"

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._profiles: Dict[str, Row] = {}
        self._projects: Dict[str, Row] = {}
        self._work: Dict[str, Row] = {}

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    @staticmethod
    def _copy(row: Optional[Row]) -> Optional[Row]:
        return copy.deepcopy(row) if row is not None else None

    def _email_taken(self, email: str, exclude_id: Optional[str] = None) -> bool:
        return any(
            row["email"] == email and row["id"] != exclude_id
            for row in self._profiles.values()
        )

    def _user_taken(self, user_id: str, exclude_id: Optional[str] = None) -> bool:
        return any(
            row.get("user_id") == user_id and row["id"] != exclude_id
            for row in self._profiles.values()
        )

    # -- profiles ---------------------------------------------------------

    def get_profile(self, profile_id: str) -> Optional[Row]:
        with self._lock:
            return self._copy(self._profiles.get(profile_id))

    def get_profile_by_email(self, email: str, exclude_id: Optional[str] = None) -> Optional[Row]:
        with self._lock:
            for row in self._profiles.values():
                if row["email"] == email and row["id"] != exclude_id:
                    return self._copy(row)
        return None

    def get_profile_by_user(self, user_id: str) -> Optional[Row]:
        with self._lock:
            for row in self._profiles.values():
                if row.get("user_id") == user_id:
                    return self._copy(row)
        return None

    def get_first_profile(self) -> Optional[Row]:
        with self._lock:
            first = next(iter(self._profiles.values()), None)
            return self._copy(first)

    def list_profiles(self) -> List[Row]:
        with self._lock:
            return [copy.deepcopy(row) for row in reversed(list(self._profiles.values()))]

    def insert_profile(self, data: Row) -> Row:
        with self._lock:
            if self._email_taken(data["email"]):
                raise DuplicateEmailError(f"email {data['email']!r} already exists")
            user_id = data.get("user_id")
            if user_id and self._user_taken(user_id):
                raise DuplicateAccountError(f"user {user_id} already owns a profile")

            now = self._now()
            row: Row = {
                "id": str(uuid.uuid4()),
                "user_id": user_id,
                "name": data["name"],
                "email": data["email"],
                "summary": data.get("summary"),
                "education": copy.deepcopy(data.get("education") or []),
                "skills": list(data.get("skills") or []),
                "links": copy.deepcopy(data.get("links") or {}),
                "created_at": now,
                "updated_at": now,
            }
            self._profiles[row["id"]] = row
            return copy.deepcopy(row)

    def update_profile(self, profile_id: str, data: Row) -> Optional[Row]:
        with self._lock:
            row = self._profiles.get(profile_id)
            if row is None:
                return None
            email = data.get("email")
            if email is not None and self._email_taken(email, exclude_id=profile_id):
                raise DuplicateEmailError(f"email {email!r} already exists")
            row.update(copy.deepcopy(data))
            return copy.deepcopy(row)

    def delete_profile(self, profile_id: str) -> bool:
        with self._lock:
            if self._profiles.pop(profile_id, None) is None:
                return False
            # ON DELETE CASCADE
            self._projects = {
                key: row for key, row in self._projects.items() if row["profile_id"] != profile_id
            }
            self._work = {
                key: row for key, row in self._work.items() if row["profile_id"] != profile_id
            }
            return True

    # -- children ---------------------------------------------------------

    def _insert_children(self, table: Dict[str, Row], profile_id: str, rows: Iterable[Row]) -> List[Row]:
        inserted = []
        with self._lock:
            for data in rows:
                now = self._now()
                row = copy.deepcopy(data)
                row.update(
                    {
                        "id": str(uuid.uuid4()),
                        "profile_id": profile_id,
                        "created_at": now,
                        "updated_at": now,
                    }
                )
                table[row["id"]] = row
                inserted.append(copy.deepcopy(row))
        return inserted

    def insert_projects(self, profile_id: str, rows: Iterable[Row]) -> List[Row]:
        defaults = {"links": {}, "skills": []}
        return self._insert_children(
            self._projects, profile_id, ({**defaults, **row} for row in rows)
        )

    def insert_work_experiences(self, profile_id: str, rows: Iterable[Row]) -> List[Row]:
        defaults: Dict[str, Any] = {
            "location": None,
            "start_date": None,
            "end_date": None,
            "summary": None,
            "highlights": [],
        }
        return self._insert_children(
            self._work, profile_id, ({**defaults, **row} for row in rows)
        )

    @staticmethod
    def _filtered(table: Dict[str, Row], profile_ids: Optional[List[str]]) -> List[Row]:
        return [
            copy.deepcopy(row)
            for row in table.values()
            if profile_ids is None or row["profile_id"] in profile_ids
        ]

    def list_projects(self, profile_ids: Optional[List[str]] = None) -> List[Row]:
        with self._lock:
            return self._filtered(self._projects, profile_ids)

    def list_work_experiences(self, profile_ids: Optional[List[str]] = None) -> List[Row]:
        with self._lock:
            return self._filtered(self._work, profile_ids)

    # -- search -----------------------------------------------------------

    def search_profiles(self, term: str) -> List[Row]:
        term = term.lower()
        with self._lock:
            return [
                copy.deepcopy(row)
                for row in reversed(list(self._profiles.values()))
                if _contains(row["name"], term)
                or _contains(row.get("summary"), term)
                or _any_contains(row.get("skills"), term)
            ]

    def search_projects(self, term: str) -> List[Row]:
        term = term.lower()
        with self._lock:
            return [
                copy.deepcopy(row)
                for row in self._projects.values()
                if _contains(row["title"], term)
                or _contains(row["description"], term)
                or _any_contains(row.get("skills"), term)
            ]

    def search_work_experiences(self, term: str) -> List[Row]:
        term = term.lower()
        with self._lock:
            return [
                copy.deepcopy(row)
                for row in self._work.values()
                if _contains(row["role"], term)
                or _contains(row["company"], term)
                or _contains(row.get("summary"), term)
            ]

    def projects_with_skill(self, skill: str, profile_ids: Optional[List[str]] = None) -> List[Row]:
        wanted = skill.lower()
        with self._lock:
            return [
                row
                for row in self._filtered(self._projects, profile_ids)
                if any(s.lower() == wanted for s in row.get("skills") or [])
            ]
