"""Repository contract shared by the storage backends.

Rows are plain dictionaries keyed by column name (snake_case), exactly as the
``profiles``, ``projects`` and ``work_experiences`` tables define them in
``db/schema.sql``. Timestamps may be ISO-8601 strings or ``datetime`` objects.

Ordering guarantees:
- ``list_profiles`` and ``search_profiles`` return profiles newest-first.
- Project and work experience listings come back in insertion order.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

Row = Dict[str, Any]


class ProfileRepository(ABC):
    """Data access for the profile aggregate."""

    name = "abstract"

    # -- profiles ---------------------------------------------------------

    @abstractmethod
    def get_profile(self, profile_id: str) -> Optional[Row]:
        ...

    @abstractmethod
    def get_profile_by_email(self, email: str, exclude_id: Optional[str] = None) -> Optional[Row]:
        ...

    @abstractmethod
    def get_profile_by_user(self, user_id: str) -> Optional[Row]:
        ...

    @abstractmethod
    def get_first_profile(self) -> Optional[Row]:
        """Return the earliest-created profile, if any."""

    @abstractmethod
    def list_profiles(self) -> List[Row]:
        ...

    @abstractmethod
    def insert_profile(self, data: Row) -> Row:
        """Insert a profile and return the stored row.

        Raises:
            DuplicateEmailError: the email is taken.
            DuplicateAccountError: ``user_id`` already owns a profile.
        """

    @abstractmethod
    def update_profile(self, profile_id: str, data: Row) -> Optional[Row]:
        """Apply ``data`` to a profile; ``None`` if the profile is gone."""

    @abstractmethod
    def delete_profile(self, profile_id: str) -> bool:
        """Delete a profile together with its projects and work experiences."""

    # -- children ---------------------------------------------------------

    @abstractmethod
    def insert_projects(self, profile_id: str, rows: Iterable[Row]) -> List[Row]:
        ...

    @abstractmethod
    def insert_work_experiences(self, profile_id: str, rows: Iterable[Row]) -> List[Row]:
        ...

    @abstractmethod
    def list_projects(self, profile_ids: Optional[List[str]] = None) -> List[Row]:
        ...

    @abstractmethod
    def list_work_experiences(self, profile_ids: Optional[List[str]] = None) -> List[Row]:
        ...

    # -- search -----------------------------------------------------------

    @abstractmethod
    def search_profiles(self, term: str) -> List[Row]:
        """Profiles whose name, summary or any skill contains ``term`` (case-insensitive)."""

    @abstractmethod
    def search_projects(self, term: str) -> List[Row]:
        """Projects whose title, description or any skill contains ``term``."""

    @abstractmethod
    def search_work_experiences(self, term: str) -> List[Row]:
        """Work experiences whose role, company or summary contains ``term``."""

    @abstractmethod
    def projects_with_skill(self, skill: str, profile_ids: Optional[List[str]] = None) -> List[Row]:
        """Projects listing ``skill`` exactly, ignoring case."""

    def close(self) -> None:
        """Release any held connections."""
