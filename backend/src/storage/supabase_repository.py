from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from postgrest.exceptions import APIError
from supabase import Client, create_client

from .errors import DuplicateAccountError, DuplicateEmailError, StorageError
from .repository import ProfileRepository, Row

logger = logging.getLogger(__name__)

_PROFILES = "profiles"
_PROJECTS = "projects"
_WORK = "work_experiences"

# Postgres SQLSTATE for unique_violation
_UNIQUE_VIOLATION = "23505"
_ACCOUNT_KEY = "user_id"


class SupabaseProfileRepository(ProfileRepository):
    """Profile storage backed by Supabase (PostgREST).

    Keyword search and the skill filter run as SQL functions (see
    ``db/schema.sql``) because PostgREST filters cannot express substring
    matches against array elements.
    """

    name = "supabase"

    def __init__(
        self,
        supabase_url: Optional[str] = None,
        supabase_key: Optional[str] = None,
        client: Optional[Client] = None,
    ) -> None:
        if client is not None:
            self.client = client
            return

        if not supabase_url or not supabase_key:
            raise StorageError("Supabase credentials not configured.")

        try:
            self.client = create_client(supabase_url, supabase_key)
        except Exception as exc:
            raise StorageError(f"Failed to initialize Supabase client: {exc}") from exc

    def _handle_response(self, response: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
        """Handle Supabase response data."""
        if response is not None:
            return response
        logger.error("Supabase operation returned None")
        raise StorageError("Supabase operation returned None")

    def _execute(self, query, action: str) -> List[Row]:
        try:
            response = query.execute()
        except APIError as exc:
            if exc.code == _UNIQUE_VIOLATION:
                # Postgres names the violated key, e.g. "Key (user_id)=(...) already exists."
                if _ACCOUNT_KEY in f"{exc.message} {exc.details}":
                    raise DuplicateAccountError(f"Failed to {action}: {exc.message}") from exc
                raise DuplicateEmailError(f"Failed to {action}: {exc.message}") from exc
            raise StorageError(f"Failed to {action}: {exc.message}") from exc
        except StorageError:
            raise
        except Exception as exc:
            raise StorageError(f"Failed to {action}: {exc}") from exc
        return self._handle_response(response.data)

    def _first(self, query, action: str) -> Optional[Row]:
        data = self._execute(query.limit(1), action)
        return data[0] if data else None

    # -- profiles ---------------------------------------------------------

    def get_profile(self, profile_id: str) -> Optional[Row]:
        query = self.client.table(_PROFILES).select("*").eq("id", profile_id)
        return self._first(query, f"retrieve profile {profile_id}")

    def get_profile_by_email(self, email: str, exclude_id: Optional[str] = None) -> Optional[Row]:
        query = self.client.table(_PROFILES).select("*").eq("email", email)
        if exclude_id is not None:
            query = query.neq("id", exclude_id)
        return self._first(query, "look up profile by email")

    def get_profile_by_user(self, user_id: str) -> Optional[Row]:
        query = self.client.table(_PROFILES).select("*").eq("user_id", user_id)
        return self._first(query, f"retrieve profile for user {user_id}")

    def get_first_profile(self) -> Optional[Row]:
        query = self.client.table(_PROFILES).select("*").order("created_at")
        return self._first(query, "retrieve primary profile")

    def list_profiles(self) -> List[Row]:
        query = self.client.table(_PROFILES).select("*").order("created_at", desc=True)
        return self._execute(query, "list profiles")

    def insert_profile(self, data: Row) -> Row:
        rows = self._execute(self.client.table(_PROFILES).insert(data), "create profile")
        if not rows:
            raise StorageError("Profile insert returned no rows")
        return rows[0]

    def update_profile(self, profile_id: str, data: Row) -> Optional[Row]:
        query = self.client.table(_PROFILES).update(data).eq("id", profile_id)
        rows = self._execute(query, f"update profile {profile_id}")
        return rows[0] if rows else None

    def delete_profile(self, profile_id: str) -> bool:
        query = self.client.table(_PROFILES).delete().eq("id", profile_id)
        return bool(self._execute(query, f"delete profile {profile_id}"))

    # -- children ---------------------------------------------------------

    def _insert_children(self, table: str, profile_id: str, rows: Iterable[Row]) -> List[Row]:
        payload = [{**row, "profile_id": profile_id} for row in rows]
        if not payload:
            return []
        return self._execute(
            self.client.table(table).insert(payload),
            f"insert {table} for profile {profile_id}",
        )

    def insert_projects(self, profile_id: str, rows: Iterable[Row]) -> List[Row]:
        return self._insert_children(_PROJECTS, profile_id, rows)

    def insert_work_experiences(self, profile_id: str, rows: Iterable[Row]) -> List[Row]:
        return self._insert_children(_WORK, profile_id, rows)

    def _list_children(self, table: str, profile_ids: Optional[List[str]]) -> List[Row]:
        if profile_ids is not None and not profile_ids:
            return []
        query = self.client.table(table).select("*")
        if profile_ids is not None:
            query = query.in_("profile_id", profile_ids)
        return self._execute(query.order("seq"), f"list {table}")

    def list_projects(self, profile_ids: Optional[List[str]] = None) -> List[Row]:
        return self._list_children(_PROJECTS, profile_ids)

    def list_work_experiences(self, profile_ids: Optional[List[str]] = None) -> List[Row]:
        return self._list_children(_WORK, profile_ids)

    # -- search -----------------------------------------------------------

    def _rpc(self, function: str, params: Dict[str, Any]) -> List[Row]:
        return self._execute(self.client.rpc(function, params), f"run {function}")

    def search_profiles(self, term: str) -> List[Row]:
        return self._rpc("search_profiles", {"term": term})

    def search_projects(self, term: str) -> List[Row]:
        return self._rpc("search_projects", {"term": term})

    def search_work_experiences(self, term: str) -> List[Row]:
        return self._rpc("search_work_experiences", {"term": term})

    def projects_with_skill(self, skill: str, profile_ids: Optional[List[str]] = None) -> List[Row]:
        rows = self._rpc("projects_with_skill", {"skill": skill})
        if profile_ids is None:
            return rows
        return [row for row in rows if row.get("profile_id") in profile_ids]

    def close(self) -> None:
        session = getattr(self.client.postgrest, "session", None)
        if session is not None:
            session.close()
