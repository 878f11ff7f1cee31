"""Storage backends for profiles, projects and work experiences."""

from .errors import DuplicateAccountError, DuplicateEmailError, StorageError
from .memory_repository import InMemoryProfileRepository
from .repository import ProfileRepository

__all__ = [
    "DuplicateAccountError",
    "DuplicateEmailError",
    "InMemoryProfileRepository",
    "ProfileRepository",
    "StorageError",
    "build_repository",
]


def build_repository(settings) -> ProfileRepository:
    """Construct the repository selected by ``settings.storage_backend``."""
    if settings.storage_backend == "memory":
        return InMemoryProfileRepository()

    from .supabase_repository import SupabaseProfileRepository

    return SupabaseProfileRepository(settings.supabase_url, settings.supabase_key)
