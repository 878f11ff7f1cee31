"""
Pytest configuration and fixtures
"""
import copy
import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Define paths
PROJECT_ROOT = Path(__file__).resolve().parent.parent
BACKEND_SRC = PROJECT_ROOT / "backend" / "src"

# Add backend/src to sys.path so `api`, `services`, `storage` resolve.
if str(BACKEND_SRC) not in sys.path:
    sys.path.insert(0, str(BACKEND_SRC))

# Set env vars BEFORE importing main, which builds a module-level app.
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-service-role-key")

from api.dependencies import AuthContext, get_auth_context  # noqa: E402
from config.settings import Settings  # noqa: E402
from main import create_app  # noqa: E402
from storage.memory_repository import InMemoryProfileRepository  # noqa: E402

TEST_USER_ID = "9870edb5-2741-4c0a-b5cd-494a498f7485"
TEST_USER_EMAIL = "user@example.com"


SAMPLE_PROFILE = {
    "name": "Ada Lovelace",
    "email": "ada@example.com",
    "summary": "Analytical engine programmer and Python enthusiast",
    "education": [
        {"school": "University of London", "degree": "Mathematics", "startYear": "1832"}
    ],
    "skills": ["Python", "Go", "Mathematics"],
    "links": {
        "github": "https://github.com/ada",
        "linkedin": None,
        "other": ["https://ada.example.com"],
    },
    "projects": [
        {
            "title": "Bernoulli Numbers",
            "description": "First published algorithm for a machine",
            "links": {"repo": "https://github.com/ada/bernoulli"},
            "skills": ["Mathematics", "Go"],
        },
        {
            "title": "Notes on the Engine",
            "description": "Translation with extensive annotations",
            "skills": ["Writing"],
        },
    ],
    "work": [
        {
            "role": "Collaborator",
            "company": "Babbage Analytical",
            "location": "London",
            "startDate": "1842",
            "summary": "Designed loops for the engine",
            "highlights": [{"bullet": "Described the first computer program"}],
        }
    ],
}


@pytest.fixture
def sample_profile():
    """Fresh copy of a full profile payload with nested projects and work."""
    return copy.deepcopy(SAMPLE_PROFILE)


@pytest.fixture
def settings():
    return Settings(storage_backend="memory", supabase_url="https://test.supabase.co", supabase_key="key")


@pytest.fixture
def repository():
    return InMemoryProfileRepository()


@pytest.fixture
def app(settings, repository):
    return create_app(settings=settings, repository=repository)


@pytest.fixture
def client(app):
    """TestClient running the app lifespan against the in-memory repository."""
    with TestClient(app) as c:
        yield c


async def _override_auth() -> AuthContext:
    return AuthContext(user_id=TEST_USER_ID, access_token="test-token", email=TEST_USER_EMAIL)


@pytest.fixture
def authenticated_client(app):
    """Client whose account-scoped routes resolve to TEST_USER_ID."""
    app.dependency_overrides[get_auth_context] = _override_auth
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
