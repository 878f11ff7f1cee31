"""Environment-driven settings for the portfolio backend."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()

STORAGE_BACKENDS = ("supabase", "memory")
_PLACEHOLDER_TOKEN = "changeme"


def _split_csv(raw: Optional[str]) -> List[str]:
    if not raw:
        return ["*"]
    return [part.strip() for part in raw.split(",") if part.strip()] or ["*"]


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    storage_backend: str = "supabase"
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    api_token: Optional[str] = None
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"
    top_skills_limit: int = 10

    @property
    def write_protection_enabled(self) -> bool:
        """Writes need a bearer token only when a real token is configured."""
        return bool(self.api_token) and self.api_token != _PLACEHOLDER_TOKEN


def load_settings() -> Settings:
    """Build settings from the process environment (and ``.env`` if present)."""
    backend = (os.getenv("STORAGE_BACKEND") or "supabase").strip().lower()
    if backend not in STORAGE_BACKENDS:
        raise ValueError(
            f"STORAGE_BACKEND must be one of {', '.join(STORAGE_BACKENDS)}, got {backend!r}"
        )

    return Settings(
        storage_backend=backend,
        supabase_url=os.getenv("SUPABASE_URL") or None,
        supabase_key=(
            os.getenv("SUPABASE_SERVICE_ROLE_KEY")
            or os.getenv("SUPABASE_KEY")
            or os.getenv("SUPABASE_ANON_KEY")
            or None
        ),
        api_token=os.getenv("API_TOKEN") or os.getenv("BASIC_AUTH_TOKEN") or None,
        cors_origins=_split_csv(os.getenv("CORS_ORIGINS")),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        top_skills_limit=_int_env("TOP_SKILLS_LIMIT", 10),
    )
