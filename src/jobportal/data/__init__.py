"""Data access for skills, job postings and applications."""

from typing import Optional

from jobportal.config import Settings, settings as default_settings

from .repository import ApplicationRepository
from .memory import InMemoryRepository
from .supabase import SupabaseRepository


def build_repository(settings: Optional[Settings] = None) -> ApplicationRepository:
    """Create the repository selected by ``settings.data_backend``."""
    settings = settings or default_settings
    backend = settings.data_backend.lower()

    if backend == "memory":
        return InMemoryRepository()
    if backend == "supabase":
        return SupabaseRepository(
            base_url=settings.supabase_url,
            api_key=settings.supabase_key,
            schema=settings.supabase_schema,
        )
    raise ValueError(f"Unknown data backend: {settings.data_backend}")


__all__ = [
    "ApplicationRepository",
    "InMemoryRepository",
    "SupabaseRepository",
    "build_repository",
]
