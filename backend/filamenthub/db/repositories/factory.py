"""Repository factory for Profile (sqlalchemy|supabase)."""
from __future__ import annotations

from typing import Optional

from flask import current_app
from sqlalchemy.orm import Session

from .profile_repo import ProfileRepository as SQLARepo
from .profile_repo_supabase import ProfileRepositorySupabase
from ...integrations.supabase_client import supabase_ext


def profile_repo(session: Optional[Session] = None):
    backend = (current_app.config.get("PROFILE_REPO_BACKEND") or "sqlalchemy").lower()
    if backend == "supabase":
        client = supabase_ext.service or supabase_ext.anon
        if client is None:
            raise RuntimeError("Supabase client is not initialized; set SUPABASE_URL and a key.")
        return ProfileRepositorySupabase(client, current_app.config.get("SUPABASE_TABLE", "filament_profiles"))
    if session is None:
        raise RuntimeError("SQLAlchemy repo requires a session")
    return SQLARepo(session)
