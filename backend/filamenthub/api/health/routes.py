"""Health check endpoints."""
from __future__ import annotations

from flask import Blueprint, current_app

from ...errors import ok
from ...integrations.supabase_client import supabase_ext


bp = Blueprint("health", __name__)


@bp.get("/")
def alive():
    return ok({"status": "ok", "repoBackend": current_app.config.get("PROFILE_REPO_BACKEND")})


@bp.get("/supabase")
def supabase_status():
    status = supabase_ext.status()
    return ok({
        "anon_initialized": status["anon_initialized"],
        "service_initialized": status["service_initialized"],
    })
