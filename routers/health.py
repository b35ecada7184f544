# routers/health.py

from fastapi import APIRouter
from core.supabase_client import ping_supabase

router = APIRouter(
    prefix="/health",
    tags=["Health"],
)


# -----------------------------------------------------
# GET /health/db
# Checks Supabase connection + permission tables
# No auth required
# -----------------------------------------------------
@router.get("/db", summary="Supabase / DB health check")
async def health_db():
    """
    Verifies Supabase connectivity.
    - Checks if URL + key are configured
    - Attempts to query the authorization tables
    - Returns row-count + error details per table

    Safe for external health monitors (no auth required).
    """
    status = await ping_supabase()
    return {
        "service": "Supabase",
        "status": status.get("status", "unknown"),
        "details": status,
    }


# -----------------------------------------------------
# GET /health/app
# -----------------------------------------------------
@router.get("/app", summary="App health check")
async def health_app():
    """
    Lightweight health check for uptime monitors.
    """
    return {
        "service": "Tenantry API",
        "status": "ok",
    }
