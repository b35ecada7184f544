# core/supabase_client.py

import asyncio
from typing import Optional

from supabase import AsyncClient, acreate_client

from core.config import settings
from core.errors import StorageUnavailable
from core.logging_config import logger
from core.storage import execute


_client: Optional[AsyncClient] = None
_client_lock = asyncio.Lock()


# ============================================================
# Supabase Client Factory (ALWAYS service role)
# ============================================================
async def get_supabase_client() -> AsyncClient:
    """
    Returns the process-wide async Supabase client, created on first use
    with the SERVICE ROLE KEY (full read/write on the permission tables).

    Raises StorageUnavailable when credentials are missing, so a
    misconfigured deployment can never answer a permission check.
    """
    global _client

    if _client is not None:
        return _client

    async with _client_lock:
        if _client is not None:
            return _client

        supabase_url = settings.SUPABASE_URL
        supabase_key = settings.SUPABASE_SERVICE_ROLE_KEY

        if not supabase_url or not supabase_key:
            logger.error("Missing Supabase credentials")
            logger.error(f"   URL: {supabase_url}")
            logger.error(f"   SERVICE ROLE KEY: {'SET' if supabase_key else 'MISSING'}")
            raise StorageUnavailable("Supabase client initialisation", "not configured")

        try:
            _client = await acreate_client(supabase_url, supabase_key)
        except Exception as e:
            logger.error(f"Supabase Init Error: {e}", exc_info=True)
            raise StorageUnavailable("Supabase client initialisation", str(e)) from e

        return _client


def reset_supabase_client():
    """Drop the cached client (tests and credential rotation)."""
    global _client
    _client = None


# ============================================================
# Ping Supabase for health checks
# ============================================================
async def ping_supabase() -> dict:
    """
    Simple connectivity check against the authorization tables.
    """
    try:
        client = await get_supabase_client()
    except StorageUnavailable as e:
        return {"service": "Supabase", "status": "not_configured", "detail": e.detail}

    tables = ["admin_permissions", "permission_audit_logs", "building_roles"]
    results = {}

    for t in tables:
        try:
            res = await execute(
                client.table(t).select("id").limit(1),
                f"Ping {t}",
            )
            results[t] = {
                "status": "ok",
                "rows_found": len(res.data or []),
            }
        except StorageUnavailable as err:
            results[t] = {"status": "error", "detail": err.detail}

    status = "ok" if all(r["status"] == "ok" for r in results.values()) else "degraded"
    return {
        "service": "Supabase",
        "status": status,
        "tables": results,
    }
