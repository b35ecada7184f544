import asyncio
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel
from supabase import AuthApiError

from core.config import settings
from core.errors import StorageUnavailable, Unauthenticated, extract_supabase_error
from core.logging_config import logger
from core.supabase_client import get_supabase_client


bearer_scheme = HTTPBearer(auto_error=False)


# ============================================================
# Current User Model (identity from Supabase Auth)
# ============================================================
class CurrentUser(BaseModel):
    id: str                         # Supabase Auth UID
    email: str

    full_name: Optional[str] = None
    phone: Optional[str] = None


# ============================================================
# AUTH DECODING (Supabase: validates JWT + reads metadata)
# ============================================================
async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:
    """
    Resolve the caller from the bearer token.

    The token is validated by Supabase Auth; the identity it returns is
    trusted as-is. Invalid tokens raise Unauthenticated, an unreachable
    auth service raises StorageUnavailable.
    """
    if not credentials or not credentials.credentials:
        raise Unauthenticated()

    client = await get_supabase_client()

    try:
        auth_resp = await asyncio.wait_for(
            client.auth.get_user(credentials.credentials),
            timeout=settings.STORAGE_TIMEOUT_SECONDS,
        )
    except AuthApiError as e:
        logger.info(f"Rejected bearer token: {extract_supabase_error(e)}")
        raise Unauthenticated("Invalid or expired authentication token") from e
    except asyncio.TimeoutError as e:
        raise StorageUnavailable("Validate session", "timeout") from e
    except Exception as e:
        raise StorageUnavailable("Validate session", extract_supabase_error(e)) from e

    if not auth_resp or not auth_resp.user:
        raise Unauthenticated("Invalid or expired authentication token")

    auth_user = auth_resp.user
    if not auth_user.email:
        raise Unauthenticated("Invalid or expired authentication token")

    metadata = auth_user.user_metadata or {}

    return CurrentUser(
        id=auth_user.id,
        email=auth_user.email,
        full_name=metadata.get("full_name"),
        phone=metadata.get("phone"),
    )

