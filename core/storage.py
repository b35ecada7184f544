# core/storage.py

"""
Deadline-bounded execution of Supabase (PostgREST) requests.

Every permission-store and building-context lookup goes through
``execute`` so that a slow database can never hang a request, and so
that every failure surfaces as ``StorageUnavailable`` instead of an
empty result.
"""

import asyncio
from typing import Any, Optional

from core.config import settings
from core.errors import StorageUnavailable, extract_supabase_error
from core.logging_config import logger


async def execute(query: Any, operation: str, timeout: Optional[float] = None) -> Any:
    """
    Await ``query.execute()`` under a deadline.

    Args:
        query: A PostgREST request builder (table query or rpc call)
        operation: Human-readable label used in logs and errors
        timeout: Seconds before giving up (default: STORAGE_TIMEOUT_SECONDS)

    Returns:
        The PostgREST response (``.data`` holds the rows)

    Raises:
        StorageUnavailable: on timeout or any client / database error
    """
    deadline = timeout if timeout is not None else settings.STORAGE_TIMEOUT_SECONDS

    try:
        return await asyncio.wait_for(query.execute(), timeout=deadline)
    except asyncio.TimeoutError as e:
        logger.error(f"{operation}: timed out after {deadline}s")
        raise StorageUnavailable(operation, "timeout") from e
    except StorageUnavailable:
        raise
    except Exception as e:
        detail = extract_supabase_error(e)
        logger.error(f"{operation}: {detail}")
        raise StorageUnavailable(operation, detail) from e
