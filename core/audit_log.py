# core/audit_log.py

"""
General audit trail (``audit_logs`` table).

Permission grants and revokes have their own table, written by the grant
functions. This one records events around them: role assignments (written
by ``assign_building_role``) and denied permission checks (written here).
"""

from typing import List, Optional, Union

from core.logging_config import logger
from core.storage import execute

AUDIT_LOGS_TABLE = "audit_logs"

PERMISSION_DENIED = "PERMISSION_DENIED"


class AuditLog:
    def __init__(self, client, timeout: Optional[float] = None):
        self._client = client
        self._timeout = timeout

    async def record_denial(
        self,
        user_id: str,
        building_id: str,
        required: Union[str, List[str]],
        endpoint: str,
    ) -> None:
        """Append a PERMISSION_DENIED row for a request a guard refused."""
        await execute(
            self._client.table(AUDIT_LOGS_TABLE).insert(
                {
                    "user_id": user_id,
                    "action": PERMISSION_DENIED,
                    "entity_type": "API_ENDPOINT",
                    "entity_id": endpoint,
                    "metadata": {"building_id": building_id, "permission": required},
                }
            ),
            "Record permission denial",
            self._timeout,
        )
        logger.debug(f"Recorded denial for user {user_id} at {endpoint}")
