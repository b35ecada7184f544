# core/role_store.py

from typing import Optional

from core.logging_config import logger
from core.permissions import BuildingRoleName
from core.storage import execute

ROLES_TABLE = "building_roles"


class RoleStore:
    """
    Coarse building roles: at most one row per (user, building).

    Assignment upserts the row and appends a GRANT_ROLE audit_logs entry in
    a single Postgres function call.
    """

    def __init__(self, client, timeout: Optional[float] = None):
        self._client = client
        self._timeout = timeout

    async def assign_role(
        self,
        user_id: str,
        building_id: str,
        role: BuildingRoleName,
        performed_by: str,
    ) -> dict:
        role = BuildingRoleName(role)

        res = await execute(
            self._client.rpc(
                "assign_building_role",
                {
                    "p_user_id": user_id,
                    "p_building_id": building_id,
                    "p_role": role.value,
                    "p_performed_by": performed_by,
                },
            ),
            "Assign building role",
            self._timeout,
        )

        logger.info(
            f"Assigned role '{role.value}' to user {user_id} "
            f"in building {building_id} (by {performed_by})"
        )

        data = res.data
        if isinstance(data, list):
            data = data[0] if data else {}
        return data or {"user_id": user_id, "building_id": building_id, "role": role.value}

    async def get_role(self, user_id: str, building_id: str) -> Optional[BuildingRoleName]:
        res = await execute(
            self._client.table(ROLES_TABLE)
            .select("role")
            .eq("user_id", user_id)
            .eq("building_id", building_id)
            .limit(1),
            "Fetch building role",
            self._timeout,
        )
        if not res.data:
            return None
        return BuildingRoleName(res.data[0]["role"])

    async def is_building_admin(self, user_id: str, building_id: str) -> bool:
        return await self.get_role(user_id, building_id) == BuildingRoleName.building_admin
