# core/permission_store.py

"""
Permission grants and their audit trail, stored in Supabase.

Tables:
    admin_permissions       (user_id, building_id, permission, granted_by, expires_at)
    permission_audit_logs   (user_id, building_id, permission, action, performed_by, reason)

Writes go through Postgres functions (see supabase/migrations) so that a
grant or revoke and its audit row commit in one transaction. Granting an
existing (user, building, permission) is an upsert: the row is refreshed
and a new ``granted`` audit entry is appended. Expiry is evaluated at read
time; expired rows are never cleaned up in the background.
"""

from datetime import datetime
from typing import Iterable, List, Optional, Set

from core.errors import PermissionNotFound
from core.logging_config import logger
from core.permissions import Permission, parse_permission
from core.storage import execute
from models.permission import PermissionAuditEntry, PermissionGrant, utcnow

GRANTS_TABLE = "admin_permissions"
AUDIT_TABLE = "permission_audit_logs"

MAX_AUDIT_LIMIT = 500


def _iso(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat().replace("+00:00", "Z")


def _dedupe(permissions: Iterable[Permission]) -> List[Permission]:
    seen = []
    for p in permissions:
        p = parse_permission(p)
        if p not in seen:
            seen.append(p)
    return seen


class PermissionStore:
    """
    Narrow grant / revoke / read contract over the permission tables.

    Every call is deadline-bounded (core.storage.execute) and raises
    StorageUnavailable on failure.
    """

    def __init__(self, client, timeout: Optional[float] = None):
        self._client = client
        self._timeout = timeout

    # -----------------------------------------------------
    # Writes
    # -----------------------------------------------------
    async def grant(
        self,
        user_id: str,
        building_id: str,
        permission: Permission,
        granted_by: str,
        expires_at: Optional[datetime] = None,
    ) -> PermissionGrant:
        grants = await self.grant_many(
            user_id, building_id, [permission], granted_by, expires_at
        )
        return grants[0]

    async def grant_many(
        self,
        user_id: str,
        building_id: str,
        permissions: Iterable[Permission],
        granted_by: str,
        expires_at: Optional[datetime] = None,
    ) -> List[PermissionGrant]:
        perms = _dedupe(permissions)
        if not perms:
            return []

        res = await execute(
            self._client.rpc(
                "grant_admin_permissions",
                {
                    "p_user_id": user_id,
                    "p_building_id": building_id,
                    "p_permissions": [p.value for p in perms],
                    "p_granted_by": granted_by,
                    "p_expires_at": _iso(expires_at),
                },
            ),
            "Grant permissions",
            self._timeout,
        )

        grants = [PermissionGrant(**row) for row in (res.data or [])]
        logger.info(
            f"Granted {[p.value for p in perms]} to user {user_id} "
            f"in building {building_id} (by {granted_by}, expires {_iso(expires_at)})"
        )
        return grants

    async def revoke(
        self,
        user_id: str,
        building_id: str,
        permission: Permission,
        revoked_by: str,
        reason: Optional[str] = None,
    ) -> None:
        permission = parse_permission(permission)

        res = await execute(
            self._client.rpc(
                "revoke_admin_permission",
                {
                    "p_user_id": user_id,
                    "p_building_id": building_id,
                    "p_permission": permission.value,
                    "p_revoked_by": revoked_by,
                    "p_reason": reason,
                },
            ),
            "Revoke permission",
            self._timeout,
        )

        # Function returns false when no grant existed (and wrote no audit row)
        if res.data is not True:
            raise PermissionNotFound(
                f"User {user_id} has no '{permission.value}' grant in building {building_id}"
            )

        logger.info(
            f"Revoked '{permission.value}' from user {user_id} "
            f"in building {building_id} (by {revoked_by})"
        )

    # -----------------------------------------------------
    # Reads
    # -----------------------------------------------------
    async def list_grants(
        self,
        building_id: str,
        user_id: Optional[str] = None,
        include_expired: bool = False,
        now: Optional[datetime] = None,
    ) -> List[PermissionGrant]:
        now = now or utcnow()

        query = (
            self._client.table(GRANTS_TABLE)
            .select("user_id, building_id, permission, granted_by, expires_at, created_at")
            .eq("building_id", building_id)
        )
        if user_id:
            query = query.eq("user_id", user_id)
        if not include_expired:
            query = query.or_(f"expires_at.is.null,expires_at.gt.{_iso(now)}")

        res = await execute(query.order("created_at"), "List permission grants", self._timeout)

        grants = []
        for row in res.data or []:
            try:
                grant = PermissionGrant(**row)
            except ValueError:
                logger.warning(f"Ignoring unknown permission in storage: {row.get('permission')}")
                continue
            # Expiry is re-checked here; the query filter is not trusted alone
            if include_expired or grant.is_active(now):
                grants.append(grant)
        return grants

    async def list_active(
        self,
        user_id: str,
        building_id: str,
        now: Optional[datetime] = None,
    ) -> Set[Permission]:
        grants = await self.list_grants(building_id, user_id=user_id, now=now)
        return {g.permission for g in grants}

    async def list_audit(
        self,
        building_id: str,
        user_id: Optional[str] = None,
        limit: int = 100,
    ) -> List[PermissionAuditEntry]:
        limit = max(1, min(limit, MAX_AUDIT_LIMIT))

        query = self._client.table(AUDIT_TABLE).select("*").eq("building_id", building_id)
        if user_id:
            query = query.eq("user_id", user_id)

        res = await execute(
            query.order("created_at", desc=True).limit(limit),
            "List permission audit log",
            self._timeout,
        )
        return [PermissionAuditEntry(**row) for row in (res.data or [])]
