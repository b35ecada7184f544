# core/resource_access.py

"""
Per-resource access checks built on the PermissionEvaluator.

Each helper answers True/False. A resource that does not exist, or an
id that is not a UUID, is False (never an error), so callers can answer 404 and 403 identically. Storage
failures raise StorageUnavailable.
"""

from typing import List, Optional

from core.authorization import PermissionEvaluator
from core.permissions import Permission
from core.storage import execute
from core.supabase_client import get_supabase_client
from core.utils import is_valid_uuid


async def _fetch_one(table: str, columns: str, resource_id: str) -> Optional[dict]:
    if not is_valid_uuid(resource_id):
        return None

    client = await get_supabase_client()
    res = await execute(
        client.table(table).select(columns).eq("id", resource_id).limit(1),
        f"Fetch {table} row",
    )
    return res.data[0] if res.data else None


# ============================================================
# BUILDING MEMBERSHIP
# ============================================================
async def is_user_in_building(user_id: str, building_id: str) -> bool:
    """Member = any building role there, or a current tenancy in one of its units."""
    if not (is_valid_uuid(user_id) and is_valid_uuid(building_id)):
        return False

    client = await get_supabase_client()

    roles = await execute(
        client.table("building_roles")
        .select("id")
        .eq("user_id", user_id)
        .eq("building_id", building_id)
        .limit(1),
        "Check building role membership",
    )
    if roles.data:
        return True

    tenancies = await execute(
        client.table("tenancies")
        .select("id, units!inner(building_id)")
        .eq("user_id", user_id)
        .eq("is_current", True)
        .eq("units.building_id", building_id)
        .limit(1),
        "Check tenancy membership",
    )
    return bool(tenancies.data)


async def can_act_on_behalf_of(
    evaluator: PermissionEvaluator,
    actor,
    target_user_id: str,
    building_id: str,
    required: Permission,
) -> bool:
    """
    May ``actor`` do something for another user in this building (e.g. file
    an issue for a tenant)? Never for oneself; the target must belong to the
    building and the actor needs ``required`` there.
    """
    if str(actor.id) == str(target_user_id):
        return False

    if not await is_user_in_building(str(target_user_id), building_id):
        return False

    return await evaluator.has_permission(actor, building_id, required)


# ============================================================
# ISSUES
# ============================================================
async def can_access_issue(
    evaluator: PermissionEvaluator,
    user,
    issue_id: str,
    required: Optional[Permission] = None,
) -> bool:
    issue = await _fetch_one("issues", "reporter_id, building_id, is_public", issue_id)
    if not issue:
        return False

    # Reporter can always see their own issue
    if str(issue.get("reporter_id")) == str(user.id):
        return True

    building_id = str(issue["building_id"])

    if evaluator.is_superuser(user):
        return True

    if not await is_user_in_building(str(user.id), building_id):
        return False

    # Public issues are visible to any building member
    if issue.get("is_public") and required is None:
        return True

    return await evaluator.has_permission(
        user, building_id, required or Permission.view_all_issues
    )


async def can_modify_issue(evaluator: PermissionEvaluator, user, issue_id: str) -> bool:
    issue = await _fetch_one("issues", "reporter_id, building_id", issue_id)
    if not issue:
        return False

    if str(issue.get("reporter_id")) == str(user.id):
        return True

    return await evaluator.has_permission(
        user, str(issue["building_id"]), Permission.manage_issues
    )


async def accessible_issue_ids(
    evaluator: PermissionEvaluator, user, building_id: str
) -> List[str]:
    """
    Issue ids the user may list in a building: every issue with
    ``view_all_issues``, otherwise their own plus the public ones.
    """
    if not is_valid_uuid(building_id):
        return []

    client = await get_supabase_client()

    if await evaluator.has_permission(user, building_id, Permission.view_all_issues):
        everything = await execute(
            client.table("issues").select("id").eq("building_id", building_id),
            "List building issues",
        )
        return [str(row["id"]) for row in everything.data or []]

    own = await execute(
        client.table("issues")
        .select("id")
        .eq("building_id", building_id)
        .eq("reporter_id", str(user.id)),
        "List own issues",
    )
    public = await execute(
        client.table("issues")
        .select("id")
        .eq("building_id", building_id)
        .eq("is_public", True),
        "List public issues",
    )

    ids = [str(row["id"]) for row in own.data or []]
    ids += [str(row["id"]) for row in public.data or [] if str(row["id"]) not in ids]
    return ids


# ============================================================
# UNITS
# ============================================================
async def can_access_unit(
    evaluator: PermissionEvaluator,
    user,
    unit_id: str,
    required: Optional[Permission] = None,
) -> bool:
    unit = await _fetch_one("units", "id, building_id", unit_id)
    if not unit:
        return False

    client = await get_supabase_client()
    tenancy = await execute(
        client.table("tenancies")
        .select("id")
        .eq("unit_id", unit_id)
        .eq("user_id", str(user.id))
        .eq("is_current", True)
        .limit(1),
        "Check unit tenancy",
    )
    # Tenants can access their own unit
    if tenancy.data:
        return True

    return await evaluator.has_permission(
        user, str(unit["building_id"]), required or Permission.view_all_tenants
    )


# ============================================================
# COMMUNICATIONS
# ============================================================
async def can_access_communication(
    evaluator: PermissionEvaluator,
    user,
    communication_id: str,
    required: Optional[Permission] = None,
) -> bool:
    communication = await _fetch_one(
        "communications", "user_id, issues(building_id)", communication_id
    )
    if not communication:
        return False

    if str(communication.get("user_id")) == str(user.id):
        return True

    issue = communication.get("issues") or {}
    building_id = issue.get("building_id")
    if not building_id:
        return False

    return await evaluator.has_permission(
        user, str(building_id), required or Permission.view_all_communications
    )


# ============================================================
# UNIT REQUESTS
# ============================================================
async def can_manage_unit_request(
    evaluator: PermissionEvaluator, user, request_id: str
) -> bool:
    unit_request = await _fetch_one("unit_requests", "user_id, building_id", request_id)
    if not unit_request:
        return False

    # Requesters never approve their own request
    if str(unit_request.get("user_id")) == str(user.id):
        return False

    return await evaluator.has_permission(
        user, str(unit_request["building_id"]), Permission.manage_unit_requests
    )
