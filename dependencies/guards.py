# dependencies/guards.py

"""
Request guards for building-scoped routes.

Usage:
    @router.post("/", dependencies=[Depends(requires_permission(Permission.manage_issues))])

    @router.get("/")
    async def handler(access: BuildingAccess = Depends(requires_any_permission(
        Permission.view_all_issues, Permission.manage_issues,
    ))):
        ...

Each guard authenticates the caller, resolves the building context and
asks the PermissionEvaluator before the handler runs. FastAPI caches
dependencies per request, so the evaluator (and its memoised grants) is
shared by every guard and handler of one request. Denials are written
to audit_logs before the 403 is raised.
"""

from typing import List, Union

from fastapi import Depends, Request
from pydantic import BaseModel

from core.audit_log import AuditLog
from core.authorization import PermissionEvaluator
from core.building_context import BuildingContextResolver
from core.errors import BuildingContextMissing, Forbidden
from core.logging_config import logger
from core.permission_store import PermissionStore
from core.permissions import Permission, parse_permission
from core.role_store import RoleStore
from core.superusers import get_superuser_allowlist
from core.supabase_client import get_supabase_client
from dependencies.auth import CurrentUser, get_current_user


class BuildingAccess(BaseModel):
    """What a guarded handler receives: who is calling, about which building."""

    user: CurrentUser
    building_id: str


# ============================================================
# Providers
# ============================================================
async def get_permission_store() -> PermissionStore:
    return PermissionStore(await get_supabase_client())


async def get_role_store() -> RoleStore:
    return RoleStore(await get_supabase_client())


async def get_building_resolver() -> BuildingContextResolver:
    return BuildingContextResolver(await get_supabase_client())


async def get_audit_log() -> AuditLog:
    return AuditLog(await get_supabase_client())


def get_permission_evaluator(
    store: PermissionStore = Depends(get_permission_store),
) -> PermissionEvaluator:
    # Allowlist snapshot taken once per request
    return PermissionEvaluator(store, get_superuser_allowlist().snapshot())


# ============================================================
# Guard factory
# ============================================================
def _build_guard(permissions: List[Permission], mode: str):
    required: Union[str, List[str]]
    if mode == "single":
        required = permissions[0].value
    else:
        required = [p.value for p in permissions]

    async def guard(
        request: Request,
        current_user: CurrentUser = Depends(get_current_user),
        resolver: BuildingContextResolver = Depends(get_building_resolver),
        evaluator: PermissionEvaluator = Depends(get_permission_evaluator),
        audit_log: AuditLog = Depends(get_audit_log),
    ) -> BuildingAccess:
        building_id = await resolver.resolve(request, current_user)
        if not building_id:
            raise BuildingContextMissing()

        if mode == "all":
            allowed = await evaluator.has_all(current_user, building_id, permissions)
        else:
            allowed = await evaluator.has_any(current_user, building_id, permissions)

        if not allowed:
            endpoint = f"{request.method} {request.url.path}"
            logger.warning(
                f"Permission denied: user {current_user.id} building {building_id} "
                f"required {required} at {endpoint}"
            )
            await audit_log.record_denial(current_user.id, building_id, required, endpoint)
            raise Forbidden(required=required)

        return BuildingAccess(user=current_user, building_id=building_id)

    return guard


def requires_permission(permission: Permission):
    return _build_guard([parse_permission(permission)], "single")


def requires_any_permission(*permissions: Permission):
    if not permissions:
        raise ValueError("requires_any_permission needs at least one permission")
    return _build_guard([parse_permission(p) for p in permissions], "any")


def requires_all_permissions(*permissions: Permission):
    if not permissions:
        raise ValueError("requires_all_permissions needs at least one permission")
    return _build_guard([parse_permission(p) for p in permissions], "all")


# ============================================================
# Superuser-only
# ============================================================
def requires_superuser():
    async def guard(
        current_user: CurrentUser = Depends(get_current_user),
        evaluator: PermissionEvaluator = Depends(get_permission_evaluator),
    ) -> CurrentUser:
        if not evaluator.is_superuser(current_user):
            raise Forbidden(message="Superuser access required")
        return current_user

    return guard
