# routers/admin.py

from fastapi import APIRouter, Depends, HTTPException

from core.permissions import Permission
from core.role_store import RoleStore
from core.superusers import get_superuser_allowlist
from dependencies.auth import CurrentUser
from dependencies.guards import (
    BuildingAccess,
    get_role_store,
    requires_permission,
    requires_superuser,
)
from models.permission import RoleGrantRequest

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
)


# ============================================================
# POST /admin/roles/grant
# One role per (user, building); re-granting replaces it
# ============================================================
@router.post("/roles/grant", summary="Assign a building role to a user")
async def grant_role(
    payload: RoleGrantRequest,
    access: BuildingAccess = Depends(requires_permission(Permission.manage_admins)),
    roles: RoleStore = Depends(get_role_store),
):
    if payload.building_id != access.building_id:
        raise HTTPException(
            status_code=400,
            detail="building_id does not match the authorized building context",
        )

    role = await roles.assign_role(
        payload.user_id,
        access.building_id,
        payload.role,
        performed_by=access.user.id,
    )
    return {"success": True, "role": role}


# ============================================================
# POST /admin/superusers/reload
# Re-reads SUPER_USER_EMAILS without a restart
# ============================================================
@router.post("/superusers/reload", summary="Reload the superuser allowlist")
async def reload_superusers(
    current_user: CurrentUser = Depends(requires_superuser()),
):
    emails = get_superuser_allowlist().reload_from_env()
    return {"success": True, "count": len(emails)}
