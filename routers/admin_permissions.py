# routers/admin_permissions.py

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query

from core.authorization import PermissionEvaluator
from core.config import settings
from core.errors import PermissionNotFound
from core.permission_store import MAX_AUDIT_LIMIT, PermissionStore
from core.permissions import ROLE_TEMPLATES, Permission, template_permissions
from dependencies.guards import (
    BuildingAccess,
    get_permission_evaluator,
    get_permission_store,
    requires_permission,
)
from models.permission import (
    PermissionGrantRequest,
    PermissionRevokeRequest,
    TemplateGrantRequest,
)

router = APIRouter(
    prefix="/admin/permissions",
    tags=["Admin Permissions"],
)

REVOKE_DEFAULT_REASON = "Permission removed via admin interface"


def require_same_building(access: BuildingAccess, building_id: str):
    """The body must target the building the guard authorized."""
    if str(building_id) != access.building_id:
        raise HTTPException(
            status_code=400,
            detail="building_id does not match the authorized building context",
        )


# ============================================================
# LIST active grants in a building
# ============================================================
@router.get("", summary="List active permission grants in a building")
async def list_grants(
    user_id: Optional[UUID] = Query(None),
    access: BuildingAccess = Depends(requires_permission(Permission.manage_permissions)),
    store: PermissionStore = Depends(get_permission_store),
):
    grants = await store.list_grants(
        access.building_id, user_id=str(user_id) if user_id else None
    )
    return [g.model_dump(mode="json") for g in grants]


# ============================================================
# GRANT (one or many permissions, upsert semantics)
# ============================================================
@router.post("/grant", summary="Grant permissions to a user")
async def grant_permissions(
    payload: PermissionGrantRequest,
    access: BuildingAccess = Depends(requires_permission(Permission.manage_permissions)),
    store: PermissionStore = Depends(get_permission_store),
    evaluator: PermissionEvaluator = Depends(get_permission_evaluator),
):
    require_same_building(access, payload.building_id)
    grants = await store.grant_many(
        payload.user_id,
        access.building_id,
        payload.permissions,
        granted_by=access.user.id,
        expires_at=payload.expires_at,
    )
    evaluator.forget(user_id=payload.user_id, building_id=access.building_id)

    return {
        "success": True,
        "grants": [g.model_dump(mode="json") for g in grants],
    }


# ============================================================
# GRANT a role template
# ============================================================
@router.post("/grant-template", summary="Grant every permission in a role template")
async def grant_template(
    payload: TemplateGrantRequest,
    access: BuildingAccess = Depends(requires_permission(Permission.manage_permissions)),
    store: PermissionStore = Depends(get_permission_store),
    evaluator: PermissionEvaluator = Depends(get_permission_evaluator),
):
    require_same_building(access, payload.building_id)
    if payload.template not in ROLE_TEMPLATES:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown template '{payload.template}'. Valid: {sorted(ROLE_TEMPLATES)}",
        )

    grants = await store.grant_many(
        payload.user_id,
        access.building_id,
        template_permissions(payload.template),
        granted_by=access.user.id,
        expires_at=payload.expires_at,
    )
    evaluator.forget(user_id=payload.user_id, building_id=access.building_id)

    return {
        "success": True,
        "template": payload.template,
        "grants": [g.model_dump(mode="json") for g in grants],
    }


# ============================================================
# REVOKE
# ============================================================
@router.post("/revoke", summary="Revoke one or more permissions from a user")
async def revoke_permissions(
    payload: PermissionRevokeRequest,
    access: BuildingAccess = Depends(requires_permission(Permission.manage_permissions)),
    store: PermissionStore = Depends(get_permission_store),
    evaluator: PermissionEvaluator = Depends(get_permission_evaluator),
):
    """
    Each permission is revoked (with its audit row) on its own. Permissions
    the user never held are reported in ``not_found``; 404 only when none
    of them was held.
    """
    require_same_building(access, payload.building_id)

    revoked, not_found = [], []
    for permission in dict.fromkeys(payload.permissions):
        try:
            await store.revoke(
                payload.user_id,
                access.building_id,
                permission,
                revoked_by=access.user.id,
                reason=payload.reason or REVOKE_DEFAULT_REASON,
            )
        except PermissionNotFound:
            not_found.append(permission.value)
            continue
        revoked.append(permission.value)

    evaluator.forget(user_id=payload.user_id, building_id=access.building_id)

    if not revoked:
        raise PermissionNotFound()

    return {"success": True, "revoked": revoked, "not_found": not_found}


# ============================================================
# AUDIT LOG
# ============================================================
@router.get("/audit", summary="Permission grant / revoke history for a building")
async def list_audit_log(
    user_id: Optional[UUID] = Query(None),
    limit: int = Query(settings.AUDIT_LOG_DEFAULT_LIMIT, ge=1, le=MAX_AUDIT_LIMIT),
    access: BuildingAccess = Depends(requires_permission(Permission.view_audit_logs)),
    store: PermissionStore = Depends(get_permission_store),
):
    entries = await store.list_audit(
        access.building_id, user_id=str(user_id) if user_id else None, limit=limit
    )
    return [e.model_dump(mode="json") for e in entries]
