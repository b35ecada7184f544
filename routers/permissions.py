# routers/permissions.py

from fastapi import APIRouter, Depends, Query

from core.authorization import PermissionEvaluator
from core.errors import BuildingContextMissing, InvalidBuildingId
from core.permissions import (
    PERMISSION_CATEGORIES,
    PERMISSION_DESCRIPTIONS,
    ROLE_TEMPLATES,
    Permission,
)
from core.utils import is_valid_uuid
from dependencies.auth import CurrentUser, get_current_user
from dependencies.guards import get_permission_evaluator
from models.permission import UserPermissionsResponse

router = APIRouter(
    prefix="/permissions",
    tags=["Permissions"],
)


# -----------------------------------------------------
# GET /permissions/catalog
# -----------------------------------------------------
@router.get("/catalog", summary="Permission catalog, categories and role templates")
async def get_catalog(current_user: CurrentUser = Depends(get_current_user)):
    return {
        "permissions": [
            {"id": p.value, "description": PERMISSION_DESCRIPTIONS[p]}
            for p in Permission
        ],
        "categories": {
            name: [p.value for p in perms]
            for name, perms in PERMISSION_CATEGORIES.items()
        },
        "templates": {
            name: [p.value for p in perms]
            for name, perms in ROLE_TEMPLATES.items()
        },
    }


# -----------------------------------------------------
# GET /permissions?building_id=
# Caller's own permissions in a building
# -----------------------------------------------------
@router.get(
    "",
    response_model=UserPermissionsResponse,
    summary="Current user's permissions in a building",
)
async def get_my_permissions(
    building_id: str = Query(None),
    current_user: CurrentUser = Depends(get_current_user),
    evaluator: PermissionEvaluator = Depends(get_permission_evaluator),
):
    if not building_id or not building_id.strip():
        raise BuildingContextMissing()
    building_id = building_id.strip()
    if not is_valid_uuid(building_id):
        raise InvalidBuildingId()

    permissions = await evaluator.list_permissions(current_user, building_id)

    return UserPermissionsResponse(
        building_id=building_id,
        permissions=sorted(permissions, key=lambda p: p.value),
        is_superuser=evaluator.is_superuser(current_user),
    )
