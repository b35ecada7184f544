# routers/access.py

"""
What may the caller do with one resource? Used by the UI to show or hide
actions. Unknown ids answer exactly like forbidden ones (all False).
"""

from fastapi import APIRouter, Depends, Query

from core.authorization import PermissionEvaluator
from core.errors import InvalidBuildingId
from core.permissions import Permission
from core.resource_access import (
    accessible_issue_ids,
    can_act_on_behalf_of,
    can_access_communication,
    can_access_issue,
    can_access_unit,
    can_manage_unit_request,
    can_modify_issue,
)
from core.utils import is_valid_uuid
from dependencies.auth import CurrentUser, get_current_user
from dependencies.guards import get_permission_evaluator

router = APIRouter(
    prefix="/access",
    tags=["Access Checks"],
)


@router.get("/issue/{issue_id}", summary="Caller's access to an issue")
async def issue_access(
    issue_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    evaluator: PermissionEvaluator = Depends(get_permission_evaluator),
):
    return {
        "can_view": await can_access_issue(evaluator, current_user, issue_id),
        "can_modify": await can_modify_issue(evaluator, current_user, issue_id),
    }


@router.get("/unit/{unit_id}", summary="Caller's access to a unit")
async def unit_access(
    unit_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    evaluator: PermissionEvaluator = Depends(get_permission_evaluator),
):
    return {
        "can_view": await can_access_unit(evaluator, current_user, unit_id),
        "can_manage": await can_access_unit(
            evaluator, current_user, unit_id, Permission.manage_tenants
        ),
    }


@router.get("/communication/{communication_id}", summary="Caller's access to a communication")
async def communication_access(
    communication_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    evaluator: PermissionEvaluator = Depends(get_permission_evaluator),
):
    return {
        "can_view": await can_access_communication(evaluator, current_user, communication_id),
        "can_moderate": await can_access_communication(
            evaluator, current_user, communication_id, Permission.moderate_communications
        ),
    }


@router.get("/unit-request/{request_id}", summary="Caller's access to a unit request")
async def unit_request_access(
    request_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    evaluator: PermissionEvaluator = Depends(get_permission_evaluator),
):
    return {
        "can_manage": await can_manage_unit_request(evaluator, current_user, request_id),
    }


@router.get("/issues", summary="Issue ids the caller may list in a building")
async def issue_ids(
    building_id: str = Query(...),
    current_user: CurrentUser = Depends(get_current_user),
    evaluator: PermissionEvaluator = Depends(get_permission_evaluator),
):
    if not is_valid_uuid(building_id):
        raise InvalidBuildingId()
    return {
        "building_id": building_id,
        "issue_ids": await accessible_issue_ids(evaluator, current_user, building_id),
    }


@router.get("/act-on-behalf/{user_id}", summary="May the caller act for another user")
async def act_on_behalf(
    user_id: str,
    building_id: str = Query(...),
    permission: Permission = Query(...),
    current_user: CurrentUser = Depends(get_current_user),
    evaluator: PermissionEvaluator = Depends(get_permission_evaluator),
):
    if not is_valid_uuid(building_id):
        raise InvalidBuildingId()
    return {
        "allowed": await can_act_on_behalf_of(
            evaluator, current_user, user_id, building_id, permission
        ),
    }
