# routers/auth.py

from fastapi import APIRouter, Depends

from core.authorization import PermissionEvaluator
from dependencies.auth import CurrentUser, get_current_user
from dependencies.guards import get_permission_evaluator


router = APIRouter(
    prefix="/auth",
    tags=["Auth"],
)


# ============================================================
# CURRENT USER
# ============================================================
@router.get("/me", summary="Current authenticated user")
async def read_me(
    current_user: CurrentUser = Depends(get_current_user),
    evaluator: PermissionEvaluator = Depends(get_permission_evaluator),
):
    return {
        **current_user.model_dump(),
        "is_superuser": evaluator.is_superuser(current_user),
    }
