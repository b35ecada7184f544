# models/permission.py

from datetime import datetime, timezone
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator

from core.permissions import BuildingRoleName, Permission
from core.utils import is_valid_uuid
from models.enums import AuditAction


def _as_utc(v):
    # Parse trailing Z timestamps; naive datetimes are taken as UTC
    if isinstance(v, str) and v.endswith("Z"):
        v = v.replace("Z", "+00:00")
    if isinstance(v, str):
        v = datetime.fromisoformat(v)
    if isinstance(v, datetime) and v.tzinfo is None:
        v = v.replace(tzinfo=timezone.utc)
    return v


def _as_uuid_str(v):
    if not is_valid_uuid(v):
        raise ValueError("must be a UUID")
    return str(v)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# -------------------------------------------------
# Grant record (admin_permissions row)
# -------------------------------------------------
class PermissionGrant(BaseModel):
    user_id: str
    building_id: str
    permission: Permission
    granted_by: Optional[str] = None
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @field_validator("user_id", "building_id", "granted_by", mode="before")
    def normalize_ids(cls, v):
        return None if v is None else str(v)

    @field_validator("expires_at", "created_at", mode="before")
    def normalize_timestamps(cls, v):
        return _as_utc(v)

    def is_active(self, now: Optional[datetime] = None) -> bool:
        """Active unless an expiry exists and has passed."""
        if self.expires_at is None:
            return True
        return self.expires_at > (now or utcnow())


# -------------------------------------------------
# Audit record (permission_audit_logs row)
# -------------------------------------------------
class PermissionAuditEntry(BaseModel):
    id: Optional[str] = None
    user_id: str
    building_id: str
    permission: str
    action: AuditAction
    performed_by: str
    reason: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_validator("id", "user_id", "building_id", "performed_by", mode="before")
    def normalize_ids(cls, v):
        return None if v is None else str(v)

    @field_validator("created_at", mode="before")
    def normalize_created_at(cls, v):
        return _as_utc(v)


# -------------------------------------------------
# Requests (ids must be UUIDs before they reach storage)
# -------------------------------------------------
class PermissionGrantRequest(BaseModel):
    user_id: str
    building_id: str
    permissions: List[Permission] = Field(..., min_length=1)
    expires_at: Optional[datetime] = None

    @field_validator("user_id", "building_id", mode="before")
    def validate_ids(cls, v):
        return _as_uuid_str(v)

    @field_validator("expires_at", mode="before")
    def normalize_expires_at(cls, v):
        return _as_utc(v)


class TemplateGrantRequest(BaseModel):
    user_id: str
    building_id: str
    template: str
    expires_at: Optional[datetime] = None

    @field_validator("user_id", "building_id", mode="before")
    def validate_ids(cls, v):
        return _as_uuid_str(v)

    @field_validator("expires_at", mode="before")
    def normalize_expires_at(cls, v):
        return _as_utc(v)


class PermissionRevokeRequest(BaseModel):
    """Accepts ``permissions: [...]`` or a single ``permission``."""

    user_id: str
    building_id: str
    permissions: List[Permission] = Field(..., min_length=1)
    reason: Optional[str] = None

    @model_validator(mode="before")
    def single_permission_as_list(cls, data):
        if isinstance(data, dict) and "permissions" not in data and "permission" in data:
            data = {**data, "permissions": [data["permission"]]}
        return data

    @field_validator("user_id", "building_id", mode="before")
    def validate_ids(cls, v):
        return _as_uuid_str(v)


class RoleGrantRequest(BaseModel):
    user_id: str
    building_id: str
    role: BuildingRoleName

    @field_validator("user_id", "building_id", mode="before")
    def validate_ids(cls, v):
        return _as_uuid_str(v)


# -------------------------------------------------
# Responses
# -------------------------------------------------
class UserPermissionsResponse(BaseModel):
    building_id: str
    permissions: List[Permission]
    is_superuser: bool = False
