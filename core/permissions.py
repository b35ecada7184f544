# core/permissions.py

from typing import Dict, FrozenSet, List, Union

from models.enums import BaseStrEnum


# ============================================
# PERMISSION CATALOG
# ============================================
class Permission(BaseStrEnum):
    """Building-scoped permissions that can be granted to a user."""

    # Issue Management
    view_all_issues = "view_all_issues"
    manage_issues = "manage_issues"
    delete_issues = "delete_issues"
    export_issues = "export_issues"

    # Tenant Management
    view_all_tenants = "view_all_tenants"
    manage_tenants = "manage_tenants"
    manage_unit_requests = "manage_unit_requests"
    contact_tenants = "contact_tenants"

    # Building Management
    manage_building = "manage_building"
    view_building_analytics = "view_building_analytics"
    manage_building_settings = "manage_building_settings"

    # Communication Management
    view_all_communications = "view_all_communications"
    moderate_communications = "moderate_communications"

    # Admin Management
    manage_admins = "manage_admins"
    view_audit_logs = "view_audit_logs"
    manage_permissions = "manage_permissions"

    # Association Features
    manage_petitions = "manage_petitions"
    manage_meetings = "manage_meetings"
    manage_association = "manage_association"

    # System Features
    view_system_health = "view_system_health"
    manage_integrations = "manage_integrations"
    bulk_operations = "bulk_operations"


class BuildingRoleName(BaseStrEnum):
    """Coarse role scoping a user to a building (one per user/building)."""

    tenant = "tenant"
    association_admin = "association_admin"
    building_admin = "building_admin"


# ============================================
# DESCRIPTIONS (UI)
# ============================================
PERMISSION_DESCRIPTIONS: Dict[Permission, str] = {
    Permission.view_all_issues: "View all issues in the building, including private ones",
    Permission.manage_issues: "Change issue status, assign to staff, and moderate content",
    Permission.delete_issues: "Permanently delete issues",
    Permission.export_issues: "Export issue data to CSV or PDF",

    Permission.view_all_tenants: "Access the complete tenant directory",
    Permission.manage_tenants: "Approve tenant requests, transfer units, and manage accounts",
    Permission.manage_unit_requests: "Handle unit assignment and transfer requests",
    Permission.contact_tenants: "Send direct messages to tenants",

    Permission.manage_building: "Edit building information, units, and policies",
    Permission.view_building_analytics: "Access detailed building analytics and reports",
    Permission.manage_building_settings: "Configure building-wide settings and preferences",

    Permission.view_all_communications: "View all tenant-landlord communications",
    Permission.moderate_communications: "Edit or delete inappropriate communications",

    Permission.manage_admins: "Grant or revoke administrative access",
    Permission.view_audit_logs: "View security audit logs and admin actions",
    Permission.manage_permissions: "Modify permission assignments for users",

    Permission.manage_petitions: "Create, edit, and manage tenant petitions",
    Permission.manage_meetings: "Schedule and manage association meetings",
    Permission.manage_association: "Overall tenant association management",

    Permission.view_system_health: "Monitor system health and performance",
    Permission.manage_integrations: "Configure third-party integrations",
    Permission.bulk_operations: "Perform bulk operations on data",
}


# ============================================
# CATEGORIES (UI grouping)
# ============================================
PERMISSION_CATEGORIES: Dict[str, List[Permission]] = {
    "Issue Management": [
        Permission.view_all_issues,
        Permission.manage_issues,
        Permission.delete_issues,
        Permission.export_issues,
    ],
    "Tenant Management": [
        Permission.view_all_tenants,
        Permission.manage_tenants,
        Permission.manage_unit_requests,
        Permission.contact_tenants,
    ],
    "Building Management": [
        Permission.manage_building,
        Permission.view_building_analytics,
        Permission.manage_building_settings,
    ],
    "Communications": [
        Permission.view_all_communications,
        Permission.moderate_communications,
    ],
    "Administration": [
        Permission.manage_admins,
        Permission.view_audit_logs,
        Permission.manage_permissions,
    ],
    "Association": [
        Permission.manage_petitions,
        Permission.manage_meetings,
        Permission.manage_association,
    ],
    "System": [
        Permission.view_system_health,
        Permission.manage_integrations,
        Permission.bulk_operations,
    ],
}


# =====================================================
# ROLE TEMPLATES: bundles granted together from the UI
# =====================================================
ROLE_TEMPLATES: Dict[str, List[Permission]] = {

    # Everything in the catalog
    "super_admin": list(Permission),

    "building_manager": [
        Permission.view_all_issues,
        Permission.manage_issues,
        Permission.view_all_tenants,
        Permission.manage_tenants,
        Permission.manage_unit_requests,
        Permission.manage_building,
        Permission.view_building_analytics,
        Permission.view_all_communications,
        Permission.manage_petitions,
        Permission.manage_meetings,
    ],

    "office_staff": [
        Permission.view_all_issues,
        Permission.view_all_tenants,
        Permission.manage_unit_requests,
        Permission.view_building_analytics,
        Permission.contact_tenants,
    ],

    "maintenance_staff": [
        Permission.view_all_issues,
        Permission.manage_issues,
        Permission.view_all_tenants,
    ],

    "association_board": [
        Permission.view_all_issues,
        Permission.view_all_tenants,
        Permission.manage_petitions,
        Permission.manage_meetings,
        Permission.manage_association,
        Permission.view_building_analytics,
    ],
}


# -----------------------------------------------------
# Helpers
# -----------------------------------------------------
def all_permissions() -> FrozenSet[Permission]:
    return frozenset(Permission)


def is_valid_permission(value: Union[str, Permission]) -> bool:
    return value in Permission.list()


def parse_permission(value: Union[str, Permission]) -> Permission:
    """Coerce a stored / submitted string into the catalog. Raises ValueError."""
    if isinstance(value, Permission):
        return value
    return Permission(value)


def template_permissions(name: str) -> List[Permission]:
    """Permissions bundled by a role template. Raises KeyError if unknown."""
    return list(ROLE_TEMPLATES[name])
