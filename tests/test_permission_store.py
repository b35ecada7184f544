# tests/test_permission_store.py

"""
Tests for the Supabase-backed PermissionStore (mock client).
"""

import asyncio
from datetime import timedelta

import pytest
from unittest.mock import AsyncMock, Mock

from core.errors import PermissionNotFound, StorageUnavailable
from core.permission_store import PermissionStore
from core.permissions import Permission
from models.enums import AuditAction
from models.permission import utcnow
from tests.fakes import make_client, make_query


def grant_row(permission, expires_at=None, user_id="u1", building_id="b1"):
    return {
        "user_id": user_id,
        "building_id": building_id,
        "permission": permission,
        "granted_by": "admin-1",
        "expires_at": expires_at,
        "created_at": "2026-10-01T12:00:00Z",
    }


# -----------------------------------------------------
# grant / grant_many
# -----------------------------------------------------
@pytest.mark.asyncio
async def test_grant_calls_atomic_function():
    client = make_client(rpc_data=[grant_row("manage_issues")])
    store = PermissionStore(client)

    grant = await store.grant("u1", "b1", Permission.manage_issues, "admin-1")

    client.rpc.assert_called_once_with(
        "grant_admin_permissions",
        {
            "p_user_id": "u1",
            "p_building_id": "b1",
            "p_permissions": ["manage_issues"],
            "p_granted_by": "admin-1",
            "p_expires_at": None,
        },
    )
    assert grant.permission is Permission.manage_issues
    assert grant.expires_at is None


@pytest.mark.asyncio
async def test_grant_many_collapses_duplicates_and_sends_expiry():
    client = make_client(rpc_data=[grant_row("manage_issues"), grant_row("view_all_issues")])
    store = PermissionStore(client)
    expires = utcnow() + timedelta(days=7)

    await store.grant_many(
        "u1", "b1",
        [Permission.manage_issues, "view_all_issues", Permission.manage_issues],
        "admin-1",
        expires_at=expires,
    )

    params = client.rpc.call_args[0][1]
    assert params["p_permissions"] == ["manage_issues", "view_all_issues"]
    assert params["p_expires_at"].endswith("Z")


@pytest.mark.asyncio
async def test_grant_many_with_nothing_to_grant_skips_storage():
    client = make_client()
    store = PermissionStore(client)

    assert await store.grant_many("u1", "b1", [], "admin-1") == []
    client.rpc.assert_not_called()


@pytest.mark.asyncio
async def test_grant_rejects_unknown_permission_before_storage():
    client = make_client()
    store = PermissionStore(client)

    with pytest.raises(ValueError):
        await store.grant("u1", "b1", "launch_rockets", "admin-1")
    client.rpc.assert_not_called()


# -----------------------------------------------------
# revoke
# -----------------------------------------------------
@pytest.mark.asyncio
async def test_revoke_existing_grant():
    client = make_client(rpc_data=True)
    store = PermissionStore(client)

    await store.revoke("u1", "b1", Permission.manage_issues, "admin-1", reason="left staff")

    client.rpc.assert_called_once_with(
        "revoke_admin_permission",
        {
            "p_user_id": "u1",
            "p_building_id": "b1",
            "p_permission": "manage_issues",
            "p_revoked_by": "admin-1",
            "p_reason": "left staff",
        },
    )


@pytest.mark.asyncio
async def test_revoke_missing_grant_raises_not_found():
    client = make_client(rpc_data=False)
    store = PermissionStore(client)

    with pytest.raises(PermissionNotFound):
        await store.revoke("u1", "b1", Permission.manage_issues, "admin-1")


# -----------------------------------------------------
# list_active / list_grants
# -----------------------------------------------------
@pytest.mark.asyncio
async def test_list_active_drops_expired_rows_returned_by_storage():
    past = (utcnow() - timedelta(hours=1)).isoformat()
    future = (utcnow() + timedelta(hours=1)).isoformat()
    client = make_client(tables={
        "admin_permissions": [
            grant_row("manage_issues"),
            grant_row("view_all_tenants", expires_at=past),
            grant_row("view_all_issues", expires_at=future),
        ],
    })
    store = PermissionStore(client)

    active = await store.list_active("u1", "b1")

    assert active == {Permission.manage_issues, Permission.view_all_issues}


@pytest.mark.asyncio
async def test_list_active_filters_by_user_building_and_expiry():
    client = make_client(tables={"admin_permissions": []})
    store = PermissionStore(client)

    await store.list_active("u1", "b1")

    query = client.queries["admin_permissions"]
    query.eq.assert_any_call("building_id", "b1")
    query.eq.assert_any_call("user_id", "u1")
    or_filter = query.or_.call_args[0][0]
    assert or_filter.startswith("expires_at.is.null,expires_at.gt.")


@pytest.mark.asyncio
async def test_list_active_ignores_unknown_permission_rows():
    client = make_client(tables={
        "admin_permissions": [grant_row("retired_permission"), grant_row("manage_issues")],
    })
    store = PermissionStore(client)

    assert await store.list_active("u1", "b1") == {Permission.manage_issues}


@pytest.mark.asyncio
async def test_list_grants_can_include_expired():
    past = (utcnow() - timedelta(days=1)).isoformat()
    client = make_client(tables={
        "admin_permissions": [grant_row("manage_issues", expires_at=past)],
    })
    store = PermissionStore(client)

    grants = await store.list_grants("b1", include_expired=True)

    assert len(grants) == 1
    client.queries["admin_permissions"].or_.assert_not_called()


# -----------------------------------------------------
# list_audit
# -----------------------------------------------------
@pytest.mark.asyncio
async def test_list_audit_newest_first_with_clamped_limit():
    client = make_client(tables={
        "permission_audit_logs": [
            {
                "id": "a2",
                "user_id": "u1",
                "building_id": "b1",
                "permission": "manage_issues",
                "action": "revoked",
                "performed_by": "admin-1",
                "reason": "rotation",
                "created_at": "2026-10-02T00:00:00Z",
            },
        ],
    })
    store = PermissionStore(client)

    entries = await store.list_audit("b1", limit=10_000)

    query = client.queries["permission_audit_logs"]
    query.order.assert_called_once_with("created_at", desc=True)
    query.limit.assert_called_once_with(500)
    assert entries[0].action is AuditAction.revoked
    assert entries[0].reason == "rotation"


# -----------------------------------------------------
# failures
# -----------------------------------------------------
@pytest.mark.asyncio
async def test_storage_error_is_not_an_empty_result():
    client = make_client(tables={
        "admin_permissions": make_query(error=ConnectionError("connection refused")),
    })
    store = PermissionStore(client)

    with pytest.raises(StorageUnavailable) as exc_info:
        await store.list_active("u1", "b1")

    assert exc_info.value.status_code == 500
    assert "connection refused" in exc_info.value.detail


@pytest.mark.asyncio
async def test_slow_storage_hits_deadline():
    async def never_answers():
        await asyncio.sleep(10)

    query = make_query()
    query.execute = AsyncMock(side_effect=never_answers)
    client = Mock()
    client.rpc.return_value = query
    store = PermissionStore(client, timeout=0.01)

    with pytest.raises(StorageUnavailable) as exc_info:
        await store.grant("u1", "b1", Permission.manage_issues, "admin-1")

    assert exc_info.value.detail == "timeout"


@pytest.mark.asyncio
async def test_revoke_storage_error_is_not_not_found():
    client = make_client(rpc_error=RuntimeError("deadlock detected"))
    store = PermissionStore(client)

    with pytest.raises(StorageUnavailable):
        await store.revoke("u1", "b1", Permission.manage_issues, "admin-1")
