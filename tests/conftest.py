# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.
"""

import pytest
from fastapi.testclient import TestClient
from typing import Generator

from core.authorization import PermissionEvaluator
from core.building_context import BuildingContextResolver
from dependencies.auth import CurrentUser, get_current_user
from dependencies.guards import (
    get_audit_log,
    get_building_resolver,
    get_permission_store,
    get_role_store,
)
from main import create_app
from tests.fakes import FakeAuditLog, FakePermissionStore, FakeRoleStore, make_client

BUILDING_ID = "0b6f6a1e-3c1d-4f7e-9a52-7d0c1f2e8a11"
OTHER_BUILDING_ID = "5d2c9e47-8b1a-4c3f-a6d0-2e9f7b4c1d22"
MANAGER_ID = "a1f3c5e7-2b4d-4f6a-8c9e-0d1b2c3d4e01"
TENANT_ID = "b2e4d6f8-3c5e-4a7b-9d0f-1e2c3d4e5f02"
ROOT_ID = "c3f5e7a9-4d6f-4b8c-8e1a-2f3d4e5f6a03"
SUPERUSER_EMAIL = "Root@Example.com"


@pytest.fixture
def store() -> FakePermissionStore:
    return FakePermissionStore()


@pytest.fixture
def role_store() -> FakeRoleStore:
    return FakeRoleStore()


@pytest.fixture
def manager_user():
    """Building manager (grants are added per test)."""
    return CurrentUser(id=MANAGER_ID, email="manager@example.com", full_name="Manager")


@pytest.fixture
def tenant_user():
    return CurrentUser(id=TENANT_ID, email="tenant@example.com")


@pytest.fixture
def superuser():
    return CurrentUser(id=ROOT_ID, email="root@example.com")


@pytest.fixture
def audit_log() -> FakeAuditLog:
    return FakeAuditLog()


@pytest.fixture
def evaluator(store) -> PermissionEvaluator:
    return PermissionEvaluator(store, [SUPERUSER_EMAIL])


@pytest.fixture
def supabase_client():
    """Mock Supabase client with no rows in any table."""
    return make_client()


@pytest.fixture(autouse=True)
def superuser_allowlist():
    """Reset the global allowlist around each test."""
    from core.superusers import get_superuser_allowlist

    allowlist = get_superuser_allowlist()
    previous = allowlist.snapshot()
    allowlist.reload([SUPERUSER_EMAIL])
    yield allowlist
    allowlist.reload(previous)


@pytest.fixture(scope="function")
def app(store, role_store, audit_log, supabase_client, manager_user):
    """
    Test FastAPI application: stores replaced by fakes, building
    resolution backed by the mock client, caller = manager_user.
    """
    app = create_app()
    app.dependency_overrides[get_permission_store] = lambda: store
    app.dependency_overrides[get_role_store] = lambda: role_store
    app.dependency_overrides[get_audit_log] = lambda: audit_log
    app.dependency_overrides[get_building_resolver] = lambda: BuildingContextResolver(
        supabase_client
    )
    app.dependency_overrides[get_current_user] = lambda: manager_user
    return app


@pytest.fixture(scope="function")
def client(app) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client


def act_as(app, user):
    """Switch the authenticated caller for subsequent requests."""
    app.dependency_overrides[get_current_user] = lambda: user
