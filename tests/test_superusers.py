# tests/test_superusers.py

"""
Tests for the superuser allowlist and its admin endpoints.
"""

from core.superusers import SuperuserAllowlist
from tests.conftest import act_as


def test_allowlist_normalizes_entries():
    allowlist = SuperuserAllowlist([" Admin@Example.com ", "", "ops@example.com"])

    assert allowlist.snapshot() == frozenset({"admin@example.com", "ops@example.com"})
    assert allowlist.contains("ADMIN@example.com")
    assert not allowlist.contains(None)


def test_snapshot_is_unaffected_by_reload():
    allowlist = SuperuserAllowlist(["a@example.com"])
    before = allowlist.snapshot()

    allowlist.reload(["b@example.com"])

    assert before == frozenset({"a@example.com"})
    assert allowlist.snapshot() == frozenset({"b@example.com"})


def test_reload_from_env(monkeypatch):
    allowlist = SuperuserAllowlist()
    monkeypatch.setenv("SUPER_USER_EMAILS", "one@example.com, Two@Example.com,")

    emails = allowlist.reload_from_env()

    assert emails == frozenset({"one@example.com", "two@example.com"})


def test_reload_endpoint_requires_superuser(app, client, tenant_user):
    act_as(app, tenant_user)

    response = client.post("/admin/superusers/reload")

    assert response.status_code == 403
    assert response.json() == {"error": "Superuser access required"}


def test_reload_endpoint_picks_up_new_superuser(app, client, superuser, tenant_user, monkeypatch):
    monkeypatch.setenv("SUPER_USER_EMAILS", f"{superuser.email},{tenant_user.email}")
    act_as(app, superuser)

    response = client.post("/admin/superusers/reload")

    assert response.status_code == 200
    assert response.json() == {"success": True, "count": 2}

    act_as(app, tenant_user)
    assert client.get("/auth/me").json()["is_superuser"] is True


def test_me_endpoint(client, manager_user):
    body = client.get("/auth/me").json()

    assert body["id"] == manager_user.id
    assert body["email"] == manager_user.email
    assert body["is_superuser"] is False
