"""
Tests for tenant-scoped role permissions
"""

import pytest

from app.core.permissions import (
    PERMISSION_CATALOG,
    effective_permissions,
    ensure_permission_catalog,
    has_role_permission,
    permission_key,
    require_permission,
)
from app.models.user import MembershipRole


def test_permission_key():
    assert permission_key("quotes", "view") == "quotes:view"


def test_require_permission_returns_dependency():
    checker = require_permission("quotes", "view")
    assert callable(checker)


@pytest.mark.asyncio
async def test_catalog_seeding_is_idempotent(db):
    first = await ensure_permission_catalog(db)
    second = await ensure_permission_catalog(db)
    assert len(first) == len(PERMISSION_CATALOG)
    assert {p.key for p in first} == {p.key for p in second}


@pytest.mark.asyncio
async def test_grants_are_per_tenant(db, make_tenant, grant):
    tenant_a = await make_tenant()
    tenant_b = await make_tenant()
    await grant(tenant_a.id, MembershipRole.MEMBER, "quotes:view")

    assert await has_role_permission(db, tenant_a.id, MembershipRole.MEMBER, "quotes", "view")
    assert not await has_role_permission(db, tenant_b.id, MembershipRole.MEMBER, "quotes", "view")
    assert not await has_role_permission(db, tenant_a.id, MembershipRole.ADMIN, "quotes", "view")


@pytest.mark.asyncio
async def test_owner_holds_whole_catalog(db, catalog, make_tenant):
    tenant = await make_tenant()
    keys = await effective_permissions(db, tenant.id, MembershipRole.OWNER)
    assert keys == sorted(p.key for p in catalog)
    assert await effective_permissions(db, tenant.id, MembershipRole.MEMBER) == []


@pytest.mark.asyncio
async def test_member_without_grant_is_forbidden(client, make_member, catalog):
    member = await make_member(role=MembershipRole.MEMBER)

    response = await client.get("/quotes", headers=member.headers)

    assert response.status_code == 403
    body = response.json()
    assert body["code"] == "insufficient_permissions"
    assert body["required"] == "quotes:view"


@pytest.mark.asyncio
async def test_member_with_grant_is_allowed(client, make_member, grant):
    member = await make_member(role=MembershipRole.MEMBER)
    await grant(member.tenant.id, MembershipRole.MEMBER, "quotes:view")

    response = await client.get("/quotes", headers=member.headers)

    assert response.status_code == 200
    assert response.json()["total"] == 0


@pytest.mark.asyncio
async def test_owner_bypasses_grants(client, owner):
    for path in ("/quotes", "/clients", "/products", "/hr/employees"):
        response = await client.get(path, headers=owner.headers)
        assert response.status_code == 200, path


@pytest.mark.asyncio
async def test_missing_identity_is_unauthorized(client, owner):
    response = await client.get("/quotes", headers={"X-Tenant-Id": str(owner.tenant.id)})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_unknown_user_is_forbidden(client, owner):
    headers = {"X-Tenant-Id": str(owner.tenant.id), "X-User-Sub": "auth0|nobody"}
    response = await client.get("/quotes", headers=headers)
    assert response.status_code == 403
    assert response.json()["code"] == "user_not_registered"


@pytest.mark.asyncio
async def test_member_of_other_tenant_is_forbidden(client, owner, make_member):
    outsider = await make_member()
    headers = {**outsider.headers, "X-Tenant-Id": str(owner.tenant.id)}

    response = await client.get("/quotes", headers=headers)

    assert response.status_code == 403
    assert response.json()["code"] == "not_a_member"


@pytest.mark.asyncio
async def test_admin_needs_grant_to_manage_permissions(client, owner, make_member, grant):
    admin = await make_member(tenant=owner.tenant, role=MembershipRole.ADMIN)

    response = await client.get("/role-permissions/roles", headers=admin.headers)
    assert response.status_code == 403

    await grant(owner.tenant.id, MembershipRole.ADMIN, "admin:manage-permissions")
    response = await client.get("/role-permissions/roles", headers=admin.headers)
    assert response.status_code == 200
    assert "admin:manage-permissions" in response.json()["roles"]["admin"]
