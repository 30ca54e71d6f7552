"""
Tests for members, role grants and the last-owner rule
"""

import pytest
from sqlmodel import select

from app.models.permission import Permission, RolePermission
from app.models.user import Membership, MembershipRole


@pytest.mark.asyncio
async def test_list_members(client, owner, make_member):
    await make_member(tenant=owner.tenant, role=MembershipRole.MEMBER)

    response = await client.get("/members", headers=owner.headers)

    assert response.status_code == 200
    roles = [m["role"] for m in response.json()]
    assert roles == ["owner", "member"]


@pytest.mark.asyncio
async def test_my_permissions(client, owner, make_member, grant):
    member = await make_member(tenant=owner.tenant, role=MembershipRole.MEMBER)
    await grant(owner.tenant.id, MembershipRole.MEMBER, "clients:view")

    mine = (await client.get("/members/me/permissions", headers=member.headers)).json()
    assert mine == {"role": "member", "permissions": ["clients:view"], "can_manage_permissions": False}

    theirs = (await client.get("/members/me/permissions", headers=owner.headers)).json()
    assert theirs["can_manage_permissions"] is True
    assert "admin:manage-permissions" in theirs["permissions"]


@pytest.mark.asyncio
async def test_replace_role_permissions(client, owner, grant, db):
    await grant(owner.tenant.id, MembershipRole.MEMBER, "clients:view")

    response = await client.patch(
        "/role-permissions/roles/member",
        json={"permissions": ["quotes:view", "products:view"]},
        headers=owner.headers,
    )

    assert response.status_code == 200
    assert response.json() == {"role": "member", "permissions": ["products:view", "quotes:view"]}

    rows = (
        await db.exec(
            select(Permission.resource)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .where(RolePermission.tenant_id == owner.tenant.id, RolePermission.role == "member")
        )
    ).all()
    assert sorted(rows) == ["products", "quotes"]


@pytest.mark.asyncio
async def test_owner_permissions_are_immutable(client, owner):
    response = await client.patch(
        "/role-permissions/roles/owner", json={"permissions": []}, headers=owner.headers
    )
    assert response.status_code == 403
    assert response.json()["code"] == "owner_permissions_immutable"


@pytest.mark.asyncio
async def test_unknown_permission_is_rejected(client, owner):
    response = await client.patch(
        "/role-permissions/roles/admin",
        json={"permissions": ["quotes:view", "rockets:launch"]},
        headers=owner.headers,
    )
    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "unknown_permission"
    assert body["permissions"] == ["rockets:launch"]


@pytest.mark.asyncio
async def test_last_owner_cannot_be_demoted(client, owner, db):
    response = await client.patch(
        f"/role-permissions/memberships/{owner.membership.id}",
        json={"role": "admin"},
        headers=owner.headers,
    )

    assert response.status_code == 403
    assert response.json()["code"] == "last_owner"
    role = (await db.exec(select(Membership.role).where(Membership.id == owner.membership.id))).one()
    assert role == MembershipRole.OWNER


@pytest.mark.asyncio
async def test_owner_can_be_demoted_when_another_exists(client, owner, make_member):
    second = await make_member(tenant=owner.tenant, role=MembershipRole.OWNER)

    response = await client.patch(
        f"/role-permissions/memberships/{second.membership.id}",
        json={"role": "member"},
        headers=owner.headers,
    )

    assert response.status_code == 200
    assert response.json()["role"] == "member"


@pytest.mark.asyncio
async def test_last_owner_cannot_be_removed(client, owner, make_member):
    admin = await make_member(tenant=owner.tenant, role=MembershipRole.ADMIN)

    response = await client.delete(f"/members/{owner.user.id}", headers=admin.headers)

    assert response.status_code == 403
    assert response.json()["code"] == "last_owner"


@pytest.mark.asyncio
async def test_remove_member(client, owner, make_member):
    member = await make_member(tenant=owner.tenant, role=MembershipRole.MEMBER)

    response = await client.delete(f"/members/{member.user.id}", headers=owner.headers)
    assert response.status_code == 200

    listing = (await client.get("/members", headers=owner.headers)).json()
    assert [m["user"]["id"] for m in listing] == [str(owner.user.id)]


@pytest.mark.asyncio
async def test_member_cannot_remove_others(client, owner, make_member):
    member = await make_member(tenant=owner.tenant, role=MembershipRole.MEMBER)
    response = await client.delete(f"/members/{owner.user.id}", headers=member.headers)
    assert response.status_code == 403
