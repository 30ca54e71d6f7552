"""
Tests for organization signup and invitations
"""

import pytest
from datetime import datetime, timedelta
from sqlmodel import select
import httpx

from app.models.invitation import Invitation, InvitationState
from app.models.user import Membership, MembershipRole, User
from app.services import email as email_service
from app.services.invitations import new_invitation_token

NEW_USER = {"X-User-Sub": "auth0|newcomer", "X-User-Email": "newcomer@example.com"}


@pytest.mark.asyncio
async def test_create_organization_makes_caller_owner(client, db):
    response = await client.post(
        "/organizations", json={"name": "Mi Empresa", "slug": "mi-empresa"}, headers=NEW_USER
    )

    assert response.status_code == 201
    body = response.json()
    assert body["role"] == "owner"
    assert body["tenant"]["slug"] == "mi-empresa"

    user = (await db.exec(select(User).where(User.auth_provider_id == "auth0|newcomer"))).one()
    assert user.email == "newcomer@example.com"

    mine = (await client.get("/organizations/me", headers=NEW_USER)).json()
    assert [org["tenant"]["id"] for org in mine["data"]] == [body["tenant"]["id"]]


@pytest.mark.asyncio
async def test_duplicate_slug_is_rejected(client):
    await client.post("/organizations", json={"name": "Uno", "slug": "repetido"}, headers=NEW_USER)
    response = await client.post("/organizations", json={"name": "Dos", "slug": "repetido"}, headers=NEW_USER)
    assert response.status_code == 400
    assert response.json()["code"] == "slug_taken"


@pytest.mark.asyncio
async def test_invalid_slug_is_rejected(client):
    response = await client.post("/organizations", json={"name": "Uno", "slug": "No Vale"}, headers=NEW_USER)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_organizations_need_identity(client):
    response = await client.get("/organizations/me")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_invite_and_accept(client, owner, db):
    created = await client.post(
        "/invitations", json={"email": "newcomer@example.com", "role": "admin"}, headers=owner.headers
    )
    assert created.status_code == 201
    token = created.json()["token"]
    assert created.json()["invite_url"].endswith(f"/invitations/{token}")

    info = (await client.get(f"/invitations/{token}")).json()
    assert info["email"] == "newcomer@example.com"
    assert info["role"] == "admin"
    assert info["organization"]["name"] == owner.tenant.name

    accepted = await client.post(f"/invitations/{token}/accept", headers=NEW_USER)
    assert accepted.status_code == 200
    assert accepted.json() == {"ok": True, "tenant_id": owner.tenant.id}

    role = (
        await db.exec(
            select(Membership.role)
            .join(User, User.id == Membership.user_id)
            .where(User.auth_provider_id == "auth0|newcomer", Membership.tenant_id == owner.tenant.id)
        )
    ).one()
    assert role == MembershipRole.ADMIN

    again = await client.post(f"/invitations/{token}/accept", headers=NEW_USER)
    assert again.status_code == 400
    assert again.json()["code"] == "invitation_already_accepted"


@pytest.mark.asyncio
async def test_expired_invitation(client, owner, db):
    invitation = Invitation(
        tenant_id=owner.tenant.id,
        email="late@example.com",
        role=MembershipRole.MEMBER,
        token=new_invitation_token(),
        expires_at=datetime.utcnow() - timedelta(minutes=1),
    )
    db.add(invitation)
    await db.commit()

    response = await client.get(f"/invitations/{invitation.token}")
    assert response.status_code == 400
    assert response.json()["code"] == "invitation_expired"


@pytest.mark.asyncio
async def test_unknown_invitation(client):
    response = await client.get(f"/invitations/{new_invitation_token()}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_accepting_never_demotes_an_owner(client, owner):
    created = (
        await client.post("/invitations", json={"email": owner.user.email, "role": "member"}, headers=owner.headers)
    ).json()

    response = await client.post(f"/invitations/{created['token']}/accept", headers=owner.headers)
    assert response.status_code == 200

    mine = (await client.get("/members/me/permissions", headers=owner.headers)).json()
    assert mine["role"] == "owner"


@pytest.mark.asyncio
async def test_members_cannot_invite(client, owner, make_member):
    member = await make_member(tenant=owner.tenant, role=MembershipRole.MEMBER)
    response = await client.post("/invitations", json={"email": "x@example.com"}, headers=member.headers)
    assert response.status_code == 403


def test_invitation_state_precedence():
    now = datetime.utcnow()
    invitation = Invitation(
        tenant_id=1, email="a@example.com", token="t", expires_at=now - timedelta(days=1), accepted_at=now
    )
    assert invitation.state(now) == InvitationState.ACCEPTED
    invitation.accepted_at = None
    assert invitation.state(now) == InvitationState.EXPIRED


def test_invitation_token_shape():
    token = new_invitation_token()
    assert len(token) == 44
    assert token != new_invitation_token()


@pytest.mark.asyncio
async def test_email_is_logged_without_api_key():
    result = await email_service.send_invitation_email("a@example.com", "Acme", "http://x/invitations/t")
    assert result == {"id": "dev", "status": "logged"}


@pytest.mark.asyncio
async def test_email_is_posted_to_resend(monkeypatch):
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["auth"] = request.headers["authorization"]
        captured["body"] = request.read()
        return httpx.Response(200, json={"id": "email_123"})

    monkeypatch.setattr(email_service.settings, "RESEND_API_KEY", "re_test")
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        result = await email_service.send_invitation_email(
            "a@example.com", "Acme", "http://x/invitations/t", client=http
        )

    assert result == {"id": "email_123"}
    assert captured["auth"] == "Bearer re_test"
    assert b"Acme" in captured["body"]


@pytest.mark.asyncio
async def test_email_provider_error_propagates(monkeypatch):
    monkeypatch.setattr(email_service.settings, "RESEND_API_KEY", "re_test")
    transport = httpx.MockTransport(lambda request: httpx.Response(422, json={"message": "invalid"}))
    async with httpx.AsyncClient(transport=transport) as http:
        with pytest.raises(httpx.HTTPStatusError):
            await email_service.send_invitation_email("a@example.com", "Acme", "http://x", client=http)


def test_invitation_html_escapes_org_name():
    rendered = email_service.render_invitation('<b>Acme</b> & "Co"', "http://x/invitations/t?a=1&b=2")

    assert "<b>Acme</b>" not in rendered["html"]
    assert "&lt;b&gt;Acme&lt;/b&gt; &amp; &quot;Co&quot;" in rendered["html"]
    assert 'href="http://x/invitations/t?a=1&amp;b=2"' in rendered["html"]
    assert rendered["subject"] == 'Invitación a <b>Acme</b> & "Co"'
