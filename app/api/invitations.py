"""
Invitation API endpoints

`router` is tenant scoped; `public_router` serves the token endpoints used
by invitees before they belong to the tenant.
"""

from fastapi import APIRouter, Depends, Path, status
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.database import get_session
from app.core.dependencies import Identity, get_identity
from app.core.permissions import MemberContext, require_owner_or_admin
from app.models.user import MembershipRole
from app.schemas.organization import (
    InvitationAccepted,
    InvitationCreate,
    InvitationCreated,
    InvitationOrganization,
    InvitationRead,
)
from app.services import invitations as invitation_service

router = APIRouter()
public_router = APIRouter()


@router.post("", response_model=InvitationCreated, status_code=status.HTTP_201_CREATED)
async def create_invitation(
    payload: InvitationCreate,
    member: MemberContext = Depends(require_owner_or_admin),
    session: AsyncSession = Depends(get_session),
):
    """Invite an email address to the current tenant"""
    invitation, url = await invitation_service.create_invitation(
        session, member.tenant_id, member.user, payload.email, MembershipRole(payload.role)
    )
    return InvitationCreated(id=invitation.id, token=invitation.token, invite_url=url)


@public_router.get("/{token}", response_model=InvitationRead)
async def read_invitation(
    token: str = Path(..., min_length=16),
    session: AsyncSession = Depends(get_session),
):
    invitation, tenant = await invitation_service.get_open_invitation(session, token)
    return InvitationRead(
        email=invitation.email,
        role=invitation.role,
        expires_at=invitation.expires_at,
        organization=InvitationOrganization(id=tenant.id, name=tenant.name),
    )


@public_router.post("/{token}/accept", response_model=InvitationAccepted)
async def accept_invitation(
    token: str = Path(..., min_length=16),
    identity: Identity = Depends(get_identity),
    session: AsyncSession = Depends(get_session),
):
    """Join the invited tenant with the invited role"""
    invitation = await invitation_service.accept_invitation(session, token, identity)
    return InvitationAccepted(tenant_id=invitation.tenant_id)
