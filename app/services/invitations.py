"""
Invitations: tokenized membership offers delivered by email
"""

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from datetime import datetime, timedelta
from typing import Tuple
import secrets
import uuid
import structlog

from app.core.config import get_settings
from app.core.dependencies import Identity
from app.core.errors import NotFound, ValidationFailed
from app.models.invitation import Invitation, InvitationState
from app.models.tenant import Tenant
from app.models.user import Membership, MembershipRole, User
from app.services.email import send_invitation_email
from app.services.users import ensure_user

logger = structlog.get_logger(__name__)
settings = get_settings()


def new_invitation_token() -> str:
    """32 hex chars plus a random suffix"""
    return uuid.uuid4().hex + secrets.token_hex(6)


def invite_url_for(token: str) -> str:
    return f"{settings.PUBLIC_APP_URL.rstrip('/')}/invitations/{token}"


async def create_invitation(
    session: AsyncSession, tenant_id: int, inviter: User, email: str, role: MembershipRole
) -> Tuple[Invitation, str]:
    """Persist an invitation and email its link; returns (invitation, url)"""
    tenant = await session.get(Tenant, tenant_id)
    if tenant is None:
        raise NotFound("Organization (tenant) not found")

    invitation = Invitation(
        tenant_id=tenant_id,
        email=email,
        role=role,
        token=new_invitation_token(),
        expires_at=datetime.utcnow() + timedelta(days=settings.INVITATION_TTL_DAYS),
        created_by_user_id=inviter.id,
    )
    try:
        session.add(invitation)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    url = invite_url_for(invitation.token)
    await send_invitation_email(email, tenant.name, url)
    logger.info("Invitation created", tenant_id=tenant_id, invitation_id=str(invitation.id), role=role.value)
    return invitation, url


async def get_open_invitation(session: AsyncSession, token: str) -> Tuple[Invitation, Tenant]:
    """Invitation that can still be accepted, with its tenant"""
    row = (
        await session.exec(
            select(Invitation, Tenant)
            .join(Tenant, Tenant.id == Invitation.tenant_id)
            .where(Invitation.token == token)
        )
    ).first()
    if row is None:
        raise NotFound("Invitation not found")

    invitation, tenant = row
    state = invitation.state()
    if state == InvitationState.ACCEPTED:
        raise ValidationFailed("Invitation already accepted", code="invitation_already_accepted")
    if state == InvitationState.EXPIRED:
        raise ValidationFailed("Invitation expired", code="invitation_expired")
    return invitation, tenant


async def accept_invitation(session: AsyncSession, token: str, identity: Identity) -> Invitation:
    """
    Join the invited tenant

    An existing membership takes the invited role, except that owners keep
    ownership.
    """
    invitation, _ = await get_open_invitation(session, token)

    try:
        user = await ensure_user(session, identity)
        membership = (
            await session.exec(
                select(Membership).where(
                    Membership.user_id == user.id,
                    Membership.tenant_id == invitation.tenant_id,
                )
            )
        ).first()
        if membership is None:
            session.add(Membership(user_id=user.id, tenant_id=invitation.tenant_id, role=invitation.role))
        elif membership.role != MembershipRole.OWNER:
            membership.role = invitation.role
            membership.updated_at = datetime.utcnow()
            session.add(membership)

        invitation.accepted_at = datetime.utcnow()
        session.add(invitation)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info(
        "Invitation accepted",
        tenant_id=invitation.tenant_id,
        invitation_id=str(invitation.id),
        user_id=str(user.id),
    )
    return invitation
