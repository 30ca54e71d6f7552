"""
Organization (tenant) signup and membership listing
"""

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from typing import List, Tuple
import structlog

from app.core.dependencies import Identity
from app.core.errors import ValidationFailed
from app.models.tenant import Tenant
from app.models.user import Membership, MembershipRole, User
from app.schemas.organization import OrganizationCreate
from app.services.users import ensure_user

logger = structlog.get_logger(__name__)


async def create_organization(
    session: AsyncSession, identity: Identity, payload: OrganizationCreate
) -> Tuple[Tenant, Membership]:
    """Create a tenant with the caller as its owner"""
    taken = (await session.exec(select(Tenant.id).where(Tenant.slug == payload.slug))).first()
    if taken is not None:
        raise ValidationFailed("Slug already in use", code="slug_taken")

    try:
        user = await ensure_user(session, identity)
        tenant = Tenant(
            name=payload.name,
            slug=payload.slug,
            logo_url=payload.logo_url,
            created_by_user_id=user.id,
        )
        session.add(tenant)
        await session.flush()

        membership = Membership(user_id=user.id, tenant_id=tenant.id, role=MembershipRole.OWNER)
        session.add(membership)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info("Organization created", tenant_id=tenant.id, slug=tenant.slug, owner_id=str(user.id))
    return tenant, membership


async def list_my_organizations(session: AsyncSession, identity: Identity) -> List[Tuple[Membership, Tenant]]:
    """Memberships of the caller with their tenants, oldest first"""
    user = (
        await session.exec(select(User).where(User.auth_provider_id == identity.auth_provider_id))
    ).first()
    if user is None:
        return []

    rows = (
        await session.exec(
            select(Membership, Tenant)
            .join(Tenant, Tenant.id == Membership.tenant_id)
            .where(Membership.user_id == user.id)
            .order_by(Membership.created_at)
        )
    ).all()
    return [(membership, tenant) for membership, tenant in rows]
