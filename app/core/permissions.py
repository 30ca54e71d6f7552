"""
Tenant-scoped role permissions

Grants live in the role_permissions table keyed by (tenant, role, permission).
Owners bypass the table entirely.
"""

from fastapi import Depends
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import or_
from typing import Dict, List, Optional, Tuple
import uuid
import structlog

from app.core.database import get_session
from app.core.dependencies import Identity, get_identity, get_tenant_id
from app.core.errors import Forbidden
from app.models.permission import Permission, RolePermission
from app.models.user import Membership, MembershipRole, User

logger = structlog.get_logger(__name__)


# Global permission catalog: (resource, action) -> description
PERMISSION_CATALOG: Dict[Tuple[str, str], str] = {
    ("clients", "view"): "Access clients and client branches",
    ("products", "view"): "Access products and product templates",
    ("quotes", "view"): "Access quotes and quote analytics",
    ("hr-calendar", "view"): "Access the HR calendar",
    ("admin", "manage-permissions"): "Manage role permissions and member roles",
}

MANAGE_PERMISSIONS = ("admin", "manage-permissions")


def permission_key(resource: str, action: str) -> str:
    return f"{resource}:{action}"


class MemberContext:
    """Resolved caller inside the current tenant"""

    def __init__(self, tenant_id: int, identity: Identity, user: User, membership: Membership):
        self.tenant_id = tenant_id
        self.identity = identity
        self.user = user
        self.membership = membership

    @property
    def role(self) -> MembershipRole:
        return self.membership.role

    @property
    def is_owner(self) -> bool:
        return self.membership.role == MembershipRole.OWNER


async def ensure_permission_catalog(session: AsyncSession) -> List[Permission]:
    """Insert missing catalog rows; returns the full catalog"""
    existing = (await session.exec(select(Permission))).all()
    known = {(p.resource, p.action) for p in existing}
    created = []
    for (resource, action), description in PERMISSION_CATALOG.items():
        if (resource, action) in known:
            continue
        permission = Permission(resource=resource, action=action, description=description)
        session.add(permission)
        created.append(permission)
    if created:
        await session.commit()
        logger.info("Permission catalog seeded", created=len(created))
    return [*existing, *created]


async def find_user(session: AsyncSession, identity: Identity) -> Optional[User]:
    """Local user matching the identity's auth subject or id"""
    conditions = [User.auth_provider_id == identity.auth_provider_id]
    try:
        conditions.append(User.id == uuid.UUID(identity.subject))
    except ValueError:
        pass
    return (await session.exec(select(User).where(or_(*conditions)))).first()


async def find_membership(session: AsyncSession, user_id: uuid.UUID, tenant_id: int) -> Optional[Membership]:
    return (
        await session.exec(
            select(Membership).where(
                Membership.user_id == user_id,
                Membership.tenant_id == tenant_id,
            )
        )
    ).first()


async def resolve_member(session: AsyncSession, identity: Identity, tenant_id: int) -> MemberContext:
    """Resolve user and membership or fail with 403"""
    user = await find_user(session, identity)
    if user is None:
        raise Forbidden("User not registered", code="user_not_registered")

    membership = await find_membership(session, user.id, tenant_id)
    if membership is None:
        raise Forbidden("Not a member of this organization", code="not_a_member")

    return MemberContext(tenant_id=tenant_id, identity=identity, user=user, membership=membership)


async def has_role_permission(
    session: AsyncSession, tenant_id: int, role: MembershipRole, resource: str, action: str
) -> bool:
    """Check the policy table for a (tenant, role, resource, action) grant"""
    grant = (
        await session.exec(
            select(RolePermission.id)
            .join(Permission, Permission.id == RolePermission.permission_id)
            .where(
                RolePermission.tenant_id == tenant_id,
                RolePermission.role == role.value,
                Permission.resource == resource,
                Permission.action == action,
            )
        )
    ).first()
    return grant is not None


async def effective_permissions(session: AsyncSession, tenant_id: int, role: MembershipRole) -> List[str]:
    """Permission keys held by a role; owners hold the whole catalog"""
    if role == MembershipRole.OWNER:
        permissions = (await session.exec(select(Permission))).all()
    else:
        permissions = (
            await session.exec(
                select(Permission)
                .join(RolePermission, RolePermission.permission_id == Permission.id)
                .where(RolePermission.tenant_id == tenant_id, RolePermission.role == role.value)
            )
        ).all()
    return sorted(p.key for p in permissions)


async def can_manage_permissions(session: AsyncSession, member: MemberContext) -> bool:
    """Owners, and admins holding admin:manage-permissions"""
    if member.is_owner:
        return True
    if member.role == MembershipRole.ADMIN:
        return await has_role_permission(session, member.tenant_id, member.role, *MANAGE_PERMISSIONS)
    return False


async def get_member_context(
    identity: Identity = Depends(get_identity),
    tenant_id: int = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> MemberContext:
    """Dependency: caller must be a member of the current tenant"""
    return await resolve_member(session, identity, tenant_id)


def require_permission(resource: str, action: str, allow_owner_bypass: bool = True):
    """Dependency factory gating an operation on a tenant role grant"""
    required = permission_key(resource, action)

    async def check_permission(
        member: MemberContext = Depends(get_member_context),
        session: AsyncSession = Depends(get_session),
    ) -> MemberContext:
        if allow_owner_bypass and member.is_owner:
            return member

        if not await has_role_permission(session, member.tenant_id, member.role, resource, action):
            logger.info(
                "Permission denied",
                tenant_id=member.tenant_id,
                user_id=str(member.user.id),
                role=member.role.value,
                required=required,
            )
            raise Forbidden("Insufficient permissions", code="insufficient_permissions", required=required)
        return member

    return check_permission


async def require_permission_manager(
    member: MemberContext = Depends(get_member_context),
    session: AsyncSession = Depends(get_session),
) -> MemberContext:
    """Dependency: caller may mutate grants and member roles"""
    if not await can_manage_permissions(session, member):
        raise Forbidden("Insufficient permissions", code="insufficient_permissions",
                        required=permission_key(*MANAGE_PERMISSIONS))
    return member


async def require_owner_or_admin(
    member: MemberContext = Depends(get_member_context),
) -> MemberContext:
    """Dependency: caller is an owner or admin of the tenant"""
    if member.role not in (MembershipRole.OWNER, MembershipRole.ADMIN):
        raise Forbidden("Insufficient permissions", code="insufficient_permissions")
    return member
