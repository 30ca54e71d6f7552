"""
Tenant membership and role grant management

Every tenant keeps at least one owner: removals and demotions that would
leave none are rejected before anything is written.
"""

from sqlalchemy import delete
from sqlmodel import func, select
from sqlmodel.ext.asyncio.session import AsyncSession
from datetime import datetime
from typing import Dict, List, Sequence, Tuple
import uuid
import structlog

from app.core.errors import Forbidden, NotFound, ValidationFailed
from app.core.permissions import permission_key
from app.models.permission import Permission, RolePermission
from app.models.user import Membership, MembershipRole, User

logger = structlog.get_logger(__name__)


async def list_members(session: AsyncSession, tenant_id: int) -> List[Tuple[Membership, User]]:
    rows = (
        await session.exec(
            select(Membership, User)
            .join(User, User.id == Membership.user_id)
            .where(Membership.tenant_id == tenant_id)
            .order_by(Membership.created_at)
        )
    ).all()
    return [(membership, user) for membership, user in rows]


async def count_owners(session: AsyncSession, tenant_id: int) -> int:
    return (
        await session.exec(
            select(func.count(Membership.id)).where(
                Membership.tenant_id == tenant_id,
                Membership.role == MembershipRole.OWNER,
            )
        )
    ).one()


async def _guard_last_owner(session: AsyncSession, membership: Membership) -> None:
    if membership.role == MembershipRole.OWNER and await count_owners(session, membership.tenant_id) <= 1:
        raise Forbidden("Cannot remove the last owner of the organization", code="last_owner")


async def remove_member(session: AsyncSession, tenant_id: int, user_id: uuid.UUID) -> None:
    membership = (
        await session.exec(
            select(Membership).where(Membership.tenant_id == tenant_id, Membership.user_id == user_id)
        )
    ).first()
    if membership is None:
        raise NotFound("Membership not found")

    await _guard_last_owner(session, membership)

    try:
        await session.delete(membership)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info("Member removed", tenant_id=tenant_id, user_id=str(user_id))


async def change_member_role(
    session: AsyncSession, tenant_id: int, membership_id: uuid.UUID, role: MembershipRole
) -> Membership:
    membership = (
        await session.exec(
            select(Membership).where(Membership.id == membership_id, Membership.tenant_id == tenant_id)
        )
    ).first()
    if membership is None:
        raise NotFound("Membership not found")

    if role != MembershipRole.OWNER:
        await _guard_last_owner(session, membership)

    try:
        membership.role = role
        membership.updated_at = datetime.utcnow()
        session.add(membership)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info("Member role changed", tenant_id=tenant_id, membership_id=str(membership_id), role=role.value)
    return membership


async def grants_by_role(session: AsyncSession, tenant_id: int) -> Dict[str, List[str]]:
    rows = (
        await session.exec(
            select(RolePermission.role, Permission.resource, Permission.action)
            .join(Permission, Permission.id == RolePermission.permission_id)
            .where(RolePermission.tenant_id == tenant_id)
            .order_by(RolePermission.role, Permission.resource, Permission.action)
        )
    ).all()
    grouped: Dict[str, List[str]] = {}
    for role, resource, action in rows:
        grouped.setdefault(role, []).append(permission_key(resource, action))
    return grouped


async def replace_role_permissions(
    session: AsyncSession, tenant_id: int, role: MembershipRole, keys: Sequence[str]
) -> List[str]:
    """
    Make the role's grant set equal to keys

    Grants not listed are removed and new ones added, in one transaction.
    Returns the resulting sorted key list.
    """
    if role == MembershipRole.OWNER:
        raise Forbidden("Owner permissions cannot be modified", code="owner_permissions_immutable")

    catalog = {p.key: p for p in (await session.exec(select(Permission))).all()}
    incoming = set(keys)
    unknown = sorted(incoming - catalog.keys())
    if unknown:
        raise ValidationFailed("Unknown permission", code="unknown_permission", permissions=unknown)

    current = (
        await session.exec(
            select(RolePermission, Permission)
            .join(Permission, Permission.id == RolePermission.permission_id)
            .where(RolePermission.tenant_id == tenant_id, RolePermission.role == role.value)
        )
    ).all()
    existing = {permission.key: grant for grant, permission in current}

    to_remove = [grant.id for key, grant in existing.items() if key not in incoming]
    to_add = sorted(incoming - existing.keys())

    try:
        if to_remove:
            await session.exec(
                delete(RolePermission).where(
                    RolePermission.tenant_id == tenant_id,
                    RolePermission.id.in_(to_remove),
                )
            )
        for key in to_add:
            session.add(
                RolePermission(tenant_id=tenant_id, role=role.value, permission_id=catalog[key].id)
            )
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info(
        "Role permissions replaced",
        tenant_id=tenant_id,
        role=role.value,
        added=to_add,
        removed=len(to_remove),
    )
    return sorted(incoming)
