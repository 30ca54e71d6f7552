"""
Role permission management API endpoints
"""

from fastapi import APIRouter, Depends
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
import uuid

from app.core.database import get_session
from app.core.permissions import MemberContext, require_permission_manager
from app.models.permission import Permission
from app.models.user import MembershipRole
from app.schemas.member import (
    MembershipRead,
    MembershipRoleUpdate,
    PermissionRead,
    RolePermissionsRead,
    RolePermissionsUpdate,
    RolesOverview,
)
from app.services import memberships as membership_service
from app.api.members import member_view

router = APIRouter(dependencies=[Depends(require_permission_manager)])


@router.get("/roles", response_model=RolesOverview)
async def roles_overview(
    member: MemberContext = Depends(require_permission_manager),
    session: AsyncSession = Depends(get_session),
):
    """Permission catalog, grants grouped by role, and members"""
    permissions = (
        await session.exec(select(Permission).order_by(Permission.resource, Permission.action))
    ).all()
    members = await membership_service.list_members(session, member.tenant_id)
    return RolesOverview(
        permissions=[
            PermissionRead(id=p.id, resource=p.resource, action=p.action, key=p.key, description=p.description)
            for p in permissions
        ],
        roles=await membership_service.grants_by_role(session, member.tenant_id),
        members=[member_view(membership, user) for membership, user in members],
    )


@router.patch("/roles/{role}", response_model=RolePermissionsRead)
async def update_role_permissions(
    role: MembershipRole,
    payload: RolePermissionsUpdate,
    member: MemberContext = Depends(require_permission_manager),
    session: AsyncSession = Depends(get_session),
):
    """Replace the grant set of a non-owner role"""
    keys = await membership_service.replace_role_permissions(session, member.tenant_id, role, payload.permissions)
    return RolePermissionsRead(role=role, permissions=keys)


@router.patch("/memberships/{membership_id}", response_model=MembershipRead)
async def update_membership_role(
    membership_id: uuid.UUID,
    payload: MembershipRoleUpdate,
    member: MemberContext = Depends(require_permission_manager),
    session: AsyncSession = Depends(get_session),
):
    """Change a member's role; the last owner cannot be demoted"""
    return await membership_service.change_member_role(session, member.tenant_id, membership_id, payload.role)
