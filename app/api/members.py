"""
Tenant members API endpoints
"""

from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession
from typing import List
import uuid

from app.core.database import get_session
from app.core.permissions import (
    MemberContext,
    can_manage_permissions,
    effective_permissions,
    get_member_context,
    require_owner_or_admin,
)
from app.schemas.common import OkResponse
from app.schemas.member import MemberRead, MyPermissionsRead
from app.services import memberships as membership_service

router = APIRouter()


def member_view(membership, user) -> MemberRead:
    return MemberRead(
        membership_id=membership.id,
        role=membership.role,
        created_at=membership.created_at,
        user={"id": user.id, "email": user.email, "name": user.name},
    )


@router.get("", response_model=List[MemberRead])
async def list_members(
    member: MemberContext = Depends(get_member_context),
    session: AsyncSession = Depends(get_session),
):
    """Members of the current tenant, oldest first"""
    rows = await membership_service.list_members(session, member.tenant_id)
    return [member_view(membership, user) for membership, user in rows]


@router.get("/me/permissions", response_model=MyPermissionsRead)
async def my_permissions(
    member: MemberContext = Depends(get_member_context),
    session: AsyncSession = Depends(get_session),
):
    """Caller's role and effective permission keys"""
    return MyPermissionsRead(
        role=member.role,
        permissions=await effective_permissions(session, member.tenant_id, member.role),
        can_manage_permissions=await can_manage_permissions(session, member),
    )


@router.delete("/{user_id}", response_model=OkResponse)
async def remove_member(
    user_id: uuid.UUID,
    member: MemberContext = Depends(require_owner_or_admin),
    session: AsyncSession = Depends(get_session),
):
    """Remove a member; the last owner cannot be removed"""
    await membership_service.remove_member(session, member.tenant_id, user_id)
    return OkResponse()
