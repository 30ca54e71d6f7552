"""
Organization signup API endpoints (no tenant header)
"""

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.database import get_session
from app.core.dependencies import Identity, get_identity
from app.schemas.organization import (
    MyOrganization,
    MyOrganizationList,
    OrganizationCreate,
    OrganizationCreated,
    OrganizationRead,
)
from app.services import organizations as organization_service

router = APIRouter()


@router.post("", response_model=OrganizationCreated, status_code=status.HTTP_201_CREATED)
async def create_organization(
    payload: OrganizationCreate,
    identity: Identity = Depends(get_identity),
    session: AsyncSession = Depends(get_session),
):
    """Create an organization owned by the caller"""
    tenant, membership = await organization_service.create_organization(session, identity, payload)
    return OrganizationCreated(
        tenant=OrganizationRead.model_validate(tenant),
        membership_id=membership.id,
        role=membership.role,
    )


@router.get("/me", response_model=MyOrganizationList)
async def my_organizations(
    identity: Identity = Depends(get_identity),
    session: AsyncSession = Depends(get_session),
):
    """Organizations the caller belongs to"""
    rows = await organization_service.list_my_organizations(session, identity)
    return MyOrganizationList(
        data=[
            MyOrganization(
                membership_id=membership.id,
                role=membership.role,
                tenant=OrganizationRead.model_validate(tenant),
            )
            for membership, tenant in rows
        ]
    )
