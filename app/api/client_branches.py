"""
Client branch API endpoints addressed by branch id
"""

from fastapi import APIRouter, Depends
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from datetime import datetime
import uuid
import structlog

from app.core.database import get_session
from app.core.errors import NotFound
from app.core.permissions import MemberContext
from app.models.client import ClientBranch
from app.schemas.client import BranchRead, BranchUpdate
from app.schemas.common import OkResponse
from app.api.clients import detach_branch_from_quotes, require_clients_view

logger = structlog.get_logger(__name__)
router = APIRouter(dependencies=[Depends(require_clients_view)])


async def get_branch_or_404(session: AsyncSession, tenant_id: int, branch_id: uuid.UUID) -> ClientBranch:
    branch = (
        await session.exec(
            select(ClientBranch).where(ClientBranch.id == branch_id, ClientBranch.tenant_id == tenant_id)
        )
    ).first()
    if not branch:
        raise NotFound("Client branch not found")
    return branch


@router.get("/{branch_id}", response_model=BranchRead)
async def get_branch(
    branch_id: uuid.UUID,
    member: MemberContext = Depends(require_clients_view),
    session: AsyncSession = Depends(get_session),
):
    return await get_branch_or_404(session, member.tenant_id, branch_id)


@router.put("/{branch_id}", response_model=BranchRead)
async def update_branch(
    branch_id: uuid.UUID,
    payload: BranchUpdate,
    member: MemberContext = Depends(require_clients_view),
    session: AsyncSession = Depends(get_session),
):
    branch = await get_branch_or_404(session, member.tenant_id, branch_id)
    try:
        for key, value in payload.model_dump(exclude_unset=True).items():
            if key == "name" and value is None:
                continue
            setattr(branch, key, value)
        branch.updated_at = datetime.utcnow()
        session.add(branch)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info("Client branch updated", tenant_id=member.tenant_id, branch_id=str(branch_id))
    return branch


@router.delete("/{branch_id}", response_model=OkResponse)
async def delete_branch(
    branch_id: uuid.UUID,
    member: MemberContext = Depends(require_clients_view),
    session: AsyncSession = Depends(get_session),
):
    branch = await get_branch_or_404(session, member.tenant_id, branch_id)
    try:
        await detach_branch_from_quotes(session, branch)
        await session.delete(branch)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info("Client branch deleted", tenant_id=member.tenant_id, branch_id=str(branch_id))
    return OkResponse()
