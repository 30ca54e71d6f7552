"""
Clients API endpoints, plus branch listing/creation under a client
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from datetime import datetime
from typing import Optional
import uuid
import structlog

from app.core.database import get_session
from app.core.errors import NotFound
from app.core.permissions import MemberContext, require_permission
from app.core.search import PageParams, paginate, search_clause
from app.models.client import Client, ClientBranch
from app.models.quote import Quote
from app.schemas.client import (
    BranchCreate,
    BranchListResponse,
    BranchRead,
    ClientCreate,
    ClientListResponse,
    ClientRead,
    ClientUpdate,
)
from app.schemas.common import OkResponse

logger = structlog.get_logger(__name__)

require_clients_view = require_permission("clients", "view")
router = APIRouter(dependencies=[Depends(require_clients_view)])


async def get_client_or_404(session: AsyncSession, tenant_id: int, client_id: uuid.UUID) -> Client:
    client = (
        await session.exec(select(Client).where(Client.id == client_id, Client.tenant_id == tenant_id))
    ).first()
    if not client:
        raise NotFound("Client not found")
    return client


@router.get("", response_model=ClientListResponse)
async def list_clients(
    search: Optional[str] = Query(None),
    page: PageParams = Depends(),
    member: MemberContext = Depends(require_clients_view),
    session: AsyncSession = Depends(get_session),
):
    """List clients, newest first"""
    query = select(Client).where(Client.tenant_id == member.tenant_id)
    clause = search_clause(search, (Client.name, Client.tax_id, Client.phone, Client.email))
    if clause is not None:
        query = query.where(clause)
    rows, total = await paginate(session, query.order_by(Client.created_at.desc()), page)
    return ClientListResponse(
        data=[ClientRead.model_validate(row) for row in rows],
        total=total,
        page=page.page,
        page_size=page.page_size,
    )


@router.get("/{client_id}", response_model=ClientRead)
async def get_client(
    client_id: uuid.UUID,
    member: MemberContext = Depends(require_clients_view),
    session: AsyncSession = Depends(get_session),
):
    return await get_client_or_404(session, member.tenant_id, client_id)


@router.post("", response_model=ClientRead, status_code=status.HTTP_201_CREATED)
async def create_client(
    payload: ClientCreate,
    member: MemberContext = Depends(require_clients_view),
    session: AsyncSession = Depends(get_session),
):
    try:
        client = Client(tenant_id=member.tenant_id, **payload.model_dump())
        session.add(client)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info("Client created", tenant_id=member.tenant_id, client_id=str(client.id))
    return client


@router.put("/{client_id}", response_model=ClientRead)
async def update_client(
    client_id: uuid.UUID,
    payload: ClientUpdate,
    member: MemberContext = Depends(require_clients_view),
    session: AsyncSession = Depends(get_session),
):
    """Update the fields present in the payload"""
    client = await get_client_or_404(session, member.tenant_id, client_id)
    try:
        for key, value in payload.model_dump(exclude_unset=True).items():
            if key == "name" and value is None:
                continue
            setattr(client, key, value)
        client.updated_at = datetime.utcnow()
        session.add(client)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info("Client updated", tenant_id=member.tenant_id, client_id=str(client_id))
    return client


@router.delete("/{client_id}", response_model=OkResponse)
async def delete_client(
    client_id: uuid.UUID,
    member: MemberContext = Depends(require_clients_view),
    session: AsyncSession = Depends(get_session),
):
    client = await get_client_or_404(session, member.tenant_id, client_id)
    try:
        branches = (
            await session.exec(select(ClientBranch).where(ClientBranch.client_id == client.id))
        ).all()
        for branch in branches:
            await detach_branch_from_quotes(session, branch)
            await session.delete(branch)
        # Quotes keep their name snapshots
        await session.exec(
            update(Quote)
            .where(Quote.tenant_id == member.tenant_id, Quote.customer_id == client.id)
            .values(customer_id=None)
        )
        await session.delete(client)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info("Client deleted", tenant_id=member.tenant_id, client_id=str(client_id))
    return OkResponse()


@router.get("/{client_id}/branches", response_model=BranchListResponse)
async def list_client_branches(
    client_id: uuid.UUID,
    search: Optional[str] = Query(None),
    page: PageParams = Depends(),
    member: MemberContext = Depends(require_clients_view),
    session: AsyncSession = Depends(get_session),
):
    """Branches of one client, by name"""
    await get_client_or_404(session, member.tenant_id, client_id)
    query = select(ClientBranch).where(
        ClientBranch.tenant_id == member.tenant_id, ClientBranch.client_id == client_id
    )
    clause = search_clause(search, (ClientBranch.name, ClientBranch.address))
    if clause is not None:
        query = query.where(clause)
    rows, total = await paginate(session, query.order_by(ClientBranch.name), page)
    return BranchListResponse(
        data=[BranchRead.model_validate(row) for row in rows],
        total=total,
        page=page.page,
        page_size=page.page_size,
    )


@router.post("/{client_id}/branches", response_model=BranchRead, status_code=status.HTTP_201_CREATED)
async def create_client_branch(
    client_id: uuid.UUID,
    payload: BranchCreate,
    member: MemberContext = Depends(require_clients_view),
    session: AsyncSession = Depends(get_session),
):
    await get_client_or_404(session, member.tenant_id, client_id)
    try:
        branch = ClientBranch(tenant_id=member.tenant_id, client_id=client_id, **payload.model_dump())
        session.add(branch)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info("Client branch created", tenant_id=member.tenant_id, branch_id=str(branch.id))
    return branch


async def detach_branch_from_quotes(session: AsyncSession, branch: ClientBranch) -> None:
    """Drop quote references to a branch, keeping its name as snapshot"""
    await session.exec(
        update(Quote)
        .where(Quote.tenant_id == branch.tenant_id, Quote.branch_id == branch.id, Quote.branch_name.is_(None))
        .values(branch_name=branch.name)
    )
    await session.exec(
        update(Quote)
        .where(Quote.tenant_id == branch.tenant_id, Quote.branch_id == branch.id)
        .values(branch_id=None)
    )
