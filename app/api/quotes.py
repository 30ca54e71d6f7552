"""
Quotes API endpoints
"""

from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession
from typing import List, Optional
import uuid
import structlog

from app.core.database import get_session
from app.core.errors import ValidationFailed
from app.core.permissions import MemberContext, require_permission
from app.core.search import PageParams
from app.models.quote import QuoteStatus
from app.schemas.common import OkResponse
from app.schemas.quote import (
    PublicLinkRead,
    PublicLinkToggle,
    QuoteCreate,
    QuoteListResponse,
    QuoteRead,
    QuoteStatusChange,
    QuoteStatusHistoryRead,
    QuoteUpdate,
)
from app.services import quotes as quote_service

logger = structlog.get_logger(__name__)

require_quotes_view = require_permission("quotes", "view")
router = APIRouter(dependencies=[Depends(require_quotes_view)])


def parse_status_filter(value: Optional[str]) -> Optional[QuoteStatus]:
    if not value:
        return None
    try:
        return QuoteStatus(value)
    except ValueError:
        raise ValidationFailed(f"Invalid status: {value}", field="status")


@router.get("", response_model=QuoteListResponse)
async def list_quotes(
    search: Optional[str] = Query(None, description="Whitespace separated search terms"),
    status_filter: Optional[str] = Query(None, alias="status"),
    page: PageParams = Depends(),
    member: MemberContext = Depends(require_quotes_view),
    session: AsyncSession = Depends(get_session),
):
    """List quotes, newest first"""
    rows, total = await quote_service.list_quotes(
        session, member.tenant_id, page, search=search, status=parse_status_filter(status_filter)
    )
    data = await quote_service.serialize_quotes(session, rows)
    return QuoteListResponse(data=data, total=total, page=page.page, page_size=page.page_size)


@router.post("", response_model=QuoteRead, status_code=status.HTTP_201_CREATED)
async def create_quote(
    payload: QuoteCreate,
    member: MemberContext = Depends(require_quotes_view),
    session: AsyncSession = Depends(get_session),
):
    """Create a quote with items and additional charges"""
    quote = await quote_service.create_quote(session, member.tenant_id, payload, member.identity.actor)
    return await quote_service.serialize_quote(session, quote)


@router.get("/{quote_id}", response_model=QuoteRead)
async def get_quote(
    quote_id: uuid.UUID,
    member: MemberContext = Depends(require_quotes_view),
    session: AsyncSession = Depends(get_session),
):
    quote = await quote_service.get_quote_or_404(session, member.tenant_id, quote_id)
    return await quote_service.serialize_quote(session, quote)


@router.put("/{quote_id}", response_model=QuoteRead)
@router.patch("/{quote_id}", response_model=QuoteRead)
async def update_quote(
    quote_id: uuid.UUID,
    payload: QuoteUpdate,
    member: MemberContext = Depends(require_quotes_view),
    session: AsyncSession = Depends(get_session),
):
    """Partially update a quote; items and additional_charges are replaced when sent"""
    quote = await quote_service.update_quote(session, member.tenant_id, quote_id, payload, member.identity.actor)
    return await quote_service.serialize_quote(session, quote)


@router.delete("/{quote_id}", response_model=OkResponse)
async def delete_quote(
    quote_id: uuid.UUID,
    member: MemberContext = Depends(require_quotes_view),
    session: AsyncSession = Depends(get_session),
):
    await quote_service.delete_quote(session, member.tenant_id, quote_id)
    return OkResponse()


@router.patch("/{quote_id}/status", response_model=QuoteRead)
async def change_quote_status(
    quote_id: uuid.UUID,
    payload: QuoteStatusChange,
    member: MemberContext = Depends(require_quotes_view),
    session: AsyncSession = Depends(get_session),
):
    """Change the status and record the transition"""
    quote = await quote_service.change_status(
        session, member.tenant_id, quote_id, payload.status, payload.reason, member.identity.actor
    )
    return await quote_service.serialize_quote(session, quote)


@router.get("/{quote_id}/status-history", response_model=List[QuoteStatusHistoryRead])
async def get_status_history(
    quote_id: uuid.UUID,
    member: MemberContext = Depends(require_quotes_view),
    session: AsyncSession = Depends(get_session),
):
    return await quote_service.list_status_history(session, member.tenant_id, quote_id)


@router.post("/{quote_id}/public/enable", response_model=PublicLinkRead)
async def set_public_enabled(
    quote_id: uuid.UUID,
    payload: PublicLinkToggle,
    member: MemberContext = Depends(require_quotes_view),
    session: AsyncSession = Depends(get_session),
):
    """Enable or disable the public link"""
    return await quote_service.set_public_enabled(session, member.tenant_id, quote_id, payload.enabled)


@router.post("/{quote_id}/regenerate-public-link", response_model=PublicLinkRead)
async def regenerate_public_link(
    quote_id: uuid.UUID,
    member: MemberContext = Depends(require_quotes_view),
    session: AsyncSession = Depends(get_session),
):
    """Issue a new public id and enable the link"""
    return await quote_service.regenerate_public_link(session, member.tenant_id, quote_id)
