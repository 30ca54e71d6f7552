"""
Quote analytics API endpoint
"""

from fastapi import APIRouter, Depends, Query, Response
from sqlmodel.ext.asyncio.session import AsyncSession
from datetime import date
from typing import Literal, Optional
import uuid

from app.core.database import get_session
from app.core.permissions import MemberContext
from app.services.analytics import quote_analytics
from app.api.quotes import parse_status_filter, require_quotes_view

router = APIRouter(dependencies=[Depends(require_quotes_view)])


@router.get("/quotes")
async def get_quote_analytics(
    response: Response,
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to"),
    tz: str = Query("America/Asuncion"),
    bucket: Literal["day", "week", "month", "year"] = Query("month"),
    status_filter: Optional[str] = Query(None, alias="status"),
    client_id: Optional[uuid.UUID] = Query(None),
    top: int = Query(10, ge=1, le=100),
    member: MemberContext = Depends(require_quotes_view),
    session: AsyncSession = Depends(get_session),
):
    """KPIs, breakdowns and funnel for quotes created in the range"""
    result = await quote_analytics(
        session,
        member.tenant_id,
        date_from=date_from,
        date_to=date_to,
        tz_name=tz,
        bucket=bucket,
        status=parse_status_filter(status_filter),
        client_id=client_id,
        top=top,
    )
    response.headers["Cache-Control"] = "max-age=60"
    return result
