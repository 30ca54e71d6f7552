"""
Public (unauthenticated) endpoints
"""

from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.database import get_session
from app.schemas.quote import PublicQuoteRead
from app.services.public_quotes import get_public_quote

router = APIRouter()


@router.get("/quotes/{public_id}", response_model=PublicQuoteRead)
async def read_public_quote(public_id: str, session: AsyncSession = Depends(get_session)):
    """Read-only quote view for holders of the public link"""
    return await get_public_quote(session, public_id)
