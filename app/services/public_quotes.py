"""
Unauthenticated quote access by opaque public id
"""

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from typing import Any, Dict

from app.core.errors import NotFound
from app.models.quote import Quote
from app.services.quotes import branch_names, load_children
from app.services.sanitize import sanitize_quote


async def get_public_quote(session: AsyncSession, public_id: str) -> Dict[str, Any]:
    """
    Sanitized quote for a public id

    Disabled links and unknown ids raise the same error so callers cannot
    tell them apart.
    """
    quote = (
        await session.exec(
            select(Quote).where(Quote.public_id == public_id, Quote.public_enabled == True)  # noqa: E712
        )
    ).first()
    if quote is None:
        raise NotFound("Public quote not found")

    items, charges = await load_children(session, [quote.id])
    names = await branch_names(session, [quote])
    view = sanitize_quote(quote, items[quote.id], charges[quote.id])
    view["branch_name"] = quote.branch_name or names.get(quote.branch_id)
    return view
