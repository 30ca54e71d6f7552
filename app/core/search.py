"""
Free-text search and pagination helpers for collection endpoints
"""

from fastapi import Query
from sqlalchemy import and_, or_
from sqlmodel import func, select
from sqlmodel.ext.asyncio.session import AsyncSession
from typing import Any, List, Optional, Sequence, Tuple


def tokenize_search(search: Optional[str]) -> List[str]:
    """Split on whitespace, dropping empty tokens"""
    return [token for token in (search or "").split() if token]


def search_clause(search: Optional[str], columns: Sequence[Any]):
    """AND across tokens, OR across columns, case-insensitive substring match"""
    tokens = tokenize_search(search)
    if not tokens:
        return None
    return and_(
        *[
            or_(*[column.icontains(token, autoescape=True) for column in columns])
            for token in tokens
        ]
    )


class PageParams:
    """page / pageSize query parameters"""

    def __init__(
        self,
        page: int = Query(1, ge=1, description="1-based page number"),
        page_size: int = Query(20, ge=1, le=100, alias="pageSize", description="Rows per page"),
    ):
        self.page = page
        self.page_size = page_size

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


async def paginate(session: AsyncSession, query, params: PageParams) -> Tuple[list, int]:
    """Run a filtered select for one page plus the total row count"""
    total = (
        await session.exec(select(func.count()).select_from(query.order_by(None).subquery()))
    ).one()
    rows = (await session.exec(query.offset(params.offset).limit(params.page_size))).all()
    return list(rows), int(total)
