"""
Product templates API endpoints
"""

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import func, select
from sqlmodel.ext.asyncio.session import AsyncSession
from datetime import datetime
from typing import Optional
import uuid
import structlog

from app.core.database import get_session
from app.core.errors import NotFound, ValidationFailed
from app.core.permissions import MemberContext
from app.core.search import PageParams, paginate, search_clause
from app.models.product import Product, ProductTemplate
from app.schemas.common import OkResponse
from app.schemas.product import (
    ProductTemplateCreate,
    ProductTemplateListResponse,
    ProductTemplateRead,
    ProductTemplateUpdate,
)
from app.api.products import require_products_view

logger = structlog.get_logger(__name__)
router = APIRouter(dependencies=[Depends(require_products_view)])


async def get_template_or_404(session: AsyncSession, tenant_id: int, template_id: uuid.UUID) -> ProductTemplate:
    template = (
        await session.exec(
            select(ProductTemplate).where(ProductTemplate.id == template_id, ProductTemplate.tenant_id == tenant_id)
        )
    ).first()
    if not template:
        raise NotFound("Product template not found")
    return template


@router.get("", response_model=ProductTemplateListResponse)
async def list_templates(
    search: Optional[str] = Query(None),
    page: PageParams = Depends(),
    member: MemberContext = Depends(require_products_view),
    session: AsyncSession = Depends(get_session),
):
    """List templates by name"""
    query = select(ProductTemplate).where(ProductTemplate.tenant_id == member.tenant_id)
    clause = search_clause(search, (ProductTemplate.name,))
    if clause is not None:
        query = query.where(clause)
    rows, total = await paginate(session, query.order_by(ProductTemplate.name), page)
    return ProductTemplateListResponse(
        data=[ProductTemplateRead.model_validate(row) for row in rows],
        total=total,
        page=page.page,
        page_size=page.page_size,
    )


@router.get("/{template_id}", response_model=ProductTemplateRead)
async def get_template(
    template_id: uuid.UUID,
    member: MemberContext = Depends(require_products_view),
    session: AsyncSession = Depends(get_session),
):
    return await get_template_or_404(session, member.tenant_id, template_id)


@router.post("", response_model=ProductTemplateRead, status_code=status.HTTP_201_CREATED)
async def create_template(
    payload: ProductTemplateCreate,
    member: MemberContext = Depends(require_products_view),
    session: AsyncSession = Depends(get_session),
):
    try:
        template = ProductTemplate(tenant_id=member.tenant_id, name=payload.name, attributes=payload.attributes)
        session.add(template)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info("Product template created", tenant_id=member.tenant_id, template_id=str(template.id))
    return template


@router.put("/{template_id}", response_model=ProductTemplateRead)
async def update_template(
    template_id: uuid.UUID,
    payload: ProductTemplateUpdate,
    member: MemberContext = Depends(require_products_view),
    session: AsyncSession = Depends(get_session),
):
    template = await get_template_or_404(session, member.tenant_id, template_id)
    try:
        if payload.name is not None:
            template.name = payload.name
        if payload.attributes is not None:
            template.attributes = payload.attributes
        template.updated_at = datetime.utcnow()
        session.add(template)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info("Product template updated", tenant_id=member.tenant_id, template_id=str(template_id))
    return template


@router.delete("/{template_id}", response_model=OkResponse)
async def delete_template(
    template_id: uuid.UUID,
    member: MemberContext = Depends(require_products_view),
    session: AsyncSession = Depends(get_session),
):
    """Delete a template no product uses"""
    template = await get_template_or_404(session, member.tenant_id, template_id)
    in_use = (
        await session.exec(
            select(func.count(Product.id)).where(
                Product.tenant_id == member.tenant_id, Product.template_id == template.id
            )
        )
    ).one()
    if in_use:
        raise ValidationFailed(
            "Template is used by existing products", code="template_in_use", products=in_use
        )

    try:
        await session.delete(template)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info("Product template deleted", tenant_id=member.tenant_id, template_id=str(template_id))
    return OkResponse()
