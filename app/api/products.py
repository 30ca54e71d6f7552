"""
Products API endpoints
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
from app.core.errors import NotFound, ValidationFailed
from app.core.permissions import MemberContext, require_permission
from app.core.search import PageParams, paginate, search_clause
from app.models.product import Product, ProductTemplate
from app.models.quote import QuoteItem
from app.schemas.common import OkResponse
from app.schemas.product import ProductCreate, ProductListResponse, ProductRead, ProductUpdate
from app.services.products import ensure_generic_product

logger = structlog.get_logger(__name__)

require_products_view = require_permission("products", "view")
router = APIRouter(dependencies=[Depends(require_products_view)])


async def get_product_or_404(session: AsyncSession, tenant_id: int, product_id: uuid.UUID) -> Product:
    product = (
        await session.exec(select(Product).where(Product.id == product_id, Product.tenant_id == tenant_id))
    ).first()
    if not product:
        raise NotFound("Product not found")
    return product


async def check_template(session: AsyncSession, tenant_id: int, template_id: Optional[uuid.UUID]) -> None:
    if template_id is None:
        return
    found = (
        await session.exec(
            select(ProductTemplate.id).where(ProductTemplate.id == template_id, ProductTemplate.tenant_id == tenant_id)
        )
    ).first()
    if found is None:
        raise ValidationFailed("Unknown template_id", field="template_id")


@router.get("/generic", response_model=ProductRead)
async def get_generic_product(
    member: MemberContext = Depends(require_products_view),
    session: AsyncSession = Depends(get_session),
):
    """Placeholder product for ad-hoc quote lines, created on first use"""
    product, _ = await ensure_generic_product(session, member.tenant_id)
    return product


@router.get("", response_model=ProductListResponse)
async def list_products(
    search: Optional[str] = Query(None, description="Matches name, sku and unit"),
    page: PageParams = Depends(),
    member: MemberContext = Depends(require_products_view),
    session: AsyncSession = Depends(get_session),
):
    """List products, newest first"""
    query = select(Product).where(Product.tenant_id == member.tenant_id)
    clause = search_clause(search, (Product.name, Product.sku, Product.unit))
    if clause is not None:
        query = query.where(clause)
    rows, total = await paginate(session, query.order_by(Product.created_at.desc()), page)
    return ProductListResponse(
        data=[ProductRead.model_validate(row) for row in rows],
        total=total,
        page=page.page,
        page_size=page.page_size,
    )


@router.get("/{product_id}", response_model=ProductRead)
async def get_product(
    product_id: uuid.UUID,
    member: MemberContext = Depends(require_products_view),
    session: AsyncSession = Depends(get_session),
):
    return await get_product_or_404(session, member.tenant_id, product_id)


@router.post("", response_model=ProductRead, status_code=status.HTTP_201_CREATED)
async def create_product(
    payload: ProductCreate,
    member: MemberContext = Depends(require_products_view),
    session: AsyncSession = Depends(get_session),
):
    await check_template(session, member.tenant_id, payload.template_id)
    try:
        product = Product(tenant_id=member.tenant_id, **payload.model_dump())
        session.add(product)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info("Product created", tenant_id=member.tenant_id, product_id=str(product.id))
    return product


@router.put("/{product_id}", response_model=ProductRead)
async def update_product(
    product_id: uuid.UUID,
    payload: ProductUpdate,
    member: MemberContext = Depends(require_products_view),
    session: AsyncSession = Depends(get_session),
):
    """Update the fields present in the payload"""
    product = await get_product_or_404(session, member.tenant_id, product_id)
    changes = payload.model_dump(exclude_unset=True)
    if "template_id" in changes:
        await check_template(session, member.tenant_id, changes["template_id"])

    try:
        for key, value in changes.items():
            if key in ("name", "price", "price_includes_tax") and value is None:
                continue
            setattr(product, key, value)
        product.updated_at = datetime.utcnow()
        session.add(product)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info("Product updated", tenant_id=member.tenant_id, product_id=str(product_id))
    return product


@router.delete("/{product_id}", response_model=OkResponse)
async def delete_product(
    product_id: uuid.UUID,
    member: MemberContext = Depends(require_products_view),
    session: AsyncSession = Depends(get_session),
):
    product = await get_product_or_404(session, member.tenant_id, product_id)
    try:
        # Quote lines keep their own description and price
        await session.exec(
            update(QuoteItem)
            .where(QuoteItem.tenant_id == member.tenant_id, QuoteItem.product_id == product.id)
            .values(product_id=None)
        )
        await session.delete(product)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info("Product deleted", tenant_id=member.tenant_id, product_id=str(product_id))
    return OkResponse()
