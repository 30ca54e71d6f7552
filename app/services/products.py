"""
Product catalog helpers
"""

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from decimal import Decimal
from typing import Tuple
import structlog

from app.models.product import GENERIC_PRODUCT_SKU, Product

logger = structlog.get_logger(__name__)

GENERIC_PRODUCT_NAME = "Servicio/Producto Personalizado"
GENERIC_PRODUCT_DESCRIPTION = (
    "Producto genérico para items personalizados en presupuestos. "
    "La descripción y precio se definen en cada presupuesto."
)


def build_generic_product(tenant_id: int) -> Product:
    return Product(
        tenant_id=tenant_id,
        sku=GENERIC_PRODUCT_SKU,
        name=GENERIC_PRODUCT_NAME,
        description=GENERIC_PRODUCT_DESCRIPTION,
        unit="UN",
        price=Decimal("0"),
        cost=Decimal("0"),
        tax_rate=Decimal("0.1"),
        price_includes_tax=False,
        stock=None,
        min_stock=None,
    )


async def ensure_generic_product(session: AsyncSession, tenant_id: int) -> Tuple[Product, bool]:
    """Return the tenant's ad-hoc line item product, creating it on first use"""
    product = (
        await session.exec(
            select(Product).where(Product.tenant_id == tenant_id, Product.sku == GENERIC_PRODUCT_SKU)
        )
    ).first()
    if product is not None:
        return product, False

    product = build_generic_product(tenant_id)
    try:
        session.add(product)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info("Generic product created", tenant_id=tenant_id, product_id=str(product.id))
    return product, True
