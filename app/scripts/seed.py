"""
Seed the permission catalog and the sample product list of the DEFAULT tenant

Run with: python -m app.scripts.seed
"""

import asyncio
from decimal import Decimal
from datetime import datetime
from typing import Dict, List

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
import structlog

from app.core.database import async_session_maker
from app.core.permissions import ensure_permission_catalog
from app.models.product import Product
from app.models.tenant import Tenant

logger = structlog.get_logger(__name__)

DEFAULT_TENANT_SLUG = "default"

# Prices in PYG
SAMPLE_PRODUCTS: List[Dict] = [
    {"sku": "BK002", "name": "CAMBIO DE TELA, PINTURA DE LA ESTRUCTURA Y REPARACION DE LA PARTE ELECTRICA DEL LETRERO BACKLIGHT", "price": Decimal("1300000")},
    {"sku": "BK004", "name": "CADA BACKLIGHT UTILIZA 9 FLUORESCENTES", "price": Decimal("35000")},
    {"sku": "CE001", "name": "PINTURA DE CUADRO DE ESTACIONAMIENTO", "price": Decimal("1200000")},
    {"sku": "CT001", "name": "PINTURA DE CENEFA DEL TINGLADO PRINCIPAL CON PINTURA P.U.", "price": Decimal("105000")},
    {"sku": "LC002", "name": "PINTURA DE LETRA CORPOREO", "price": Decimal("900000")},
    {"sku": "FO004", "name": "CADA FORRO UTILIZA 8 FLUORESCENTES", "price": Decimal("32000")},
    {"sku": "IS004", "name": "PINTURA DE ISLA DE MAQUINA", "price": Decimal("1800000")},
    {"sku": "PF001", "name": "PINTURAS DE FILTROS GRANDE EN PU Y PLOTEADO DE LETRAS", "price": Decimal("550000")},
    {"sku": "PF002", "name": "PINTURAS DE FILTROS CHICO EN PU Y PLOTEADO DE LETRAS", "price": Decimal("450000")},
    {"sku": "PM001", "name": "PINTURA EXTERIOR DE MAQUINA TIPO HON YANG EN TINTURA P.U Y PLOTEOS DE LETRAS POR LA TAPA", "price": Decimal("1300000")},
    {"sku": "TT005", "name": "EL TOTEM UTILIZA 30 FLUORESCENTES", "price": Decimal("32000")},
    {"sku": "LP004", "name": "CONFECCION DE CARTEL DE CHAPA MEDIDAS 1,50 x 1,00 PARA LISTA DE PRECIOS CON NUMEROS MANTADOS Y REFLECTIVOS", "price": Decimal("550000")},
]


async def ensure_default_tenant(session: AsyncSession) -> Tenant:
    tenant = (await session.exec(select(Tenant).where(Tenant.slug == DEFAULT_TENANT_SLUG))).first()
    if tenant is None:
        tenant = Tenant(name="DEFAULT", slug=DEFAULT_TENANT_SLUG)
        session.add(tenant)
        await session.commit()
        logger.info("Default tenant created", tenant_id=tenant.id)
    return tenant


async def seed_products(session: AsyncSession, tenant_id: int) -> dict:
    """Upsert the sample products by sku"""
    created = updated = 0
    try:
        for sample in SAMPLE_PRODUCTS:
            product = (
                await session.exec(
                    select(Product).where(Product.tenant_id == tenant_id, Product.sku == sample["sku"])
                )
            ).first()
            if product is None:
                session.add(Product(tenant_id=tenant_id, unit="UN", **sample))
                created += 1
            else:
                product.name = sample["name"]
                product.price = sample["price"]
                product.unit = "UN"
                product.updated_at = datetime.utcnow()
                session.add(product)
                updated += 1
        await session.commit()
    except Exception as e:
        await session.rollback()
        logger.error(f"Error seeding products: {e}")
        raise

    logger.info("Products seeded", tenant_id=tenant_id, created=created, updated=updated)
    return {"created": created, "updated": updated}


async def main():
    async with async_session_maker() as session:
        await ensure_permission_catalog(session)
        tenant = await ensure_default_tenant(session)
        result = await seed_products(session, tenant.id)
    print(f"Seed completed: {result}")


if __name__ == "__main__":
    asyncio.run(main())
