"""
Ensure every tenant has the generic "Servicio/Producto Personalizado" product
used as placeholder for custom quote lines

Run with: python -m app.scripts.create_generic_product
"""

import asyncio

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
import structlog

from app.core.database import async_session_maker
from app.models.tenant import Tenant
from app.services.products import ensure_generic_product

logger = structlog.get_logger(__name__)


async def create_generic_products(session: AsyncSession) -> dict:
    tenants = (await session.exec(select(Tenant).order_by(Tenant.id))).all()
    if not tenants:
        logger.info("No tenants found")
        return {"tenants": 0, "created": 0}

    created = 0
    for tenant in tenants:
        _, was_created = await ensure_generic_product(session, tenant.id)
        if was_created:
            created += 1
        else:
            logger.info("Generic product already present", tenant_id=tenant.id, tenant=tenant.name)

    return {"tenants": len(tenants), "created": created}


async def main():
    async with async_session_maker() as session:
        result = await create_generic_products(session)
    print(f"Generic products: {result}")


if __name__ == "__main__":
    asyncio.run(main())
