"""
Tests for maintenance scripts
"""

import pytest
from sqlmodel import func, select

from app.models.product import GENERIC_PRODUCT_SKU, Product
from app.scripts.create_generic_product import create_generic_products
from app.scripts.seed import SAMPLE_PRODUCTS, ensure_default_tenant, seed_products


@pytest.mark.asyncio
async def test_generic_products_for_every_tenant(db, make_tenant):
    await make_tenant()
    await make_tenant()

    first = await create_generic_products(db)
    second = await create_generic_products(db)

    assert first == {"tenants": 2, "created": 2}
    assert second == {"tenants": 2, "created": 0}
    count = (await db.exec(select(func.count(Product.id)).where(Product.sku == GENERIC_PRODUCT_SKU))).one()
    assert count == 2


@pytest.mark.asyncio
async def test_no_tenants(db):
    assert await create_generic_products(db) == {"tenants": 0, "created": 0}


@pytest.mark.asyncio
async def test_seed_is_idempotent(db):
    tenant = await ensure_default_tenant(db)
    assert (await ensure_default_tenant(db)).id == tenant.id

    first = await seed_products(db, tenant.id)
    second = await seed_products(db, tenant.id)

    assert first == {"created": len(SAMPLE_PRODUCTS), "updated": 0}
    assert second == {"created": 0, "updated": len(SAMPLE_PRODUCTS)}
