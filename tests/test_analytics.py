"""
Tests for quote analytics
"""

import pytest
from datetime import date, datetime, timedelta
from decimal import Decimal
from zoneinfo import ZoneInfo
import uuid

from app.core.errors import ValidationFailed
from app.models.client import Client
from app.models.quote import Quote, QuoteStatus, QuoteStatusHistory
from app.services.analytics import bucket_start, quote_analytics

NOW = datetime(2026, 3, 20, 12, 0)
ASUNCION = ZoneInfo("America/Asuncion")


@pytest.fixture
def add_quote(db):
    sequence = iter(range(1, 1000))

    async def _add_quote(tenant_id, created_at, total, status=QuoteStatus.DRAFT, customer=None, due_date=None):
        quote = Quote(
            tenant_id=tenant_id,
            sequence=next(sequence),
            status=status,
            customer_id=customer.id if customer else None,
            customer_name=customer.name if customer else "Mostrador",
            total=Decimal(total),
            due_date=due_date,
            public_id=str(uuid.uuid4()),
            created_at=created_at,
        )
        db.add(quote)
        await db.commit()
        return quote

    return _add_quote


def test_bucket_start_uses_local_time():
    # 02:00 UTC on the 1st is still the previous day in Asunción
    moment = datetime(2026, 3, 1, 2, 0)
    assert bucket_start(moment, "day", ASUNCION) == date(2026, 2, 28)
    assert bucket_start(moment, "month", ASUNCION) == date(2026, 2, 1)
    assert bucket_start(moment, "year", ASUNCION) == date(2026, 1, 1)
    assert bucket_start(datetime(2026, 3, 19, 15, 0), "week", ASUNCION) == date(2026, 3, 16)


@pytest.mark.asyncio
async def test_kpis_and_breakdowns(db, owner, add_quote):
    tenant_id = owner.tenant.id
    customer = Client(tenant_id=tenant_id, name="Constructora Sur")
    db.add(customer)
    await db.commit()

    approved = await add_quote(tenant_id, NOW - timedelta(days=10), "300", QuoteStatus.APPROVED, customer)
    await add_quote(tenant_id, NOW - timedelta(days=5), "100", QuoteStatus.OPEN, customer, NOW + timedelta(days=3))
    await add_quote(tenant_id, NOW - timedelta(days=2), "200", QuoteStatus.DRAFT, None, NOW - timedelta(days=1))
    await add_quote(tenant_id, NOW - timedelta(days=200), "999", QuoteStatus.APPROVED)

    db.add(QuoteStatusHistory(
        tenant_id=tenant_id,
        quote_id=approved.id,
        from_status=QuoteStatus.OPEN,
        to_status=QuoteStatus.APPROVED,
        changed_by="test",
        created_at=approved.created_at + timedelta(hours=36),
    ))
    await db.commit()

    result = await quote_analytics(db, tenant_id, bucket="month", now=NOW)

    kpis = result["kpis"]
    assert kpis["count"] == 3
    assert kpis["amount_sum"] == 600.0
    assert kpis["avg_ticket"] == 200.0
    assert kpis["hit_rate"] == pytest.approx(1 / 3)
    assert kpis["lead_time_median_hours"] == 36.0
    assert kpis["expiring_7d"] == 1
    assert kpis["expired"] == 1

    assert {row["status"]: row["count"] for row in result["by_status"]} == {"APPROVED": 1, "OPEN": 1, "DRAFT": 1}
    assert [row["bucket"] for row in result["by_time"]] == ["2026-03-01"]
    assert result["top_clients_by_amount"][0] == {
        "client_id": customer.id,
        "client_name": "Constructora Sur",
        "count": 2,
        "amount_sum": 400.0,
    }
    funnel = {stage["stage"]: stage["count"] for stage in result["funnel"]}
    assert funnel == {"DRAFT": 1, "OPEN": 1, "APPROVED": 1, "INVOICED": 0}


@pytest.mark.asyncio
async def test_explicit_range_and_filters(db, owner, add_quote):
    tenant_id = owner.tenant.id
    await add_quote(tenant_id, datetime(2026, 1, 10, 15), "50", QuoteStatus.OPEN)
    await add_quote(tenant_id, datetime(2026, 1, 31, 23), "70", QuoteStatus.APPROVED)
    await add_quote(tenant_id, datetime(2026, 2, 1, 1), "90", QuoteStatus.APPROVED)

    january = await quote_analytics(db, tenant_id, date(2026, 1, 1), date(2026, 1, 31), tz_name="UTC", now=NOW)
    assert january["kpis"]["count"] == 2
    assert january["range"]["to"] == "2026-01-31"

    approved = await quote_analytics(
        db, tenant_id, date(2026, 1, 1), date(2026, 2, 28), status=QuoteStatus.APPROVED, bucket="day", now=NOW
    )
    assert approved["kpis"]["count"] == 2
    assert approved["kpis"]["hit_rate"] == 1.0


@pytest.mark.asyncio
async def test_other_tenants_are_ignored(db, owner, make_member, add_quote):
    other = await make_member()
    await add_quote(other.tenant.id, NOW - timedelta(days=1), "500")

    result = await quote_analytics(db, owner.tenant.id, now=NOW)
    assert result["kpis"]["count"] == 0
    assert result["kpis"]["avg_ticket"] == 0.0


@pytest.mark.asyncio
async def test_unknown_timezone(db, owner):
    with pytest.raises(ValidationFailed):
        await quote_analytics(db, owner.tenant.id, tz_name="Mars/Olympus")


@pytest.mark.asyncio
async def test_analytics_endpoint(client, owner):
    await client.post("/quotes", json={"customer_name": "Cliente"}, headers=owner.headers)

    response = await client.get(
        "/analytics/quotes", params={"bucket": "week", "tz": "UTC"}, headers=owner.headers
    )

    assert response.status_code == 200
    assert response.headers["cache-control"] == "max-age=60"
    assert response.json()["kpis"]["count"] == 1


@pytest.mark.asyncio
async def test_analytics_rejects_bad_bucket(client, owner):
    response = await client.get("/analytics/quotes", params={"bucket": "hour"}, headers=owner.headers)
    assert response.status_code == 400
