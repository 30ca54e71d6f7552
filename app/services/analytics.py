"""
Quote analytics: KPIs, status breakdown, time series, top clients and funnel

Aggregation runs in Python over the filtered rows so the time buckets can
follow the caller's time zone on any database backend.
"""

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from statistics import median
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
import uuid
import structlog

from app.core.errors import ValidationFailed
from app.models.quote import Quote, QuoteStatus, QuoteStatusHistory

logger = structlog.get_logger(__name__)

DEFAULT_RANGE_DAYS = 90
EXPIRING_WINDOW_DAYS = 7
FUNNEL_STAGES = (QuoteStatus.DRAFT, QuoteStatus.OPEN, QuoteStatus.APPROVED, QuoteStatus.INVOICED)
BUCKETS = ("day", "week", "month", "year")


def resolve_timezone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationFailed(f"Unknown time zone: {name}", field="tz")


def bucket_start(moment: datetime, bucket: str, tz: ZoneInfo) -> date:
    """First local day of the bucket containing a naive-UTC timestamp"""
    local = moment.replace(tzinfo=timezone.utc).astimezone(tz).date()
    if bucket == "day":
        return local
    if bucket == "week":
        return local - timedelta(days=local.weekday())
    if bucket == "month":
        return local.replace(day=1)
    return local.replace(month=1, day=1)


def _money(value: Optional[Decimal]) -> Decimal:
    return value if value is not None else Decimal("0")


def _top_clients(rows: List[Quote], key, limit: int) -> List[Dict[str, Any]]:
    clients: Dict[uuid.UUID, Dict[str, Any]] = {}
    for quote in rows:
        if quote.customer_id is None:
            continue
        entry = clients.setdefault(
            quote.customer_id,
            {"client_id": quote.customer_id, "client_name": quote.customer_name, "count": 0, "amount_sum": Decimal("0")},
        )
        entry["count"] += 1
        entry["amount_sum"] += _money(quote.total)
    ranked = sorted(clients.values(), key=key, reverse=True)[:limit]
    return [{**entry, "amount_sum": float(entry["amount_sum"])} for entry in ranked]


async def _lead_time_median_hours(session: AsyncSession, tenant_id: int, quotes: List[Quote]) -> float:
    """Median hours between creation and first approval"""
    created = {q.id: q.created_at for q in quotes}
    if not created:
        return 0.0
    approvals = (
        await session.exec(
            select(QuoteStatusHistory.quote_id, QuoteStatusHistory.created_at)
            .where(
                QuoteStatusHistory.tenant_id == tenant_id,
                QuoteStatusHistory.to_status == QuoteStatus.APPROVED,
                QuoteStatusHistory.quote_id.in_(list(created)),
            )
            .order_by(QuoteStatusHistory.created_at)
        )
    ).all()

    first_approval: Dict[uuid.UUID, datetime] = {}
    for quote_id, approved_at in approvals:
        first_approval.setdefault(quote_id, approved_at)

    hours = [
        (approved_at - created[quote_id]).total_seconds() / 3600
        for quote_id, approved_at in first_approval.items()
    ]
    return round(median(hours), 2) if hours else 0.0


async def quote_analytics(
    session: AsyncSession,
    tenant_id: int,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    tz_name: str = "America/Asuncion",
    bucket: str = "month",
    status: Optional[QuoteStatus] = None,
    client_id: Optional[uuid.UUID] = None,
    top: int = 10,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Aggregate the tenant's quotes created inside [from, to]

    Both bounds are whole days; defaults cover the last 90 days.
    """
    if bucket not in BUCKETS:
        raise ValidationFailed(f"Invalid bucket: {bucket}", field="bucket")
    tz = resolve_timezone(tz_name)
    now = now or datetime.utcnow()

    end = datetime.combine(date_to, time.min) + timedelta(days=1) if date_to else now
    start = datetime.combine(date_from, time.min) if date_from else end - timedelta(days=DEFAULT_RANGE_DAYS)

    period = select(Quote).where(
        Quote.tenant_id == tenant_id,
        Quote.created_at >= start,
        Quote.created_at < end,
    )
    all_rows = list((await session.exec(period.order_by(Quote.created_at))).all())

    rows = all_rows
    if status is not None:
        rows = [q for q in rows if q.status == status]
    if client_id is not None:
        rows = [q for q in rows if q.customer_id == client_id]

    count = len(rows)
    amount_sum = sum((_money(q.total) for q in rows), Decimal("0"))
    approved = sum(1 for q in rows if q.status == QuoteStatus.APPROVED)
    expiring_until = now + timedelta(days=EXPIRING_WINDOW_DAYS)
    expiring = sum(1 for q in rows if q.due_date is not None and now <= q.due_date <= expiring_until)
    expired = sum(
        1 for q in rows if q.due_date is not None and q.due_date < now and q.status != QuoteStatus.APPROVED
    )

    by_status: Dict[QuoteStatus, Dict[str, Any]] = {}
    for q in rows:
        entry = by_status.setdefault(q.status, {"status": q.status.value, "count": 0, "amount_sum": Decimal("0")})
        entry["count"] += 1
        entry["amount_sum"] += _money(q.total)

    by_time: Dict[date, Dict[str, Any]] = {}
    for q in rows:
        key = bucket_start(q.created_at, bucket, tz)
        entry = by_time.setdefault(key, {"bucket": key.isoformat(), "count": 0, "amount_sum": Decimal("0")})
        entry["count"] += 1
        entry["amount_sum"] += _money(q.total)

    funnel = [
        {"stage": stage.value, "count": sum(1 for q in all_rows if q.status == stage)}
        for stage in FUNNEL_STAGES
    ]

    logger.info("Quote analytics computed", tenant_id=tenant_id, count=count, bucket=bucket)

    return {
        "range": {
            "from": start.date().isoformat(),
            "to": (end - timedelta(microseconds=1)).date().isoformat(),
            "tz": tz_name,
            "bucket": bucket,
        },
        "kpis": {
            "count": count,
            "amount_sum": float(amount_sum),
            "avg_ticket": float(amount_sum / count) if count else 0.0,
            "hit_rate": approved / count if count else 0.0,
            "lead_time_median_hours": await _lead_time_median_hours(session, tenant_id, rows),
            "expiring_7d": expiring,
            "expired": expired,
        },
        "by_status": [
            {**entry, "amount_sum": float(entry["amount_sum"])}
            for entry in sorted(by_status.values(), key=lambda e: e["count"], reverse=True)
        ],
        "by_time": [
            {**entry, "amount_sum": float(entry["amount_sum"])} for _, entry in sorted(by_time.items())
        ],
        "top_clients_by_count": _top_clients(all_rows, lambda e: e["count"], top),
        "top_clients_by_amount": _top_clients(all_rows, lambda e: e["amount_sum"], top),
        "funnel": funnel,
        "last_updated": datetime.utcnow().isoformat(),
    }
