"""
Quote lifecycle: aggregate create/update/delete, status transitions with
history, and public link management.

Every mutating operation runs in the request session and commits once at the
end; any failure rolls the session back and propagates.
"""

from sqlalchemy import delete, update
from sqlmodel import func, select
from sqlmodel.ext.asyncio.session import AsyncSession
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple
import uuid
import structlog

from app.core.errors import NotFound, ValidationFailed
from app.core.search import PageParams, paginate, search_clause
from app.models.client import Client, ClientBranch
from app.models.quote import (
    Quote,
    QuoteAdditionalCharge,
    QuoteItem,
    QuoteStatus,
    QuoteStatusHistory,
)
from app.schemas.quote import (
    AdditionalChargeInput,
    AdditionalChargeRead,
    QuoteCreate,
    QuoteItemInput,
    QuoteItemRead,
    QuoteRead,
    QuoteUpdate,
)
from app.services.totals import compute_totals

logger = structlog.get_logger(__name__)

QUOTE_SEARCH_COLUMNS = (Quote.customer_name, Quote.branch_name, Quote.number)


def new_public_id() -> str:
    """Opaque, unguessable public identifier"""
    return str(uuid.uuid4())


def format_quote_number(sequence: int) -> str:
    return f"{sequence:06d}"


async def next_sequence(session: AsyncSession, tenant_id: int) -> int:
    current = (
        await session.exec(select(func.max(Quote.sequence)).where(Quote.tenant_id == tenant_id))
    ).one()
    return (current or 0) + 1


async def get_quote_or_404(
    session: AsyncSession, tenant_id: int, quote_id: uuid.UUID, for_update: bool = False
) -> Quote:
    query = select(Quote).where(Quote.id == quote_id, Quote.tenant_id == tenant_id)
    if for_update:
        query = query.with_for_update()
    quote = (await session.exec(query)).first()
    if not quote:
        raise NotFound("Quote not found")
    return quote


async def load_children(
    session: AsyncSession, quote_ids: Sequence[uuid.UUID]
) -> Tuple[Dict[uuid.UUID, List[QuoteItem]], Dict[uuid.UUID, List[QuoteAdditionalCharge]]]:
    """Items and charges of several quotes, grouped by quote id"""
    items: Dict[uuid.UUID, List[QuoteItem]] = {quote_id: [] for quote_id in quote_ids}
    charges: Dict[uuid.UUID, List[QuoteAdditionalCharge]] = {quote_id: [] for quote_id in quote_ids}
    if not quote_ids:
        return items, charges

    item_rows = (
        await session.exec(
            select(QuoteItem)
            .where(QuoteItem.quote_id.in_(quote_ids))
            .order_by(QuoteItem.position)
        )
    ).all()
    for item in item_rows:
        items[item.quote_id].append(item)

    charge_rows = (
        await session.exec(
            select(QuoteAdditionalCharge)
            .where(QuoteAdditionalCharge.quote_id.in_(quote_ids))
            .order_by(QuoteAdditionalCharge.position)
        )
    ).all()
    for charge in charge_rows:
        charges[charge.quote_id].append(charge)

    return items, charges


async def branch_names(session: AsyncSession, quotes: Iterable[Quote]) -> Dict[uuid.UUID, str]:
    """Current names of the branches referenced by quotes lacking a snapshot"""
    branch_ids = {q.branch_id for q in quotes if q.branch_id and not q.branch_name}
    if not branch_ids:
        return {}
    rows = (
        await session.exec(select(ClientBranch.id, ClientBranch.name).where(ClientBranch.id.in_(branch_ids)))
    ).all()
    return {branch_id: name for branch_id, name in rows}


def to_quote_read(
    quote: Quote,
    items: Iterable[QuoteItem],
    charges: Iterable[QuoteAdditionalCharge],
    fallback_branch_name: Optional[str] = None,
) -> QuoteRead:
    data = quote.model_dump()
    data["branch_name"] = quote.branch_name or fallback_branch_name
    data["items"] = [QuoteItemRead.model_validate(item) for item in items]
    data["additional_charges"] = [AdditionalChargeRead.model_validate(charge) for charge in charges]
    return QuoteRead(**data)


async def serialize_quote(session: AsyncSession, quote: Quote) -> QuoteRead:
    """Rehydrate a quote with its children and resolved branch name"""
    items, charges = await load_children(session, [quote.id])
    names = await branch_names(session, [quote])
    return to_quote_read(quote, items[quote.id], charges[quote.id], names.get(quote.branch_id))


async def serialize_quotes(session: AsyncSession, quotes: Sequence[Quote]) -> List[QuoteRead]:
    ids = [q.id for q in quotes]
    items, charges = await load_children(session, ids)
    names = await branch_names(session, quotes)
    return [to_quote_read(q, items[q.id], charges[q.id], names.get(q.branch_id)) for q in quotes]


async def _check_references(
    session: AsyncSession, tenant_id: int, customer_id: Optional[uuid.UUID], branch_id: Optional[uuid.UUID]
) -> None:
    if customer_id:
        found = (
            await session.exec(select(Client.id).where(Client.id == customer_id, Client.tenant_id == tenant_id))
        ).first()
        if found is None:
            raise ValidationFailed("Unknown customer_id", field="customer_id")
    if branch_id:
        found = (
            await session.exec(
                select(ClientBranch.id).where(ClientBranch.id == branch_id, ClientBranch.tenant_id == tenant_id)
            )
        ).first()
        if found is None:
            raise ValidationFailed("Unknown branch_id", field="branch_id")


def _build_items(tenant_id: int, quote_id: uuid.UUID, payload: Sequence[QuoteItemInput]) -> List[QuoteItem]:
    return [
        QuoteItem(
            tenant_id=tenant_id,
            quote_id=quote_id,
            product_id=item.product_id,
            description=item.description,
            quantity=item.quantity,
            unit_price=item.unit_price,
            discount=item.discount,
            tax_rate=item.tax_rate,
            position=position,
        )
        for position, item in enumerate(payload)
    ]


def _build_charges(
    tenant_id: int, quote_id: uuid.UUID, payload: Sequence[AdditionalChargeInput]
) -> List[QuoteAdditionalCharge]:
    return [
        QuoteAdditionalCharge(
            tenant_id=tenant_id,
            quote_id=quote_id,
            type=charge.type,
            amount=charge.amount,
            position=position,
        )
        for position, charge in enumerate(payload)
    ]


def _apply_totals(quote: Quote, items: Sequence[Any], charges: Sequence[Any]) -> None:
    totals = compute_totals(items, charges)
    quote.subtotal = totals.subtotal
    quote.tax_total = totals.tax_total
    quote.discount_total = totals.discount_total
    quote.total = totals.total


async def create_quote(session: AsyncSession, tenant_id: int, payload: QuoteCreate, actor: str) -> Quote:
    """
    Create a quote with its items and additional charges

    Assigns the next per-tenant number and a fresh public id; the initial
    status is recorded as the first history entry.
    """
    await _check_references(session, tenant_id, payload.customer_id, payload.branch_id)

    try:
        sequence = await next_sequence(session, tenant_id)
        quote = Quote(
            tenant_id=tenant_id,
            sequence=sequence,
            number=format_quote_number(sequence),
            status=payload.status or QuoteStatus.DRAFT,
            customer_id=payload.customer_id,
            customer_name=payload.customer_name,
            branch_id=payload.branch_id,
            branch_name=payload.branch_name,
            issue_date=payload.issue_date,
            due_date=payload.due_date,
            currency=payload.currency,
            notes=payload.notes,
            print_notes=payload.print_notes,
            public_id=new_public_id(),
            public_enabled=True,
        )
        items = _build_items(tenant_id, quote.id, payload.items)
        charges = _build_charges(tenant_id, quote.id, payload.additional_charges or [])
        _apply_totals(quote, items, charges)

        session.add(quote)
        # Parent row first so child foreign keys resolve
        await session.flush()
        session.add_all(items)
        session.add_all(charges)
        session.add(
            QuoteStatusHistory(
                tenant_id=tenant_id,
                quote_id=quote.id,
                from_status=None,
                to_status=quote.status,
                changed_by=actor,
            )
        )
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info("Quote created", tenant_id=tenant_id, quote_id=str(quote.id), number=quote.number)
    return quote


async def update_quote(
    session: AsyncSession, tenant_id: int, quote_id: uuid.UUID, payload: QuoteUpdate, actor: str
) -> Quote:
    """
    Partially update a quote

    Supplied items / additional_charges replace the stored set. Totals are
    recomputed from the effective children whenever either set is replaced.
    """
    quote = await get_quote_or_404(session, tenant_id, quote_id, for_update=True)

    fields = payload.model_fields_set
    replace_items = "items" in fields and payload.items is not None
    replace_charges = "additional_charges" in fields and payload.additional_charges is not None

    await _check_references(
        session,
        tenant_id,
        payload.customer_id if "customer_id" in fields else None,
        payload.branch_id if "branch_id" in fields else None,
    )

    try:
        scalars = payload.model_dump(
            include=fields - {"items", "additional_charges", "status"}, exclude_unset=True
        )
        for key, value in scalars.items():
            if key == "customer_name" and value is None:
                continue
            setattr(quote, key, value)

        previous_status = quote.status
        if "status" in fields and payload.status is not None and payload.status != previous_status:
            quote.status = payload.status
            session.add(
                QuoteStatusHistory(
                    tenant_id=tenant_id,
                    quote_id=quote.id,
                    from_status=previous_status,
                    to_status=payload.status,
                    changed_by=actor,
                )
            )

        if replace_items or replace_charges:
            stored_items, stored_charges = await load_children(session, [quote.id])

            if replace_items:
                await session.exec(
                    delete(QuoteItem).where(QuoteItem.quote_id == quote.id, QuoteItem.tenant_id == tenant_id)
                )
                items = _build_items(tenant_id, quote.id, payload.items)
                session.add_all(items)
            else:
                items = stored_items[quote.id]

            if replace_charges:
                await session.exec(
                    delete(QuoteAdditionalCharge).where(
                        QuoteAdditionalCharge.quote_id == quote.id,
                        QuoteAdditionalCharge.tenant_id == tenant_id,
                    )
                )
                charges = _build_charges(tenant_id, quote.id, payload.additional_charges)
                session.add_all(charges)
            else:
                charges = stored_charges[quote.id]

            _apply_totals(quote, items, charges)

        quote.updated_at = datetime.utcnow()
        session.add(quote)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info(
        "Quote updated",
        tenant_id=tenant_id,
        quote_id=str(quote.id),
        replaced_items=replace_items,
        replaced_charges=replace_charges,
    )
    return quote


async def delete_quote(session: AsyncSession, tenant_id: int, quote_id: uuid.UUID) -> None:
    """Delete a quote together with its items, charges and history"""
    try:
        for child in (QuoteItem, QuoteAdditionalCharge, QuoteStatusHistory):
            await session.exec(delete(child).where(child.quote_id == quote_id, child.tenant_id == tenant_id))
        result = await session.exec(delete(Quote).where(Quote.id == quote_id, Quote.tenant_id == tenant_id))
        if result.rowcount == 0:
            raise NotFound("Quote not found")
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info("Quote deleted", tenant_id=tenant_id, quote_id=str(quote_id))


async def change_status(
    session: AsyncSession,
    tenant_id: int,
    quote_id: uuid.UUID,
    new_status: QuoteStatus,
    reason: Optional[str],
    actor: str,
) -> Quote:
    """Set the status and append the transition to the history"""
    quote = await get_quote_or_404(session, tenant_id, quote_id, for_update=True)
    from_status = quote.status

    try:
        quote.status = new_status
        quote.updated_at = datetime.utcnow()
        session.add(quote)
        session.add(
            QuoteStatusHistory(
                tenant_id=tenant_id,
                quote_id=quote.id,
                from_status=from_status,
                to_status=new_status,
                reason=reason,
                changed_by=actor,
            )
        )
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info(
        "Quote status changed",
        tenant_id=tenant_id,
        quote_id=str(quote.id),
        from_status=from_status.value,
        to_status=new_status.value,
        actor=actor,
    )
    return quote


async def _update_public_link(
    session: AsyncSession, tenant_id: int, quote_id: uuid.UUID, **values: Any
) -> Dict[str, Any]:
    try:
        result = await session.exec(
            update(Quote)
            .where(Quote.id == quote_id, Quote.tenant_id == tenant_id)
            .values(updated_at=datetime.utcnow(), **values)
        )
        if result.rowcount == 0:
            raise NotFound("Quote not found")
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    link_id, public_id, public_enabled = (
        await session.exec(
            select(Quote.id, Quote.public_id, Quote.public_enabled).where(
                Quote.id == quote_id, Quote.tenant_id == tenant_id
            )
        )
    ).one()
    return {"id": link_id, "public_id": public_id, "public_enabled": public_enabled}


async def set_public_enabled(
    session: AsyncSession, tenant_id: int, quote_id: uuid.UUID, enabled: bool
) -> Dict[str, Any]:
    link = await _update_public_link(session, tenant_id, quote_id, public_enabled=enabled)
    logger.info("Quote public link toggled", tenant_id=tenant_id, quote_id=str(quote_id), enabled=enabled)
    return link


async def regenerate_public_link(session: AsyncSession, tenant_id: int, quote_id: uuid.UUID) -> Dict[str, Any]:
    """Issue a new public id; the previous one stops resolving"""
    link = await _update_public_link(
        session, tenant_id, quote_id, public_id=new_public_id(), public_enabled=True
    )
    logger.info("Quote public link regenerated", tenant_id=tenant_id, quote_id=str(quote_id))
    return link


async def list_quotes(
    session: AsyncSession,
    tenant_id: int,
    params: PageParams,
    search: Optional[str] = None,
    status: Optional[QuoteStatus] = None,
) -> Tuple[List[Quote], int]:
    """Tenant quotes, newest first"""
    query = select(Quote).where(Quote.tenant_id == tenant_id)
    clause = search_clause(search, QUOTE_SEARCH_COLUMNS)
    if clause is not None:
        query = query.where(clause)
    if status is not None:
        query = query.where(Quote.status == status)
    query = query.order_by(Quote.created_at.desc(), Quote.sequence.desc())
    return await paginate(session, query, params)


async def list_status_history(
    session: AsyncSession, tenant_id: int, quote_id: uuid.UUID
) -> List[QuoteStatusHistory]:
    await get_quote_or_404(session, tenant_id, quote_id)
    rows = (
        await session.exec(
            select(QuoteStatusHistory)
            .where(QuoteStatusHistory.quote_id == quote_id, QuoteStatusHistory.tenant_id == tenant_id)
            .order_by(QuoteStatusHistory.created_at, QuoteStatusHistory.id)
        )
    ).all()
    return list(rows)
