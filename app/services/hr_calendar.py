"""
Weekly HR calendar: schedules, overtime and cash advances per employee
"""

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional
import uuid
import structlog

from app.core.config import get_settings
from app.core.errors import NotFound
from app.models.employee import Employee, EmployeeAdvance, EmployeeSchedule
from app.schemas.hr import AdvanceRead, ScheduleUpsert

logger = structlog.get_logger(__name__)
settings = get_settings()

WEEK_DAYS = 7


def schedule_view(schedule: EmployeeSchedule, advances: List[EmployeeAdvance]) -> Dict[str, Any]:
    return {
        "id": schedule.id,
        "employee_id": schedule.employee_id,
        "date": schedule.date,
        "clock_in": schedule.clock_in,
        "clock_out": schedule.clock_out,
        "day_type": schedule.day_type,
        "overtime_minutes": schedule.overtime_minutes,
        "notes": schedule.notes,
        "advances": [AdvanceRead.model_validate(advance) for advance in advances],
    }


async def _advances_by_schedule(
    session: AsyncSession, tenant_id: int, schedule_ids: List[uuid.UUID]
) -> Dict[uuid.UUID, List[EmployeeAdvance]]:
    grouped: Dict[uuid.UUID, List[EmployeeAdvance]] = {schedule_id: [] for schedule_id in schedule_ids}
    if not schedule_ids:
        return grouped
    rows = (
        await session.exec(
            select(EmployeeAdvance)
            .where(EmployeeAdvance.tenant_id == tenant_id, EmployeeAdvance.schedule_id.in_(schedule_ids))
            .order_by(EmployeeAdvance.issued_at)
        )
    ).all()
    for advance in rows:
        grouped[advance.schedule_id].append(advance)
    return grouped


async def get_week(session: AsyncSession, tenant_id: int, start: date) -> Dict[str, Any]:
    """
    Employees with their schedules for the 7 days starting at start

    Each employee carries a summary: overtime hours (1 decimal), number of
    advances and their sum.
    """
    end = start + timedelta(days=WEEK_DAYS - 1)

    employees = (
        await session.exec(
            select(Employee).where(Employee.tenant_id == tenant_id).order_by(Employee.first_name, Employee.last_name)
        )
    ).all()
    schedules = (
        await session.exec(
            select(EmployeeSchedule)
            .where(
                EmployeeSchedule.tenant_id == tenant_id,
                EmployeeSchedule.date >= start,
                EmployeeSchedule.date <= end,
            )
            .order_by(EmployeeSchedule.date)
        )
    ).all()
    advances = await _advances_by_schedule(session, tenant_id, [s.id for s in schedules])

    by_employee: Dict[uuid.UUID, List[EmployeeSchedule]] = {}
    for schedule in schedules:
        by_employee.setdefault(schedule.employee_id, []).append(schedule)

    week = []
    for employee in employees:
        own = by_employee.get(employee.id, [])
        own_advances = [advance for schedule in own for advance in advances[schedule.id]]
        overtime_minutes = sum(schedule.overtime_minutes for schedule in own)
        advance_total = sum((advance.amount for advance in own_advances), Decimal("0"))

        week.append({
            "id": employee.id,
            "first_name": employee.first_name,
            "last_name": employee.last_name,
            "full_name": employee.full_name,
            "avatar_url": employee.avatar_url,
            "schedules": [schedule_view(schedule, advances[schedule.id]) for schedule in own],
            "summary": {
                "overtime_hours": round(overtime_minutes / 60, 1),
                "advance_count": len(own_advances),
                "advance_total": float(advance_total),
            },
        })

    return {"start": start, "end": end, "employees": week}


async def upsert_schedule(
    session: AsyncSession,
    tenant_id: int,
    employee_id: uuid.UUID,
    day: date,
    payload: ScheduleUpsert,
) -> Dict[str, Any]:
    """Create or replace one employee's schedule for a day, with its advance"""
    employee = (
        await session.exec(select(Employee).where(Employee.id == employee_id, Employee.tenant_id == tenant_id))
    ).first()
    if employee is None:
        raise NotFound("Employee not found")

    try:
        schedule = (
            await session.exec(
                select(EmployeeSchedule).where(
                    EmployeeSchedule.tenant_id == tenant_id,
                    EmployeeSchedule.employee_id == employee_id,
                    EmployeeSchedule.date == day,
                )
            )
        ).first()
        if schedule is None:
            schedule = EmployeeSchedule(tenant_id=tenant_id, employee_id=employee_id, date=day)
        else:
            schedule.updated_at = datetime.utcnow()

        schedule.clock_in = payload.clock_in
        schedule.clock_out = payload.clock_out
        schedule.day_type = payload.day_type
        schedule.overtime_minutes = payload.overtime_minutes
        schedule.notes = payload.notes
        session.add(schedule)
        await session.flush()

        advance: Optional[EmployeeAdvance] = None
        if payload.advance_amount is not None and payload.advance_amount > 0:
            advance = (
                await session.exec(
                    select(EmployeeAdvance).where(
                        EmployeeAdvance.tenant_id == tenant_id,
                        EmployeeAdvance.employee_id == employee_id,
                        EmployeeAdvance.schedule_id == schedule.id,
                    )
                )
            ).first()
            if advance is None:
                advance = EmployeeAdvance(
                    tenant_id=tenant_id,
                    employee_id=employee_id,
                    schedule_id=schedule.id,
                    amount=payload.advance_amount,
                    currency=settings.DEFAULT_ADVANCE_CURRENCY,
                    reason=payload.advance_reason,
                )
            else:
                advance.amount = payload.advance_amount
                if payload.advance_reason is not None:
                    advance.reason = payload.advance_reason
            session.add(advance)

        await session.commit()
    except Exception:
        await session.rollback()
        raise

    if advance is not None:
        advances = [advance]
    else:
        advances = (await _advances_by_schedule(session, tenant_id, [schedule.id]))[schedule.id]

    logger.info(
        "Schedule saved",
        tenant_id=tenant_id,
        employee_id=str(employee_id),
        date=day.isoformat(),
        day_type=schedule.day_type.value,
        advance=str(payload.advance_amount) if advance else None,
    )
    return schedule_view(schedule, advances)
