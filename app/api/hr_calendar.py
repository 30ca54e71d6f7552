"""
HR calendar API endpoints
"""

from fastapi import APIRouter, Depends, Query
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from datetime import date
from typing import List
import uuid

from app.core.database import get_session
from app.core.permissions import MemberContext, require_permission
from app.models.employee import Employee
from app.schemas.hr import CalendarWeek, EmployeeCard, ScheduleRead, ScheduleUpsert
from app.services import hr_calendar as calendar_service

require_hr_view = require_permission("hr-calendar", "view")
router = APIRouter(dependencies=[Depends(require_hr_view)])


@router.get("/calendar/week", response_model=CalendarWeek)
async def get_calendar_week(
    start: date = Query(..., description="First day of the week (YYYY-MM-DD)"),
    member: MemberContext = Depends(require_hr_view),
    session: AsyncSession = Depends(get_session),
):
    """Employees with schedules and advances for 7 days from start"""
    return await calendar_service.get_week(session, member.tenant_id, start)


@router.put("/calendar/week/{employee_id}/{day}", response_model=ScheduleRead)
async def upsert_schedule(
    employee_id: uuid.UUID,
    day: date,
    payload: ScheduleUpsert,
    member: MemberContext = Depends(require_hr_view),
    session: AsyncSession = Depends(get_session),
):
    """Create or replace an employee's schedule for one day"""
    return await calendar_service.upsert_schedule(session, member.tenant_id, employee_id, day, payload)


@router.get("/employees", response_model=List[EmployeeCard])
async def list_employees(
    member: MemberContext = Depends(require_hr_view),
    session: AsyncSession = Depends(get_session),
):
    employees = (
        await session.exec(
            select(Employee)
            .where(Employee.tenant_id == member.tenant_id)
            .order_by(Employee.first_name, Employee.last_name)
        )
    ).all()
    return [EmployeeCard.model_validate(employee) for employee in employees]
