"""
Pydantic schemas for the HR calendar
"""

from pydantic import BaseModel, Field
from datetime import date as date_type, datetime
from decimal import Decimal
from typing import List, Optional
import uuid

from app.models.employee import DayType
from app.schemas.common import Number

HHMM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class ScheduleUpsert(BaseModel):
    """Schedule of one employee for one day"""
    clock_in: Optional[str] = Field(default=None, pattern=HHMM_PATTERN)
    clock_out: Optional[str] = Field(default=None, pattern=HHMM_PATTERN)
    day_type: DayType = DayType.WORKDAY
    overtime_minutes: int = Field(default=0, ge=0)
    notes: Optional[str] = Field(default=None, max_length=1000)
    advance_amount: Optional[Decimal] = Field(default=None, ge=0)
    advance_reason: Optional[str] = Field(default=None, max_length=500)


class AdvanceRead(BaseModel):
    id: uuid.UUID
    amount: Number = None
    currency: str
    reason: Optional[str] = None
    issued_at: datetime

    class Config:
        from_attributes = True


class ScheduleRead(BaseModel):
    id: uuid.UUID
    employee_id: uuid.UUID
    date: date_type
    clock_in: Optional[str] = None
    clock_out: Optional[str] = None
    day_type: DayType
    overtime_minutes: int
    notes: Optional[str] = None
    advances: List[AdvanceRead] = Field(default_factory=list)


class EmployeeWeekSummary(BaseModel):
    overtime_hours: float
    advance_count: int
    advance_total: float


class EmployeeWeek(BaseModel):
    id: uuid.UUID
    first_name: str
    last_name: str
    full_name: str
    avatar_url: Optional[str] = None
    schedules: List[ScheduleRead]
    summary: EmployeeWeekSummary


class CalendarWeek(BaseModel):
    start: date_type
    end: date_type
    employees: List[EmployeeWeek]


class EmployeeCard(BaseModel):
    id: uuid.UUID
    first_name: str
    last_name: str
    full_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    monthly_salary: Number = None
    default_shift_start: Optional[str] = None
    default_shift_end: Optional[str] = None

    class Config:
        from_attributes = True
