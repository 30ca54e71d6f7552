"""
HR scheduling models: employees, daily schedules and cash advances
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import UniqueConstraint
from decimal import Decimal
from datetime import date as date_type, datetime
from typing import Optional
from enum import Enum
import uuid


class DayType(str, Enum):
    """Classification of a schedule day"""
    WORKDAY = "workday"
    ABSENT = "absent"
    DAY_OFF = "day_off"
    NON_WORKING = "non_working"
    HOLIDAY = "holiday"


class Employee(SQLModel, table=True):
    """Employee with tenant isolation"""

    __tablename__ = "employees"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    tenant_id: int = Field(foreign_key="tenants.id", index=True)

    first_name: str = Field(max_length=100, index=True)
    last_name: str = Field(max_length=100)
    email: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    avatar_url: Optional[str] = Field(default=None, max_length=500)
    monthly_salary: Optional[Decimal] = Field(default=None, max_digits=14, decimal_places=2)
    default_shift_start: Optional[str] = Field(default=None, max_length=5, description="HH:MM")
    default_shift_end: Optional[str] = Field(default=None, max_length=5, description="HH:MM")

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class EmployeeSchedule(SQLModel, table=True):
    """One employee's clock-in/out and classification for one day"""

    __tablename__ = "employee_schedules"
    __table_args__ = (
        UniqueConstraint("tenant_id", "employee_id", "date", name="uq_schedule_employee_date"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    tenant_id: int = Field(foreign_key="tenants.id", index=True)
    employee_id: uuid.UUID = Field(foreign_key="employees.id", index=True)
    date: date_type = Field(index=True)

    clock_in: Optional[str] = Field(default=None, max_length=5)
    clock_out: Optional[str] = Field(default=None, max_length=5)
    day_type: DayType = Field(default=DayType.WORKDAY)
    overtime_minutes: int = Field(default=0)
    notes: Optional[str] = Field(default=None, max_length=1000)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None


class EmployeeAdvance(SQLModel, table=True):
    """Cash advance paid on a schedule day"""

    __tablename__ = "employee_advances"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    tenant_id: int = Field(foreign_key="tenants.id", index=True)
    employee_id: uuid.UUID = Field(foreign_key="employees.id", index=True)
    schedule_id: Optional[uuid.UUID] = Field(default=None, foreign_key="employee_schedules.id", index=True)

    amount: Decimal = Field(max_digits=14, decimal_places=2)
    currency: str = Field(default="PYG", max_length=3)
    reason: Optional[str] = Field(default=None, max_length=500)
    issued_at: datetime = Field(default_factory=datetime.utcnow)
