"""Employee and shift models, keyed for reconciliation by external_id."""
from datetime import datetime
from typing import Optional

from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel


def naive_utc_column(**kwargs) -> Column:
    """Timezone-less DATETIME column; values are naive UTC."""
    return Column(DateTime(timezone=False), **kwargs)


class Employee(SQLModel, table=True):
    """One row per provider employee. Replaced wholesale on every re-sync."""

    id: Optional[int] = Field(default=None, primary_key=True)
    external_id: str = Field(unique=True, index=True)
    first_name: str = ""
    last_name: str = ""
    email: Optional[str] = None  # always lower-cased
    hourly_rate_cents: int
    active: bool = True

    created_at: datetime = Field(
        default_factory=datetime.utcnow, sa_column=naive_utc_column(nullable=False)
    )


class Shift(SQLModel, table=True):
    """
    One row per worked shift.

    worked_minutes and earnings_cents are derived at sync time from the
    shift times and the owning employee's hourly rate.
    """

    id: Optional[int] = Field(default=None, primary_key=True)
    external_id: str = Field(unique=True, index=True)
    employee_external_id: str = Field(foreign_key="employee.external_id", index=True)

    start_at: datetime = Field(sa_column=naive_utc_column(index=True, nullable=False))
    end_at: datetime = Field(sa_column=naive_utc_column(nullable=False))  # strictly after start_at
    break_minutes: int = 0

    worked_minutes: int
    earnings_cents: int

    created_at: datetime = Field(
        default_factory=datetime.utcnow, sa_column=naive_utc_column(nullable=False)
    )
