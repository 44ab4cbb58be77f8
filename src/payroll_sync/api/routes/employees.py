"""Employee query routes."""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from payroll_sync.api.deps import get_store
from payroll_sync.config import get_settings
from payroll_sync.errors import EmployeeNotFoundError
from payroll_sync.reports.employees import (
    get_employee_shifts,
    list_employees_with_summary,
    parse_range_bound,
)
from payroll_sync.sync.store import SyncStore

router = APIRouter()


class RangeResponse(BaseModel):
    start_from: Optional[datetime]
    start_to: Optional[datetime]


class TotalsResponse(BaseModel):
    total_minutes: int
    total_hours: float
    total_earnings_cents: int


class EmployeeResponse(BaseModel):
    id: int
    external_id: str
    first_name: str
    last_name: str
    email: Optional[str]
    hourly_rate_cents: int
    active: bool


class EmployeeSummaryResponse(EmployeeResponse):
    last_shift_end_at: Optional[datetime]
    recent_earnings_cents: int


class ShiftResponse(BaseModel):
    id: int
    external_id: str
    employee_external_id: str
    start_at: datetime
    end_at: datetime
    break_minutes: int
    worked_minutes: int
    earnings_cents: int


class EmployeeShiftsResponse(BaseModel):
    employee: EmployeeResponse
    range: RangeResponse
    shifts: List[ShiftResponse]
    totals: TotalsResponse


@router.get("", response_model=List[EmployeeSummaryResponse])
def list_employees(store: SyncStore = Depends(get_store)):
    """All employees with last shift end and trailing earnings."""
    return list_employees_with_summary(
        store, window_days=get_settings().summary_window_days
    )


@router.get("/{external_id}/shifts", response_model=EmployeeShiftsResponse)
def employee_shifts(
    external_id: str,
    start_from: Optional[str] = Query(None, alias="from"),
    start_to: Optional[str] = Query(None, alias="to"),
    store: SyncStore = Depends(get_store),
):
    """
    Shifts of one employee starting in [from, to), newest first, with totals.

    `from` and `to` are ISO dates or date-times; both are optional.
    """
    external_id = external_id.strip()
    if not external_id:
        raise HTTPException(status_code=400, detail="Invalid employee external_id")

    try:
        lower = parse_range_bound(start_from)
        upper = parse_range_bound(start_to)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid from/to date")

    try:
        report = get_employee_shifts(store, external_id, lower, upper)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except EmployeeNotFoundError:
        raise HTTPException(status_code=404, detail="Employee not found")

    return {
        "employee": report.employee,
        "range": {"start_from": report.start_from, "start_to": report.start_to},
        "shifts": report.shifts,
        "totals": report.totals.to_dict(),
    }
