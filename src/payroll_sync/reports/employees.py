"""
Read-side reports over synced employees and shifts.

Nothing here writes to the store. Timestamps are naive UTC throughout,
matching what the sync engine persists.
"""
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional, Sequence

from payroll_sync.errors import EmployeeNotFoundError
from payroll_sync.models.payroll import Employee, Shift
from payroll_sync.sync.store import SyncStore, utcnow

_DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True)
class ShiftTotals:
    total_minutes: int
    total_hours: float  # rounded half-up to 2 decimals
    total_earnings_cents: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_minutes": self.total_minutes,
            "total_hours": self.total_hours,
            "total_earnings_cents": self.total_earnings_cents,
        }


@dataclass(frozen=True)
class EmployeeShifts:
    employee: Employee
    start_from: Optional[datetime]
    start_to: Optional[datetime]
    shifts: List[Shift]
    totals: ShiftTotals


def parse_range_bound(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a query range bound.

    Accepts a date ("2026-01-29", midnight UTC) or an ISO-8601 date-time with
    or without an offset (no offset means UTC).

    Returns:
        Naive UTC datetime, or None for a missing/blank value.

    Raises:
        ValueError: if the value cannot be parsed.
    """
    if value is None or not value.strip():
        return None
    text = value.strip()
    if _DATE_ONLY_RE.match(text):
        return datetime.strptime(text, "%Y-%m-%d")
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def compute_shift_totals(shifts: Sequence[Shift]) -> ShiftTotals:
    """Sum worked minutes and earnings; hours are minutes / 60 to 2 decimals."""
    total_minutes = sum(s.worked_minutes or 0 for s in shifts)
    total_earnings = sum(s.earnings_cents or 0 for s in shifts)
    hours = (Decimal(total_minutes) / Decimal(60)).quantize(
        Decimal("0.01"), rounding=ROUND_HALF_UP
    )
    return ShiftTotals(
        total_minutes=total_minutes,
        total_hours=float(hours),
        total_earnings_cents=total_earnings,
    )


def list_employees_with_summary(
    store: SyncStore,
    now: Optional[datetime] = None,
    window_days: int = 7,
) -> List[Dict[str, Any]]:
    """
    Every employee with their last shift end and trailing earnings.

    Args:
        store: SyncStore to read from.
        now: Reference time (naive UTC); defaults to the current time.
        window_days: Length of the trailing earnings window.

    Returns:
        One dict per employee, ordered by external_id, holding the employee
        columns plus `last_shift_end_at` (latest end over all shifts, or None)
        and `recent_earnings_cents` (earnings of shifts starting inside
        the window, 0 when none).
    """
    now = now or utcnow()
    since = now - timedelta(days=window_days)

    employees = store.list_employees()
    last_ends = store.last_shift_end_by_employee()
    earnings = store.earnings_since_by_employee(since)

    return [
        {
            **emp.model_dump(exclude={"created_at"}),
            "last_shift_end_at": last_ends.get(emp.external_id),
            "recent_earnings_cents": earnings.get(emp.external_id, 0),
        }
        for emp in employees
    ]


def get_employee_shifts(
    store: SyncStore,
    external_id: str,
    start_from: Optional[datetime] = None,
    start_to: Optional[datetime] = None,
) -> EmployeeShifts:
    """
    One employee's shifts starting in [start_from, start_to), with totals.

    Raises:
        ValueError: if both bounds are given and start_to <= start_from.
        EmployeeNotFoundError: if no employee has this external id.
    """
    if start_from is not None and start_to is not None and start_to <= start_from:
        raise ValueError("`to` must be after `from`")

    employee = store.find_employee_by_external_id(external_id)
    if employee is None:
        raise EmployeeNotFoundError(f"Employee not found: {external_id}")

    shifts = store.list_shifts_for_employee(external_id, start_from, start_to)
    return EmployeeShifts(
        employee=employee,
        start_from=start_from,
        start_to=start_to,
        shifts=shifts,
        totals=compute_shift_totals(shifts),
    )
