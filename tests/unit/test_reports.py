"""Tests for employee summary and shift-range reports."""
from datetime import datetime

import pytest

from payroll_sync.errors import EmployeeNotFoundError
from payroll_sync.models.payroll import Shift
from payroll_sync.reports.employees import (
    ShiftTotals,
    compute_shift_totals,
    get_employee_shifts,
    list_employees_with_summary,
    parse_range_bound,
)

EMPLOYEE_FIELDS = {
    "first_name": "Ana",
    "last_name": "Silva",
    "email": None,
    "hourly_rate_cents": 2500,
    "active": True,
}


def make_shift(minutes: int, cents: int) -> Shift:
    return Shift(
        external_id=f"S-{minutes}",
        employee_external_id="E-1",
        start_at=datetime(2026, 1, 29, 9),
        end_at=datetime(2026, 1, 29, 17),
        worked_minutes=minutes,
        earnings_cents=cents,
    )


def add_shift(store, external_id, employee, start, end, minutes=60, cents=1000):
    store.upsert_shift(external_id, {
        "employee_external_id": employee,
        "start_at": start,
        "end_at": end,
        "break_minutes": 0,
        "worked_minutes": minutes,
        "earnings_cents": cents,
    })


class TestComputeShiftTotals:
    def test_three_shifts(self):
        shifts = [make_shift(60, 500), make_shift(120, 1000), make_shift(30, 250)]
        assert compute_shift_totals(shifts) == ShiftTotals(
            total_minutes=210, total_hours=3.5, total_earnings_cents=1750
        )

    def test_empty(self):
        assert compute_shift_totals([]) == ShiftTotals(0, 0.0, 0)

    def test_hours_rounded_to_two_decimals(self):
        # 100 / 60 = 1.6666...
        assert compute_shift_totals([make_shift(100, 0)]).total_hours == 1.67

    def test_small_totals(self):
        assert compute_shift_totals([make_shift(3, 0)]).total_hours == 0.05
        # 1 / 60 = 0.01666 -> 0.02
        assert compute_shift_totals([make_shift(1, 0)]).total_hours == 0.02


class TestParseRangeBound:
    def test_blank_is_none(self):
        assert parse_range_bound(None) is None
        assert parse_range_bound("  ") is None

    def test_date_only_is_midnight(self):
        assert parse_range_bound("2026-01-29") == datetime(2026, 1, 29)

    def test_zulu_datetime(self):
        assert parse_range_bound("2026-01-29T09:30:00Z") == datetime(2026, 1, 29, 9, 30)

    def test_offset_converted_to_utc(self):
        assert parse_range_bound("2026-01-29T09:30:00+01:00") == datetime(2026, 1, 29, 8, 30)

    def test_naive_datetime_taken_as_utc(self):
        assert parse_range_bound("2026-01-29T09:30:00") == datetime(2026, 1, 29, 9, 30)

    @pytest.mark.parametrize("value", ["tomorrow", "2026-13-01", "29/01/2026"])
    def test_unparseable_raises(self, value):
        with pytest.raises(ValueError):
            parse_range_bound(value)


class TestListEmployeesWithSummary:
    def test_summary_fields(self, store):
        store.upsert_employee("E-2", EMPLOYEE_FIELDS)
        store.upsert_employee("E-1", EMPLOYEE_FIELDS)
        now = datetime(2026, 2, 1, 12)
        # outside the 7-day window (starts Jan 20)
        add_shift(store, "S-1", "E-1", datetime(2026, 1, 20, 9), datetime(2026, 1, 20, 17), cents=900)
        add_shift(store, "S-2", "E-1", datetime(2026, 1, 30, 9), datetime(2026, 1, 30, 17), cents=1000)
        add_shift(store, "S-3", "E-1", datetime(2026, 1, 31, 9), datetime(2026, 1, 31, 12), cents=400)

        summary = list_employees_with_summary(store, now=now)

        assert [row["external_id"] for row in summary] == ["E-1", "E-2"]
        e1, e2 = summary
        assert e1["recent_earnings_cents"] == 1400
        assert e1["last_shift_end_at"] == datetime(2026, 1, 31, 12)
        assert e2["recent_earnings_cents"] == 0
        assert e2["last_shift_end_at"] is None

    def test_window_days_configurable(self, store):
        store.upsert_employee("E-1", EMPLOYEE_FIELDS)
        add_shift(store, "S-1", "E-1", datetime(2026, 1, 20, 9), datetime(2026, 1, 20, 17), cents=900)
        summary = list_employees_with_summary(store, now=datetime(2026, 2, 1), window_days=30)
        assert summary[0]["recent_earnings_cents"] == 900


class TestGetEmployeeShifts:
    def test_totals_for_range(self, store):
        store.upsert_employee("E-1", EMPLOYEE_FIELDS)
        add_shift(store, "S-1", "E-1", datetime(2026, 1, 5, 9), datetime(2026, 1, 5, 10), 60, 500)
        add_shift(store, "S-2", "E-1", datetime(2026, 1, 6, 9), datetime(2026, 1, 6, 11), 120, 1000)
        add_shift(store, "S-3", "E-1", datetime(2026, 1, 7, 9), datetime(2026, 1, 7, 9, 30), 30, 250)
        add_shift(store, "S-4", "E-1", datetime(2026, 1, 8, 9), datetime(2026, 1, 8, 17), 480, 4000)

        report = get_employee_shifts(
            store, "E-1", datetime(2026, 1, 5), datetime(2026, 1, 8, 9)
        )

        assert [s.external_id for s in report.shifts] == ["S-3", "S-2", "S-1"]
        assert report.totals == ShiftTotals(210, 3.5, 1750)
        assert report.employee.external_id == "E-1"

    def test_unknown_employee(self, store):
        with pytest.raises(EmployeeNotFoundError):
            get_employee_shifts(store, "E-404")

    def test_out_of_order_range(self, store):
        store.upsert_employee("E-1", EMPLOYEE_FIELDS)
        with pytest.raises(ValueError):
            get_employee_shifts(store, "E-1", datetime(2026, 1, 2), datetime(2026, 1, 1))
