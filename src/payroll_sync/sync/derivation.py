"""
Worked-time and earnings derivation for shifts.

All arithmetic is on integers: minutes and minor currency units (cents).
Earnings round half-up to the nearest cent.
"""
from datetime import datetime
from typing import NamedTuple


class ShiftDerivation(NamedTuple):
    worked_minutes: int
    earnings_cents: int


def worked_minutes(start_at: datetime, end_at: datetime, break_minutes: int) -> int:
    """
    Whole minutes between start and end, less the unpaid break.

    Partial minutes are dropped before the break is subtracted. Never
    negative: a break longer than the shift yields 0.
    """
    duration = int((end_at - start_at).total_seconds() // 60)
    return max(0, duration - break_minutes)


def earnings_cents(worked: int, hourly_rate_cents: int) -> int:
    """
    round(worked * hourly_rate_cents / 60), rounding halves up.

    >>> earnings_cents(450, 2500)
    18750
    >>> earnings_cents(1, 90)  # 1.5 cents
    2
    """
    # floor((2n + d) / 2d) == floor(n/d + 1/2) for non-negative n
    return (2 * worked * hourly_rate_cents + 60) // 120


def derive_shift(
    start_at: datetime,
    end_at: datetime,
    break_minutes: int,
    hourly_rate_cents: int,
) -> ShiftDerivation:
    """Compute the derived columns of a shift for the owning employee's rate."""
    minutes = worked_minutes(start_at, end_at, break_minutes)
    return ShiftDerivation(
        worked_minutes=minutes,
        earnings_cents=earnings_cents(minutes, hourly_rate_cents),
    )
