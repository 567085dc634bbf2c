# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Target working-time calculation.

All functions here are pure: holiday dates are passed in by the caller,
nothing touches the database.
"""

from calendar import monthrange
from collections.abc import Collection, Iterator, Mapping
from dataclasses import dataclass
from datetime import date, time, timedelta

WEEKDAY_KEYS = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


@dataclass(frozen=True)
class WorkProfile:
    """Contract data needed to compute target hours."""

    weekly_hours: float
    work_schedule: Mapping[str, float] | None = None
    hire_date: date | None = None
    end_date: date | None = None


def daily_target_hours(profile: WorkProfile, day: date) -> float:
    """Return the contracted hours for a single calendar day.

    Weekends never carry target hours. With a per-weekday schedule the
    value for the weekday is used as is; otherwise the weekly hours are
    spread evenly over Monday to Friday.

    Args:
        profile: The employee's contract data.
        day: The day to look up.

    Returns:
        Target hours for the day, rounded to 2 decimals. Holidays and
        employment dates are not considered here.
    """
    weekday = day.weekday()
    if weekday >= 5:
        return 0.0
    if profile.work_schedule:
        return round(float(profile.work_schedule.get(WEEKDAY_KEYS[weekday]) or 0), 2)
    return round(profile.weekly_hours / 5, 2)


def is_active(profile: WorkProfile, day: date) -> bool:
    """Check whether the employee is employed on the given day."""
    if profile.hire_date and day < profile.hire_date:
        return False
    if profile.end_date and day > profile.end_date:
        return False
    return True


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every calendar day from start to end inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def working_days(
    profile: WorkProfile,
    start: date,
    end: date,
    holidays: Collection[date],
    excluded: Collection[date] | None = None,
) -> Iterator[date]:
    """Yield the days in a range that carry target hours.

    A day counts when the employee is active, it is not a weekend or a
    holiday, its scheduled hours are positive and it is not in ``excluded``.
    """
    for day in iter_days(start, end):
        if not is_active(profile, day):
            continue
        if day in holidays:
            continue
        if excluded and day in excluded:
            continue
        if daily_target_hours(profile, day) <= 0:
            continue
        yield day


def count_working_days(
    profile: WorkProfile,
    start: date,
    end: date,
    holidays: Collection[date],
    excluded: Collection[date] | None = None,
) -> int:
    """Count the working days in a range (see working_days)."""
    return sum(1 for _ in working_days(profile, start, end, holidays, excluded))


def calculate_target_hours(
    profile: WorkProfile,
    start: date,
    end: date,
    holidays: Collection[date],
    excluded: Collection[date] | None = None,
) -> float:
    """Calculate the target hours for a date range.

    Args:
        profile: The employee's contract data. Days before the hire date or
            after the end date contribute nothing.
        start: First day of the range.
        end: Last day of the range (inclusive).
        holidays: Non-working dates for the spanned years.
        excluded: Additional dates without target, e.g. approved unpaid leave.

    Returns:
        Total target hours rounded to 2 decimals. An inverted range yields 0.
    """
    total = sum(
        daily_target_hours(profile, day)
        for day in working_days(profile, start, end, holidays, excluded)
    )
    return round(total, 2)


def month_bounds(month: str) -> tuple[date, date]:
    """Return first and last day of a ``YYYY-MM`` month string.

    Raises:
        ValueError: If the string is not a valid month.
    """
    try:
        year_str, month_str = month.split("-")
        year, month_no = int(year_str), int(month_str)
        _, last_day = monthrange(year, month_no)
    except (ValueError, TypeError):
        raise ValueError(f"Invalid month '{month}', expected YYYY-MM") from None
    return date(year, month_no, 1), date(year, month_no, last_day)


def month_key(day: date) -> str:
    """Format the month of a date as ``YYYY-MM``."""
    return f"{day.year:04d}-{day.month:02d}"


def calculate_hours(start_time: time, end_time: time, break_minutes: int) -> float:
    """Calculate net working hours from start/end time and breaks.

    Args:
        start_time: Start of work.
        end_time: End of work, must be after start.
        break_minutes: Unpaid break in minutes.

    Returns:
        Net hours rounded to 2 decimals.
    """
    start_minutes = start_time.hour * 60 + start_time.minute
    end_minutes = end_time.hour * 60 + end_time.minute
    net_minutes = end_minutes - start_minutes - (break_minutes or 0)
    return round(net_minutes / 60, 2)
