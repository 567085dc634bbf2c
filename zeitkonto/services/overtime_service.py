# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Monthly overtime aggregation.

One MonthlyOvertimeBalance row caches target and actual hours per
employee and month. Rows are built lazily on first read and deleted
whenever their inputs change; they are never patched in place.
"""

import logging
import uuid
from collections.abc import Collection, Iterable
from datetime import date

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from zeitkonto.config import settings
from zeitkonto.database import atomic
from zeitkonto.models import (
    AbsenceRequest,
    AbsenceStatus,
    AbsenceType,
    Employee,
    MonthlyOvertimeBalance,
    OvertimeTransaction,
    ReferenceType,
    TimeEntry,
    TransactionType,
    UnpaidLeavePolicy,
)
from zeitkonto.schemas.overtime import MonthlyOvertime, OvertimeSummary
from zeitkonto.services import employee_service, ledger_service
from zeitkonto.services.absence_credits import build_absence_transactions
from zeitkonto.services.holiday_service import (
    HolidayProvider,
    get_holiday_provider,
    holiday_dates,
)
from zeitkonto.services.working_time import (
    calculate_target_hours,
    daily_target_hours,
    iter_days,
    month_bounds,
    month_key,
    working_days,
)

logger = logging.getLogger(__name__)

# Ledger rows regenerated from approved absences by rebuild_ledger; the
# corrections are the reversals written when an approved absence is cancelled
DERIVED_TRANSACTION_TYPES = (
    TransactionType.CORRECTION,
    TransactionType.SICK_CREDIT,
    TransactionType.OVERTIME_COMP_CREDIT,
    TransactionType.COMPENSATION,
    TransactionType.UNPAID_ADJUSTMENT,
)
DERIVED_REFERENCE_TYPES = (ReferenceType.ABSENCE,)


def get_approved_absences(
    db: Session,
    user_id: uuid.UUID,
    start: date,
    end: date,
    types: Iterable[AbsenceType] | None = None,
) -> list[AbsenceRequest]:
    """Get approved absences overlapping a date range."""
    query = db.query(AbsenceRequest).filter(
        AbsenceRequest.user_id == user_id,
        AbsenceRequest.status == AbsenceStatus.APPROVED,
        AbsenceRequest.start_date <= end,
        AbsenceRequest.end_date >= start,
    )
    if types:
        query = query.filter(AbsenceRequest.type.in_(list(types)))
    return query.order_by(AbsenceRequest.start_date).all()


def _absence_dates(
    absences: Iterable[AbsenceRequest], start: date, end: date
) -> set[date]:
    result: set[date] = set()
    for absence in absences:
        result.update(
            iter_days(max(absence.start_date, start), min(absence.end_date, end))
        )
    return result


def _unreflected_entry_hours(
    db: Session, user_id: uuid.UUID, start: date, end: date
) -> float:
    """Hours of time entries that have no ledger row pointing at them."""
    referenced = select(OvertimeTransaction.reference_id).where(
        OvertimeTransaction.user_id == user_id,
        OvertimeTransaction.reference_type == ReferenceType.TIME_ENTRY,
        OvertimeTransaction.reference_id.is_not(None),
    )
    total = (
        db.query(func.coalesce(func.sum(TimeEntry.hours), 0.0))
        .filter(
            TimeEntry.user_id == user_id,
            TimeEntry.date >= start,
            TimeEntry.date <= end,
            TimeEntry.id.not_in(referenced),
        )
        .scalar()
    )
    return float(total)


def calculate_month(
    db: Session,
    employee: Employee,
    month: str,
    holiday_provider: HolidayProvider | None = None,
    unpaid_policy: UnpaidLeavePolicy | None = None,
) -> tuple[float, float]:
    """Compute target and actual hours of one month from source records.

    Actual hours are the month's ledger rows, plus time entries not yet
    reflected in the ledger, plus the target hours of approved vacation
    days.

    Args:
        db: Database session.
        employee: The employee.
        month: Month as ``YYYY-MM``.
        holiday_provider: Holiday source, defaults to the configured one.
        unpaid_policy: Unpaid leave handling, defaults to the setting.

    Returns:
        Tuple of (target_hours, actual_hours), both rounded to 2 decimals.
    """
    provider = holiday_provider or get_holiday_provider()
    policy = unpaid_policy or settings.unpaid_leave_policy
    start, end = month_bounds(month)
    holidays = holiday_dates(provider, start, end, employee.holiday_region)
    profile = employee.work_profile

    excluded: set[date] = set()
    if policy == UnpaidLeavePolicy.REDUCE_TARGET:
        unpaid = get_approved_absences(
            db, employee.id, start, end, [AbsenceType.UNPAID]
        )
        excluded = _absence_dates(unpaid, start, end)
    target_hours = calculate_target_hours(profile, start, end, holidays, excluded)

    vacations = get_approved_absences(
        db, employee.id, start, end, [AbsenceType.VACATION]
    )
    vacation_days = _absence_dates(vacations, start, end)
    vacation_hours = sum(
        daily_target_hours(profile, day)
        for day in working_days(profile, start, end, holidays)
        if day in vacation_days
    )

    actual_hours = (
        ledger_service.sum_hours(db, employee.id, start, end)
        + _unreflected_entry_hours(db, employee.id, start, end)
        + vacation_hours
    )
    return round(target_hours, 2), round(actual_hours, 2)


def _to_schema(row: MonthlyOvertimeBalance) -> MonthlyOvertime:
    return MonthlyOvertime(
        user_id=row.user_id,
        month=row.month,
        target_hours=row.target_hours,
        actual_hours=row.actual_hours,
        overtime=row.overtime,
    )


def _get_row(
    db: Session, user_id: uuid.UUID, month: str
) -> MonthlyOvertimeBalance | None:
    return (
        db.query(MonthlyOvertimeBalance)
        .filter(
            MonthlyOvertimeBalance.user_id == user_id,
            MonthlyOvertimeBalance.month == month,
        )
        .first()
    )


def get_monthly_overtime(
    db: Session,
    user_id: uuid.UUID,
    month: str,
    holiday_provider: HolidayProvider | None = None,
) -> MonthlyOvertime:
    """Get target, actual and overtime hours for one month.

    The cached row is built and stored on first access.

    Args:
        db: Database session.
        user_id: Employee id.
        month: Month as ``YYYY-MM``.
        holiday_provider: Holiday source, defaults to the configured one.

    Returns:
        MonthlyOvertime with overtime = actual - target.

    Raises:
        NotFoundError: If the employee does not exist.
        ValueError: If the month string is malformed.
    """
    employee = employee_service.require_employee(db, user_id)
    month_bounds(month)

    row = _get_row(db, user_id, month)
    if row is not None:
        return _to_schema(row)

    target_hours, actual_hours = calculate_month(db, employee, month, holiday_provider)
    try:
        with atomic(db):
            row = MonthlyOvertimeBalance(
                user_id=user_id,
                month=month,
                target_hours=target_hours,
                actual_hours=actual_hours,
            )
            db.add(row)
            db.flush()
    except IntegrityError:
        # Built concurrently by another request
        row = _get_row(db, user_id, month)
        if row is None:
            raise
    else:
        logger.info(
            f"Built overtime balance {month} for user {user_id}: "
            f"target {target_hours:.2f}h, actual {actual_hours:.2f}h"
        )
    return _to_schema(row)


def get_overtime_summary(
    db: Session,
    user_id: uuid.UUID,
    year: int,
    holiday_provider: HolidayProvider | None = None,
) -> OvertimeSummary:
    """Get monthly overtime for all months of a year."""
    months = [
        get_monthly_overtime(db, user_id, f"{year:04d}-{m:02d}", holiday_provider)
        for m in range(1, 13)
    ]
    return OvertimeSummary(
        user_id=user_id,
        year=year,
        months=months,
        total_target_hours=round(sum(m.target_hours for m in months), 2),
        total_actual_hours=round(sum(m.actual_hours for m in months), 2),
        total_overtime=round(sum(m.overtime for m in months), 2),
        ledger_balance=ledger_service.get_ledger_balance(db, user_id),
    )


def get_overtime_balance(
    db: Session,
    user_id: uuid.UUID,
    until: date | None = None,
    holiday_provider: HolidayProvider | None = None,
) -> float:
    """Accumulated overtime from the hire month up to a month.

    Args:
        db: Database session.
        user_id: Employee id.
        until: Any day of the last month to include, defaults to today.
        holiday_provider: Holiday source, defaults to the configured one.

    Returns:
        Sum of monthly overtime, rounded to 2 decimals.
    """
    employee = employee_service.require_employee(db, user_id)
    until = until or date.today()
    total = 0.0
    year, month = employee.hire_date.year, employee.hire_date.month
    while (year, month) <= (until.year, until.month):
        total += get_monthly_overtime(
            db, user_id, f"{year:04d}-{month:02d}", holiday_provider
        ).overtime
        year, month = (year + 1, 1) if month == 12 else (year, month + 1)
    return round(total, 2)


def has_sufficient_overtime_balance(
    db: Session,
    user_id: uuid.UUID,
    hours_required: float,
    max_minus_hours: float | None = None,
    until: date | None = None,
    holiday_provider: HolidayProvider | None = None,
) -> bool:
    """Check whether time off can be paid from accrued overtime.

    The balance may go negative down to ``max_minus_hours``.
    """
    limit = (
        settings.overtime_max_minus_hours if max_minus_hours is None else max_minus_hours
    )
    balance = get_overtime_balance(db, user_id, until, holiday_provider)
    return balance - hours_required >= limit


def invalidate_range(
    db: Session, user_id: uuid.UUID, start: date, end: date
) -> int:
    """Delete cached monthly rows touching a date range."""
    with atomic(db):
        count = (
            db.query(MonthlyOvertimeBalance)
            .filter(
                MonthlyOvertimeBalance.user_id == user_id,
                MonthlyOvertimeBalance.month >= month_key(start),
                MonthlyOvertimeBalance.month <= month_key(end),
            )
            .delete(synchronize_session="fetch")
        )
    if count:
        logger.debug(f"Invalidated {count} monthly balances for user {user_id}")
    return count


def invalidate_month(db: Session, user_id: uuid.UUID, day: date) -> int:
    """Delete the cached row of the month containing the given day."""
    return invalidate_range(db, user_id, day, day)


def _rebuild_bounds(db: Session, employee: Employee) -> tuple[date, date]:
    """Earliest and latest date any derived ledger row could carry."""
    ledger_min, ledger_max = (
        db.query(func.min(OvertimeTransaction.date), func.max(OvertimeTransaction.date))
        .filter(OvertimeTransaction.user_id == employee.id)
        .one()
    )
    absence_min, absence_max = (
        db.query(func.min(AbsenceRequest.start_date), func.max(AbsenceRequest.end_date))
        .filter(AbsenceRequest.user_id == employee.id)
        .one()
    )
    starts = [d for d in (employee.hire_date, ledger_min, absence_min) if d]
    ends = [d for d in (date.today(), ledger_max, absence_max) if d]
    return min(starts), max(ends)


def rebuild_ledger(
    db: Session,
    user_id: uuid.UUID,
    start: date | None = None,
    end: date | None = None,
    holiday_provider: HolidayProvider | None = None,
) -> int:
    """Regenerate an employee's absence-derived ledger rows.

    Rows that reference an absence are deleted and recreated from the
    approved absences, using the current contract. Manual corrections,
    system rows and rows referencing time entries (imported history) are
    kept. Cached monthly overtime in the range is dropped. Runs as one
    database transaction.

    Returns:
        Number of rows written.
    """
    employee = employee_service.require_employee(db, user_id)
    default_start, default_end = _rebuild_bounds(db, employee)
    start = start or default_start
    end = end or default_end
    provider = holiday_provider or get_holiday_provider()

    with atomic(db):
        deleted = ledger_service.delete_transactions_in_range(
            db,
            user_id,
            start,
            end,
            types=DERIVED_TRANSACTION_TYPES,
            reference_types=DERIVED_REFERENCE_TYPES,
        )
        holidays: Collection[date] = holiday_dates(
            provider, start, end, employee.holiday_region
        )
        transactions = []
        for absence in get_approved_absences(db, user_id, start, end):
            transactions.extend(
                build_absence_transactions(
                    employee,
                    absence,
                    holidays,
                    settings.unpaid_leave_policy,
                    start=start,
                    end=end,
                )
            )
        ids = ledger_service.create_transactions_batch(db, transactions)
        invalidate_range(db, user_id, start, end)

    written = sum(1 for i in ids if i is not None)
    logger.info(
        f"Rebuilt ledger for user {user_id} ({start} to {end}): "
        f"{deleted} deleted, {written} written"
    )
    return written


def recalculate_for_user(
    db: Session,
    user_id: uuid.UUID,
    rebuild: bool = False,
    holiday_provider: HolidayProvider | None = None,
) -> int:
    """Drop all cached monthly rows of an employee.

    They are rebuilt lazily on the next read. With ``rebuild`` the
    absence-derived ledger rows are regenerated first.

    Returns:
        Number of monthly rows deleted.
    """
    employee_service.require_employee(db, user_id)
    with atomic(db):
        if rebuild:
            rebuild_ledger(db, user_id, holiday_provider=holiday_provider)
        count = (
            db.query(MonthlyOvertimeBalance)
            .filter(MonthlyOvertimeBalance.user_id == user_id)
            .delete(synchronize_session="fetch")
        )
    logger.info(f"Recalculation for user {user_id}: {count} monthly balances reset")
    return count


def record_correction(
    db: Session,
    user_id: uuid.UUID,
    day: date,
    hours: float,
    description: str,
    created_by: str | None = None,
) -> int | None:
    """Book a manual correction and drop the cached month it falls into.

    Returns:
        The ledger row id, or None if an identical correction exists.

    Raises:
        NotFoundError: If the employee does not exist.
        InvalidRequestError: If no description is given.
    """
    employee_service.require_employee(db, user_id)
    with atomic(db):
        transaction_id = ledger_service.record_correction(
            db, user_id, day, hours, description, created_by
        )
        invalidate_month(db, user_id, day)
    return transaction_id
