# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Vacation balance service.

Only entitlement and carryover are stored per year. Days taken are
recomputed from approved vacation absences on every read, so approving,
editing or cancelling absences can never leave the balance out of sync.
"""

import calendar
import logging
import math
import uuid
from datetime import date

from sqlalchemy.orm import Session

from zeitkonto.config import settings
from zeitkonto.database import atomic
from zeitkonto.models import (
    AbsenceRequest,
    AbsenceType,
    Employee,
    ReferenceType,
    TransactionType,
    VacationBalance,
)
from zeitkonto.schemas.overtime import TransactionCreate
from zeitkonto.schemas.vacation import RolloverResult, VacationBalanceSummary
from zeitkonto.services import employee_service, ledger_service, overtime_service
from zeitkonto.services.absence_credits import build_absence_transactions
from zeitkonto.services.holiday_service import (
    HolidayProvider,
    get_holiday_provider,
    holiday_dates,
)
from zeitkonto.services.working_time import count_working_days

logger = logging.getLogger(__name__)


def calculate_pro_rata_entitlement(
    annual_days: float, hire_date: date, year: int
) -> float:
    """Entitlement for a year, reduced for employees hired during it.

    The annual entitlement is scaled by the share of calendar days from the
    hire date to year end and rounded to the nearest half day.

    Args:
        annual_days: Full annual entitlement.
        hire_date: First day of employment.
        year: Year to compute.

    Returns:
        Entitlement in days.
    """
    if hire_date.year < year:
        return annual_days
    if hire_date.year > year:
        return 0.0
    days_in_year = 366 if calendar.isleap(year) else 365
    employed_days = (date(year, 12, 31) - hire_date).days + 1
    return math.floor(annual_days * employed_days / days_in_year * 2 + 0.5) / 2


def calculate_carryover(remaining: float, cap: float | None = None) -> float:
    """Days carried into the next year: remaining days, capped.

    Negative balances are not carried over.
    """
    cap = settings.vacation_carryover_cap_days if cap is None else cap
    return min(max(remaining, 0.0), cap)


def _get_row(db: Session, user_id: uuid.UUID, year: int) -> VacationBalance | None:
    return (
        db.query(VacationBalance)
        .filter(VacationBalance.user_id == user_id, VacationBalance.year == year)
        .first()
    )


def ensure_balance(db: Session, employee: Employee, year: int) -> VacationBalance:
    """Get or create the vacation row of one year."""
    row = _get_row(db, employee.id, year)
    if row is not None:
        return row

    with atomic(db):
        row = VacationBalance(
            user_id=employee.id,
            year=year,
            entitlement=calculate_pro_rata_entitlement(
                employee.vacation_days_per_year, employee.hire_date, year
            ),
            carryover=0.0,
        )
        db.add(row)
        db.flush()
    logger.info(
        f"Created vacation balance {year} for user {employee.id}: "
        f"{row.entitlement} days"
    )
    return row


def initialize_for_employee(
    db: Session, employee: Employee, year: int | None = None
) -> list[VacationBalance]:
    """Create the rows for the given (default: current) and the next year."""
    year = year or date.today().year
    with atomic(db):
        rows = [ensure_balance(db, employee, y) for y in (year, year + 1)]
    return rows


def initialize_year_for_all(db: Session, year: int) -> int:
    """Create missing rows of one year for every employee.

    Returns:
        Number of rows created.
    """
    created = 0
    with atomic(db):
        for employee in employee_service.list_employees(db):
            if employee.end_date and employee.end_date.year < year:
                continue
            if _get_row(db, employee.id, year) is None:
                ensure_balance(db, employee, year)
                created += 1
    logger.info(f"Initialized {created} vacation balances for {year}")
    return created


def calculate_taken(
    db: Session,
    employee: Employee,
    year: int,
    holiday_provider: HolidayProvider | None = None,
) -> float:
    """Sum the vacation days of approved absences overlapping a year.

    Absences inside the year contribute their stored days_required.
    Absences crossing the year boundary contribute only their working
    days within the year.
    """
    year_start, year_end = date(year, 1, 1), date(year, 12, 31)
    absences = overtime_service.get_approved_absences(
        db, employee.id, year_start, year_end, [AbsenceType.VACATION]
    )

    taken = 0.0
    for absence in absences:
        if absence.start_date >= year_start and absence.end_date <= year_end:
            taken += absence.days_required
            continue
        start = max(absence.start_date, year_start)
        end = min(absence.end_date, year_end)
        provider = holiday_provider or get_holiday_provider()
        holidays = holiday_dates(provider, start, end, employee.holiday_region)
        taken += count_working_days(employee.work_profile, start, end, holidays)
    return round(taken, 2)


def get_balance(
    db: Session,
    user_id: uuid.UUID,
    year: int,
    holiday_provider: HolidayProvider | None = None,
) -> VacationBalanceSummary:
    """Get the vacation account of one year.

    Does not write: a missing row is reported with its default
    entitlement and no carryover.

    Args:
        db: Database session.
        user_id: Employee id.
        year: Calendar year.
        holiday_provider: Holiday source for absences crossing years.

    Returns:
        VacationBalanceSummary with derived taken and remaining days.

    Raises:
        NotFoundError: If the employee does not exist.
    """
    employee = employee_service.require_employee(db, user_id)
    row = _get_row(db, user_id, year)
    if row is not None:
        entitlement, carryover = row.entitlement, row.carryover
    else:
        entitlement = calculate_pro_rata_entitlement(
            employee.vacation_days_per_year, employee.hire_date, year
        )
        carryover = 0.0

    taken = calculate_taken(db, employee, year, holiday_provider)
    remaining = round(entitlement + carryover - taken, 2)
    return VacationBalanceSummary(
        user_id=user_id,
        year=year,
        entitlement=entitlement,
        carryover=carryover,
        taken=taken,
        remaining=remaining,
        is_overdrawn=remaining < 0,
    )


def on_absence_approved(
    db: Session,
    absence: AbsenceRequest,
    holiday_provider: HolidayProvider | None = None,
) -> list[int | None]:
    """Apply the side effects of an approved absence.

    Vacation only needs the year-rows to exist; sick and overtime
    compensation days are credited to the ledger (unpaid leave depending
    on the configured policy). Cached monthly overtime of the affected
    months is dropped.

    Returns:
        Ids of the ledger rows written.
    """
    employee = employee_service.require_employee(db, absence.user_id)
    provider = holiday_provider or get_holiday_provider()

    with atomic(db):
        if absence.type == AbsenceType.VACATION:
            for year in range(absence.start_date.year, absence.end_date.year + 1):
                ensure_balance(db, employee, year)
        holidays = holiday_dates(
            provider, absence.start_date, absence.end_date, employee.holiday_region
        )
        transactions = build_absence_transactions(
            employee, absence, holidays, settings.unpaid_leave_policy
        )
        ids = ledger_service.create_transactions_batch(db, transactions)
        overtime_service.invalidate_range(
            db, absence.user_id, absence.start_date, absence.end_date
        )
    return ids


def on_absence_cancelled(db: Session, absence: AbsenceRequest) -> list[int | None]:
    """Reverse the ledger rows an approved absence produced.

    Each credit or compensation row gets an offsetting correction row, so
    the history stays intact. Vacation needs nothing: days taken are
    derived from approved absences.

    Returns:
        Ids of the correction rows written.
    """
    with atomic(db):
        rows = ledger_service.get_transactions_for_reference(
            db, ReferenceType.ABSENCE, absence.id
        )
        reversals = [
            TransactionCreate(
                user_id=row.user_id,
                date=row.date,
                type=TransactionType.CORRECTION,
                hours=-row.hours,
                description=f"Reversal of {row.type.value} (absence cancelled)",
                reference_type=ReferenceType.ABSENCE,
                reference_id=absence.id,
                created_by="system",
            )
            for row in rows
            if row.type != TransactionType.CORRECTION and row.hours != 0
        ]
        ids = ledger_service.create_transactions_batch(db, reversals)
        overtime_service.invalidate_range(
            db, absence.user_id, absence.start_date, absence.end_date
        )
    return ids


def on_entitlement_changed(
    db: Session, user_id: uuid.UUID, new_entitlement: float
) -> int:
    """Apply a new annual entitlement to every year-row of an employee.

    Each year gets the pro-rata share of the new value for the time
    employed in that year, so the hire year keeps its reduced entitlement.

    Returns:
        Number of rows updated.
    """
    employee = employee_service.require_employee(db, user_id)
    with atomic(db):
        rows = (
            db.query(VacationBalance).filter(VacationBalance.user_id == user_id).all()
        )
        for row in rows:
            row.entitlement = calculate_pro_rata_entitlement(
                new_entitlement, employee.hire_date, row.year
            )
        db.flush()
    logger.info(
        f"Entitlement of user {user_id} set to {new_entitlement} days "
        f"on {len(rows)} year(s)"
    )
    return len(rows)


def rollover_year(
    db: Session,
    user_id: uuid.UUID,
    from_year: int,
    cap: float | None = None,
    holiday_provider: HolidayProvider | None = None,
) -> RolloverResult:
    """Carry remaining vacation days of a year into the next one.

    Sets the next year's carryover (created if missing) to the capped
    remaining days and records the ledger year-end marker. Running it
    again yields the same result.
    """
    employee = employee_service.require_employee(db, user_id)
    summary = get_balance(db, user_id, from_year, holiday_provider)
    carryover = calculate_carryover(summary.remaining, cap)

    with atomic(db):
        next_row = ensure_balance(db, employee, from_year + 1)
        next_row.carryover = carryover
        db.flush()
        ledger_service.record_year_end_carryover(db, user_id, from_year + 1)

    logger.info(
        f"Rollover {from_year} -> {from_year + 1} for user {user_id}: "
        f"{summary.remaining} remaining, {carryover} carried over"
    )
    return RolloverResult(
        user_id=user_id,
        from_year=from_year,
        to_year=from_year + 1,
        remaining=summary.remaining,
        carryover=carryover,
    )


def rollover_all(
    db: Session,
    from_year: int,
    cap: float | None = None,
    holiday_provider: HolidayProvider | None = None,
) -> list[RolloverResult]:
    """Run the year-end rollover for every employee active in the year."""
    results = []
    with atomic(db):
        for employee in employee_service.list_employees(db):
            if employee.hire_date.year > from_year:
                continue
            if employee.end_date and employee.end_date.year <= from_year:
                continue
            results.append(
                rollover_year(db, employee.id, from_year, cap, holiday_provider)
            )
    return results
