# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Absence request workflow.

States: pending -> approved | rejected. Sick leave is approved on
submission. Approval applies vacation and ledger side effects; cancelling
an approved request reverses them and deletes the request.
"""

import logging
import uuid
from datetime import UTC, date, datetime, timedelta

from sqlalchemy.orm import Session

from zeitkonto.config import settings
from zeitkonto.database import atomic
from zeitkonto.exceptions import ConflictError, InvalidRequestError, NotFoundError
from zeitkonto.models import (
    AbsenceRequest,
    AbsenceStatus,
    AbsenceType,
    Employee,
    TimeEntry,
    TransactionType,
)
from zeitkonto.schemas.absence import AbsenceCreate, AbsenceUpdate
from zeitkonto.services import employee_service, overtime_service, vacation_service
from zeitkonto.services.absence_credits import build_absence_transactions
from zeitkonto.services.holiday_service import (
    HolidayProvider,
    get_holiday_provider,
    holiday_dates,
)
from zeitkonto.services.working_time import count_working_days

logger = logging.getLogger(__name__)

AUTO_APPROVED_TYPES = (AbsenceType.SICK,)
SYSTEM_ACTOR = "system"


def calculate_days_required(
    employee: Employee,
    start_date: date,
    end_date: date,
    holiday_provider: HolidayProvider | None = None,
) -> float:
    """Count the working days an absence covers.

    Weekends, holidays, unscheduled weekdays and days outside employment
    are not counted.
    """
    provider = holiday_provider or get_holiday_provider()
    holidays = holiday_dates(provider, start_date, end_date, employee.holiday_region)
    return float(
        count_working_days(employee.work_profile, start_date, end_date, holidays)
    )


def get_absence(db: Session, absence_id: uuid.UUID) -> AbsenceRequest | None:
    """Get an absence request by ID."""
    return db.query(AbsenceRequest).filter(AbsenceRequest.id == absence_id).first()


def require_absence(db: Session, absence_id: uuid.UUID) -> AbsenceRequest:
    """Get an absence request by ID or raise NotFoundError."""
    absence = get_absence(db, absence_id)
    if absence is None:
        raise NotFoundError(f"Absence request {absence_id} not found")
    return absence


def list_absences(
    db: Session,
    user_id: uuid.UUID | None = None,
    status: AbsenceStatus | None = None,
    type: AbsenceType | None = None,
    year: int | None = None,
) -> list[AbsenceRequest]:
    """List absence requests with optional filters."""
    query = db.query(AbsenceRequest)
    if user_id:
        query = query.filter(AbsenceRequest.user_id == user_id)
    if status:
        query = query.filter(AbsenceRequest.status == status)
    if type:
        query = query.filter(AbsenceRequest.type == type)
    if year:
        query = query.filter(
            AbsenceRequest.start_date <= date(year, 12, 31),
            AbsenceRequest.end_date >= date(year, 1, 1),
        )
    return query.order_by(AbsenceRequest.start_date.desc()).all()


def check_overlap(
    db: Session,
    user_id: uuid.UUID,
    start_date: date,
    end_date: date,
    exclude_id: uuid.UUID | None = None,
) -> AbsenceRequest | None:
    """Find a pending or approved absence overlapping a date range.

    Ranges that only touch (one ends the day before the other starts) do
    not overlap.

    Args:
        db: Database session.
        user_id: Employee id.
        start_date: First day of the new range.
        end_date: Last day of the new range.
        exclude_id: Absence to ignore, used when editing.

    Returns:
        The first conflicting absence, or None.
    """
    query = db.query(AbsenceRequest).filter(
        AbsenceRequest.user_id == user_id,
        AbsenceRequest.status.in_([AbsenceStatus.PENDING, AbsenceStatus.APPROVED]),
        AbsenceRequest.start_date <= end_date,
        AbsenceRequest.end_date >= start_date,
    )
    if exclude_id:
        query = query.filter(AbsenceRequest.id != exclude_id)
    return query.order_by(AbsenceRequest.start_date).first()


def find_time_entries(
    db: Session, user_id: uuid.UUID, start_date: date, end_date: date
) -> list[TimeEntry]:
    """Time entries of an employee within a date range."""
    return (
        db.query(TimeEntry)
        .filter(
            TimeEntry.user_id == user_id,
            TimeEntry.date >= start_date,
            TimeEntry.date <= end_date,
        )
        .order_by(TimeEntry.date, TimeEntry.start_time)
        .all()
    )


def _validate_range(
    db: Session,
    employee: Employee,
    start_date: date,
    end_date: date,
    exclude_id: uuid.UUID | None = None,
) -> None:
    if end_date < start_date:
        raise InvalidRequestError("End date must be on or after start date")
    if start_date < employee.hire_date:
        raise InvalidRequestError(
            f"Absence cannot start before the hire date {employee.hire_date}"
        )
    conflict = check_overlap(db, employee.id, start_date, end_date, exclude_id)
    if conflict is not None:
        raise ConflictError(
            f"Overlaps with {conflict.status.value} {conflict.type.value} absence "
            f"{conflict.start_date} to {conflict.end_date}"
        )
    entries = find_time_entries(db, employee.id, start_date, end_date)
    if entries:
        days = sorted({entry.date.isoformat() for entry in entries})
        raise ConflictError(
            f"Time entries exist between {start_date} and {end_date} "
            f"({', '.join(days)}); delete them first"
        )


def _require_working_days(days_required: float) -> None:
    if days_required <= 0:
        raise InvalidRequestError("Absence request must span at least one working day")


def _check_overtime_balance(
    db: Session,
    absence: AbsenceRequest,
    holiday_provider: HolidayProvider | None,
) -> None:
    """Refuse overtime compensation the account cannot pay for.

    The balance of the completed months before the absence must stay at or
    above the configured minus limit after the compensated hours.
    """
    employee = employee_service.require_employee(db, absence.user_id)
    provider = holiday_provider or get_holiday_provider()
    holidays = holiday_dates(
        provider, absence.start_date, absence.end_date, employee.holiday_region
    )
    required = sum(
        t.hours
        for t in build_absence_transactions(
            employee, absence, holidays, settings.unpaid_leave_policy
        )
        if t.type == TransactionType.OVERTIME_COMP_CREDIT
    )
    until = absence.start_date.replace(day=1) - timedelta(days=1)
    if not overtime_service.has_sufficient_overtime_balance(
        db, absence.user_id, required, until=until, holiday_provider=provider
    ):
        balance = overtime_service.get_overtime_balance(
            db, absence.user_id, until, provider
        )
        raise ConflictError(
            f"Insufficient overtime balance (need {required:.2f}h, have "
            f"{balance:.2f}h, limit {settings.overtime_max_minus_hours:.2f}h)"
        )


def _remove_time_entries(db: Session, absence: AbsenceRequest) -> int:
    count = (
        db.query(TimeEntry)
        .filter(
            TimeEntry.user_id == absence.user_id,
            TimeEntry.date >= absence.start_date,
            TimeEntry.date <= absence.end_date,
        )
        .delete(synchronize_session="fetch")
    )
    if count:
        logger.warning(
            f"Deleted {count} time entries of user {absence.user_id} covered by "
            f"absence {absence.id}"
        )
    return count


def _approve(
    db: Session,
    absence: AbsenceRequest,
    approver_id: str,
    note: str | None,
    holiday_provider: HolidayProvider | None,
) -> None:
    absence.status = AbsenceStatus.APPROVED
    absence.approved_by = approver_id
    absence.approved_at = datetime.now(UTC)
    if note:
        absence.admin_note = note
    _remove_time_entries(db, absence)
    db.flush()
    vacation_service.on_absence_approved(db, absence, holiday_provider)


def submit_absence(
    db: Session,
    data: AbsenceCreate,
    holiday_provider: HolidayProvider | None = None,
) -> AbsenceRequest:
    """Submit a new absence request.

    Sick leave is approved immediately and its side effects are applied
    in the same transaction; every other type starts as pending.

    Args:
        db: Database session.
        data: Request data.
        holiday_provider: Holiday source, defaults to the configured one.

    Returns:
        The stored absence request.

    Raises:
        NotFoundError: If the employee does not exist.
        InvalidRequestError: For inverted ranges, a start before hiring or
            a range without working days.
        ConflictError: If the range overlaps a pending or approved absence
            or already holds time entries.
    """
    employee = employee_service.require_employee(db, data.user_id)

    with atomic(db):
        _validate_range(db, employee, data.start_date, data.end_date)
        days_required = calculate_days_required(
            employee, data.start_date, data.end_date, holiday_provider
        )
        _require_working_days(days_required)
        absence = AbsenceRequest(
            user_id=data.user_id,
            type=data.type,
            start_date=data.start_date,
            end_date=data.end_date,
            reason=data.reason,
            status=AbsenceStatus.PENDING,
            days_required=days_required,
        )
        db.add(absence)
        db.flush()
        if absence.type in AUTO_APPROVED_TYPES:
            _approve(db, absence, SYSTEM_ACTOR, None, holiday_provider)

    db.refresh(absence)
    logger.info(
        f"Absence {absence.id} ({absence.type.value}, {absence.start_date} to "
        f"{absence.end_date}, {absence.days_required} days) submitted as "
        f"{absence.status.value}"
    )
    return absence


def approve_absence(
    db: Session,
    absence_id: uuid.UUID,
    approver_id: str,
    note: str | None = None,
    holiday_provider: HolidayProvider | None = None,
) -> AbsenceRequest:
    """Approve a pending absence and apply its side effects.

    Time entries recorded in the meantime on the covered days are removed.

    Raises:
        NotFoundError: If the absence does not exist.
        ConflictError: If the absence is not pending, or for overtime
            compensation the balance would drop below the minus limit.
    """
    absence = require_absence(db, absence_id)
    if absence.status != AbsenceStatus.PENDING:
        raise ConflictError(
            f"Only pending absences can be approved (status: {absence.status.value})"
        )
    if absence.type == AbsenceType.OVERTIME_COMP:
        _check_overtime_balance(db, absence, holiday_provider)

    with atomic(db):
        _approve(db, absence, approver_id, note, holiday_provider)

    db.refresh(absence)
    logger.info(f"Absence {absence.id} approved by {approver_id}")
    return absence


def reject_absence(
    db: Session,
    absence_id: uuid.UUID,
    approver_id: str,
    reason: str | None = None,
) -> AbsenceRequest:
    """Reject a pending absence. Nothing was booked, so nothing is undone.

    Raises:
        NotFoundError: If the absence does not exist.
        ConflictError: If the absence is not pending.
    """
    absence = require_absence(db, absence_id)
    if absence.status != AbsenceStatus.PENDING:
        raise ConflictError(
            f"Only pending absences can be rejected (status: {absence.status.value})"
        )

    with atomic(db):
        absence.status = AbsenceStatus.REJECTED
        absence.rejected_by = approver_id
        absence.rejected_at = datetime.now(UTC)
        absence.admin_note = reason
        db.flush()

    db.refresh(absence)
    logger.info(f"Absence {absence.id} rejected by {approver_id}")
    return absence


def cancel_absence(db: Session, absence_id: uuid.UUID) -> None:
    """Cancel an absence by deleting it.

    For approved absences the ledger credits are offset first; vacation
    days taken follow automatically once the request is gone.

    Raises:
        NotFoundError: If the absence does not exist.
    """
    absence = require_absence(db, absence_id)
    was_approved = absence.status == AbsenceStatus.APPROVED

    with atomic(db):
        if was_approved:
            vacation_service.on_absence_cancelled(db, absence)
        db.delete(absence)
        db.flush()

    logger.info(
        f"Absence {absence_id} cancelled"
        + (" and its bookings reversed" if was_approved else "")
    )


def update_absence(
    db: Session,
    absence_id: uuid.UUID,
    data: AbsenceUpdate,
    holiday_provider: HolidayProvider | None = None,
) -> AbsenceRequest:
    """Change the dates or reason of a pending absence.

    Approved absences are immutable and must be cancelled and submitted
    again.

    Raises:
        NotFoundError: If the absence does not exist.
        ConflictError: If the absence is not pending or the new range
            overlaps another absence or holds time entries.
        InvalidRequestError: For an inverted range, a start before hiring or
            a range without working days.
    """
    absence = require_absence(db, absence_id)
    if absence.status != AbsenceStatus.PENDING:
        raise ConflictError(
            f"Only pending absences can be changed (status: {absence.status.value})"
        )
    employee = employee_service.require_employee(db, absence.user_id)

    start_date = data.start_date or absence.start_date
    end_date = data.end_date or absence.end_date

    with atomic(db):
        _validate_range(db, employee, start_date, end_date, exclude_id=absence.id)
        days_required = calculate_days_required(
            employee, start_date, end_date, holiday_provider
        )
        _require_working_days(days_required)
        absence.start_date = start_date
        absence.end_date = end_date
        if data.reason is not None:
            absence.reason = data.reason
        absence.days_required = days_required
        db.flush()

    db.refresh(absence)
    logger.info(f"Absence {absence.id} changed to {start_date} to {end_date}")
    return absence
