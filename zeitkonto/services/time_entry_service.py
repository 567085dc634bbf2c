# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Time entry service.

Entries pass the compliance check (warnings only), are stored, and the
cached overtime of their month is dropped.
"""

import logging
import uuid
from datetime import date, timedelta

from sqlalchemy.orm import Session

from zeitkonto.database import atomic
from zeitkonto.exceptions import InvalidRequestError, NotFoundError
from zeitkonto.models import TimeEntry
from zeitkonto.schemas.compliance import ValidationResult
from zeitkonto.schemas.time_entry import (
    TimeEntryCandidate,
    TimeEntryCreate,
    TimeEntryUpdate,
)
from zeitkonto.services import compliance_service, employee_service, overtime_service
from zeitkonto.services.working_time import calculate_hours

logger = logging.getLogger(__name__)


def get_time_entry(db: Session, entry_id: uuid.UUID) -> TimeEntry | None:
    """Get a time entry by ID."""
    return db.query(TimeEntry).filter(TimeEntry.id == entry_id).first()


def list_time_entries(
    db: Session,
    user_id: uuid.UUID,
    start: date | None = None,
    end: date | None = None,
) -> list[TimeEntry]:
    """List an employee's entries ordered by date and start time."""
    query = db.query(TimeEntry).filter(TimeEntry.user_id == user_id)
    if start:
        query = query.filter(TimeEntry.date >= start)
    if end:
        query = query.filter(TimeEntry.date <= end)
    return query.order_by(TimeEntry.date, TimeEntry.start_time).all()


def _neighbouring_entries(
    db: Session, user_id: uuid.UUID, day: date
) -> list[TimeEntry]:
    """Entries of the ISO week plus the last entry before it.

    That is all the compliance checks need: the week for daily and weekly
    totals, the previous entry for the rest period.
    """
    week_start = day - timedelta(days=day.weekday())
    week_end = week_start + timedelta(days=6)
    in_week = list_time_entries(db, user_id, week_start, week_end)
    before = (
        db.query(TimeEntry)
        .filter(TimeEntry.user_id == user_id, TimeEntry.date < week_start)
        .order_by(TimeEntry.date.desc(), TimeEntry.end_time.desc())
        .first()
    )
    return ([before] if before else []) + in_week


def validate_time_entry(db: Session, candidate: TimeEntryCandidate) -> ValidationResult:
    """Run the compliance checks for a candidate against stored entries.

    The German working-time act applies regardless of the configured
    holiday calendar. Never raises for a rule violation; findings are
    returned as warnings.
    """
    existing = _neighbouring_entries(db, candidate.user_id, candidate.date)
    return compliance_service.validate_time_entry(candidate, existing)


def create_time_entry(
    db: Session, data: TimeEntryCreate
) -> tuple[TimeEntry, ValidationResult]:
    """Store a new time entry.

    Args:
        db: Database session.
        data: Entry data.

    Returns:
        The stored entry and the advisory compliance result.

    Raises:
        NotFoundError: If the employee does not exist.
    """
    employee_service.require_employee(db, data.user_id)
    validation = validate_time_entry(db, TimeEntryCandidate(**data.model_dump()))

    with atomic(db):
        entry = TimeEntry(
            **data.model_dump(),
            hours=calculate_hours(data.start_time, data.end_time, data.break_minutes),
        )
        db.add(entry)
        db.flush()
        overtime_service.invalidate_month(db, entry.user_id, entry.date)

    db.refresh(entry)
    logger.info(
        f"Time entry {entry.id} stored for user {entry.user_id} on {entry.date} "
        f"({entry.hours:.2f}h, {len(validation.warnings)} warning(s))"
    )
    return entry, validation


def update_time_entry(
    db: Session, entry_id: uuid.UUID, data: TimeEntryUpdate
) -> tuple[TimeEntry, ValidationResult]:
    """Update a time entry and drop the cached overtime of affected months.

    Raises:
        NotFoundError: If the entry does not exist.
        InvalidRequestError: If the resulting times are invalid.
    """
    entry = get_time_entry(db, entry_id)
    if entry is None:
        raise NotFoundError(f"Time entry {entry_id} not found")

    merged = {
        "user_id": entry.user_id,
        "date": entry.date,
        "start_time": entry.start_time,
        "end_time": entry.end_time,
        "break_minutes": entry.break_minutes,
        "location": entry.location,
        "activity": entry.activity,
        "project": entry.project,
        "notes": entry.notes,
    }
    merged.update(data.model_dump(exclude_unset=True))
    try:
        candidate = TimeEntryCandidate(**merged, entry_id=entry.id)
    except ValueError as e:
        raise InvalidRequestError(str(e)) from None

    validation = validate_time_entry(db, candidate)
    old_date = entry.date

    with atomic(db):
        for field in (
            "date",
            "start_time",
            "end_time",
            "break_minutes",
            "location",
            "activity",
            "project",
            "notes",
        ):
            setattr(entry, field, getattr(candidate, field))
        entry.hours = calculate_hours(
            candidate.start_time, candidate.end_time, candidate.break_minutes
        )
        db.flush()
        overtime_service.invalidate_month(db, entry.user_id, old_date)
        overtime_service.invalidate_month(db, entry.user_id, entry.date)

    db.refresh(entry)
    logger.info(f"Time entry {entry.id} updated ({entry.hours:.2f}h)")
    return entry, validation


def delete_time_entry(db: Session, entry_id: uuid.UUID) -> bool:
    """Delete a time entry.

    Returns:
        True if deleted, False if the entry did not exist.
    """
    entry = get_time_entry(db, entry_id)
    if entry is None:
        return False

    with atomic(db):
        user_id, day = entry.user_id, entry.date
        db.delete(entry)
        db.flush()
        overtime_service.invalidate_month(db, user_id, day)

    logger.info(f"Time entry {entry_id} deleted")
    return True
