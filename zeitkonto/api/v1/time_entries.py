# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Time entry API endpoints."""

import uuid
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from zeitkonto.api.deps import get_db
from zeitkonto.schemas.compliance import ValidationResult
from zeitkonto.schemas.time_entry import (
    TimeEntryCandidate,
    TimeEntryCreate,
    TimeEntryResponse,
    TimeEntryUpdate,
    TimeEntryWithWarnings,
)
from zeitkonto.services import employee_service, time_entry_service

router = APIRouter()


@router.post("/validate", response_model=ValidationResult)
def validate_time_entry(
    candidate: TimeEntryCandidate,
    db: Session = Depends(get_db),
) -> ValidationResult:
    """Check a time entry against the working-time act without storing it."""
    employee_service.require_employee(db, candidate.user_id)
    return time_entry_service.validate_time_entry(db, candidate)


@router.get("", response_model=list[TimeEntryResponse])
def list_time_entries(
    user_id: uuid.UUID,
    start: date | None = Query(None),
    end: date | None = Query(None),
    db: Session = Depends(get_db),
) -> list[TimeEntryResponse]:
    """List an employee's time entries."""
    entries = time_entry_service.list_time_entries(db, user_id, start, end)
    return [TimeEntryResponse.model_validate(e) for e in entries]


@router.post(
    "", response_model=TimeEntryWithWarnings, status_code=status.HTTP_201_CREATED
)
def create_time_entry(
    data: TimeEntryCreate,
    db: Session = Depends(get_db),
) -> TimeEntryWithWarnings:
    """Store a time entry; compliance findings are returned, never enforced."""
    entry, validation = time_entry_service.create_time_entry(db, data)
    return TimeEntryWithWarnings(
        entry=TimeEntryResponse.model_validate(entry),
        validation=validation,
    )


@router.patch("/{entry_id}", response_model=TimeEntryWithWarnings)
def update_time_entry(
    entry_id: uuid.UUID,
    data: TimeEntryUpdate,
    db: Session = Depends(get_db),
) -> TimeEntryWithWarnings:
    """Update a time entry."""
    entry, validation = time_entry_service.update_time_entry(db, entry_id, data)
    return TimeEntryWithWarnings(
        entry=TimeEntryResponse.model_validate(entry),
        validation=validation,
    )


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_time_entry(
    entry_id: uuid.UUID,
    db: Session = Depends(get_db),
) -> None:
    """Delete a time entry."""
    if not time_entry_service.delete_time_entry(db, entry_id):
        raise HTTPException(status_code=404, detail="Time entry not found")
