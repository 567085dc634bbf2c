# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Absence request API endpoints."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from zeitkonto.api.deps import get_db, get_holidays
from zeitkonto.models import AbsenceStatus, AbsenceType
from zeitkonto.schemas.absence import (
    AbsenceCreate,
    AbsenceDecision,
    AbsenceResponse,
    AbsenceUpdate,
)
from zeitkonto.services import absence_service
from zeitkonto.services.holiday_service import HolidayProvider

router = APIRouter()


@router.get("", response_model=list[AbsenceResponse])
def list_absences(
    user_id: uuid.UUID | None = Query(None),
    status_filter: AbsenceStatus | None = Query(None, alias="status"),
    type_filter: AbsenceType | None = Query(None, alias="type"),
    year: int | None = Query(None),
    db: Session = Depends(get_db),
) -> list[AbsenceResponse]:
    """List absence requests."""
    absences = absence_service.list_absences(
        db, user_id=user_id, status=status_filter, type=type_filter, year=year
    )
    return [AbsenceResponse.model_validate(a) for a in absences]


@router.post("", response_model=AbsenceResponse, status_code=status.HTTP_201_CREATED)
def submit_absence(
    data: AbsenceCreate,
    db: Session = Depends(get_db),
    holidays: HolidayProvider = Depends(get_holidays),
) -> AbsenceResponse:
    """Submit an absence request. Sick leave is approved immediately."""
    absence = absence_service.submit_absence(db, data, holidays)
    return AbsenceResponse.model_validate(absence)


@router.get("/{absence_id}", response_model=AbsenceResponse)
def get_absence(
    absence_id: uuid.UUID,
    db: Session = Depends(get_db),
) -> AbsenceResponse:
    """Get a single absence request."""
    absence = absence_service.get_absence(db, absence_id)
    if not absence:
        raise HTTPException(status_code=404, detail="Absence request not found")
    return AbsenceResponse.model_validate(absence)


@router.patch("/{absence_id}", response_model=AbsenceResponse)
def update_absence(
    absence_id: uuid.UUID,
    data: AbsenceUpdate,
    db: Session = Depends(get_db),
    holidays: HolidayProvider = Depends(get_holidays),
) -> AbsenceResponse:
    """Change a pending absence request."""
    absence = absence_service.update_absence(db, absence_id, data, holidays)
    return AbsenceResponse.model_validate(absence)


@router.post("/{absence_id}/approve", response_model=AbsenceResponse)
def approve_absence(
    absence_id: uuid.UUID,
    decision: AbsenceDecision,
    db: Session = Depends(get_db),
    holidays: HolidayProvider = Depends(get_holidays),
) -> AbsenceResponse:
    """Approve a pending absence request."""
    absence = absence_service.approve_absence(
        db, absence_id, decision.actor, decision.note, holidays
    )
    return AbsenceResponse.model_validate(absence)


@router.post("/{absence_id}/reject", response_model=AbsenceResponse)
def reject_absence(
    absence_id: uuid.UUID,
    decision: AbsenceDecision,
    db: Session = Depends(get_db),
) -> AbsenceResponse:
    """Reject a pending absence request."""
    absence = absence_service.reject_absence(
        db, absence_id, decision.actor, decision.note
    )
    return AbsenceResponse.model_validate(absence)


@router.delete("/{absence_id}", status_code=status.HTTP_204_NO_CONTENT)
def cancel_absence(
    absence_id: uuid.UUID,
    db: Session = Depends(get_db),
) -> None:
    """Cancel an absence request, reversing its bookings if approved."""
    absence_service.cancel_absence(db, absence_id)
