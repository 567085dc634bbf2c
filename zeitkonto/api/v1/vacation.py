# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Vacation balance API endpoints."""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from zeitkonto.api.deps import get_db, get_holidays
from zeitkonto.schemas.vacation import RolloverResult, VacationBalanceSummary
from zeitkonto.services import vacation_service
from zeitkonto.services.holiday_service import HolidayProvider

router = APIRouter()


@router.get("/{user_id}/{year}", response_model=VacationBalanceSummary)
def get_vacation_balance(
    user_id: uuid.UUID,
    year: int,
    db: Session = Depends(get_db),
    holidays: HolidayProvider = Depends(get_holidays),
) -> VacationBalanceSummary:
    """Get entitlement, carryover, taken and remaining days of a year."""
    return vacation_service.get_balance(db, user_id, year, holidays)


@router.post("/rollover/{from_year}", response_model=list[RolloverResult])
def rollover(
    from_year: int,
    cap: float | None = Query(None, ge=0),
    db: Session = Depends(get_db),
    holidays: HolidayProvider = Depends(get_holidays),
) -> list[RolloverResult]:
    """Carry remaining days of every employee into the next year."""
    return vacation_service.rollover_all(db, from_year, cap, holidays)
