# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Overtime API endpoints."""

import uuid
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from zeitkonto.api.deps import get_db, get_holidays
from zeitkonto.schemas.overtime import (
    CorrectionCreate,
    MonthlyOvertime,
    OvertimeSummary,
    TransactionResponse,
)
from zeitkonto.services import employee_service, ledger_service, overtime_service
from zeitkonto.services.holiday_service import HolidayProvider

router = APIRouter()


@router.get("/{user_id}/months/{month}", response_model=MonthlyOvertime)
def get_monthly_overtime(
    user_id: uuid.UUID,
    month: str,
    db: Session = Depends(get_db),
    holidays: HolidayProvider = Depends(get_holidays),
) -> MonthlyOvertime:
    """Get target, actual and overtime hours of one month (YYYY-MM)."""
    try:
        return overtime_service.get_monthly_overtime(db, user_id, month, holidays)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None


@router.get("/{user_id}/years/{year}", response_model=OvertimeSummary)
def get_overtime_summary(
    user_id: uuid.UUID,
    year: int,
    db: Session = Depends(get_db),
    holidays: HolidayProvider = Depends(get_holidays),
) -> OvertimeSummary:
    """Get monthly overtime for a whole year."""
    return overtime_service.get_overtime_summary(db, user_id, year, holidays)


@router.get("/{user_id}/balance")
def get_overtime_balance(
    user_id: uuid.UUID,
    until: date | None = Query(None),
    hours_required: float | None = Query(None, ge=0),
    db: Session = Depends(get_db),
    holidays: HolidayProvider = Depends(get_holidays),
) -> dict:
    """Get accumulated overtime, optionally checking a planned withdrawal."""
    balance = overtime_service.get_overtime_balance(db, user_id, until, holidays)
    result: dict = {"user_id": str(user_id), "balance": balance}
    if hours_required is not None:
        result["sufficient"] = overtime_service.has_sufficient_overtime_balance(
            db, user_id, hours_required, until=until, holiday_provider=holidays
        )
    return result


@router.get("/{user_id}/transactions", response_model=list[TransactionResponse])
def list_transactions(
    user_id: uuid.UUID,
    start: date | None = Query(None),
    end: date | None = Query(None),
    db: Session = Depends(get_db),
) -> list[TransactionResponse]:
    """List ledger rows ordered by date and insertion."""
    employee_service.require_employee(db, user_id)
    rows = ledger_service.get_transactions_in_range(db, user_id, start, end)
    return [TransactionResponse.model_validate(r) for r in rows]


@router.post(
    "/{user_id}/corrections",
    response_model=list[TransactionResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_correction(
    user_id: uuid.UUID,
    data: CorrectionCreate,
    db: Session = Depends(get_db),
) -> list[TransactionResponse]:
    """Record a manual correction; returns the day's ledger rows."""
    overtime_service.record_correction(
        db, user_id, data.date, data.hours, data.description, data.created_by
    )
    rows = ledger_service.get_transactions_in_range(db, user_id, data.date, data.date)
    return [TransactionResponse.model_validate(r) for r in rows]


@router.post("/{user_id}/recalculate")
def recalculate(
    user_id: uuid.UUID,
    rebuild: bool = Query(False),
    db: Session = Depends(get_db),
    holidays: HolidayProvider = Depends(get_holidays),
) -> dict:
    """Drop cached monthly balances, optionally regenerating absence credits."""
    count = overtime_service.recalculate_for_user(
        db, user_id, rebuild=rebuild, holiday_provider=holidays
    )
    return {"user_id": str(user_id), "monthly_balances_reset": count}
