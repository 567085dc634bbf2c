# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Employee profile API endpoints."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from zeitkonto.api.deps import get_db, get_holidays
from zeitkonto.schemas.employee import EmployeeCreate, EmployeeResponse, EmployeeUpdate
from zeitkonto.services import employee_service
from zeitkonto.services.holiday_service import HolidayProvider

router = APIRouter()


@router.get("", response_model=list[EmployeeResponse])
def list_employees(db: Session = Depends(get_db)) -> list[EmployeeResponse]:
    """List all employees."""
    return [
        EmployeeResponse.model_validate(e) for e in employee_service.list_employees(db)
    ]


@router.post("", response_model=EmployeeResponse, status_code=status.HTTP_201_CREATED)
def create_employee(
    data: EmployeeCreate,
    db: Session = Depends(get_db),
) -> EmployeeResponse:
    """Create an employee and open their vacation accounts."""
    employee = employee_service.create_employee(db, data)
    return EmployeeResponse.model_validate(employee)


@router.get("/{employee_id}", response_model=EmployeeResponse)
def get_employee(
    employee_id: uuid.UUID,
    db: Session = Depends(get_db),
) -> EmployeeResponse:
    """Get a single employee."""
    employee = employee_service.get_employee(db, employee_id)
    if not employee:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Employee not found",
        )
    return EmployeeResponse.model_validate(employee)


@router.patch("/{employee_id}", response_model=EmployeeResponse)
def update_employee(
    employee_id: uuid.UUID,
    data: EmployeeUpdate,
    db: Session = Depends(get_db),
    holidays: HolidayProvider = Depends(get_holidays),
) -> EmployeeResponse:
    """Update a profile; contract changes trigger overtime recalculation."""
    employee = employee_service.update_employee(db, employee_id, data, holidays)
    return EmployeeResponse.model_validate(employee)
