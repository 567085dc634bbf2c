# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Employee profile service."""

import logging
import uuid

from sqlalchemy.orm import Session

from zeitkonto.database import atomic
from zeitkonto.exceptions import InvalidRequestError, NotFoundError
from zeitkonto.models import Employee
from zeitkonto.schemas.employee import EmployeeCreate, EmployeeUpdate
from zeitkonto.services.holiday_service import HolidayProvider

logger = logging.getLogger(__name__)

# Profile fields that change which days and hours are targeted
CONTRACT_FIELDS = ("weekly_hours", "work_schedule", "hire_date", "end_date")


def get_employee(db: Session, employee_id: uuid.UUID) -> Employee | None:
    """Get an employee by ID."""
    return db.query(Employee).filter(Employee.id == employee_id).first()


def require_employee(db: Session, employee_id: uuid.UUID) -> Employee:
    """Get an employee by ID or raise NotFoundError."""
    employee = get_employee(db, employee_id)
    if employee is None:
        raise NotFoundError(f"Employee {employee_id} not found")
    return employee


def list_employees(db: Session) -> list[Employee]:
    """List all employees ordered by name."""
    return db.query(Employee).order_by(Employee.name).all()


def _check_dates(employee: Employee) -> None:
    if employee.end_date and employee.end_date < employee.hire_date:
        raise InvalidRequestError("End date must not be before hire date")


def create_employee(db: Session, data: EmployeeCreate) -> Employee:
    """Create an employee and open their vacation accounts.

    Vacation rows for the current and the next year are created in the
    same transaction.
    """
    from zeitkonto.services import vacation_service

    with atomic(db):
        employee = Employee(**data.model_dump())
        _check_dates(employee)
        db.add(employee)
        db.flush()
        vacation_service.initialize_for_employee(db, employee)

    db.refresh(employee)
    logger.info(f"Created employee {employee.id} ({employee.name})")
    return employee


def update_employee(
    db: Session,
    employee_id: uuid.UUID,
    data: EmployeeUpdate,
    holiday_provider: HolidayProvider | None = None,
) -> Employee:
    """Update an employee profile and trigger dependent recalculation.

    A changed annual entitlement or hire date is applied pro rata to every
    vacation year-row.
    A changed contract (weekly hours, schedule, hire or end date) resets
    all monthly overtime rows and regenerates the absence credits in the
    ledger.

    Args:
        db: Database session.
        employee_id: The employee to update.
        data: Fields to change; unset fields are left alone.
        holiday_provider: Holiday source for regenerating absence credits.

    Returns:
        The updated employee.

    Raises:
        NotFoundError: If the employee does not exist.
        InvalidRequestError: If the resulting dates are inconsistent.
    """
    from zeitkonto.services import overtime_service, vacation_service

    employee = require_employee(db, employee_id)
    changes = data.model_dump(exclude_unset=True)

    with atomic(db):
        changed = {
            field
            for field, value in changes.items()
            if getattr(employee, field) != value
        }
        for field, value in changes.items():
            setattr(employee, field, value)
        _check_dates(employee)
        db.flush()

        if changed & {"vacation_days_per_year", "hire_date"}:
            vacation_service.on_entitlement_changed(
                db, employee.id, employee.vacation_days_per_year
            )
        if changed & set(CONTRACT_FIELDS):
            overtime_service.recalculate_for_user(
                db, employee.id, rebuild=True, holiday_provider=holiday_provider
            )

    db.refresh(employee)
    logger.info(
        f"Updated employee {employee.id}: {', '.join(sorted(changed)) or 'no changes'}"
    )
    return employee
