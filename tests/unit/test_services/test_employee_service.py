# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for employee profiles."""

import uuid
from datetime import date

import pytest
from pydantic import ValidationError

from zeitkonto.exceptions import InvalidRequestError, NotFoundError
from zeitkonto.models import MonthlyOvertimeBalance, VacationBalance
from zeitkonto.schemas.employee import EmployeeCreate, EmployeeUpdate
from zeitkonto.services import employee_service, overtime_service


def test_create_employee_opens_vacation_accounts(db_session, employee):
    rows = (
        db_session.query(VacationBalance)
        .filter(VacationBalance.user_id == employee.id)
        .order_by(VacationBalance.year)
        .all()
    )

    this_year = date.today().year
    assert [row.year for row in rows] == [this_year, this_year + 1]


def test_create_employee_with_end_before_hire(db_session):
    with pytest.raises(InvalidRequestError):
        employee_service.create_employee(
            db_session,
            EmployeeCreate(
                name="Max",
                hire_date=date(2027, 5, 1),
                end_date=date(2027, 4, 30),
            ),
        )

    assert employee_service.list_employees(db_session) == []


def test_schedule_with_unknown_weekday():
    with pytest.raises(ValidationError):
        EmployeeCreate(
            name="Max", hire_date=date(2027, 5, 1), work_schedule={"funday": 8}
        )


def test_list_employees_ordered_by_name(db_session, make_employee):
    make_employee(name="Zoe")
    make_employee(name="Anna")

    assert [e.name for e in employee_service.list_employees(db_session)] == [
        "Anna",
        "Zoe",
    ]


def test_update_without_contract_change_keeps_monthly_rows(db_session, employee):
    overtime_service.get_monthly_overtime(db_session, employee.id, "2027-02")

    updated = employee_service.update_employee(
        db_session, employee.id, EmployeeUpdate(name="Erika Musterfrau")
    )

    assert updated.name == "Erika Musterfrau"
    assert (
        db_session.query(MonthlyOvertimeBalance)
        .filter(MonthlyOvertimeBalance.user_id == employee.id)
        .count()
        == 1
    )


def test_update_weekly_hours_resets_monthly_rows(db_session, employee):
    overtime_service.get_monthly_overtime(db_session, employee.id, "2027-02")

    employee_service.update_employee(
        db_session, employee.id, EmployeeUpdate(weekly_hours=30.0)
    )

    assert (
        db_session.query(MonthlyOvertimeBalance)
        .filter(MonthlyOvertimeBalance.user_id == employee.id)
        .count()
        == 0
    )
    month = overtime_service.get_monthly_overtime(db_session, employee.id, "2027-02")
    assert month.target_hours == 120.0


def test_update_end_before_hire_is_rolled_back(db_session, employee):
    with pytest.raises(InvalidRequestError):
        employee_service.update_employee(
            db_session, employee.id, EmployeeUpdate(end_date=date(2026, 12, 31))
        )

    db_session.expire_all()
    assert employee_service.get_employee(db_session, employee.id).end_date is None


def test_unknown_employee(db_session):
    with pytest.raises(NotFoundError):
        employee_service.update_employee(
            db_session, uuid.uuid4(), EmployeeUpdate(name="Nobody")
        )
