# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for monthly overtime aggregation."""

import uuid
from datetime import date, time

import pytest

from zeitkonto.config import settings
from zeitkonto.exceptions import NotFoundError
from zeitkonto.models import (
    AbsenceType,
    MonthlyOvertimeBalance,
    ReferenceType,
    TimeEntry,
    TransactionType,
    UnpaidLeavePolicy,
)
from zeitkonto.schemas.absence import AbsenceCreate
from zeitkonto.schemas.employee import EmployeeUpdate
from zeitkonto.schemas.overtime import TransactionCreate
from zeitkonto.schemas.time_entry import TimeEntryCreate
from zeitkonto.services import (
    absence_service,
    employee_service,
    ledger_service,
    overtime_service,
    time_entry_service,
)
from zeitkonto.services.holiday_service import StaticHolidayProvider

FEBRUARY = "2027-02"


def work(db, employee, day, start=time(8, 0), end=time(17, 0), break_minutes=60):
    entry, _ = time_entry_service.create_time_entry(
        db,
        TimeEntryCreate(
            user_id=employee.id,
            date=day,
            start_time=start,
            end_time=end,
            break_minutes=break_minutes,
        ),
    )
    return entry


def absence(db, employee, type, start, end, approve=True):
    request = absence_service.submit_absence(
        db,
        AbsenceCreate(user_id=employee.id, type=type, start_date=start, end_date=end),
    )
    if approve and request.status.value == "pending":
        request = absence_service.approve_absence(db, request.id, "manager")
    return request


def test_empty_month(db_session, employee):
    result = overtime_service.get_monthly_overtime(db_session, employee.id, FEBRUARY)

    assert result.target_hours == 160.0
    assert result.actual_hours == 0.0
    assert result.overtime == -160.0


def test_time_entries_count_as_actual_hours(db_session, employee):
    work(db_session, employee, date(2027, 2, 1))
    work(db_session, employee, date(2027, 2, 2), end=time(19, 0))

    result = overtime_service.get_monthly_overtime(db_session, employee.id, FEBRUARY)

    assert result.actual_hours == 18.0


def test_holidays_reduce_target(db_session, employee):
    provider = StaticHolidayProvider([date(2027, 2, 1), date(2027, 2, 6)])

    result = overtime_service.get_monthly_overtime(
        db_session, employee.id, FEBRUARY, holiday_provider=provider
    )

    # the Saturday holiday does not count twice
    assert result.target_hours == 152.0


def test_monthly_row_is_cached_until_invalidated(db_session, employee):
    overtime_service.get_monthly_overtime(db_session, employee.id, FEBRUARY)
    db_session.add(
        TimeEntry(
            user_id=employee.id,
            date=date(2027, 2, 3),
            start_time=time(8, 0),
            end_time=time(16, 0),
            break_minutes=0,
            hours=8.0,
        )
    )
    db_session.commit()

    cached = overtime_service.get_monthly_overtime(db_session, employee.id, FEBRUARY)
    assert cached.actual_hours == 0.0

    assert overtime_service.invalidate_month(db_session, employee.id, date(2027, 2, 3)) == 1
    fresh = overtime_service.get_monthly_overtime(db_session, employee.id, FEBRUARY)
    assert fresh.actual_hours == 8.0


def test_entries_reflected_in_ledger_are_not_counted_twice(db_session, employee):
    entry = work(db_session, employee, date(2027, 2, 1))
    ledger_service.create_transaction(
        db_session,
        TransactionCreate(
            user_id=employee.id,
            date=entry.date,
            type=TransactionType.EARNED,
            hours=entry.hours,
            reference_type=ReferenceType.TIME_ENTRY,
            reference_id=entry.id,
        ),
    )

    target, actual = overtime_service.calculate_month(db_session, employee, FEBRUARY)

    assert (target, actual) == (160.0, 8.0)


def test_sick_leave_is_neutral(db_session, employee):
    absence(db_session, employee, AbsenceType.SICK, date(2027, 2, 1), date(2027, 2, 5))
    for day in range(8, 27):
        if date(2027, 2, day).weekday() < 5:
            work(db_session, employee, date(2027, 2, day))

    result = overtime_service.get_monthly_overtime(db_session, employee.id, FEBRUARY)

    assert result.target_hours == 160.0
    assert result.actual_hours == 160.0
    assert result.overtime == 0.0


def test_vacation_is_credited(db_session, employee):
    absence(
        db_session, employee, AbsenceType.VACATION, date(2027, 2, 1), date(2027, 2, 7)
    )

    result = overtime_service.get_monthly_overtime(db_session, employee.id, FEBRUARY)

    assert result.actual_hours == 40.0
    # vacation is not written to the ledger
    assert ledger_service.get_ledger_balance(db_session, employee.id) == 0.0


def test_pending_vacation_is_not_credited(db_session, employee):
    absence(
        db_session,
        employee,
        AbsenceType.VACATION,
        date(2027, 2, 1),
        date(2027, 2, 5),
        approve=False,
    )

    result = overtime_service.get_monthly_overtime(db_session, employee.id, FEBRUARY)

    assert result.actual_hours == 0.0


def test_overtime_compensation_reduces_overtime(db_session, employee):
    overtime_service.record_correction(
        db_session, employee.id, date(2027, 1, 15), 168.0, "January worked off-system"
    )
    absence(
        db_session,
        employee,
        AbsenceType.OVERTIME_COMP,
        date(2027, 2, 1),
        date(2027, 2, 2),
    )

    result = overtime_service.get_monthly_overtime(db_session, employee.id, FEBRUARY)

    # credit and compensation cancel out, the two days stay unworked
    assert result.actual_hours == 0.0
    assert result.overtime == -160.0
    assert ledger_service.get_ledger_balance(db_session, employee.id) == 168.0
    rows = ledger_service.get_transactions_in_range(db_session, employee.id)
    assert len(rows) == 5


def test_unpaid_leave_reduces_target(db_session, employee):
    absence(db_session, employee, AbsenceType.UNPAID, date(2027, 2, 1), date(2027, 2, 5))

    result = overtime_service.get_monthly_overtime(db_session, employee.id, FEBRUARY)

    assert result.target_hours == 120.0
    assert result.actual_hours == 0.0


def test_unpaid_leave_without_credit(db_session, employee):
    absence(db_session, employee, AbsenceType.UNPAID, date(2027, 2, 1), date(2027, 2, 5))

    target, actual = overtime_service.calculate_month(
        db_session, employee, FEBRUARY, unpaid_policy=UnpaidLeavePolicy.NO_CREDIT
    )

    assert (target, actual) == (160.0, 0.0)


def test_unpaid_leave_as_ledger_adjustment(db_session, employee, monkeypatch):
    monkeypatch.setattr(
        settings, "unpaid_leave_policy", UnpaidLeavePolicy.LEDGER_ADJUSTMENT
    )
    absence(db_session, employee, AbsenceType.UNPAID, date(2027, 2, 1), date(2027, 2, 5))

    result = overtime_service.get_monthly_overtime(db_session, employee.id, FEBRUARY)

    assert result.target_hours == 160.0
    assert result.actual_hours == 40.0
    rows = ledger_service.get_transactions_in_range(db_session, employee.id)
    assert {row.type for row in rows} == {TransactionType.UNPAID_ADJUSTMENT}


def test_target_is_clipped_to_employment(db_session, make_employee):
    employee = make_employee(hire_date=date(2027, 2, 15))

    result = overtime_service.get_monthly_overtime(db_session, employee.id, FEBRUARY)

    assert result.target_hours == 80.0


def test_target_is_clipped_to_end_date(db_session, make_employee):
    employee = make_employee(end_date=date(2027, 2, 12))

    result = overtime_service.get_monthly_overtime(db_session, employee.id, FEBRUARY)

    assert result.target_hours == 80.0


def test_work_schedule_drives_target(db_session, make_employee):
    employee = make_employee(
        weekly_hours=20.0,
        work_schedule={"monday": 8, "tuesday": 8, "wednesday": 4},
    )

    result = overtime_service.get_monthly_overtime(db_session, employee.id, FEBRUARY)

    assert result.target_hours == 80.0


def test_contract_change_resets_monthly_rows(db_session, employee):
    assert (
        overtime_service.get_monthly_overtime(db_session, employee.id, FEBRUARY).target_hours
        == 160.0
    )

    employee_service.update_employee(
        db_session, employee.id, EmployeeUpdate(weekly_hours=20.0)
    )

    result = overtime_service.get_monthly_overtime(db_session, employee.id, FEBRUARY)
    assert result.target_hours == 80.0


def test_schedule_change_rebuilds_absence_credits(db_session, employee):
    absence(db_session, employee, AbsenceType.SICK, date(2027, 2, 1), date(2027, 2, 5))
    assert ledger_service.get_ledger_balance(db_session, employee.id) == 40.0

    employee_service.update_employee(
        db_session,
        employee.id,
        EmployeeUpdate(
            work_schedule={
                "monday": 4,
                "tuesday": 8,
                "wednesday": 8,
                "thursday": 8,
                "friday": 8,
            }
        ),
    )

    assert ledger_service.get_ledger_balance(db_session, employee.id) == 36.0
    result = overtime_service.get_monthly_overtime(db_session, employee.id, FEBRUARY)
    assert result.actual_hours == 36.0


def test_rebuild_keeps_manual_corrections(db_session, employee):
    absence(db_session, employee, AbsenceType.SICK, date(2027, 2, 1), date(2027, 2, 2))
    overtime_service.record_correction(
        db_session, employee.id, date(2027, 2, 10), 3.0, "Late booking", "hr"
    )

    written = overtime_service.rebuild_ledger(db_session, employee.id)

    assert written == 2
    assert ledger_service.get_ledger_balance(db_session, employee.id) == 19.0



def test_rebuild_keeps_rows_of_imported_time_entries(db_session, employee):
    entry = work(db_session, employee, date(2027, 2, 1))
    ledger_service.create_transaction(
        db_session,
        TransactionCreate(
            user_id=employee.id,
            date=entry.date,
            type=TransactionType.EARNED,
            hours=entry.hours,
            reference_type=ReferenceType.TIME_ENTRY,
            reference_id=entry.id,
        ),
    )

    assert overtime_service.rebuild_ledger(db_session, employee.id) == 0

    rows = ledger_service.get_transactions_in_range(db_session, employee.id)
    assert [(row.type, row.reference_id) for row in rows] == [
        (TransactionType.EARNED, entry.id)
    ]
    result = overtime_service.get_monthly_overtime(db_session, employee.id, FEBRUARY)
    assert result.actual_hours == 8.0


def test_rebuild_drops_cached_months(db_session, employee):
    absence(db_session, employee, AbsenceType.SICK, date(2027, 2, 1), date(2027, 2, 5))
    cached = overtime_service.get_monthly_overtime(db_session, employee.id, FEBRUARY)
    assert cached.actual_hours == 40.0

    employee.weekly_hours = 20.0
    db_session.commit()
    overtime_service.rebuild_ledger(db_session, employee.id)

    result = overtime_service.get_monthly_overtime(db_session, employee.id, FEBRUARY)
    assert result.actual_hours == 20.0
    assert result.target_hours == 80.0

def test_recalculate_for_user(db_session, employee):
    overtime_service.get_overtime_summary(db_session, employee.id, 2027)

    assert overtime_service.recalculate_for_user(db_session, employee.id) == 12
    assert (
        db_session.query(MonthlyOvertimeBalance)
        .filter(MonthlyOvertimeBalance.user_id == employee.id)
        .count()
        == 0
    )


def test_record_correction_invalidates_month(db_session, employee):
    overtime_service.get_monthly_overtime(db_session, employee.id, FEBRUARY)

    overtime_service.record_correction(
        db_session, employee.id, date(2027, 2, 10), 5.5, "Trade fair weekend"
    )

    result = overtime_service.get_monthly_overtime(db_session, employee.id, FEBRUARY)
    assert result.actual_hours == 5.5


def test_overtime_summary(db_session, employee):
    overtime_service.record_correction(
        db_session, employee.id, date(2027, 3, 1), 2.0, "Opening balance"
    )

    summary = overtime_service.get_overtime_summary(db_session, employee.id, 2027)

    assert [m.month for m in summary.months][:2] == ["2027-01", "2027-02"]
    assert len(summary.months) == 12
    assert summary.total_overtime == pytest.approx(
        summary.total_actual_hours - summary.total_target_hours, abs=0.01
    )
    assert summary.ledger_balance == 2.0


def test_overtime_balance_and_sufficiency(db_session, employee):
    # January 2027 has 21 working days (168h)
    overtime_service.record_correction(
        db_session, employee.id, date(2027, 1, 15), 170.0, "Imported hours"
    )
    until = date(2027, 1, 31)

    assert overtime_service.get_overtime_balance(db_session, employee.id, until) == 2.0
    assert overtime_service.has_sufficient_overtime_balance(
        db_session, employee.id, 22.0, until=until
    )
    assert not overtime_service.has_sufficient_overtime_balance(
        db_session, employee.id, 22.5, until=until
    )
    assert overtime_service.has_sufficient_overtime_balance(
        db_session, employee.id, 22.5, max_minus_hours=-40.0, until=until
    )


def test_invalid_month(db_session, employee):
    with pytest.raises(ValueError):
        overtime_service.get_monthly_overtime(db_session, employee.id, "2027-13")


def test_unknown_employee(db_session):
    with pytest.raises(NotFoundError):
        overtime_service.get_monthly_overtime(db_session, uuid.uuid4(), FEBRUARY)
