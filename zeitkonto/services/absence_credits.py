# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Ledger rows produced by approved absences."""

from collections.abc import Collection
from datetime import date

from zeitkonto.models import (
    AbsenceRequest,
    AbsenceType,
    Employee,
    ReferenceType,
    TransactionType,
    UnpaidLeavePolicy,
)
from zeitkonto.schemas.overtime import TransactionCreate
from zeitkonto.services.working_time import daily_target_hours, working_days

_LABELS = {
    AbsenceType.SICK: "Sick leave",
    AbsenceType.OVERTIME_COMP: "Overtime compensation",
    AbsenceType.UNPAID: "Unpaid leave",
}


def build_absence_transactions(
    employee: Employee,
    absence: AbsenceRequest,
    holidays: Collection[date],
    unpaid_policy: UnpaidLeavePolicy,
    start: date | None = None,
    end: date | None = None,
) -> list[TransactionCreate]:
    """Build the ledger rows for an approved absence.

    One row per working day of the absence, crediting that day's target
    hours:

    - sick: sick_credit
    - overtime_comp: overtime_comp_credit plus an equal negative
      compensation row, so the day off is paid from accrued overtime
    - unpaid: unpaid_adjustment, only under the ledger_adjustment policy
    - vacation: nothing (credited from the absence records directly)

    Args:
        employee: The absent employee.
        absence: The approved request.
        holidays: Holiday dates covering the absence.
        unpaid_policy: Active unpaid leave policy.
        start: Optional lower bound, e.g. when rebuilding a date range.
        end: Optional upper bound.

    Returns:
        Transactions in date order, empty if the type earns no credit.
    """
    if absence.type == AbsenceType.SICK:
        credit_type = TransactionType.SICK_CREDIT
    elif absence.type == AbsenceType.OVERTIME_COMP:
        credit_type = TransactionType.OVERTIME_COMP_CREDIT
    elif (
        absence.type == AbsenceType.UNPAID
        and unpaid_policy == UnpaidLeavePolicy.LEDGER_ADJUSTMENT
    ):
        credit_type = TransactionType.UNPAID_ADJUSTMENT
    else:
        return []

    range_start = max(absence.start_date, start) if start else absence.start_date
    range_end = min(absence.end_date, end) if end else absence.end_date
    profile = employee.work_profile
    label = _LABELS[absence.type]
    actor = absence.approved_by or "system"

    transactions: list[TransactionCreate] = []
    for day in working_days(profile, range_start, range_end, holidays):
        hours = daily_target_hours(profile, day)
        transactions.append(
            TransactionCreate(
                user_id=absence.user_id,
                date=day,
                type=credit_type,
                hours=hours,
                description=f"{label} {absence.start_date} to {absence.end_date}",
                reference_type=ReferenceType.ABSENCE,
                reference_id=absence.id,
                created_by=actor,
            )
        )
        if absence.type == AbsenceType.OVERTIME_COMP:
            transactions.append(
                TransactionCreate(
                    user_id=absence.user_id,
                    date=day,
                    type=TransactionType.COMPENSATION,
                    hours=-hours,
                    description=f"Overtime taken as time off on {day}",
                    reference_type=ReferenceType.ABSENCE,
                    reference_id=absence.id,
                    created_by=actor,
                )
            )
    return transactions
