# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Database models package."""

from zeitkonto.models.absence_request import AbsenceRequest
from zeitkonto.models.base import Base, TimestampMixin
from zeitkonto.models.employee import Employee
from zeitkonto.models.enums import (
    AbsenceStatus,
    AbsenceType,
    ReferenceType,
    TransactionType,
    UnpaidLeavePolicy,
    WorkLocation,
)
from zeitkonto.models.monthly_overtime_balance import MonthlyOvertimeBalance
from zeitkonto.models.overtime_transaction import OvertimeTransaction
from zeitkonto.models.time_entry import TimeEntry
from zeitkonto.models.vacation_balance import VacationBalance

__all__ = [
    "AbsenceRequest",
    "AbsenceStatus",
    "AbsenceType",
    "Base",
    "Employee",
    "MonthlyOvertimeBalance",
    "OvertimeTransaction",
    "ReferenceType",
    "TimeEntry",
    "TimestampMixin",
    "TransactionType",
    "UnpaidLeavePolicy",
    "VacationBalance",
    "WorkLocation",
]
