# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Enumeration types for database models."""

from enum import Enum


class TransactionType(str, Enum):
    """Kinds of overtime ledger rows."""

    EARNED = "earned"
    COMPENSATION = "compensation"
    CORRECTION = "correction"
    CARRYOVER = "carryover"
    VACATION_CREDIT = "vacation_credit"
    SICK_CREDIT = "sick_credit"
    OVERTIME_COMP_CREDIT = "overtime_comp_credit"
    SPECIAL_CREDIT = "special_credit"
    UNPAID_ADJUSTMENT = "unpaid_adjustment"


class ReferenceType(str, Enum):
    """Origin of a ledger row."""

    TIME_ENTRY = "time_entry"
    ABSENCE = "absence"
    MANUAL = "manual"
    SYSTEM = "system"


class AbsenceType(str, Enum):
    """Absence request type enumeration."""

    VACATION = "vacation"
    SICK = "sick"
    UNPAID = "unpaid"
    OVERTIME_COMP = "overtime_comp"


class AbsenceStatus(str, Enum):
    """Absence request lifecycle states."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class WorkLocation(str, Enum):
    """Work location types."""

    OFFICE = "office"
    HOMEOFFICE = "homeoffice"
    FIELD = "field"


class UnpaidLeavePolicy(str, Enum):
    """How approved unpaid leave affects the overtime account.

    - REDUCE_TARGET: unpaid days are removed from the target hours
    - LEDGER_ADJUSTMENT: target stays, an unpaid_adjustment row credits the day
    - NO_CREDIT: target stays and nothing is credited (time debt)
    """

    REDUCE_TARGET = "reduce_target"
    LEDGER_ADJUSTMENT = "ledger_adjustment"
    NO_CREDIT = "no_credit"
