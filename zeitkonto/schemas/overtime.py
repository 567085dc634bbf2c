# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Overtime ledger and monthly balance schemas."""

import uuid
import datetime

from pydantic import BaseModel, ConfigDict, Field

from zeitkonto.models.enums import ReferenceType, TransactionType


class TransactionCreate(BaseModel):
    """Parameters for a new ledger row.

    balance_before/balance_after are normally derived by the ledger. Passing
    them explicitly is meant for bulk imports and migrations only.
    """

    user_id: uuid.UUID
    date: datetime.date
    type: TransactionType
    hours: float
    description: str | None = None
    reference_type: ReferenceType | None = None
    reference_id: uuid.UUID | None = None
    created_by: str | None = None
    balance_before: float | None = None
    balance_after: float | None = None


class TransactionResponse(BaseModel):
    """Schema for ledger rows."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: uuid.UUID
    date: datetime.date
    type: TransactionType
    hours: float
    description: str | None = None
    reference_type: ReferenceType | None = None
    reference_id: uuid.UUID | None = None
    created_by: str | None = None
    balance_before: float
    balance_after: float
    created_at: datetime.datetime


class CorrectionCreate(BaseModel):
    """Manual correction of an employee's time account."""

    date: datetime.date
    hours: float
    description: str = Field(..., min_length=1)
    created_by: str | None = None


class MonthlyOvertime(BaseModel):
    """Target, actual and resulting overtime hours of one month."""

    user_id: uuid.UUID
    month: str
    target_hours: float
    actual_hours: float
    overtime: float


class OvertimeSummary(BaseModel):
    """Monthly overtime for a whole year."""

    user_id: uuid.UUID
    year: int
    months: list[MonthlyOvertime]
    total_target_hours: float
    total_actual_hours: float
    total_overtime: float
    ledger_balance: float
