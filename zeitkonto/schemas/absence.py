# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Absence request schemas."""

import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, model_validator

from zeitkonto.models.enums import AbsenceStatus, AbsenceType


class AbsenceCreate(BaseModel):
    """Schema for submitting an absence request."""

    user_id: uuid.UUID
    type: AbsenceType
    start_date: date
    end_date: date
    reason: str | None = None

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("End date must be on or after start date")
        return self


class AbsenceUpdate(BaseModel):
    """Schema for changing a pending absence request."""

    start_date: date | None = None
    end_date: date | None = None
    reason: str | None = None


class AbsenceDecision(BaseModel):
    """Approve or reject payload."""

    actor: str
    note: str | None = None


class AbsenceResponse(BaseModel):
    """Schema for absence request responses."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    type: AbsenceType
    start_date: date
    end_date: date
    days_required: float
    status: AbsenceStatus
    reason: str | None = None
    admin_note: str | None = None
    approved_by: str | None = None
    approved_at: datetime | None = None
    rejected_by: str | None = None
    rejected_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
