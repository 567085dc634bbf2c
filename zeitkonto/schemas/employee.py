# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Employee profile schemas."""

import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from zeitkonto.services.working_time import WEEKDAY_KEYS


def _check_schedule(value: dict[str, float] | None) -> dict[str, float] | None:
    if value is None:
        return value
    unknown = set(value) - set(WEEKDAY_KEYS)
    if unknown:
        raise ValueError(f"Unknown weekday(s) in schedule: {', '.join(sorted(unknown))}")
    if any(hours < 0 or hours > 24 for hours in value.values()):
        raise ValueError("Scheduled hours must be between 0 and 24")
    return value


class EmployeeBase(BaseModel):
    """Base schema for employees."""

    name: str = Field(..., min_length=1, max_length=200)
    email: str | None = Field(default=None, max_length=255)
    weekly_hours: float = Field(default=40.0, ge=0, le=80)
    work_schedule: dict[str, float] | None = None
    hire_date: date
    end_date: date | None = None
    vacation_days_per_year: float = Field(default=30.0, ge=0, le=366)
    holiday_region: str | None = Field(default=None, max_length=10)

    @field_validator("work_schedule")
    @classmethod
    def check_schedule(cls, value: dict[str, float] | None) -> dict[str, float] | None:
        return _check_schedule(value)


class EmployeeCreate(EmployeeBase):
    """Schema for creating an employee."""

    pass


class EmployeeUpdate(BaseModel):
    """Schema for updating an employee profile."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    email: str | None = Field(default=None, max_length=255)
    weekly_hours: float | None = Field(default=None, ge=0, le=80)
    work_schedule: dict[str, float] | None = None
    hire_date: date | None = None
    end_date: date | None = None
    vacation_days_per_year: float | None = Field(default=None, ge=0, le=366)
    holiday_region: str | None = Field(default=None, max_length=10)

    @field_validator("work_schedule")
    @classmethod
    def check_schedule(cls, value: dict[str, float] | None) -> dict[str, float] | None:
        return _check_schedule(value)


class EmployeeResponse(EmployeeBase):
    """Schema for employee responses."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    created_at: datetime
    updated_at: datetime
