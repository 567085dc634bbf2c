# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Time entry schemas."""

import uuid
import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from zeitkonto.models.enums import WorkLocation
from zeitkonto.schemas.compliance import ValidationResult


class TimeEntryBase(BaseModel):
    """Base schema for time entries."""

    date: datetime.date
    start_time: datetime.time
    end_time: datetime.time
    break_minutes: int = Field(default=0, ge=0)
    location: WorkLocation = WorkLocation.OFFICE
    activity: str | None = Field(default=None, max_length=200)
    project: str | None = Field(default=None, max_length=200)
    notes: str | None = None

    @model_validator(mode="after")
    def check_times(self):
        if self.end_time <= self.start_time:
            raise ValueError("End time must be after start time")
        gross_minutes = (self.end_time.hour * 60 + self.end_time.minute) - (
            self.start_time.hour * 60 + self.start_time.minute
        )
        if self.break_minutes >= gross_minutes:
            raise ValueError("Break must be shorter than the working interval")
        return self


class TimeEntryCreate(TimeEntryBase):
    """Schema for creating a time entry."""

    user_id: uuid.UUID


class TimeEntryCandidate(TimeEntryCreate):
    """A time entry to be checked before it is stored.

    ``entry_id`` is set when an existing entry is being edited so that it
    is not counted twice.
    """

    entry_id: uuid.UUID | None = None


class TimeEntryUpdate(BaseModel):
    """Schema for updating a time entry."""

    start_time: datetime.time | None = None
    end_time: datetime.time | None = None
    break_minutes: int | None = Field(default=None, ge=0)
    location: WorkLocation | None = None
    activity: str | None = Field(default=None, max_length=200)
    project: str | None = Field(default=None, max_length=200)
    notes: str | None = None
    date: datetime.date | None = None


class TimeEntryResponse(BaseModel):
    """Schema for time entry responses."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    date: datetime.date
    start_time: datetime.time
    end_time: datetime.time
    break_minutes: int
    hours: float
    location: WorkLocation
    activity: str | None = None
    project: str | None = None
    notes: str | None = None
    created_at: datetime.datetime
    updated_at: datetime.datetime


class TimeEntryWithWarnings(BaseModel):
    """A stored time entry together with its compliance findings."""

    entry: TimeEntryResponse
    validation: ValidationResult
