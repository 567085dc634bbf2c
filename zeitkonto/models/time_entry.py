# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Time entry model."""

import datetime
import uuid as uuid_lib

from sqlalchemy import (
    Date,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Time,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from zeitkonto.models.base import Base, TimestampMixin
from zeitkonto.models.enums import WorkLocation


class TimeEntry(Base, TimestampMixin):
    """A single worked interval.

    Multiple entries per day are allowed (split shifts). ``hours`` is the
    net working time after breaks.
    """

    __tablename__ = "time_entries"
    __table_args__ = (Index("ix_time_entries_user_date", "user_id", "date"),)

    id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid_lib.uuid4,
    )
    user_id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
    )
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    start_time: Mapped[datetime.time] = mapped_column(Time, nullable=False)
    end_time: Mapped[datetime.time] = mapped_column(Time, nullable=False)
    break_minutes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    hours: Mapped[float] = mapped_column(Float, nullable=False)
    location: Mapped[WorkLocation] = mapped_column(
        Enum(WorkLocation),
        default=WorkLocation.OFFICE,
        nullable=False,
    )
    activity: Mapped[str | None] = mapped_column(String(200), nullable=True)
    project: Mapped[str | None] = mapped_column(String(200), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
