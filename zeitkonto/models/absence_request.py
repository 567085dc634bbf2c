# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Absence request model."""

import datetime
import uuid as uuid_lib

from sqlalchemy import (
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from zeitkonto.models.base import Base, TimestampMixin
from zeitkonto.models.enums import AbsenceStatus, AbsenceType


class AbsenceRequest(Base, TimestampMixin):
    """A vacation, sick, unpaid or overtime compensation request."""

    __tablename__ = "absence_requests"
    __table_args__ = (
        Index("ix_absence_requests_user_dates", "user_id", "start_date", "end_date"),
    )

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
    type: Mapped[AbsenceType] = mapped_column(Enum(AbsenceType), nullable=False)
    start_date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    end_date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    days_required: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    status: Mapped[AbsenceStatus] = mapped_column(
        Enum(AbsenceStatus),
        default=AbsenceStatus.PENDING,
        nullable=False,
    )
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    admin_note: Mapped[str | None] = mapped_column(Text, nullable=True)
    approved_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    approved_at: Mapped[datetime.datetime | None] = mapped_column(
        DateTime, nullable=True
    )
    rejected_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    rejected_at: Mapped[datetime.datetime | None] = mapped_column(
        DateTime, nullable=True
    )
