# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Cached monthly overtime balance model."""

import datetime
import uuid as uuid_lib

from sqlalchemy import DateTime, Float, String, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from zeitkonto.models.base import Base


class MonthlyOvertimeBalance(Base):
    """Target and actual hours of one employee for one month.

    Rows are created lazily on first read and deleted (never patched) when
    their inputs change.
    """

    __tablename__ = "overtime_balance"
    __table_args__ = (
        UniqueConstraint("user_id", "month", name="uq_overtime_balance_user_month"),
    )

    id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid_lib.uuid4,
    )
    user_id: Mapped[uuid_lib.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False)
    month: Mapped[str] = mapped_column(String(7), nullable=False)  # YYYY-MM
    target_hours: Mapped[float] = mapped_column(Float, nullable=False)
    actual_hours: Mapped[float] = mapped_column(Float, nullable=False)
    computed_at: Mapped[datetime.datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        nullable=False,
    )

    @property
    def overtime(self) -> float:
        """Actual minus target hours."""
        return round(self.actual_hours - self.target_hours, 2)
