# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Employee profile model."""

import datetime
import uuid as uuid_lib

from sqlalchemy import JSON, Date, Float, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from zeitkonto.models.base import Base, TimestampMixin
from zeitkonto.services.working_time import WorkProfile


class Employee(Base, TimestampMixin):
    """Employee master data consumed by the balance engine.

    The contract fields (weekly hours, schedule, hire and end date) drive
    target-hour calculation; vacation_days_per_year drives entitlement.
    """

    __tablename__ = "employees"

    id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid_lib.uuid4,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)
    weekly_hours: Mapped[float] = mapped_column(Float, default=40.0, nullable=False)
    # Optional per-weekday hours, e.g. {"monday": 8, "friday": 2}
    work_schedule: Mapped[dict[str, float] | None] = mapped_column(JSON, nullable=True)
    hire_date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    end_date: Mapped[datetime.date | None] = mapped_column(Date, nullable=True)
    vacation_days_per_year: Mapped[float] = mapped_column(
        Float, default=30.0, nullable=False
    )
    holiday_region: Mapped[str | None] = mapped_column(String(10), nullable=True)

    @property
    def work_profile(self) -> WorkProfile:
        """Contract data as a plain value object for the calculator."""
        return WorkProfile(
            weekly_hours=self.weekly_hours,
            work_schedule=self.work_schedule,
            hire_date=self.hire_date,
            end_date=self.end_date,
        )
