# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Vacation balance model."""

import uuid as uuid_lib

from sqlalchemy import Float, ForeignKey, Integer, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from zeitkonto.models.base import Base, TimestampMixin


class VacationBalance(Base, TimestampMixin):
    """Per-year vacation account of an employee.

    Only entitlement and carryover are stored. Days taken and remaining
    are derived from approved absences on every read.
    """

    __tablename__ = "vacation_balance"
    __table_args__ = (
        UniqueConstraint("user_id", "year", name="uq_vacation_balance_user_year"),
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
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    entitlement: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    carryover: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
