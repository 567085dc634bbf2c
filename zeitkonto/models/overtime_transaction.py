# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Overtime ledger model."""

import datetime
import uuid as uuid_lib

from sqlalchemy import (
    Date,
    DateTime,
    Enum,
    Float,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from zeitkonto.models.base import Base
from zeitkonto.models.enums import ReferenceType, TransactionType


class OvertimeTransaction(Base):
    """One immutable row of an employee's time account.

    Rows are appended per business event and never edited; the integer
    primary key defines insertion order within a day. ``balance_before``
    and ``balance_after`` are running-balance snapshots kept chained by
    the ledger service.
    """

    __tablename__ = "overtime_transactions"
    __table_args__ = (
        Index("ix_overtime_transactions_user_date", "user_id", "date"),
        Index(
            "ix_overtime_transactions_reference", "reference_type", "reference_id"
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[uuid_lib.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False)
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    type: Mapped[TransactionType] = mapped_column(Enum(TransactionType), nullable=False)
    hours: Mapped[float] = mapped_column(Float, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    reference_type: Mapped[ReferenceType | None] = mapped_column(
        Enum(ReferenceType), nullable=True
    )
    reference_id: Mapped[uuid_lib.UUID | None] = mapped_column(
        Uuid(as_uuid=True), nullable=True
    )
    created_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    balance_before: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    balance_after: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        nullable=False,
    )
