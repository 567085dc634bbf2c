# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Overtime transaction ledger.

The ledger is append-only: rows are written once per business event and
removed only by range deletion when an employee's derived rows are
rebuilt. Writes are idempotent on the natural key
(user, date, type, hours, reference type, reference id).
"""

import logging
import uuid
from collections.abc import Sequence
from datetime import date

from sqlalchemy import func
from sqlalchemy.orm import Session

from zeitkonto.config import settings
from zeitkonto.database import atomic
from zeitkonto.exceptions import InvalidRequestError
from zeitkonto.models import OvertimeTransaction, ReferenceType, TransactionType
from zeitkonto.schemas.overtime import TransactionCreate

logger = logging.getLogger(__name__)


def _round(value: float) -> float:
    return round(value, 2)


def _natural_key_query(
    db: Session,
    user_id: uuid.UUID,
    day: date,
    type: TransactionType,
    reference_type: ReferenceType | None,
    reference_id: uuid.UUID | None,
    hours: float | None = None,
):
    query = db.query(OvertimeTransaction).filter(
        OvertimeTransaction.user_id == user_id,
        OvertimeTransaction.date == day,
        OvertimeTransaction.type == type,
    )
    if hours is not None:
        query = query.filter(
            func.abs(OvertimeTransaction.hours - hours)
            < settings.balance_tolerance_hours
        )
    if reference_type is None:
        query = query.filter(OvertimeTransaction.reference_type.is_(None))
    else:
        query = query.filter(OvertimeTransaction.reference_type == reference_type)
    if reference_id is None:
        query = query.filter(OvertimeTransaction.reference_id.is_(None))
    else:
        query = query.filter(OvertimeTransaction.reference_id == reference_id)
    return query


def transaction_exists(
    db: Session,
    user_id: uuid.UUID,
    day: date,
    type: TransactionType,
    reference_type: ReferenceType | None = None,
    reference_id: uuid.UUID | None = None,
    hours: float | None = None,
) -> bool:
    """Check whether a ledger row with the given key exists.

    Args:
        db: Database session.
        user_id: Employee id.
        day: Booking date.
        type: Transaction type.
        reference_type: Origin kind, None matches rows without reference.
        reference_id: Origin row id, None matches rows without reference.
        hours: When given, hours must match within the balance tolerance.

    Returns:
        True if a matching row exists.
    """
    query = _natural_key_query(
        db, user_id, day, type, reference_type, reference_id, hours
    )
    return db.query(query.exists()).scalar()


def _previous_balance(db: Session, user_id: uuid.UUID, day: date) -> float:
    """Balance after the last row booked on or before the given day."""
    previous = (
        db.query(OvertimeTransaction)
        .filter(
            OvertimeTransaction.user_id == user_id,
            OvertimeTransaction.date <= day,
        )
        .order_by(OvertimeTransaction.date.desc(), OvertimeTransaction.id.desc())
        .first()
    )
    return previous.balance_after if previous else 0.0


def _rechain(
    db: Session,
    user_id: uuid.UUID,
    rows: Sequence[OvertimeTransaction],
    balance: float,
) -> int:
    """Recompute snapshots of rows following a given running balance.

    Returns:
        Number of rows whose snapshots changed.
    """
    changed = 0
    for row in rows:
        before = _round(balance)
        after = _round(before + row.hours)
        if row.balance_before != before or row.balance_after != after:
            row.balance_before = before
            row.balance_after = after
            changed += 1
        balance = after
    if changed:
        db.flush()
        logger.debug(f"Re-chained {changed} ledger snapshots for user {user_id}")
    return changed


def _rechain_after(db: Session, row: OvertimeTransaction) -> int:
    later = (
        db.query(OvertimeTransaction)
        .filter(
            OvertimeTransaction.user_id == row.user_id,
            OvertimeTransaction.date > row.date,
        )
        .order_by(OvertimeTransaction.date, OvertimeTransaction.id)
        .all()
    )
    return _rechain(db, row.user_id, later, row.balance_after)


def _rechain_from(db: Session, user_id: uuid.UUID, start: date) -> int:
    previous = (
        db.query(OvertimeTransaction)
        .filter(
            OvertimeTransaction.user_id == user_id,
            OvertimeTransaction.date < start,
        )
        .order_by(OvertimeTransaction.date.desc(), OvertimeTransaction.id.desc())
        .first()
    )
    rows = (
        db.query(OvertimeTransaction)
        .filter(
            OvertimeTransaction.user_id == user_id,
            OvertimeTransaction.date >= start,
        )
        .order_by(OvertimeTransaction.date, OvertimeTransaction.id)
        .all()
    )
    return _rechain(db, user_id, rows, previous.balance_after if previous else 0.0)


def create_transaction(db: Session, data: TransactionCreate) -> int | None:
    """Append a row to the ledger unless an identical one exists.

    The balance snapshots are derived from the latest earlier row. Explicit
    balance values in ``data`` are trusted as given; an inconsistent pair
    is logged at error level and still written.

    Args:
        db: Database session.
        data: Row parameters.

    Returns:
        The new row id, or None if the row already existed.
    """
    type = TransactionType(data.type)
    reference_type = ReferenceType(data.reference_type) if data.reference_type else None
    hours = _round(data.hours)

    with atomic(db):
        if transaction_exists(
            db,
            data.user_id,
            data.date,
            type,
            reference_type,
            data.reference_id,
            hours=hours,
        ):
            logger.debug(
                f"Skipping duplicate {type.value} transaction for user "
                f"{data.user_id} on {data.date} ({hours:+.2f}h)"
            )
            return None

        if data.balance_before is None and data.balance_after is None:
            balance_before = _previous_balance(db, data.user_id, data.date)
            balance_after = balance_before + hours
        else:
            balance_before = (
                data.balance_before
                if data.balance_before is not None
                else _previous_balance(db, data.user_id, data.date)
            )
            balance_after = (
                data.balance_after
                if data.balance_after is not None
                else balance_before + hours
            )
            if abs(balance_after - (balance_before + hours)) > (
                settings.balance_tolerance_hours
            ):
                logger.error(
                    f"Inconsistent balance for user {data.user_id} on {data.date}: "
                    f"{balance_before:.2f} + {hours:.2f} != {balance_after:.2f}; "
                    f"writing explicit values"
                )

        transaction = OvertimeTransaction(
            user_id=data.user_id,
            date=data.date,
            type=type,
            hours=hours,
            description=data.description,
            reference_type=reference_type,
            reference_id=data.reference_id,
            created_by=data.created_by,
            balance_before=_round(balance_before),
            balance_after=_round(balance_after),
        )
        db.add(transaction)
        db.flush()
        _rechain_after(db, transaction)

        logger.info(
            f"Ledger {type.value} {hours:+.2f}h for user {data.user_id} on "
            f"{data.date} (balance {transaction.balance_after:.2f})"
        )
        return transaction.id


def create_transactions_batch(
    db: Session, items: Sequence[TransactionCreate]
) -> list[int | None]:
    """Create several rows in one database transaction.

    Either every row is written (duplicates skipped) or, if any write
    fails, none of them.

    Returns:
        Ids in input order, None for skipped duplicates.
    """
    with atomic(db):
        ids = [create_transaction(db, item) for item in items]
    logger.info(
        f"Ledger batch: {sum(1 for i in ids if i is not None)} of {len(ids)} written"
    )
    return ids


def delete_transactions_in_range(
    db: Session,
    user_id: uuid.UUID,
    start: date,
    end: date,
    types: Sequence[TransactionType] | None = None,
    reference_types: Sequence[ReferenceType] | None = None,
) -> int:
    """Bulk-delete rows of an employee within a date range.

    Only meant for rebuilding derived rows; corrections are recorded as new
    rows instead. Snapshots of the remaining rows are re-chained.

    Args:
        db: Database session.
        user_id: Employee id.
        start: First day (inclusive).
        end: Last day (inclusive).
        types: Restrict deletion to these transaction types.
        reference_types: Restrict deletion to rows with these origins.

    Returns:
        Number of deleted rows.
    """
    with atomic(db):
        query = db.query(OvertimeTransaction).filter(
            OvertimeTransaction.user_id == user_id,
            OvertimeTransaction.date >= start,
            OvertimeTransaction.date <= end,
        )
        if types:
            query = query.filter(OvertimeTransaction.type.in_(list(types)))
        if reference_types:
            query = query.filter(
                OvertimeTransaction.reference_type.in_(list(reference_types))
            )
        count = query.delete(synchronize_session="fetch")
        db.flush()
        if count:
            _rechain_from(db, user_id, start)

    logger.info(
        f"Deleted {count} ledger rows for user {user_id} between {start} and {end}"
    )
    return count


def get_transactions_in_range(
    db: Session,
    user_id: uuid.UUID,
    start: date | None = None,
    end: date | None = None,
    types: Sequence[TransactionType] | None = None,
) -> list[OvertimeTransaction]:
    """Get ledger rows ordered by date, then insertion order."""
    query = db.query(OvertimeTransaction).filter(
        OvertimeTransaction.user_id == user_id
    )
    if start:
        query = query.filter(OvertimeTransaction.date >= start)
    if end:
        query = query.filter(OvertimeTransaction.date <= end)
    if types:
        query = query.filter(OvertimeTransaction.type.in_(list(types)))
    return query.order_by(OvertimeTransaction.date, OvertimeTransaction.id).all()


def get_transactions_for_reference(
    db: Session,
    reference_type: ReferenceType,
    reference_id: uuid.UUID,
) -> list[OvertimeTransaction]:
    """Get all rows that originate from one business object."""
    return (
        db.query(OvertimeTransaction)
        .filter(
            OvertimeTransaction.reference_type == reference_type,
            OvertimeTransaction.reference_id == reference_id,
        )
        .order_by(OvertimeTransaction.date, OvertimeTransaction.id)
        .all()
    )


def sum_hours(
    db: Session,
    user_id: uuid.UUID,
    start: date | None = None,
    end: date | None = None,
) -> float:
    """Sum of booked hours, optionally limited to a date range."""
    query = db.query(func.coalesce(func.sum(OvertimeTransaction.hours), 0.0)).filter(
        OvertimeTransaction.user_id == user_id
    )
    if start:
        query = query.filter(OvertimeTransaction.date >= start)
    if end:
        query = query.filter(OvertimeTransaction.date <= end)
    return _round(float(query.scalar()))


def get_ledger_balance(db: Session, user_id: uuid.UUID) -> float:
    """Current balance over all rows of an employee."""
    return sum_hours(db, user_id)


def get_balance_at_date(db: Session, user_id: uuid.UUID, day: date) -> float:
    """Balance including all rows booked up to and including the day."""
    return sum_hours(db, user_id, end=day)


def record_correction(
    db: Session,
    user_id: uuid.UUID,
    day: date,
    hours: float,
    description: str,
    created_by: str | None = None,
) -> int | None:
    """Record a manual correction of an employee's time account.

    Raises:
        InvalidRequestError: If no description is given.
    """
    if not description or not description.strip():
        raise InvalidRequestError("A correction requires a description")
    return create_transaction(
        db,
        TransactionCreate(
            user_id=user_id,
            date=day,
            type=TransactionType.CORRECTION,
            hours=hours,
            description=description.strip(),
            reference_type=ReferenceType.MANUAL,
            created_by=created_by,
        ),
    )


def record_year_end_carryover(
    db: Session, user_id: uuid.UUID, year: int
) -> int | None:
    """Record the zero-hour marker for the start of a new year.

    The running balance simply continues; the row documents that the
    year-end rollover ran.
    """
    return create_transaction(
        db,
        TransactionCreate(
            user_id=user_id,
            date=date(year, 1, 1),
            type=TransactionType.CARRYOVER,
            hours=0.0,
            description=f"Year-end carryover {year - 1} → {year}",
            reference_type=ReferenceType.SYSTEM,
            created_by="system",
        ),
    )
