# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Database engine, session factory and unit-of-work helper."""

import logging
from collections.abc import Generator, Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from zeitkonto.config import settings

logger = logging.getLogger(__name__)

_connect_args = (
    {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}
)

engine = create_engine(settings.database_url, connect_args=_connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

_ATOMIC_DEPTH_KEY = "zeitkonto_atomic_depth"


def get_db() -> Generator[Session, None, None]:
    """Get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """Run a block of writes as a single database transaction.

    Blocks may nest; only the outermost block commits. Any exception rolls
    back everything written since the outermost block was entered and is
    re-raised to the caller.

    Args:
        db: The session to run the block on.

    Yields:
        The same session.
    """
    depth = db.info.get(_ATOMIC_DEPTH_KEY, 0)
    db.info[_ATOMIC_DEPTH_KEY] = depth + 1
    try:
        yield db
        if depth == 0:
            db.commit()
    except Exception:
        if depth == 0:
            logger.debug("Rolling back unit of work")
            db.rollback()
        raise
    finally:
        db.info[_ATOMIC_DEPTH_KEY] = depth
