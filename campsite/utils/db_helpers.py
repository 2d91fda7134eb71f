"""
Database Helper Utilities for Concurrency Control

Provides:
- Database dialect detection (PostgreSQL vs SQLite)
- Row locking helpers
- The atomic write transaction used by every calendar mutation
"""

import logging
import time
from typing import Callable, Optional, TypeVar, Type
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy.exc import DBAPIError, IntegrityError

from ..database import WRITE_LOCK_OPTION
from ..exceptions import ConflictError, ReservationError, TransientError

logger = logging.getLogger(__name__)

T = TypeVar('T')

# serialization_failure, deadlock_detected, lock_not_available
TRANSIENT_PG_CODES = {"40001", "40P01", "55P03"}

TRANSIENT_MESSAGES = (
    "database is locked",
    "database table is locked",
    "could not obtain lock",
    "could not serialize access",
    "deadlock detected",
    "lock timeout",
)


def is_postgres(db: Session) -> bool:
    """Check if the database is PostgreSQL"""
    try:
        dialect = db.bind.dialect.name
        return dialect == 'postgresql'
    except AttributeError:
        return False


def acquire_row_lock(
    db: Session,
    model: Type[T],
    filter_condition,
    nowait: bool = False,
    skip_locked: bool = False
) -> Optional[T]:
    """
    Acquire a row-level lock on a database record.

    Args:
        db: Database session
        model: SQLAlchemy model class
        filter_condition: Filter to find the row
        nowait: If True, raise error immediately if lock unavailable (PostgreSQL only)
        skip_locked: If True, skip locked rows (PostgreSQL only)

    Returns:
        The locked model instance, or None if not found

    Raises:
        OperationalError: If nowait=True and row is locked by another transaction

    Example:
        reservation = acquire_row_lock(db, Reservation, Reservation.id == reservation_id)
    """
    query = db.query(model).filter(filter_condition)

    # Only apply locking on PostgreSQL
    if is_postgres(db):
        if skip_locked:
            query = query.with_for_update(skip_locked=True)
        elif nowait:
            query = query.with_for_update(nowait=True)
        else:
            query = query.with_for_update()

    return query.first()


def write_execution_options(db: Session) -> dict:
    """Connection options for a calendar write transaction on the session's dialect."""
    options = {WRITE_LOCK_OPTION: True}
    if is_postgres(db):
        options["isolation_level"] = "SERIALIZABLE"
    return options


def is_transient_error(exc: Exception) -> bool:
    """
    True when the failure came from contention rather than from the request.

    Covers PostgreSQL serialization failures, deadlocks and lock timeouts,
    SQLite busy timeouts, and optimistic version mismatches.
    """
    if isinstance(exc, StaleDataError):
        return True
    if not isinstance(exc, DBAPIError):
        return False

    pgcode = getattr(exc.orig, "pgcode", None)
    if pgcode in TRANSIENT_PG_CODES:
        return True

    message = str(exc.orig).lower()
    return any(fragment in message for fragment in TRANSIENT_MESSAGES)


def run_in_write_transaction(
    db: Session,
    work: Callable[[Session], T],
    retries: int = 0,
    backoff_seconds: float = 0.05
) -> T:
    """
    Run work(db) as one atomic calendar write.

    The transaction takes the write lock when it begins (BEGIN IMMEDIATE on
    SQLite, SERIALIZABLE on PostgreSQL), commits when work returns and rolls
    back on any exception, so no partial marker or reservation write survives.

    Anything pending on the session beforehand is discarded.

    Raises:
        ReservationError subclasses raised by work, unchanged
        ConflictError: a day was claimed concurrently (unique day violated)
        TransientError: contention persisted through all retries
    """
    attempt = 0
    while True:
        attempt += 1
        if db.in_transaction():
            db.rollback()

        try:
            db.connection(execution_options=write_execution_options(db))
            result = work(db)
            db.commit()
            return result
        except ReservationError:
            db.rollback()
            raise
        except IntegrityError as e:
            db.rollback()
            logger.warning(f"Calendar integrity violation, treating as conflict: {e.orig}")
            raise ConflictError() from e
        except (DBAPIError, StaleDataError) as e:
            db.rollback()
            if not is_transient_error(e):
                raise
            if attempt > retries:
                logger.warning(f"Write transaction gave up after {attempt} attempts: {e}")
                raise TransientError() from e
            logger.info(f"Transient failure on attempt {attempt}, retrying: {e}")
            time.sleep(backoff_seconds * attempt)
        except Exception:
            db.rollback()
            raise
