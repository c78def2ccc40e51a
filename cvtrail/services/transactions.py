"""Optimistic transaction runner.

Runs a unit of work against the session and commits it. If the commit loses
a race with another writer (conditional UPDATE matched no row, duplicate
primary key, or the database reported a lock), the whole unit is rolled back
and re-executed from fresh reads, with bounded exponential backoff. After the
last attempt the contention surfaces as TransientStoreError; nothing from a
failed attempt is ever committed.
"""

import logging
import random
import time
from typing import Callable, Optional, TypeVar

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from ..core.config import settings
from ..exceptions import TransientStoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")

CONTENTION_ERRORS = (StaleDataError, IntegrityError, OperationalError)


def backoff_delay(attempt: int, base: float, cap: float) -> float:
    """Full-jitter exponential delay for the given zero-based attempt."""
    ceiling = min(cap, base * (2 ** attempt))
    return random.uniform(ceiling / 2, ceiling)


def run_in_transaction(
    db: Session,
    work: Callable[[], T],
    *,
    key: str,
    max_attempts: Optional[int] = None,
    backoff_base: Optional[float] = None,
    backoff_max: Optional[float] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Execute *work* in a transaction, retrying on write contention.

    The session must not hold uncommitted changes when this is called: each
    attempt starts with a rollback so every read inside *work* sees the
    latest committed state.

    Args:
        db: Session to run in.
        work: Callable performing reads and writes; its return value is returned.
        key: Identifier of the contended record, used in logs and errors.
        max_attempts: Total attempts (defaults to settings.txn_max_attempts).
        backoff_base: First backoff delay in seconds.
        backoff_max: Upper bound for a single delay.
        sleep: Injectable sleep function.

    Raises:
        TransientStoreError: contention persisted through every attempt.
        Any exception raised by *work* other than contention, after rollback.
    """
    attempts = max_attempts or settings.txn_max_attempts
    base = settings.txn_backoff_base_seconds if backoff_base is None else backoff_base
    cap = settings.txn_backoff_max_seconds if backoff_max is None else backoff_max

    last_exc: Exception | None = None
    for attempt in range(attempts):
        db.rollback()
        try:
            result = work()
            db.commit()
            return result
        except CONTENTION_ERRORS as exc:
            db.rollback()
            last_exc = exc
            if attempt < attempts - 1:
                delay = backoff_delay(attempt, base, cap)
                logger.warning(
                    "Transaction on %s lost a write race (attempt %d/%d), retrying in %.3fs: %s",
                    key, attempt + 1, attempts, delay, type(exc).__name__,
                    extra={"key": key, "attempt": attempt + 1},
                )
                sleep(delay)
        except Exception:
            db.rollback()
            raise

    logger.error(
        "Transaction on %s gave up after %d attempts", key, attempts,
        extra={"key": key, "attempts": attempts},
    )
    raise TransientStoreError(key, attempts, last_exc)
