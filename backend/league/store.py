"""
Store boundary helpers.

- store_operation: turns SQLAlchemy failures into StoreUnavailableError
  after rolling the session back
- tournament_lock: one re-entrant lock per tournament id; pod generation,
  placement capture and round finalization of the same tournament never
  interleave
"""

import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from league.errors import StoreUnavailableError

logger = logging.getLogger(__name__)

_locks_guard = threading.Lock()
_tournament_locks: Dict[int, threading.RLock] = {}


@contextmanager
def store_operation(session: Session, action: str) -> Iterator[None]:
    """Run a block of store reads/writes, surfacing failures as StoreUnavailableError.

    No retry: the session is rolled back and the error propagates.
    """
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("Store failure during %s: %s", action, exc)
        session.rollback()
        raise StoreUnavailableError(f"{action} failed") from exc


@contextmanager
def tournament_lock(tournament_id: int) -> Iterator[None]:
    """Serialize mutations of a single tournament."""
    with _locks_guard:
        lock = _tournament_locks.get(tournament_id)
        if lock is None:
            lock = threading.RLock()
            _tournament_locks[tournament_id] = lock
    with lock:
        yield


def forget_tournament_lock(tournament_id: int) -> None:
    """Drop the lock of a deleted tournament."""
    with _locks_guard:
        _tournament_locks.pop(tournament_id, None)
