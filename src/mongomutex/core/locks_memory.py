"""In-process lock store evaluating the same conditions as the Mongo queries."""

from __future__ import annotations

import datetime as dt
import threading
from typing import Dict, List, Optional

from .errors import LockConflictError
from .locks import LockOperations
from .models import LockDocument, as_utc


class InMemoryLockOperations(LockOperations):
    """Thread-safe store for tests and single-host use.

    Documents are kept as immutable snapshots; every conditional write runs
    under one lock so it behaves like a single-document atomic update.
    """

    def __init__(self) -> None:
        self._documents: Dict[str, LockDocument] = {}
        self._lock = threading.Lock()

    def lock_info(self, lock_id: str) -> Optional[LockDocument]:
        with self._lock:
            return self._documents.get(lock_id)

    def try_lock(
        self,
        lock_id: str,
        locker_id: str,
        now: dt.datetime,
        retention: dt.timedelta,
    ) -> Optional[LockDocument]:
        with self._lock:
            previous = self._documents.get(lock_id)
            if previous is not None and not _acquirable(previous, locker_id, now - retention):
                raise LockConflictError(f"duplicate key: lock {lock_id!r} held by {previous.locked_by}")
            self._documents[lock_id] = LockDocument(id=lock_id, locked_by=locker_id, locked_at=now)
            return previous

    def unlock(
        self,
        lock_id: str,
        locker_id: str,
        now: dt.datetime,
        retention: dt.timedelta,
    ) -> Optional[LockDocument]:
        with self._lock:
            current = self._documents.get(lock_id)
            if current is None or current.locked_by != locker_id or current.locked_at is None:
                return None
            if as_utc(current.locked_at) < as_utc(now - retention):
                return None
            self._documents[lock_id] = LockDocument(id=lock_id)
            return current

    def documents(self) -> List[LockDocument]:
        with self._lock:
            return list(self._documents.values())


def _acquirable(document: LockDocument, locker_id: str, expires_before: dt.datetime) -> bool:
    if document.locked_by is None or document.locked_by == locker_id:
        return True
    return document.locked_at is not None and as_utc(document.locked_at) < as_utc(expires_before)
