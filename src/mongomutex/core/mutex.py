"""Lease-based mutual exclusion on top of a single conditional store write."""

from __future__ import annotations

import datetime as dt
import time
from typing import Any, Callable, Optional, TypeVar, Union

from pydantic import ValidationError

from mongomutex.utils.logging import library_logger

from .clock import Clock, SystemClock
from .errors import InvalidMutexConfig, LockConflictError, LockNotHeldError, LockTimeoutError, MutexError
from .locks import LockOperations
from .locks_mongo import MongoLockOperations
from .models import LockDocument, MutexOptions, as_utc


T = TypeVar("T")
Timeout = Union[float, int, dt.timedelta, None]

logger = library_logger(__name__)


class DistributedMutex:
    """Named lock shared by every process that can reach the same lock store.

    A handle is stateless between calls: it never remembers whether it holds
    the lock, every operation goes back to the store. Leases are fixed at
    acquisition and are not renewed while held, except that re-acquiring a
    lock you already hold stamps a fresh ``locked_at``.
    """

    def __init__(self, lock_id: str, locker_id: str, collection: Any = None, **options: Any) -> None:
        if not isinstance(lock_id, str) or not lock_id:
            raise InvalidMutexConfig("String lock id required")
        if not isinstance(locker_id, str) or not locker_id:
            raise InvalidMutexConfig("String locker id required")
        try:
            parsed = MutexOptions.model_validate(options)
        except ValidationError as exc:
            raise InvalidMutexConfig(f"Unsupported options: {exc}") from exc

        lock_operations = parsed.lock_operations
        if lock_operations is None:
            if collection is None:
                raise InvalidMutexConfig("Either a collection or lock_operations is required")
            lock_operations = MongoLockOperations(collection)

        self.lock_id = lock_id
        self.locker_id = locker_id
        self.lock_check_period: dt.timedelta = parsed.lock_check_period
        self.lock_retention_timeout: dt.timedelta = parsed.lock_retention_timeout
        self._clock: Clock = parsed.clock or SystemClock()
        self._logger = parsed.logger or logger
        self._operations: LockOperations = lock_operations

    def __repr__(self) -> str:
        return f"<{type(self).__name__} lock_id={self.lock_id!r} locker_id={self.locker_id!r}>"

    def try_lock(self) -> bool:
        """Single non-blocking attempt. False means another locker holds a live lease."""
        now = self._clock.now()
        try:
            previous = self._operations.try_lock(self.lock_id, self.locker_id, now, self.lock_retention_timeout)
        except LockConflictError:
            logger.debug("Lock %s is held by another locker", self.lock_id)
            return False

        if previous is not None and previous.locked_by is not None and previous.locked_by != self.locker_id:
            if not self._expired(previous.locked_at, now):
                raise MutexError(
                    f"mutex {self.lock_id} already locked by {previous.locked_by} at {previous.locked_at}"
                )
            self._logger.warning(
                f"Ignoring old {self.lock_id} lock by {previous.locked_by}"
                f" since {previous.locked_at} was too long ago"
            )
        logger.debug("Lock %s acquired by %s", self.lock_id, self.locker_id)
        return True

    def lock(self, timeout: Timeout = None) -> "DistributedMutex":
        """Block until the lock is ours, polling every ``lock_check_period``.

        Without a timeout this may wait forever. With one, ``LockTimeoutError``
        is raised once the deadline passes.
        """
        deadline = deadline_after(timeout)
        period = self.lock_check_period.total_seconds()
        while not self.try_lock():
            if deadline is None:
                time.sleep(period)
                continue
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise LockTimeoutError(f"Timed out waiting for lock {self.lock_id}")
            time.sleep(min(period, remaining))
        return self

    def locked(self) -> bool:
        """True if anyone, us included, holds a live lease. Never writes."""
        info = self.lock_info()
        return bool(info and info.locked_by and not self._expired(info.locked_at, self._clock.now()))

    def lock_info(self) -> Optional[LockDocument]:
        return self._operations.lock_info(self.lock_id)

    def unlock(self) -> "DistributedMutex":
        now = self._clock.now()
        if not self._operations.unlock(self.lock_id, self.locker_id, now, self.lock_retention_timeout):
            raise LockNotHeldError("lock is either not locked or locked by someone else")
        logger.debug("Lock %s released by %s", self.lock_id, self.locker_id)
        return self

    def synchronize(self, work: Callable[[], T], *, timeout: Timeout = None) -> T:
        """Run ``work`` while holding the lock and release it on every exit path."""
        self.lock(timeout)
        try:
            return work()
        finally:
            self.unlock()

    def __enter__(self) -> "DistributedMutex":
        return self.lock()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.unlock()

    def _expired(self, locked_at: Optional[dt.datetime], now: dt.datetime) -> bool:
        return locked_at is None or as_utc(locked_at) < as_utc(now) - self.lock_retention_timeout


def deadline_after(timeout: Timeout) -> Optional[float]:
    if timeout is None:
        return None
    seconds = timeout.total_seconds() if isinstance(timeout, dt.timedelta) else float(timeout)
    return time.monotonic() + seconds
