"""Abstract store delegate for the mutex protocol."""

from __future__ import annotations

import abc
import datetime as dt
from typing import Optional

from .models import LockDocument


class LockOperations(abc.ABC):
    """Point read, conditional upsert and conditional clear on lock documents.

    Implementations must evaluate each condition atomically on the store side.
    """

    @abc.abstractmethod
    def lock_info(self, lock_id: str) -> Optional[LockDocument]:  # pragma: no cover - interface
        """Return the current lock document, or None if it was never created."""
        raise NotImplementedError

    @abc.abstractmethod
    def try_lock(
        self,
        lock_id: str,
        locker_id: str,
        now: dt.datetime,
        retention: dt.timedelta,
    ) -> Optional[LockDocument]:  # pragma: no cover - interface
        """Take the lock if it is free, expired or already ours.

        Returns the document as it was before the write, or None when the
        document was inserted. Raises ``LockConflictError`` when another
        locker holds a live lease.
        """
        raise NotImplementedError

    @abc.abstractmethod
    def unlock(
        self,
        lock_id: str,
        locker_id: str,
        now: dt.datetime,
        retention: dt.timedelta,
    ) -> Optional[LockDocument]:  # pragma: no cover - interface
        """Clear the holder fields if we hold a live lease; None if nothing matched."""
        raise NotImplementedError
