"""Time sources used to stamp and expire leases."""

from __future__ import annotations

import datetime as dt
from typing import Protocol


class Clock(Protocol):
    def now(self) -> dt.datetime: ...


class SystemClock:
    """Wall clock in UTC.

    The same clock must be used to write ``locked_at`` and to compare against it,
    so every locker sharing a lock should run on reasonably synchronized hosts.
    """

    def now(self) -> dt.datetime:
        return dt.datetime.now(dt.timezone.utc)
