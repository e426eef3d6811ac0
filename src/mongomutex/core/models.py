"""Data models shared across the mutex runtime."""

from __future__ import annotations

import datetime as dt
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def as_utc(value: dt.datetime) -> dt.datetime:
    """Treat naive datetimes as UTC, which is how MongoDB stores them."""
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value


class LockDocument(BaseModel):
    """The persisted lock row. One document per lock id."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    locked_by: Optional[str] = None
    locked_at: Optional[dt.datetime] = None

    @field_validator("locked_at")
    @classmethod
    def _utc(cls, value: Optional[dt.datetime]) -> Optional[dt.datetime]:
        return as_utc(value) if value is not None else None


class MutexOptions(BaseModel):
    """Recognized configuration for a ``DistributedMutex``."""

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    lock_check_period: dt.timedelta = Field(default=dt.timedelta(seconds=5))
    lock_retention_timeout: dt.timedelta = Field(default=dt.timedelta(seconds=600))
    clock: Optional[Any] = None
    logger: Optional[Any] = None
    lock_operations: Optional[Any] = None

    @field_validator("lock_check_period", "lock_retention_timeout")
    @classmethod
    def _positive(cls, value: dt.timedelta) -> dt.timedelta:
        if value <= dt.timedelta(0):
            raise ValueError("must be positive")
        return value
