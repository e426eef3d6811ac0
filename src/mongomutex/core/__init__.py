"""Core primitives for the distributed mutex."""

from .clock import Clock, SystemClock
from .errors import (
    InvalidMutexConfig,
    LockConflictError,
    LockNotHeldError,
    LockTimeoutError,
    MutexError,
)
from .locks import LockOperations
from .locks_memory import InMemoryLockOperations
from .locks_mongo import MongoLockOperations
from .models import LockDocument, MutexOptions
from .mutex import DistributedMutex
from .mutex_async import AsyncDistributedMutex
from .settings import MutexSettings

__all__ = [
    "AsyncDistributedMutex",
    "Clock",
    "DistributedMutex",
    "InMemoryLockOperations",
    "InvalidMutexConfig",
    "LockConflictError",
    "LockDocument",
    "LockNotHeldError",
    "LockOperations",
    "LockTimeoutError",
    "MongoLockOperations",
    "MutexError",
    "MutexOptions",
    "MutexSettings",
    "SystemClock",
]
