"""Distributed mutex coordinated through a MongoDB collection."""

from .core import (
    AsyncDistributedMutex,
    Clock,
    DistributedMutex,
    InMemoryLockOperations,
    InvalidMutexConfig,
    LockConflictError,
    LockDocument,
    LockNotHeldError,
    LockOperations,
    LockTimeoutError,
    MongoLockOperations,
    MutexError,
    MutexOptions,
    MutexSettings,
    SystemClock,
)

__all__ = [
    "__version__",
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

__version__ = "0.1.0"
