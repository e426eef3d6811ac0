"""Exception hierarchy for the distributed mutex."""

from __future__ import annotations


class MutexError(Exception):
    """Base class for every error raised by mongomutex."""


class InvalidMutexConfig(MutexError, ValueError):
    """Raised at construction time; the store is never contacted."""


class LockConflictError(MutexError):
    """A concurrent writer owns a live lease on the same lock document.

    Store delegates raise this for a uniqueness conflict on the lock's primary
    key. ``DistributedMutex.try_lock`` turns it into ``False``.
    """


class LockNotHeldError(MutexError, RuntimeError):
    """Release failed: the lock is not locked, expired, or locked by someone else."""


class LockTimeoutError(MutexError, TimeoutError):
    """The lock could not be acquired before the caller's deadline."""
