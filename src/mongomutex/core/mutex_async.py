"""Asyncio front-end for ``DistributedMutex``."""

from __future__ import annotations

import asyncio
import inspect
import time
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union

from mongomutex.utils.logging import library_logger

from .errors import LockTimeoutError
from .models import LockDocument
from .mutex import DistributedMutex, Timeout, deadline_after


T = TypeVar("T")

logger = library_logger(__name__)


class AsyncDistributedMutex:
    """Runs store calls in worker threads so the event loop is never blocked.

    Cancelling the awaiting task stops the polling loop. An acquisition
    already running in its thread is allowed to finish, and if it took the
    lock the lock is released before the cancellation propagates.
    """

    def __init__(self, mutex: DistributedMutex) -> None:
        self._mutex = mutex

    @property
    def lock_id(self) -> str:
        return self._mutex.lock_id

    @property
    def locker_id(self) -> str:
        return self._mutex.locker_id

    async def try_lock(self) -> bool:
        attempt = asyncio.ensure_future(asyncio.to_thread(self._mutex.try_lock))
        try:
            return await asyncio.shield(attempt)
        except asyncio.CancelledError:
            await self._release_abandoned(attempt)
            raise

    async def _release_abandoned(self, attempt: "asyncio.Future[bool]") -> None:
        # The upsert keeps running in its thread after cancellation; a lock it
        # took must not stay held until the lease expires.
        try:
            acquired = await attempt
        except Exception as exc:
            logger.warning("Lock attempt on %s failed after cancellation: %s", self.lock_id, exc)
            return
        if not acquired:
            return
        try:
            await asyncio.to_thread(self._mutex.unlock)
        except Exception as exc:
            logger.warning("Could not release %s after cancellation: %s", self.lock_id, exc)

    async def lock(self, timeout: Timeout = None) -> "AsyncDistributedMutex":
        deadline = deadline_after(timeout)
        period = self._mutex.lock_check_period.total_seconds()
        while not await self.try_lock():
            if deadline is None:
                await asyncio.sleep(period)
                continue
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise LockTimeoutError(f"Timed out waiting for lock {self.lock_id}")
            await asyncio.sleep(min(period, remaining))
        return self

    async def locked(self) -> bool:
        return await asyncio.to_thread(self._mutex.locked)

    async def lock_info(self) -> Optional[LockDocument]:
        return await asyncio.to_thread(self._mutex.lock_info)

    async def unlock(self) -> "AsyncDistributedMutex":
        await asyncio.to_thread(self._mutex.unlock)
        return self

    async def synchronize(
        self,
        work: Callable[[], Union[Awaitable[T], T]],
        *,
        timeout: Timeout = None,
    ) -> T:
        await self.lock(timeout)
        try:
            result: Any = work()
            if inspect.isawaitable(result):
                result = await result
            return result
        finally:
            await self.unlock()

    async def __aenter__(self) -> "AsyncDistributedMutex":
        return await self.lock()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.unlock()
