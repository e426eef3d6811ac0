"""MongoDB lock store using find-and-modify with upsert."""

from __future__ import annotations

import datetime as dt
from typing import Any, Mapping, Optional

from pymongo import ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from .errors import LockConflictError
from .locks import LockOperations
from .models import LockDocument


class MongoLockOperations(LockOperations):
    """Binds the mutex protocol to one collection of lock documents.

    Acquisition relies on the unique ``_id`` index: when the filter does not
    match an existing document, the upsert attempts an insert with the same
    ``_id`` and the server rejects it with E11000.
    """

    def __init__(self, collection: Collection) -> None:
        self._collection = collection

    def lock_info(self, lock_id: str) -> Optional[LockDocument]:
        return _to_document(self._collection.find_one({"_id": lock_id}))

    def try_lock(
        self,
        lock_id: str,
        locker_id: str,
        now: dt.datetime,
        retention: dt.timedelta,
    ) -> Optional[LockDocument]:
        query = {
            "_id": lock_id,
            "$or": [
                {"locked_at": {"$lt": now - retention}},
                {"locked_by": locker_id},
                {"locked_by": {"$exists": False}},
            ],
        }
        replacement = {"_id": lock_id, "locked_by": locker_id, "locked_at": now}
        try:
            previous = self._collection.find_one_and_replace(
                query,
                replacement,
                upsert=True,
                return_document=ReturnDocument.BEFORE,
            )
        except DuplicateKeyError as exc:
            raise LockConflictError(str(exc)) from exc
        return _to_document(previous)

    def unlock(
        self,
        lock_id: str,
        locker_id: str,
        now: dt.datetime,
        retention: dt.timedelta,
    ) -> Optional[LockDocument]:
        query = {
            "_id": lock_id,
            "locked_by": locker_id,
            "locked_at": {"$gte": now - retention},
        }
        released = self._collection.find_one_and_update(
            query,
            {"$unset": {"locked_by": "", "locked_at": ""}},
        )
        return _to_document(released)


def _to_document(raw: Optional[Mapping[str, Any]]) -> Optional[LockDocument]:
    if raw is None:
        return None
    return LockDocument.model_validate(dict(raw))
