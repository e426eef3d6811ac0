from __future__ import annotations

import datetime as dt
from unittest import mock

import pytest
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, OperationFailure

from mongomutex.core.errors import LockConflictError
from mongomutex.core.locks_mongo import MongoLockOperations
from mongomutex.core.models import LockDocument


NOW = dt.datetime(2024, 1, 1, 12, 0, tzinfo=dt.timezone.utc)
RETENTION = dt.timedelta(seconds=600)


@pytest.fixture
def collection():
    return mock.Mock()


@pytest.fixture
def operations(collection):
    return MongoLockOperations(collection)


def test_try_lock_issues_conditional_upsert(operations, collection):
    collection.find_one_and_replace.return_value = None

    assert operations.try_lock("job-1", "host-A", NOW, RETENTION) is None
    collection.find_one_and_replace.assert_called_once_with(
        {
            "_id": "job-1",
            "$or": [
                {"locked_at": {"$lt": NOW - RETENTION}},
                {"locked_by": "host-A"},
                {"locked_by": {"$exists": False}},
            ],
        },
        {"_id": "job-1", "locked_by": "host-A", "locked_at": NOW},
        upsert=True,
        return_document=ReturnDocument.BEFORE,
    )


def test_try_lock_returns_previous_document(operations, collection):
    naive = dt.datetime(2024, 1, 1, 11, 0)
    collection.find_one_and_replace.return_value = {"_id": "job-1", "locked_by": "host-B", "locked_at": naive}

    previous = operations.try_lock("job-1", "host-A", NOW, RETENTION)

    assert previous == LockDocument(
        id="job-1", locked_by="host-B", locked_at=naive.replace(tzinfo=dt.timezone.utc)
    )


def test_try_lock_translates_duplicate_key(operations, collection):
    collection.find_one_and_replace.side_effect = DuplicateKeyError(
        "E11000 duplicate key error collection: mongomutex.mutex index: _id_ dup key: { _id: \"job-1\" }",
        11000,
    )
    with pytest.raises(LockConflictError, match="E11000"):
        operations.try_lock("job-1", "host-A", NOW, RETENTION)


def test_try_lock_propagates_other_failures(operations, collection):
    collection.find_one_and_replace.side_effect = OperationFailure("not authorized", 13)
    with pytest.raises(OperationFailure):
        operations.try_lock("job-1", "host-A", NOW, RETENTION)


def test_unlock_issues_conditional_clear(operations, collection):
    collection.find_one_and_update.return_value = {"_id": "job-1", "locked_by": "host-A", "locked_at": NOW}

    released = operations.unlock("job-1", "host-A", NOW, RETENTION)

    assert released == LockDocument(id="job-1", locked_by="host-A", locked_at=NOW)
    collection.find_one_and_update.assert_called_once_with(
        {"_id": "job-1", "locked_by": "host-A", "locked_at": {"$gte": NOW - RETENTION}},
        {"$unset": {"locked_by": "", "locked_at": ""}},
    )


def test_unlock_without_match(operations, collection):
    collection.find_one_and_update.return_value = None
    assert operations.unlock("job-1", "host-A", NOW, RETENTION) is None


def test_lock_info_reads_by_id(operations, collection):
    collection.find_one.return_value = {"_id": "job-1"}
    assert operations.lock_info("job-1") == LockDocument(id="job-1")
    collection.find_one.assert_called_once_with({"_id": "job-1"})
