"""Settings loader for mutex deployments."""

from __future__ import annotations

import datetime as dt
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict

import yaml
from pydantic import BaseModel, Field, ValidationError

if TYPE_CHECKING:
    from pymongo.collection import Collection


DEFAULT_MONGO_URL = "mongodb://localhost:27017"


def _default_url() -> str:
    return os.getenv("MONGOMUTEX_URL", DEFAULT_MONGO_URL)


class MongoSettings(BaseModel):
    url: str = Field(default_factory=_default_url)
    database: str = "mongomutex"
    collection: str = "mutex"


class MutexTimings(BaseModel):
    lock_check_period: dt.timedelta = Field(default=dt.timedelta(seconds=5), gt=dt.timedelta(0))
    lock_retention_timeout: dt.timedelta = Field(default=dt.timedelta(seconds=600), gt=dt.timedelta(0))


class MutexSettings(BaseModel):
    mongo: MongoSettings = Field(default_factory=MongoSettings)
    mutex: MutexTimings = Field(default_factory=MutexTimings)

    @classmethod
    def from_file(cls, path: Path) -> "MutexSettings":
        data = yaml.safe_load(path.read_text()) or {}
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ValueError(f"Invalid mutex settings: {exc}") from exc

    @classmethod
    def from_env(cls) -> "MutexSettings":
        return cls()

    def mutex_options(self) -> Dict[str, Any]:
        """Keyword options for ``DistributedMutex``."""
        return self.mutex.model_dump()

    def collection(self) -> "Collection":
        from pymongo import MongoClient

        client: MongoClient = MongoClient(self.mongo.url, tz_aware=True)
        return client[self.mongo.database][self.mongo.collection]
