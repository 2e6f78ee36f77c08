"""
MongoDB-backed record store.

One ``RecordStore`` is built at application startup and handed to the
request handlers; records are append-only documents, one collection per
schema model.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel
from pymongo import DESCENDING, MongoClient
from pymongo.errors import PyMongoError

from config import Settings

logger = logging.getLogger(__name__)

NEWEST_FIRST = [("createdAt", DESCENDING), ("_id", DESCENDING)]


class StorageError(Exception):
    """The database could not complete a read or write."""


def _serialize(doc: Dict[str, Any]) -> Dict[str, Any]:
    if "_id" in doc:
        doc["_id"] = str(doc["_id"])
    return doc


class RecordStore:
    def __init__(self, client: Any, database_name: str):
        self._client = client
        self.db = client[database_name]

    @classmethod
    def from_settings(cls, settings: Settings) -> "RecordStore":
        client = MongoClient(
            settings.mongodb_url,
            serverSelectionTimeoutMS=settings.database_timeout_ms,
            tz_aware=True,
        )
        logger.info("Using database %s", settings.database_name)
        return cls(client, settings.database_name)

    @property
    def name(self) -> str:
        return self.db.name

    def create(self, kind: str, record: Union[BaseModel, Dict[str, Any]]) -> Dict[str, Any]:
        """Insert one record, stamping ``createdAt``. Returns the stored document."""
        if isinstance(record, BaseModel):
            doc = record.model_dump()
        else:
            doc = dict(record)
        doc["createdAt"] = datetime.now(timezone.utc)
        try:
            result = self.db[kind].insert_one(doc)
        except PyMongoError as e:
            raise StorageError(f"insert into {kind} failed") from e
        doc["_id"] = result.inserted_id
        return _serialize(doc)

    def list_all(self, kind: str) -> List[Dict[str, Any]]:
        """All records of a kind, newest first."""
        try:
            docs = list(self.db[kind].find({}).sort(NEWEST_FIRST))
        except PyMongoError as e:
            raise StorageError(f"read from {kind} failed") from e
        return [_serialize(d) for d in docs]

    def list_collections(self, limit: Optional[int] = None) -> List[str]:
        try:
            names = self.db.list_collection_names()
        except PyMongoError as e:
            raise StorageError("listing collections failed") from e
        return names[:limit] if limit is not None else names

    def close(self) -> None:
        self._client.close()
