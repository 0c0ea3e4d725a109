"""
MongoDB helpers

The connection is opened once by ``connect`` when the app is created and the
resulting ``Database`` is passed to whatever needs it.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database


def connect(url: str, name: str) -> Database:
    client = MongoClient(url, serverSelectionTimeoutMS=5000, tz_aware=True)
    return client[name]


def ensure_indexes(db: Database) -> None:
    db["newslettersubscriber"].create_index([("email", ASCENDING)], unique=True)
    db["adminuser"].create_index([("email", ASCENDING)], unique=True)
    db["ratelimit"].create_index([("key", ASCENDING)], unique=True)
    db["ratelimit"].create_index("expires_at", expireAfterSeconds=0)
    db["contactsubmission"].create_index([("submitted_at", ASCENDING)])


def create_document(db: Database, collection_name: str, data: Union[BaseModel, Dict[str, Any]]) -> str:
    if isinstance(data, BaseModel):
        doc = data.model_dump()
    else:
        doc = dict(data)
    now = datetime.now(timezone.utc)
    doc.setdefault("created_at", now)
    doc["updated_at"] = now
    result = db[collection_name].insert_one(doc)
    return str(result.inserted_id)


def get_documents(
    db: Database,
    collection_name: str,
    filter_dict: Optional[Dict[str, Any]] = None,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    cursor = db[collection_name].find(filter_dict or {}).sort("created_at", -1)
    if limit:
        cursor = cursor.limit(int(limit))
    docs = list(cursor)
    for d in docs:
        d["_id"] = str(d["_id"])
    return docs
