"""MongoDB connection backing the key/value store when ``ENABLE_MONGODB`` is set."""

from __future__ import annotations

import os
from typing import Optional

from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database

KV_COLLECTION = "kv_entries"
SERVER_SELECTION_TIMEOUT_MS = 5000

_client: Optional[MongoClient] = None
_database: Optional[Database] = None


def mongodb_enabled() -> bool:
    return os.getenv("ENABLE_MONGODB", "false").lower() == "true"


def get_mongo_client() -> MongoClient:
    """Get or create the shared client."""
    global _client
    if _client is None:
        mongo_uri = os.getenv("MONGODB_URI", "mongodb://localhost:27017/")
        _client = MongoClient(mongo_uri, serverSelectionTimeoutMS=SERVER_SELECTION_TIMEOUT_MS)
    return _client


def get_database() -> Database:
    global _database
    if _database is None:
        db_name = os.getenv("MONGODB_DATABASE", "credential_hub")
        _database = get_mongo_client()[db_name]
    return _database


def get_kv_collection() -> Collection:
    return get_database()[KV_COLLECTION]


def ensure_indexes() -> None:
    """One document per (namespace, key) pair."""
    get_kv_collection().create_index(
        [("namespace", ASCENDING), ("key", ASCENDING)],
        unique=True,
        name="namespace_key_unique",
    )
