"""String key/value stores standing in for the browser's local storage."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from credential_hub import database

_LOGGER = logging.getLogger(__name__)

# Keys written by the session helpers.
USER_DATA_KEY = "credentialHub_userData"
REGISTERED_USERS_KEY = "credentialHub_registeredUsers"
RESET_TOKENS_KEY = "credentialHub_resetTokens"
SENT_EMAILS_KEY = "credentialHub_sentEmails"

# Tab-scoped flag set when a tab logs in rather than signs up.
IS_LOGIN_FLAG = "credentialHub_isLogin"


class KeyValueStore:
    """Synchronous string-keyed, string-valued storage."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    """Process-local store; contents vanish on restart."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self):
        return list(self._data)


class MongoStore(KeyValueStore):
    """Store entries as ``{namespace, key, value}`` documents in MongoDB."""

    def __init__(self, collection: Optional[Collection] = None, namespace: str = "") -> None:
        self._collection = collection
        self.namespace = namespace

    @property
    def collection(self) -> Collection:
        if self._collection is None:
            self._collection = database.get_kv_collection()
        return self._collection

    def get(self, key: str) -> Optional[str]:
        document = self.collection.find_one({"namespace": self.namespace, "key": key})
        if not document:
            return None
        return document.get("value")

    def set(self, key: str, value: str) -> None:
        self.collection.update_one(
            {"namespace": self.namespace, "key": key},
            {"$set": {"value": value, "updated_at": datetime.utcnow()}},
            upsert=True,
        )

    def remove(self, key: str) -> None:
        self.collection.delete_one({"namespace": self.namespace, "key": key})


class NamespacedStore(KeyValueStore):
    """View of another store with every key prefixed by ``namespace``."""

    def __init__(self, inner: KeyValueStore, namespace: str) -> None:
        self.inner = inner
        self.namespace = namespace

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    def get(self, key: str) -> Optional[str]:
        return self.inner.get(self._key(key))

    def set(self, key: str, value: str) -> None:
        self.inner.set(self._key(key), value)

    def remove(self, key: str) -> None:
        self.inner.remove(self._key(key))


_shared_memory_store = MemoryStore()


def get_base_store() -> KeyValueStore:
    """Return the process-wide store, in MongoDB when it is enabled."""
    if database.mongodb_enabled():
        return MongoStore()
    return _shared_memory_store


def store_for_client(client_id: str) -> KeyValueStore:
    """Return the store owned by a single browser profile."""
    return NamespacedStore(get_base_store(), client_id)


def read_json(store: KeyValueStore, key: str, default: Any = None) -> Any:
    """Decode the JSON blob under ``key``; malformed or unreadable blobs yield ``default``."""
    try:
        raw = store.get(key)
    except PyMongoError:
        _LOGGER.exception("Failed to read %s from key/value store", key)
        return default

    if raw is None:
        return default
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        _LOGGER.warning("Discarding malformed JSON stored under %s", key)
        return default


def write_json(store: KeyValueStore, key: str, value: Any) -> None:
    store.set(key, json.dumps(value))
