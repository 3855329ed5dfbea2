"""Tests for the key/value stores backing per-client browser storage."""

from __future__ import annotations

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from credential_hub.services import kv_store  # noqa: E402


def test_memory_store_basic_operations():
    store = kv_store.MemoryStore()
    assert store.get("missing") is None

    store.set("a", "1")
    assert store.get("a") == "1"
    store.remove("a")
    store.remove("a")
    assert store.keys() == []


def test_namespaced_store_isolates_clients():
    base = kv_store.MemoryStore()
    alice = kv_store.NamespacedStore(base, "alice")
    bob = kv_store.NamespacedStore(base, "bob")

    alice.set(kv_store.USER_DATA_KEY, "{}")
    assert bob.get(kv_store.USER_DATA_KEY) is None
    assert base.keys() == [f"alice:{kv_store.USER_DATA_KEY}"]


def test_mongo_store_upserts_documents(mongo_db):
    store = kv_store.MongoStore(namespace="ns")
    store.set("key", "first")
    store.set("key", "second")

    assert store.get("key") == "second"
    assert mongo_db.kv_entries.count_documents({"namespace": "ns", "key": "key"}) == 1

    store.remove("key")
    assert store.get("key") is None


def test_base_store_follows_mongodb_setting(monkeypatch):
    assert isinstance(kv_store.get_base_store(), kv_store.MongoStore)

    monkeypatch.setenv("ENABLE_MONGODB", "false")
    assert isinstance(kv_store.get_base_store(), kv_store.MemoryStore)


def test_store_for_client_persists_in_mongo(mongo_db):
    kv_store.write_json(kv_store.store_for_client("client-1"), "k", {"x": 1})

    assert kv_store.read_json(kv_store.store_for_client("client-1"), "k") == {"x": 1}
    assert kv_store.read_json(kv_store.store_for_client("client-2"), "k", "default") == "default"
    assert mongo_db.kv_entries.count_documents({"key": "client-1:k"}) == 1


def test_read_json_discards_malformed_values(caplog):
    store = kv_store.MemoryStore({"k": "not json"})
    assert kv_store.read_json(store, "k", []) == []
    assert "malformed JSON" in caplog.text
