"""Tests for key-value store backends."""

import json

import pytest

from feeforecast.store import JsonFileStore, KeyValueStore, MemoryStore, SqliteStore, create_store


def exercise(store):
    assert store.get("missing") is None
    store.set("a", "1")
    store.set("b", "2")
    store.set("a", "3")
    assert store.get("a") == "3"
    assert store.get("b") == "2"
    store.remove("a")
    assert store.get("a") is None
    # Removing a missing key is a no-op
    store.remove("a")
    assert store.get("b") == "2"


def test_memory_store():
    exercise(MemoryStore())


def test_json_file_store(tmp_path):
    path = tmp_path / "nested" / "store.json"
    store = JsonFileStore(str(path))
    exercise(store)

    assert json.loads(path.read_text()) == {"b": "2"}
    assert JsonFileStore(str(path)).get("b") == "2"


@pytest.mark.parametrize("contents", ["[1, 2]", "{not json", ""])
def test_json_file_store_recovers_from_bad_file(tmp_path, contents):
    path = tmp_path / "store.json"
    path.write_text(contents)
    store = JsonFileStore(str(path))

    assert store.get("a") is None
    store.remove("a")
    store.set("a", "1")
    assert json.loads(path.read_text()) == {"a": "1"}
    assert JsonFileStore(str(path)).get("a") == "1"


def test_sqlite_store(tmp_path):
    db_path = str(tmp_path / "state" / "store.db")
    store = SqliteStore(db_path)
    exercise(store)
    store.close()

    reopened = SqliteStore(db_path)
    assert reopened.get("b") == "2"
    reopened.close()


def test_create_store(tmp_path):
    assert isinstance(create_store("memory"), MemoryStore)
    assert isinstance(create_store("json", json_path=str(tmp_path / "s.json")), JsonFileStore)
    sqlite_store = create_store("sqlite", db_path=str(tmp_path / "s.db"))
    assert isinstance(sqlite_store, SqliteStore)
    sqlite_store.close()


def test_create_store_unknown_backend():
    with pytest.raises(ValueError):
        create_store("redis")


def test_key_value_store_is_abstract():
    with pytest.raises(TypeError):
        KeyValueStore()
