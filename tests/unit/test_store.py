from __future__ import annotations

import json
from pathlib import Path

from finsync.schema import CREDENTIAL_KEYS, REMEMBER_ME_KEY, TOKEN_KEY, USER_KEY
from finsync.store import JsonFileStore, MemoryStore


def test_memory_store_roundtrip() -> None:
    store = MemoryStore({TOKEN_KEY: "abc"})
    store.set(USER_KEY, "{}")

    assert store.get(TOKEN_KEY) == "abc"
    assert store.snapshot() == {TOKEN_KEY: "abc", USER_KEY: "{}"}

    store.delete(TOKEN_KEY)
    store.delete("missing")
    assert store.get(TOKEN_KEY) is None


def test_delete_many_keeps_other_keys() -> None:
    store = MemoryStore({TOKEN_KEY: "abc", USER_KEY: "{}", REMEMBER_ME_KEY: "true"})

    store.delete_many(CREDENTIAL_KEYS)

    assert store.snapshot() == {REMEMBER_ME_KEY: "true"}


def test_json_store_persists_across_instances(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "session.json"
    JsonFileStore(path).set(TOKEN_KEY, "abc")

    reopened = JsonFileStore(path)

    assert reopened.get(TOKEN_KEY) == "abc"
    with path.open("r", encoding="utf-8") as handle:
        assert json.load(handle) == {TOKEN_KEY: "abc"}
    assert not path.with_suffix(".json.tmp").exists()


def test_json_store_ignores_corrupt_file(tmp_path: Path) -> None:
    path = tmp_path / "session.json"
    path.write_text("{not json", encoding="utf-8")

    store = JsonFileStore(path)

    assert store.get(TOKEN_KEY) is None
    store.set(TOKEN_KEY, "fresh")
    assert JsonFileStore(path).get(TOKEN_KEY) == "fresh"


def test_json_store_ignores_non_object(tmp_path: Path) -> None:
    path = tmp_path / "session.json"
    path.write_text("[1, 2]", encoding="utf-8")

    assert JsonFileStore(path).get(TOKEN_KEY) is None


def test_json_store_clear_removes_file(tmp_path: Path) -> None:
    path = tmp_path / "session.json"
    store = JsonFileStore(path)
    store.set(TOKEN_KEY, "abc")

    store.clear()

    assert not path.exists()
    assert store.get(TOKEN_KEY) is None
