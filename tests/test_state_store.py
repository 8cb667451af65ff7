"""Tests for AppStateStore (SQLite key/value application state)."""

import pytest

from eagledash.core.state_store import AppStateStore


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    if request.param == "memory":
        return AppStateStore()
    return AppStateStore(tmp_path / "data" / "app_state.db")


class TestAppStateStore:

    def test_get_default(self, store):
        assert store.get("missing") is None
        assert store.get("missing", []) == []

    def test_set_get_json_values(self, store):
        store.set("passwords", [{"id": "1", "note": "ç"}])
        store.set("vaultPin", "1234")
        assert store.get("passwords") == [{"id": "1", "note": "ç"}]
        assert store.get("vaultPin") == "1234"

    def test_overwrite(self, store):
        store.set("theme", "light")
        store.set("theme", "dark")
        assert store.get("theme") == "dark"

    def test_set_many_and_get_all(self, store):
        store.set_many({"b": 2, "a": 1})
        assert store.get_all() == {"a": 1, "b": 2}

    def test_stored_null_is_none(self, store):
        store.set("vaultPin", None)
        assert store.get("vaultPin", "fallback") is None

    def test_delete(self, store):
        store.set("x", 1)
        assert store.delete("x") is True
        assert store.delete("x") is False
        assert store.get("x") is None


def test_sqlite_survives_reopen(tmp_path):
    path = tmp_path / "app_state.db"
    AppStateStore(path).set("vaultPin", "1234")
    reopened = AppStateStore(path)
    assert reopened.is_persistent
    assert reopened.get("vaultPin") == "1234"
