"""Tests for VaultManager: the vault's result-returning boundary."""

import json

import pytest

from eagledash.core.state_store import AppStateStore, KEY_PASSWORDS, KEY_VAULT_PIN
from eagledash.vault import (
    AUTO_LOCK_SECONDS,
    DecryptionFailure,
    EntryNotFound,
    IncorrectPin,
    LockState,
    VaultLocked,
    VaultManager,
    WeakPin,
)


@pytest.fixture
def make_vault(clock):
    created = []

    def _make(state_store=None):
        vault = VaultManager(state_store=state_store, clock=clock)
        created.append(vault)
        return vault

    yield _make

    for vault in created:
        vault.close()


class TestBootstrapAndUnlock:

    def test_initial_state_without_pin(self, make_vault):
        assert make_vault().get_lock_state() == LockState.NO_PIN_CONFIGURED

    def test_weak_pin_is_a_result_not_an_exception(self, make_vault):
        vault = make_vault()
        result = vault.bootstrap_pin("abc")
        assert not result.success
        assert isinstance(result.error, WeakPin)
        assert result.error_kind == "WeakPin"
        assert vault.get_lock_state() == LockState.NO_PIN_CONFIGURED

    def test_bootstrap_unlocks(self, make_vault):
        vault = make_vault()
        result = vault.bootstrap_pin("abcd")
        assert result.success
        assert result.value == LockState.UNLOCKED
        assert vault.is_unlocked

    def test_wrong_pin_keeps_vault_locked(self, make_vault):
        vault = make_vault()
        vault.bootstrap_pin("1234")
        vault.lock()
        result = vault.unlock("9999")
        assert not result.success
        assert isinstance(result.error, IncorrectPin)
        assert vault.get_lock_state() == LockState.LOCKED

    def test_new_pin_refused_while_locked(self, make_vault):
        store = AppStateStore()
        vault = make_vault(store)
        plain = vault.add_entry("Old", "x", "plainsecret").value
        vault.bootstrap_pin("1234")
        vault.lock()
        assert vault.reveal_secret(plain.id).error_kind == "VaultLocked"

        result = vault.bootstrap_pin("0000")

        assert not result.success
        assert isinstance(result.error, VaultLocked)
        assert vault.get_lock_state() == LockState.LOCKED
        assert vault.reveal_secret(plain.id).error_kind == "VaultLocked"
        assert store.get(KEY_VAULT_PIN) == "1234"
        assert vault.unlock("1234").success

    def test_new_pin_accepted_while_unlocked(self, make_vault):
        vault = make_vault()
        vault.bootstrap_pin("1234")
        assert vault.bootstrap_pin("5678").success
        vault.lock()
        assert vault.unlock("5678").success

    def test_unlock_without_pin(self, make_vault):
        result = make_vault().unlock("1234")
        assert not result.success
        assert result.error_kind == "PinNotConfigured"

    def test_lock_is_idempotent(self, make_vault):
        vault = make_vault()
        vault.bootstrap_pin("1234")
        assert vault.lock().value == LockState.LOCKED
        assert vault.lock().success
        assert vault.get_lock_state() == LockState.LOCKED


class TestScenarios:

    def test_gmail_roundtrip_through_lock(self, make_vault):
        vault = make_vault()
        assert vault.bootstrap_pin("1234").success
        entry = vault.add_entry("Gmail", "a@b.com", "hunter2").value
        assert entry.is_encrypted

        vault.lock()
        assert vault.unlock("1234").success
        assert vault.reveal_secret(entry.id).value == "hunter2"

    def test_reveal_while_locked(self, make_vault):
        vault = make_vault()
        vault.bootstrap_pin("1234")
        entry = vault.add_entry("Gmail", "a@b.com", "hunter2").value
        vault.lock()

        result = vault.reveal_secret(entry.id)
        assert not result.success
        assert isinstance(result.error, VaultLocked)

    def test_add_while_locked_still_encrypts(self, make_vault):
        vault = make_vault()
        vault.bootstrap_pin("1234")
        vault.lock()
        entry = vault.add_entry("Gmail", "a@b.com", "hunter2").value
        assert entry.is_encrypted
        vault.unlock("1234")
        assert vault.reveal_secret(entry.id).value == "hunter2"

    def test_no_pin_plain_entry_reveals_without_unlock(self, make_vault):
        vault = make_vault()
        entry = vault.add_entry("Gmail", "a@b.com", "plainsecret").value
        assert [e.payload.tag for e in vault.list_entries()] == ["Plain"]
        assert vault.reveal_secret(entry.id).value == "plainsecret"

    def test_plain_entry_is_gated_once_pin_exists(self, make_vault):
        vault = make_vault()
        entry = vault.add_entry("Old", "x", "plainsecret").value
        vault.bootstrap_pin("1234")
        vault.lock()
        assert vault.reveal_secret(entry.id).error_kind == "VaultLocked"
        vault.unlock("1234")
        assert vault.reveal_secret(entry.id).value == "plainsecret"

    def test_auto_lock_after_five_minutes(self, make_vault, clock):
        vault = make_vault()
        vault.bootstrap_pin("1234")
        entry = vault.add_entry("Gmail", "a@b.com", "hunter2").value
        vault.lock()
        vault.unlock("1234")

        clock.advance(AUTO_LOCK_SECONDS)

        assert vault.get_lock_state() == LockState.LOCKED
        result = vault.reveal_secret(entry.id)
        assert isinstance(result.error, VaultLocked)

    def test_rebootstrap_orphans_old_entries(self, make_vault):
        vault = make_vault()
        vault.bootstrap_pin("1234")
        old = vault.add_entry("Gmail", "a@b.com", "hunter2").value
        vault.bootstrap_pin("5678")
        new = vault.add_entry("Bank", "me", "s3cret").value

        assert isinstance(vault.reveal_secret(old.id).error, DecryptionFailure)
        assert vault.reveal_secret(new.id).value == "s3cret"


class TestEntries:

    def test_reveal_unknown_id(self, make_vault):
        vault = make_vault()
        result = vault.reveal_secret("missing")
        assert isinstance(result.error, EntryNotFound)
        assert result.error_kind == "NotFound"

    def test_empty_platform_or_secret_rejected(self, make_vault):
        vault = make_vault()
        assert vault.add_entry("", "a", "s").error_kind == "InvalidEntry"
        assert vault.add_entry("Gmail", "a", "").error_kind == "InvalidEntry"
        assert vault.list_entries() == []

    def test_remove_entry_idempotent(self, make_vault):
        vault = make_vault()
        entry = vault.add_entry("Gmail", "a@b.com", "s").value
        assert vault.remove_entry(entry.id).value is True
        assert vault.remove_entry(entry.id).success
        assert vault.remove_entry(entry.id).value is False
        assert vault.list_entries() == []

    def test_search_entries(self, make_vault):
        vault = make_vault()
        vault.add_entry("Gmail", "a@b.com", "s")
        vault.add_entry("Netflix", "casa", "s")
        assert [e.platform for e in vault.search_entries("net")] == ["Netflix"]

    def test_status(self, make_vault):
        vault = make_vault()
        vault.bootstrap_pin("1234")
        vault.add_entry("Gmail", "a@b.com", "s")
        status = vault.status()
        assert status["lock_state"] == "unlocked"
        assert status["pin_configured"] is True
        assert status["unlocked_since"] is not None
        assert status["auto_lock_seconds"] == AUTO_LOCK_SECONDS
        assert status["entry_count"] == 1


class TestPersistence:

    def test_snapshot_written_after_mutations(self, make_vault):
        store = AppStateStore()
        vault = make_vault(store)
        vault.bootstrap_pin("1234")
        entry = vault.add_entry("Gmail", "a@b.com", "hunter2").value

        assert store.get(KEY_VAULT_PIN) == "1234"
        records = store.get(KEY_PASSWORDS)
        assert [r["id"] for r in records] == [entry.id]
        assert "nonceBase64" in records[0]

        vault.remove_entry(entry.id)
        assert store.get(KEY_PASSWORDS) == []

    def test_reload_from_disk(self, make_vault, tmp_path):
        db_path = tmp_path / "data" / "app_state.db"
        vault = make_vault(AppStateStore(db_path))
        vault.bootstrap_pin("1234")
        entry = vault.add_entry("Gmail", "a@b.com", "hunter2").value
        vault.close()

        reopened = make_vault(AppStateStore(db_path))
        assert reopened.get_lock_state() == LockState.LOCKED
        assert reopened.reveal_secret(entry.id).error_kind == "VaultLocked"
        assert reopened.unlock("1234").success
        assert reopened.reveal_secret(entry.id).value == "hunter2"

    def test_tampered_snapshot_fails_decryption(self, make_vault):
        store = AppStateStore()
        vault = make_vault(store)
        vault.bootstrap_pin("1234")
        entry = vault.add_entry("Gmail", "a@b.com", "hunter2").value

        records = store.get(KEY_PASSWORDS)
        other_nonce = make_vault().store.add_entry("x", "", "y", pin="1234").to_record()["nonceBase64"]
        records[0]["nonceBase64"] = other_nonce
        store.set(KEY_PASSWORDS, records)

        reopened = make_vault(store)
        reopened.unlock("1234")
        assert reopened.reveal_secret(entry.id).error_kind == "DecryptionFailure"

    def test_malformed_snapshot_raises(self, make_vault):
        store = AppStateStore()
        store.set(KEY_PASSWORDS, [{"platform": "Gmail"}])
        with pytest.raises(ValueError):
            make_vault(store)

    def test_lock_and_unlock_do_not_write(self, make_vault):
        store = AppStateStore()
        vault = make_vault(store)
        vault.bootstrap_pin("1234")
        before = json.dumps(store.get_all(), sort_keys=True)
        vault.lock()
        vault.unlock("1234")
        assert json.dumps(store.get_all(), sort_keys=True) == before
