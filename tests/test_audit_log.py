"""Tests for the structured audit log."""

import json

from eagledash.core.audit_log import (
    AuditLogger,
    EventSeverity,
    EventType,
    get_audit_logger,
)


def _read_events(logger):
    lines = logger.log_file.read_text(encoding="utf-8").splitlines()
    return [json.loads(line) for line in lines if line.strip()]


class TestAuditLogger:

    def test_event_written_as_json(self, tmp_path):
        logger = AuditLogger(log_dir=tmp_path / "logs")
        event_id = logger.log_event(
            EventType.VAULT_UNLOCKED,
            EventSeverity.INFO,
            "Vault unlocked",
            details={"entry_count": 2},
        )
        events = _read_events(logger)
        assert events[-1]["event_id"] == event_id
        assert events[-1]["event_type"] == "vault.unlocked"
        assert events[-1]["details"] == {"entry_count": 2}

    def test_vault_event_prefix(self, tmp_path):
        logger = AuditLogger(log_dir=tmp_path / "logs")
        logger.log_vault_event(EventType.VAULT_LOCKED, "Vault locked")
        assert _read_events(logger)[-1]["message"] == "Vault: Vault locked"

    def test_singleton_uses_isolated_dir(self, tmp_path):
        logger = get_audit_logger()
        assert logger is get_audit_logger()
        assert logger.log_dir == tmp_path / "audit_logs"


def test_vault_never_logs_secrets_or_pin(tmp_path):
    from eagledash.vault import VaultManager

    vault = VaultManager()
    try:
        vault.bootstrap_pin("zqxw-pin")
        entry = vault.add_entry("Gmail", "a@b.com", "hunter2").value
        vault.reveal_secret(entry.id)
        vault.unlock("yvkm-pin")
    finally:
        vault.close()

    content = get_audit_logger().log_file.read_text(encoding="utf-8")
    assert "vault.entry.revealed" in content
    assert "hunter2" not in content
    assert "zqxw-pin" not in content
    assert "yvkm-pin" not in content
