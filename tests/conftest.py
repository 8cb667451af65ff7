"""
Shared pytest fixtures for the EagleDash test suite.

Autouse fixtures below isolate tests from the live application data:
  - Audit logger  -> temp directory  (prevents test events in ./audit_logs)
  - Vault manager -> reset singleton (prevents writes to data/app_state.db)
"""

import pytest


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture(autouse=True)
def _isolate_audit_logs(tmp_path, monkeypatch):
    """Redirect the global AuditLogger to a temp directory for every test."""
    import eagledash.core.audit_log as audit_mod

    old_logger = audit_mod._audit_logger
    audit_mod._audit_logger = None

    orig_init = audit_mod.AuditLogger.__init__

    def patched_init(self, log_dir=None):
        orig_init(self, log_dir=log_dir or tmp_path / "audit_logs")

    monkeypatch.setattr(audit_mod.AuditLogger, "__init__", patched_init)

    yield

    audit_mod._audit_logger = old_logger


@pytest.fixture(autouse=True)
def _isolate_vault_manager():
    """Reset the API's VaultManager singleton around every test."""
    import eagledash.api.vault_routes as vault_mod

    old_manager = vault_mod._vault_manager
    vault_mod._vault_manager = None

    yield

    if vault_mod._vault_manager is not None:
        vault_mod._vault_manager.close()
    vault_mod._vault_manager = old_manager
