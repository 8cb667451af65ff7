# Vault Manager - PIN-protected credential vault
#
# Boundary between the dashboard UI and the vault core.
# Every call returns a VaultResult; vault errors never escape as exceptions.
# Every mutation is followed by a full snapshot write (vaultPin + passwords).
#
# Known gaps kept as-is:
# - the PIN is persisted in the same state snapshot as the entries
# - re-bootstrapping the PIN does not re-encrypt existing entries
# - with no PIN configured, secrets are stored and revealed as plain text

import time
from typing import Any, Callable, Dict, List, Optional

from ..core import AppStateStore, EventSeverity, EventType, get_audit_logger
from ..core.state_store import KEY_PASSWORDS, KEY_VAULT_PIN
from .entry_store import CredentialStore
from .exceptions import InvalidEntry, VaultError
from .lock_state import AUTO_LOCK_SECONDS, VaultLock
from .models import CredentialEntry, LockState, VaultResult


class VaultManager:
    """
    Manages the credential vault.

    Security:
    - Each secret encrypted with AES-256-GCM (per-entry nonce)
    - Key derived from the PIN with PBKDF2-SHA256 (100k iterations)
    - Reveal gated by the lock state, auto-lock after 5 minutes
    - Audit logging for all vault access (never secrets or PINs)
    """

    def __init__(
        self,
        state_store: Optional[AppStateStore] = None,
        auto_lock_seconds: float = AUTO_LOCK_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize vault manager from persisted state.

        Args:
            state_store: Application state store. None keeps state in memory.
            auto_lock_seconds: Inactivity window before relocking.
            clock: Monotonic time source (seconds).

        Raises:
            ValueError: The persisted entries are malformed.
        """
        self.state_store = state_store if state_store is not None else AppStateStore()
        self.logger = get_audit_logger()

        stored_pin = self.state_store.get(KEY_VAULT_PIN)
        try:
            self.store = CredentialStore.from_records(self.state_store.get(KEY_PASSWORDS, []))
        except ValueError as e:
            self.logger.log_vault_event(
                EventType.VAULT_ERROR,
                f"Failed to load vault entries: {e}",
                severity=EventSeverity.CRITICAL,
            )
            raise

        self.lock_state = VaultLock(
            stored_pin=stored_pin,
            auto_lock_seconds=auto_lock_seconds,
            clock=clock,
            on_auto_lock=self._log_auto_lock,
        )

    # ------------------------------------------------------------------
    # Lock state
    # ------------------------------------------------------------------

    def get_lock_state(self) -> LockState:
        return self.lock_state.state

    @property
    def is_unlocked(self) -> bool:
        return self.lock_state.is_unlocked

    def bootstrap_pin(self, pin: str) -> VaultResult:
        """
        Set the vault PIN and unlock.

        Returns:
            VaultResult with LockState.UNLOCKED, or WeakPin / VaultLocked
            (replacing a PIN needs an unlocked session)
        """
        was_configured = self.lock_state.pin_configured
        try:
            state = self.lock_state.bootstrap_pin(pin)
        except VaultError as e:
            if was_configured:
                self.logger.log_vault_event(
                    EventType.VAULT_UNLOCK_FAILED,
                    f"PIN change refused: {e.kind}",
                    severity=EventSeverity.INVESTIGATE,
                )
            return VaultResult.fail(e)

        self._save_snapshot()

        orphaned = self.store.count_encrypted() if was_configured else 0
        self.logger.log_vault_event(
            EventType.VAULT_PIN_CONFIGURED,
            "PIN replaced" if was_configured else "PIN configured",
            details={"orphaned_entries": orphaned},
            severity=EventSeverity.ALERT if orphaned else EventSeverity.INFO,
        )
        return VaultResult.ok(state)

    def unlock(self, pin: str) -> VaultResult:
        """
        Unlock vault with the PIN.

        Returns:
            VaultResult with LockState.UNLOCKED, or IncorrectPin /
            PinNotConfigured
        """
        try:
            state = self.lock_state.unlock(pin)
        except VaultError as e:
            self.logger.log_vault_event(
                EventType.VAULT_UNLOCK_FAILED,
                f"Unlock failed: {e.kind}",
                severity=EventSeverity.INVESTIGATE,
            )
            return VaultResult.fail(e)

        self.logger.log_vault_event(EventType.VAULT_UNLOCKED, "Vault unlocked")
        return VaultResult.ok(state)

    def lock(self) -> VaultResult:
        """Lock vault (forget the session PIN). Idempotent."""
        was_unlocked = self.lock_state.is_unlocked
        state = self.lock_state.lock()
        if was_unlocked:
            self.logger.log_vault_event(EventType.VAULT_LOCKED, "Vault locked")
        return VaultResult.ok(state)

    def _log_auto_lock(self) -> None:
        self.logger.log_vault_event(
            EventType.VAULT_AUTO_LOCKED,
            "Vault locked after inactivity",
            details={"auto_lock_seconds": self.lock_state.auto_lock_seconds},
        )

    # ------------------------------------------------------------------
    # Entries
    # ------------------------------------------------------------------

    def add_entry(
        self,
        platform: str,
        identifier: str,
        secret: str,
        note: str = "",
    ) -> VaultResult:
        """
        Add a credential.

        Encrypted under the configured PIN (even while locked), or stored
        as plain text when no PIN has been configured.

        Returns:
            VaultResult with the new CredentialEntry, or InvalidEntry
        """
        if not platform.strip() or not secret:
            return VaultResult.fail(InvalidEntry())

        entry = self.store.add_entry(
            platform=platform,
            identifier=identifier,
            secret=secret,
            note=note,
            pin=self.lock_state.stored_pin,
        )
        self._save_snapshot()

        self.logger.log_vault_event(
            EventType.VAULT_ENTRY_ADDED,
            f"Entry added: {platform}",
            details={"entry_id": entry.id, "payload": entry.payload.tag},
        )
        return VaultResult.ok(entry)

    def reveal_secret(self, entry_id: str) -> VaultResult:
        """
        Reveal the plaintext secret of an entry.

        Returns:
            VaultResult with the secret, or VaultLocked / DecryptionFailure /
            EntryNotFound
        """
        try:
            pin = self.lock_state.pin_for_reveal()
            secret = self.store.reveal_secret(entry_id, pin)
        except VaultError as e:
            self.logger.log_vault_event(
                EventType.VAULT_REVEAL_FAILED,
                f"Reveal failed: {e.kind}",
                details={"entry_id": entry_id},
                severity=EventSeverity.INVESTIGATE,
            )
            return VaultResult.fail(e)

        self.logger.log_vault_event(
            EventType.VAULT_ENTRY_REVEALED,
            "Secret revealed",
            details={"entry_id": entry_id},
        )
        return VaultResult.ok(secret)

    def remove_entry(self, entry_id: str) -> VaultResult:
        """Delete an entry. Succeeds whether or not the id existed."""
        removed = self.store.remove_entry(entry_id)
        if removed:
            self._save_snapshot()
            self.logger.log_vault_event(
                EventType.VAULT_ENTRY_REMOVED,
                "Entry removed",
                details={"entry_id": entry_id},
            )
        return VaultResult.ok(removed)

    def list_entries(self) -> List[CredentialEntry]:
        """All entries in insertion order, secrets still opaque."""
        return self.store.list_entries()

    def search_entries(self, term: str) -> List[CredentialEntry]:
        """Entries whose platform or identifier contains the term."""
        return self.store.search(term)

    def status(self) -> Dict[str, Any]:
        state = self.lock_state.state
        since = self.lock_state.unlocked_since
        return {
            "lock_state": state.value,
            "pin_configured": self.lock_state.pin_configured,
            "unlocked_since": since.isoformat() if since else None,
            "auto_lock_seconds": self.lock_state.auto_lock_seconds,
            "entry_count": len(self.store),
        }

    def close(self) -> None:
        """Stop the auto-lock timer."""
        self.lock_state.shutdown()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _save_snapshot(self) -> None:
        try:
            self.state_store.set_many({
                KEY_VAULT_PIN: self.lock_state.stored_pin,
                KEY_PASSWORDS: self.store.to_records(),
            })
        except Exception as e:
            self.logger.log_vault_event(
                EventType.VAULT_ERROR,
                f"Failed to save vault state: {e}",
                severity=EventSeverity.CRITICAL,
            )
            raise
