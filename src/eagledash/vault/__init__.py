# Vault Module - PIN-protected credential vault
#
# Per-entry AES-256-GCM encryption with a PBKDF2-derived key,
# lock/unlock lifecycle with a 5-minute auto-lock.

from .encryption import EncryptionService
from .entry_store import CredentialStore
from .exceptions import (
    DecryptionFailure,
    EntryNotFound,
    IncorrectPin,
    InvalidEntry,
    PinNotConfigured,
    VaultError,
    VaultLocked,
    WeakPin,
)
from .lock_state import AUTO_LOCK_SECONDS, VaultLock
from .models import (
    CredentialEntry,
    EncryptedSecret,
    LockState,
    PlainSecret,
    VaultResult,
)
from .vault_manager import VaultManager

__all__ = [
    "VaultManager",
    "EncryptionService",
    "CredentialStore",
    "VaultLock",
    "AUTO_LOCK_SECONDS",
    "CredentialEntry",
    "PlainSecret",
    "EncryptedSecret",
    "LockState",
    "VaultResult",
    "VaultError",
    "WeakPin",
    "IncorrectPin",
    "PinNotConfigured",
    "VaultLocked",
    "DecryptionFailure",
    "EntryNotFound",
    "InvalidEntry",
]
