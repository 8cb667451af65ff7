"""
Vault Exception Classes

Raised inside the vault modules; VaultManager turns them into
VaultResult values at the boundary.
"""


class VaultError(Exception):
    """Base exception for vault operations"""

    kind = "VaultError"
    default_message = "Vault operation failed"

    def __init__(self, message: str = ""):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class WeakPin(VaultError):
    """Raised when a PIN is shorter than the minimum length"""

    kind = "WeakPin"
    default_message = "PIN must be at least 4 characters long"


class IncorrectPin(VaultError):
    """Raised when an unlock attempt does not match the stored PIN"""

    kind = "IncorrectPin"
    default_message = "Incorrect PIN"


class PinNotConfigured(VaultError):
    """Raised when unlocking a vault that has no PIN yet"""

    kind = "PinNotConfigured"
    default_message = "No PIN configured. Set a PIN first."


class VaultLocked(VaultError):
    """Raised when a reveal is attempted while the vault is locked"""

    kind = "VaultLocked"
    default_message = "Vault is locked. Unlock vault first."


class DecryptionFailure(VaultError):
    """Raised when authenticated decryption fails.

    Wrong PIN and corrupted data are deliberately indistinguishable.
    """

    kind = "DecryptionFailure"
    default_message = "Decryption failed. Wrong PIN or corrupted data."


class EntryNotFound(VaultError):
    """Raised when an entry id does not exist"""

    kind = "NotFound"
    default_message = "Entry not found"


class InvalidEntry(VaultError):
    """Raised when a new entry is missing required fields"""

    kind = "InvalidEntry"
    default_message = "Platform and secret are required"
