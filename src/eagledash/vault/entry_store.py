# Vault - Credential Record Store
#
# In-memory, insertion-ordered collection of credential entries.
# Encrypts on add when a PIN is given, decrypts on reveal.
# Decrypted secrets are returned to the caller and never kept here.

import logging
from typing import Any, Dict, Iterable, List, Optional

from .encryption import EncryptionService
from .exceptions import DecryptionFailure, EntryNotFound
from .models import CredentialEntry, EncryptedSecret, PlainSecret, SecretPayload

logger = logging.getLogger(__name__)


class CredentialStore:
    """Owns every CredentialEntry of the vault."""

    def __init__(self, entries: Optional[Iterable[CredentialEntry]] = None):
        # dict keeps insertion order
        self._entries: Dict[str, CredentialEntry] = {}
        for entry in entries or ():
            self._entries[entry.id] = entry

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, entry_id: str) -> bool:
        return entry_id in self._entries

    def add_entry(
        self,
        platform: str,
        identifier: str,
        secret: str,
        note: str = "",
        pin: Optional[str] = None,
    ) -> CredentialEntry:
        """
        Create and store a new entry.

        Args:
            platform: Service name (e.g. "Gmail")
            identifier: Account name or email
            secret: The secret to protect
            note: Optional free text
            pin: PIN to encrypt under; None stores the secret as plain text

        Returns:
            The new entry (with a fresh unique id)
        """
        payload: SecretPayload
        if pin is None:
            payload = PlainSecret(secret)
        else:
            ciphertext, nonce = EncryptionService.encrypt(secret, pin)
            payload = EncryptedSecret(ciphertext=ciphertext, nonce=nonce)

        entry = CredentialEntry(
            platform=platform,
            identifier=identifier,
            payload=payload,
            note=note,
        )
        self._entries[entry.id] = entry
        return entry

    def get_entry(self, entry_id: str) -> CredentialEntry:
        try:
            return self._entries[entry_id]
        except KeyError:
            raise EntryNotFound(f"Entry not found: {entry_id}") from None

    def reveal_secret(self, entry_id: str, pin: Optional[str]) -> str:
        """
        Return the plaintext secret of an entry.

        Raises:
            EntryNotFound: Unknown id.
            DecryptionFailure: Wrong PIN (or no PIN) for an encrypted entry,
                or corrupted data.
        """
        entry = self.get_entry(entry_id)
        payload = entry.payload
        if isinstance(payload, PlainSecret):
            return payload.value

        if pin is None:
            # An encrypted entry cannot be opened without a PIN
            raise DecryptionFailure()

        return EncryptionService.decrypt(payload.ciphertext, payload.nonce, pin)

    def remove_entry(self, entry_id: str) -> bool:
        """Delete by id. Returns False (and does nothing) if absent."""
        return self._entries.pop(entry_id, None) is not None

    def list_entries(self) -> List[CredentialEntry]:
        return list(self._entries.values())

    def search(self, term: str) -> List[CredentialEntry]:
        """Case-insensitive match on platform or identifier."""
        needle = term.strip().lower()
        if not needle:
            return self.list_entries()
        return [
            entry for entry in self._entries.values()
            if needle in entry.platform.lower() or needle in entry.identifier.lower()
        ]

    def count_encrypted(self) -> int:
        return sum(1 for entry in self._entries.values() if entry.is_encrypted)

    def to_records(self) -> List[Dict[str, Any]]:
        return [entry.to_record() for entry in self._entries.values()]

    @classmethod
    def from_records(cls, records: Iterable[Dict[str, Any]]) -> "CredentialStore":
        """
        Load a store from persisted records.

        Raises:
            ValueError: A record is malformed.
        """
        entries = [CredentialEntry.from_record(record) for record in records]
        logger.debug("Loaded %d vault entries", len(entries))
        return cls(entries)
