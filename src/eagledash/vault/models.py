"""
Vault data models.

A credential's secret is a tagged variant: PlainSecret when no PIN was
configured at creation time, EncryptedSecret otherwise. The tag never
changes after creation.
"""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union

from .encryption import EncryptionService
from .exceptions import VaultError


class LockState(str, Enum):
    NO_PIN_CONFIGURED = "no_pin_configured"
    LOCKED = "locked"
    UNLOCKED = "unlocked"


@dataclass(frozen=True)
class PlainSecret:
    value: str = field(repr=False)

    @property
    def tag(self) -> str:
        return "Plain"


@dataclass(frozen=True)
class EncryptedSecret:
    ciphertext: bytes = field(repr=False)
    nonce: bytes = field(repr=False)

    @property
    def tag(self) -> str:
        return "Encrypted"


SecretPayload = Union[PlainSecret, EncryptedSecret]


@dataclass(frozen=True)
class CredentialEntry:
    """One stored credential. The payload is never decrypted in place."""

    platform: str
    identifier: str
    payload: SecretPayload = field(repr=False)
    note: str = ""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def is_encrypted(self) -> bool:
        return isinstance(self.payload, EncryptedSecret)

    def to_record(self) -> Dict[str, Any]:
        """
        Convert to the persisted snapshot shape.

        nonceBase64 is present if and only if the secret is encrypted.
        A plain secret is stored as base64 of its UTF-8 text.
        """
        record: Dict[str, Any] = {
            "id": self.id,
            "platform": self.platform,
            "identifier": self.identifier,
        }
        if isinstance(self.payload, EncryptedSecret):
            record["secretCiphertextBase64"] = EncryptionService.encode_for_storage(
                self.payload.ciphertext
            )
            record["nonceBase64"] = EncryptionService.encode_for_storage(self.payload.nonce)
        else:
            record["secretCiphertextBase64"] = EncryptionService.encode_for_storage(
                self.payload.value.encode("utf-8")
            )
        record["note"] = self.note
        return record

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "CredentialEntry":
        """
        Rebuild an entry from its persisted shape.

        Raises:
            ValueError: Missing id/secret fields or invalid base64.
        """
        for required in ("id", "secretCiphertextBase64"):
            if not record.get(required):
                raise ValueError(f"Vault record is missing '{required}'")

        secret_bytes = EncryptionService.decode_from_storage(record["secretCiphertextBase64"])
        nonce_b64 = record.get("nonceBase64")
        payload: SecretPayload
        if nonce_b64:
            payload = EncryptedSecret(
                ciphertext=secret_bytes,
                nonce=EncryptionService.decode_from_storage(nonce_b64),
            )
        else:
            try:
                payload = PlainSecret(secret_bytes.decode("utf-8"))
            except UnicodeDecodeError as exc:
                raise ValueError("Plain vault secret is not valid UTF-8") from exc

        return cls(
            id=record["id"],
            platform=record.get("platform", ""),
            identifier=record.get("identifier", ""),
            payload=payload,
            note=record.get("note", ""),
        )

    def summary(self) -> Dict[str, Any]:
        """Listing form: metadata plus payload tag, no secret material."""
        return {
            "id": self.id,
            "platform": self.platform,
            "identifier": self.identifier,
            "note": self.note,
            "payload": self.payload.tag,
        }


@dataclass
class VaultResult:
    """
    Outcome of a vault boundary call.

    Either success with a value, or failure carrying the VaultError that
    caused it. Errors never escape the boundary as exceptions.
    """

    success: bool
    value: Any = None
    error: Optional[VaultError] = None

    @classmethod
    def ok(cls, value: Any = None) -> "VaultResult":
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: VaultError) -> "VaultResult":
        return cls(success=False, error=error)

    @property
    def error_kind(self) -> Optional[str]:
        return self.error.kind if self.error is not None else None

    @property
    def message(self) -> str:
        return self.error.message if self.error is not None else ""
