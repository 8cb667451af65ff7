# Vault - Encryption Service
#
# PIN -> Encryption key (PBKDF2-HMAC-SHA256, fixed salt, 100k iterations)
# Secret encryption (AES-256-GCM, fresh 96-bit nonce per call)
#
# Known weakness: the salt is the same for every installation, so equal
# PINs give equal keys everywhere. Only the iteration count slows down
# dictionary attacks.

import base64
import binascii
import os
from typing import Tuple

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .exceptions import DecryptionFailure

MIN_PIN_LENGTH = 4


class EncryptionService:
    """
    Handles key derivation and encryption/decryption of vault secrets.

    Flow:
    1. User enters PIN
    2. PBKDF2 derives 256-bit key from PIN + application salt
    3. AES-256-GCM encrypts/decrypts the secret
    4. Each secret has its own nonce, stored next to the ciphertext
    """

    FIXED_SALT = b"eagledash-salt-2025"
    PBKDF2_ITERATIONS = 100_000
    KEY_LENGTH = 32  # 256 bits for AES-256
    NONCE_LENGTH = 12  # 96-bit nonce for GCM

    @staticmethod
    def derive_key(pin: str) -> bytes:
        """
        Derive encryption key from a PIN using PBKDF2.

        Deterministic: the same PIN always yields the same key.
        PIN length policy is enforced by the caller.

        Args:
            pin: User's PIN

        Returns:
            256-bit encryption key
        """
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=EncryptionService.KEY_LENGTH,
            salt=EncryptionService.FIXED_SALT,
            iterations=EncryptionService.PBKDF2_ITERATIONS,
        )

        return kdf.derive(pin.encode('utf-8'))

    @staticmethod
    def encrypt(plaintext: str, pin: str) -> Tuple[bytes, bytes]:
        """
        Encrypt plaintext under a key derived from the PIN.

        Args:
            plaintext: Secret to encrypt
            pin: PIN the key is derived from

        Returns:
            Tuple of (ciphertext, nonce). Ciphertext includes the GCM tag.
        """
        key = EncryptionService.derive_key(pin)

        # Never reuse a nonce with the same key
        nonce = os.urandom(EncryptionService.NONCE_LENGTH)

        ciphertext = AESGCM(key).encrypt(nonce, plaintext.encode('utf-8'), None)

        return ciphertext, nonce

    @staticmethod
    def decrypt(ciphertext: bytes, nonce: bytes, pin: str) -> str:
        """
        Decrypt ciphertext produced by encrypt().

        Args:
            ciphertext: Encrypted data (with tag)
            nonce: Nonce generated alongside this ciphertext
            pin: PIN the key is derived from

        Returns:
            Decrypted plaintext

        Raises:
            DecryptionFailure: Wrong PIN, tampered or truncated data, or a
                nonce that does not belong to this ciphertext.
        """
        if len(nonce) != EncryptionService.NONCE_LENGTH:
            raise DecryptionFailure()

        key = EncryptionService.derive_key(pin)
        try:
            plaintext_bytes = AESGCM(key).decrypt(nonce, ciphertext, None)
            return plaintext_bytes.decode('utf-8')
        except (InvalidTag, UnicodeDecodeError) as exc:
            raise DecryptionFailure() from exc

    @staticmethod
    def encode_for_storage(data: bytes) -> str:
        """Encode binary data as base64 text for the state snapshot."""
        return base64.b64encode(data).decode('ascii')

    @staticmethod
    def decode_from_storage(data: str) -> bytes:
        """
        Decode base64 text from the state snapshot.

        Raises:
            ValueError: If the text is not valid base64.
        """
        try:
            return base64.b64decode(data.encode('ascii'), validate=True)
        except (binascii.Error, UnicodeEncodeError) as exc:
            raise ValueError(f"Invalid base64 data in vault record: {exc}") from exc


def verify_pin(pin: str) -> Tuple[bool, str]:
    """
    Check a new PIN against the vault's PIN policy.

    Length is the only rule (at least 4 characters).

    Returns:
        (is_valid, error_message)
    """
    if len(pin) < MIN_PIN_LENGTH:
        return False, f"PIN must be at least {MIN_PIN_LENGTH} characters long"

    return True, ""
