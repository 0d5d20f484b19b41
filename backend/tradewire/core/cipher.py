"""
Credential cipher for refresh tokens at rest.

AES-256-GCM with a fresh 16-byte IV per message. The key is the SHA-256
digest of the configured secret, so any secret length works. Envelopes
are ``hex(iv):hex(ciphertext):hex(tag)``.
"""

import hashlib
import os
from functools import lru_cache
from typing import Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from tradewire.config import settings
from tradewire.core.exceptions import CryptoIntegrityError

IV_SIZE = 16
TAG_SIZE = 16


class CredentialCipher:
    """Encrypts and decrypts refresh tokens with a single process-wide key."""

    def __init__(self, secret: str):
        self._key = hashlib.sha256(str(secret).encode("utf-8")).digest()
        self._aesgcm = AESGCM(self._key)

    def encrypt(self, plaintext: Union[str, bytes]) -> str:
        if isinstance(plaintext, str):
            plaintext = plaintext.encode("utf-8")
        iv = os.urandom(IV_SIZE)
        sealed = self._aesgcm.encrypt(iv, plaintext, None)
        ciphertext, tag = sealed[:-TAG_SIZE], sealed[-TAG_SIZE:]
        return f"{iv.hex()}:{ciphertext.hex()}:{tag.hex()}"

    def decrypt_bytes(self, envelope: str) -> bytes:
        """Open an envelope, raising CryptoIntegrityError on any defect."""
        parts = envelope.split(":") if isinstance(envelope, str) else []
        if len(parts) != 3:
            raise CryptoIntegrityError("Malformed envelope: expected iv:ciphertext:tag")

        try:
            iv, ciphertext, tag = (bytes.fromhex(part) for part in parts)
        except ValueError as e:
            raise CryptoIntegrityError("Malformed envelope: fields must be hex") from e

        if len(iv) != IV_SIZE or len(tag) != TAG_SIZE:
            raise CryptoIntegrityError("Malformed envelope: bad iv or tag length")

        try:
            return self._aesgcm.decrypt(iv, ciphertext + tag, None)
        except InvalidTag as e:
            raise CryptoIntegrityError("Envelope failed authentication") from e

    def decrypt(self, envelope: str) -> str:
        plaintext = self.decrypt_bytes(envelope)
        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as e:
            raise CryptoIntegrityError("Decrypted payload is not UTF-8 text") from e


@lru_cache()
def get_cipher() -> CredentialCipher:
    """Process-wide cipher built from settings."""
    return CredentialCipher(settings.encryption_key)
