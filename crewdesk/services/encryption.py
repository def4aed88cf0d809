"""AES-256-GCM reversible encryption for admin password recovery.

Tokens have the form ``base64(nonce).base64(tag).base64(ciphertext)``.
Encryption fails loudly when the key is missing or malformed; decryption
fails closed and returns ``None``.
"""

from __future__ import annotations

import base64
import binascii
import logging
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from crewdesk.errors import EncryptionKeyError

logger = logging.getLogger(__name__)

KEY_BYTES = 32
NONCE_BYTES = 12
TAG_BYTES = 16
DELIMITER = "."


def generate_key() -> str:
    """Return a fresh base64-encoded 32-byte key suitable for PASSWORD_ENC_KEY."""
    return base64.b64encode(os.urandom(KEY_BYTES)).decode("ascii")


class PasswordCipher:
    def __init__(self, key_b64: str | None):
        self._key_b64 = key_b64 or ""

    def _get_aead(self) -> AESGCM:
        if not self._key_b64:
            raise EncryptionKeyError(
                "PASSWORD_ENC_KEY environment variable not set. Generate one with: python -m crewdesk.cli generate-key"
            )
        try:
            key = base64.b64decode(self._key_b64, validate=True)
        except (binascii.Error, ValueError) as e:
            raise EncryptionKeyError("PASSWORD_ENC_KEY is not valid base64") from e
        if len(key) != KEY_BYTES:
            raise EncryptionKeyError("PASSWORD_ENC_KEY must be 32 bytes base64")
        return AESGCM(key)

    def encrypt(self, plain: str) -> str:
        aead = self._get_aead()
        nonce = os.urandom(NONCE_BYTES)
        sealed = aead.encrypt(nonce, plain.encode("utf-8"), None)
        # cryptography appends the tag to the ciphertext
        ciphertext, tag = sealed[:-TAG_BYTES], sealed[-TAG_BYTES:]
        return DELIMITER.join(
            base64.b64encode(part).decode("ascii") for part in (nonce, tag, ciphertext)
        )

    def decrypt(self, token: str | None) -> str | None:
        if not token:
            return None
        try:
            aead = self._get_aead()
        except EncryptionKeyError:
            logger.warning("Password recovery unavailable: encryption key not configured")
            return None

        parts = token.split(DELIMITER)
        if len(parts) != 3:
            return None
        try:
            nonce, tag, ciphertext = (base64.b64decode(p, validate=True) for p in parts)
        except (binascii.Error, ValueError):
            return None
        if len(nonce) != NONCE_BYTES or len(tag) != TAG_BYTES:
            return None

        try:
            plain = aead.decrypt(nonce, ciphertext + tag, None)
        except InvalidTag:
            logger.warning("Password recovery token failed authentication")
            return None
        try:
            return plain.decode("utf-8")
        except UnicodeDecodeError:
            return None
