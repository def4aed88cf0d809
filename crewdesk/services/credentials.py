"""Credential engine: usernames, readable passwords, verification hashes."""

from __future__ import annotations

import logging
import re
import secrets
from dataclasses import dataclass
from typing import Awaitable, Callable

import bcrypt

from crewdesk.errors import UsernameGenerationExhausted, ValidationFailed
from crewdesk.services.encryption import PasswordCipher

logger = logging.getLogger(__name__)

MAX_USERNAME_TRIES = 5
DEFAULT_PASSWORD_LENGTH = 12

# Visually ambiguous characters (I, O, l, o, 0, 1) are left out.
# Bytes are mapped with a modulo, so the first 256 % 59 characters are
# drawn slightly more often than the rest.
PASSWORD_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnpqrstuvwxyz23456789@#$"

UsernameTaken = Callable[[str], Awaitable[bool]]


@dataclass
class IssuedCredentials:
    username: str
    password: str
    password_hash: str
    password_enc: str

    def public(self) -> dict:
        """The only shape in which a plaintext password leaves the service."""
        return {"username": self.username, "password": self.password}


def hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str | None) -> bool:
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Not a bcrypt hash
        return False


def generate_password(length: int = DEFAULT_PASSWORD_LENGTH) -> str:
    data = secrets.token_bytes(length)
    return "".join(PASSWORD_ALPHABET[b % len(PASSWORD_ALPHABET)] for b in data)


def _clean_seed(seed_id: str) -> str:
    return re.sub(r"[^a-z0-9]", "", str(seed_id).lower())


async def generate_username(seed_id: str, taken: UsernameTaken) -> str:
    """Seafarer-id based username with a random hex suffix, retried on collision."""
    base = _clean_seed(seed_id)
    for _ in range(MAX_USERNAME_TRIES):
        candidate = f"{base}.{secrets.token_hex(3)}"
        if not await taken(candidate):
            return candidate
    logger.error("Username generation exhausted for seed %r after %d tries", base, MAX_USERNAME_TRIES)
    raise UsernameGenerationExhausted()


async def make_unique_username(base: str, taken: UsernameTaken) -> str:
    """Keep a caller-chosen username when free, otherwise add a short suffix."""
    clean = re.sub(r"[^a-z0-9._-]", "", str(base or "").strip().lower())
    if not clean:
        raise ValidationFailed("username is empty after normalisation")
    if not await taken(clean):
        return clean
    for _ in range(MAX_USERNAME_TRIES):
        candidate = f"{clean}.{secrets.token_hex(2)}"
        if not await taken(candidate):
            return candidate
    raise UsernameGenerationExhausted()


class CredentialEngine:
    """Produces credential bundles whose hash and recovery token share one plaintext."""

    def __init__(self, cipher: PasswordCipher, password_length: int = DEFAULT_PASSWORD_LENGTH):
        self.cipher = cipher
        self.password_length = password_length

    def seal(self, plain: str) -> tuple[str, str]:
        """Return (password_hash, password_enc) for one plaintext."""
        # Encrypt first so a key error leaves nothing half-derived
        enc = self.cipher.encrypt(plain)
        return hash_password(plain), enc

    async def issue(self, seed_id: str, taken: UsernameTaken) -> IssuedCredentials:
        username = await generate_username(seed_id, taken)
        password = generate_password(self.password_length)
        password_hash, password_enc = self.seal(password)
        logger.info("Issued credentials for username %s", username)
        return IssuedCredentials(
            username=username,
            password=password,
            password_hash=password_hash,
            password_enc=password_enc,
        )

    def recover(self, password_enc: str | None) -> str | None:
        return self.cipher.decrypt(password_enc)
