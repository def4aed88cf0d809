"""FastAPI dependency providers for settings, auth and credential engines."""

from __future__ import annotations

from datetime import timedelta
from functools import lru_cache

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from crewdesk.config import Settings, get_settings
from crewdesk.errors import Unauthorized
from crewdesk.services.auth import TokenManager
from crewdesk.services.credentials import CredentialEngine
from crewdesk.services.encryption import PasswordCipher
from crewdesk.services.principal import Principal

_bearer = HTTPBearer(auto_error=False)


@lru_cache
def get_settings_dep() -> Settings:
    return get_settings()


@lru_cache
def get_token_manager() -> TokenManager:
    sec = get_settings_dep().security
    return TokenManager(
        secret=sec.jwt_secret,
        algorithm=sec.jwt_algorithm,
        access_ttl=timedelta(minutes=sec.access_token_expire_minutes),
        refresh_ttl=timedelta(days=sec.refresh_token_expire_days),
        reset_ttl=timedelta(minutes=sec.reset_token_expire_minutes),
    )


@lru_cache
def get_credential_engine() -> CredentialEngine:
    return CredentialEngine(PasswordCipher(get_settings_dep().security.password_enc_key))


async def require_auth(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    tokens: TokenManager = Depends(get_token_manager),
) -> Principal:
    """Require a valid bearer access token. Returns the caller's Principal."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise Unauthorized("Missing token")
    return tokens.decode_access_token(credentials.credentials)
