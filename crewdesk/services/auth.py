"""Authentication service: JWT access tokens, DB-backed refresh sessions, password reset."""

from __future__ import annotations

import hashlib
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timezone, timedelta
from typing import Callable

import jwt
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from crewdesk.db import crud
from crewdesk.errors import Forbidden, InvalidToken, NotFound, Unauthorized, ValidationFailed
from crewdesk.models import RefreshSession, User
from crewdesk.models.enums import Role, is_onboard
from crewdesk.services.credentials import CredentialEngine, verify_password
from crewdesk.services.principal import Principal

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8

Clock = Callable[[], datetime]


def utc_clock() -> datetime:
    return datetime.now(timezone.utc)


def _hash_token(token: str) -> str:
    """SHA-256 hash of a refresh/reset token for DB storage."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


@dataclass
class LoginResult:
    access_token: str
    refresh_token: str
    principal: Principal
    token_type: str = "bearer"


class TokenManager:
    """Issues and verifies tokens. Secret and lifetimes are injected."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        access_ttl: timedelta = timedelta(hours=12),
        refresh_ttl: timedelta = timedelta(days=30),
        reset_ttl: timedelta = timedelta(minutes=15),
        clock: Clock = utc_clock,
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self.reset_ttl = reset_ttl
        self.clock = clock

    def _require_secret(self) -> str:
        if not self.secret:
            raise RuntimeError("JWT_SECRET environment variable not set")
        return self.secret

    def create_access_token(self, principal: Principal) -> str:
        now = self.clock()
        payload = {
            "sub": str(principal.user_id),
            "role": int(principal.role),
            "company_id": principal.company_id,
            "ship_id": principal.ship_id,
            "username": principal.username,
            "type": "access",
            "iat": now,
            "exp": now + self.access_ttl,
        }
        return jwt.encode(payload, self._require_secret(), algorithm=self.algorithm)

    def decode_access_token(self, token: str) -> Principal:
        try:
            payload = jwt.decode(
                token,
                self._require_secret(),
                algorithms=[self.algorithm],
                # Expiry is checked below against the injected clock
                options={"require": ["exp", "sub"], "verify_exp": False, "verify_iat": False},
            )
        except jwt.InvalidTokenError:
            raise Unauthorized("Invalid token")

        if payload.get("type") != "access":
            raise Unauthorized("Invalid token")
        if datetime.fromtimestamp(payload["exp"], tz=timezone.utc) <= self.clock():
            raise Unauthorized("Token expired")
        try:
            return Principal(
                user_id=int(payload["sub"]),
                role=Role(int(payload["role"])),
                company_id=payload.get("company_id"),
                ship_id=payload.get("ship_id"),
                username=payload.get("username"),
            )
        except (KeyError, TypeError, ValueError):
            raise Unauthorized("Invalid token")

    def new_opaque_token(self) -> tuple[str, str]:
        """Return (raw token, hash). Only the hash is ever stored."""
        token = secrets.token_urlsafe(48)
        return token, _hash_token(token)


def _check_login_gate(user: User) -> None:
    # Administrative and company accounts may not carry a meaningful status
    if user.role is Role.CREW and not is_onboard(user.status):
        raise Forbidden("User is not onboard. Login disabled.")


# ── Refresh sessions ─────────────────────────────────────

async def create_refresh_session(
    db: AsyncSession, user: User, tokens: TokenManager, ip_address: str = ""
) -> str:
    """Persist a refresh session. Returns the raw token (not the hash)."""
    token, token_hash = tokens.new_opaque_token()
    db.add(RefreshSession(
        user_id=user.id,
        token_hash=token_hash,
        expires_at=tokens.clock() + tokens.refresh_ttl,
        ip_address=ip_address,
    ))
    await db.commit()
    return token


async def revoke_all_sessions(db: AsyncSession, user_id: int, now: datetime | None = None, commit: bool = True) -> None:
    """Revoke every outstanding refresh session of an account."""
    await db.execute(
        update(RefreshSession)
        .where(RefreshSession.user_id == user_id, RefreshSession.revoked_at.is_(None))
        .values(revoked_at=now or utc_clock())
    )
    if commit:
        await db.commit()


async def login(
    db: AsyncSession, username: str, password: str, tokens: TokenManager, ip_address: str = ""
) -> LoginResult:
    user = await crud.get_user_by_username(db, username)
    if not user or not verify_password(password, user.password_hash):
        logger.info("Failed login for username %r", username)
        raise Unauthorized("Invalid credentials")

    _check_login_gate(user)

    principal = Principal.from_user(user)
    refresh_token = await create_refresh_session(db, user, tokens, ip_address=ip_address)
    user.last_login_at = tokens.clock()
    await db.commit()

    return LoginResult(
        access_token=tokens.create_access_token(principal),
        refresh_token=refresh_token,
        principal=principal,
    )


async def refresh(db: AsyncSession, refresh_token: str, tokens: TokenManager) -> str:
    """Exchange a refresh token for a new access token. The refresh token is not rotated."""
    result = await db.execute(
        select(RefreshSession).where(RefreshSession.token_hash == _hash_token(refresh_token))
    )
    session = result.scalars().first()
    if not session or session.revoked_at is not None:
        raise Unauthorized("Invalid refresh token")
    if _as_utc(session.expires_at) <= tokens.clock():
        raise Unauthorized("Refresh token expired")

    # Role, company or ship may have changed since login
    user = await db.get(User, session.user_id)
    if not user:
        raise Unauthorized("Invalid refresh token")
    _check_login_gate(user)

    return tokens.create_access_token(Principal.from_user(user))


async def logout(db: AsyncSession, refresh_token: str, tokens: TokenManager | None = None) -> None:
    """Revoke one refresh session; other sessions of the account stay valid."""
    result = await db.execute(
        select(RefreshSession).where(RefreshSession.token_hash == _hash_token(refresh_token))
    )
    session = result.scalars().first()
    if session and session.revoked_at is None:
        session.revoked_at = tokens.clock() if tokens else utc_clock()
        await db.commit()


# ── Password reset / change ──────────────────────────────

async def issue_reset_token(db: AsyncSession, username: str, tokens: TokenManager) -> str | None:
    """Store a fresh reset token in the account's single slot. Returns the raw token.

    Returns None when no account with credentials matches.
    """
    user = await crud.get_user_by_username(db, username)
    if not user or not user.has_credentials:
        return None

    token, token_hash = tokens.new_opaque_token()
    user.reset_token_hash = token_hash
    user.reset_token_expires_at = tokens.clock() + tokens.reset_ttl
    await db.commit()
    logger.info("Issued password reset token for user %s", user.id)
    return token


def _check_new_password(new_password: str) -> None:
    if len(new_password) < MIN_PASSWORD_LENGTH:
        raise ValidationFailed(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


async def reset_password(
    db: AsyncSession,
    token: str,
    new_password: str,
    engine: CredentialEngine,
    tokens: TokenManager,
) -> None:
    _check_new_password(new_password)

    result = await db.execute(select(User).where(User.reset_token_hash == _hash_token(token)))
    user = result.scalars().first()
    if not user or user.reset_token_expires_at is None:
        raise InvalidToken("Invalid or expired reset token")
    if _as_utc(user.reset_token_expires_at) <= tokens.clock():
        raise InvalidToken("Invalid or expired reset token")

    try:
        user.password_hash, user.password_enc = engine.seal(new_password)
        user.reset_token_hash = None
        user.reset_token_expires_at = None
        await revoke_all_sessions(db, user.id, now=tokens.clock(), commit=False)
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    logger.info("Password reset for user %s; refresh sessions revoked", user.id)


async def change_password(
    db: AsyncSession,
    principal: Principal,
    current_password: str,
    new_password: str,
    engine: CredentialEngine,
    tokens: TokenManager,
) -> None:
    _check_new_password(new_password)

    user = await db.get(User, principal.user_id)
    if not user:
        raise NotFound("User not found")
    if not verify_password(current_password, user.password_hash):
        raise Unauthorized("Current password is incorrect")

    try:
        user.password_hash, user.password_enc = engine.seal(new_password)
        await revoke_all_sessions(db, user.id, now=tokens.clock(), commit=False)
        await db.commit()
    except Exception:
        await db.rollback()
        raise
