"""Onboard/offboard credential lifecycle.

Credential states are NoCredentials and HasCredentials. Becoming Onboard
without credentials generates them exactly once; an Onboard account that
already has credentials is left alone; leaving Onboard keeps credentials
unless the caller asks for them to be removed.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from crewdesk.db import crud
from crewdesk.errors import UsernameGenerationExhausted
from crewdesk.models import User
from crewdesk.models.enums import AccountStatus, normalize_status
from crewdesk.services.authorization import Action, authorize, deny, require_action
from crewdesk.services.auth import revoke_all_sessions
from crewdesk.services.credentials import CredentialEngine, IssuedCredentials, UsernameTaken
from crewdesk.services.principal import Principal
from crewdesk.services.scope import Entity

logger = logging.getLogger(__name__)


class CredentialState(enum.Enum):
    NO_CREDENTIALS = "no_credentials"
    HAS_CREDENTIALS = "has_credentials"


class Transition(enum.Enum):
    GENERATE = "generate"
    KEEP = "keep"
    CLEAR = "clear"


def credential_state(user: User) -> CredentialState:
    return CredentialState.HAS_CREDENTIALS if user.has_credentials else CredentialState.NO_CREDENTIALS


def plan_transition(state: CredentialState, next_status: str | None, remove_credentials: bool = False) -> Transition:
    onboard = normalize_status(next_status) is AccountStatus.ONBOARD
    if state is CredentialState.NO_CREDENTIALS:
        return Transition.GENERATE if onboard else Transition.KEEP
    if not onboard and remove_credentials:
        return Transition.CLEAR
    return Transition.KEEP


def session_taken_check(db: AsyncSession, reserved: set[str] | None = None) -> UsernameTaken:
    """Username check against storage plus names handed out earlier in this transaction."""
    reserved = reserved if reserved is not None else set()

    async def taken(candidate: str) -> bool:
        return candidate in reserved or await crud.username_taken(db, candidate)

    return taken


async def apply_transition(
    db: AsyncSession,
    user: User,
    next_status: str | None,
    engine: CredentialEngine,
    remove_credentials: bool = False,
    taken: UsernameTaken | None = None,
) -> IssuedCredentials | None:
    """Move ``user`` to ``next_status`` (None keeps the current one).

    Returns the freshly issued credentials, the only time a plaintext
    password exists, or None when nothing was generated. Does not commit.
    """
    status = next_status if next_status is not None else user.status
    plan = plan_transition(credential_state(user), status, remove_credentials)

    issued = None
    if plan is Transition.GENERATE:
        issued = await engine.issue(user.seafarer_id, taken or session_taken_check(db))
        user.set_credentials(issued.username, issued.password_hash, issued.password_enc)
    elif plan is Transition.CLEAR:
        user.clear_credentials()
        user.reset_token_hash = None
        user.reset_token_expires_at = None
        if user.id is not None:
            await revoke_all_sessions(db, user.id, commit=False)
        logger.info("Cleared credentials for user %s", user.id)

    if next_status is not None:
        user.status = next_status
    return issued


# ── Bulk transitions ─────────────────────────────────────

@dataclass
class BulkRowResult:
    user_id: int
    outcome: str  # updated | not_found | failed
    credentials: dict | None = None
    credentials_cleared: bool = False
    error: str | None = None


@dataclass
class BulkResult:
    status: str
    rows: list[BulkRowResult] = field(default_factory=list)

    @property
    def updated(self) -> int:
        return sum(1 for r in self.rows if r.outcome == "updated")


async def bulk_update_status(
    db: AsyncSession,
    principal: Principal,
    user_ids: list[int],
    status: str,
    engine: CredentialEngine,
    remove_credentials: bool = False,
) -> BulkResult:
    """Apply one status to many accounts inside a single locked transaction.

    Every targeted row is locked and scope-checked before anything is
    written; a single out-of-scope id aborts the whole batch. Credential
    generation then succeeds or fails per row.
    """
    require_action(principal, Entity.USERS, Action.UPDATE)
    ids = list(dict.fromkeys(user_ids))

    try:
        rows = await crud.lock_users(db, ids)
        for row in rows.values():
            decision = authorize(principal, Entity.USERS, Action.UPDATE, row=row)
            if not decision:
                raise deny(principal, decision)

        reserved: set[str] = set()
        taken = session_taken_check(db, reserved)
        result = BulkResult(status=status)

        for user_id in ids:
            user = rows.get(user_id)
            if user is None:
                result.rows.append(BulkRowResult(user_id=user_id, outcome="not_found"))
                continue

            had_credentials = user.has_credentials
            try:
                issued = await apply_transition(
                    db, user, status, engine,
                    remove_credentials=remove_credentials, taken=taken,
                )
            except UsernameGenerationExhausted as e:
                result.rows.append(BulkRowResult(
                    user_id=user_id, outcome="failed", error=type(e).__name__,
                ))
                continue

            if issued:
                reserved.add(issued.username)
            result.rows.append(BulkRowResult(
                user_id=user_id,
                outcome="updated",
                credentials=issued.public() if issued else None,
                credentials_cleared=had_credentials and not user.has_credentials,
            ))

        await crud.flush_or_conflict(db, "Duplicate username")
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Bulk status %r by user %s: %d/%d rows updated",
        status, principal.user_id, result.updated, len(ids),
    )
    return result
