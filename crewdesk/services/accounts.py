"""Account operations: admin create/update/delete, signup, password recovery."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from crewdesk.db import crud
from crewdesk.errors import Conflict, NotFound, ValidationFailed
from crewdesk.models import User
from crewdesk.models.enums import Role
from crewdesk.services import ship_history
from crewdesk.services.auth import MIN_PASSWORD_LENGTH, revoke_all_sessions
from crewdesk.services.authorization import (
    Action, Target, enforce, ensure_can_assign_role, ensure_credential_access, require_action,
)
from crewdesk.services.credentials import CredentialEngine, IssuedCredentials, generate_password
from crewdesk.services.lifecycle import apply_transition
from crewdesk.services.principal import Principal
from crewdesk.services.scope import Entity

logger = logging.getLogger(__name__)

SIGNUP_STATUS = "Pending"
DUPLICATE_SEAFARER = "Duplicate seafarer_id (must be unique forever)"
DUPLICATE_ACCOUNT = "Duplicate seafarer_id or username"

# Plain profile columns copied from create/update payloads
PROFILE_FIELDS = (
    "full_name", "rank", "trip", "embarkation_date", "disembarkation_date", "email",
)


async def _resolve_tenancy(
    db: AsyncSession, company_id: str | None, ship_id: int | None
) -> tuple[str | None, int | None]:
    """Fill in the company from the ship and reject mismatches."""
    if ship_id is None:
        return company_id, None
    ship = await crud.get_ship(db, ship_id)
    if not ship:
        raise NotFound("Ship not found")
    if company_id is not None and str(company_id) != str(ship.company_id):
        raise ValidationFailed("company_id mismatch with ship.company_id")
    return ship.company_id, ship_id


async def _load_user(db: AsyncSession, user_id: int) -> User:
    user = await crud.get_row(db, User, user_id)
    if not user:
        raise NotFound("User not found")
    return user


async def create_account(
    db: AsyncSession,
    principal: Principal,
    data: dict,
    engine: CredentialEngine,
) -> tuple[User, IssuedCredentials | None]:
    """Create an account; credentials are generated only when it starts Onboard."""
    require_action(principal, Entity.USERS, Action.CREATE)

    role = Role(data.get("role_id") or Role.CREW)
    ensure_can_assign_role(principal, role)

    company_id = data.get("company_id")
    ship_id = data.get("ship_id")
    if ship_id is None and principal.role is Role.SUBADMIN:
        ship_id = principal.ship_id
    if company_id is None and ship_id is None:
        company_id = principal.company_id
    company_id, ship_id = await _resolve_tenancy(db, company_id, ship_id)
    enforce(principal, Entity.USERS, Action.CREATE, target=Target(company_id, ship_id))

    seafarer_id = str(data["seafarer_id"]).strip()
    if not seafarer_id:
        raise ValidationFailed("seafarer_id is required")
    if await crud.seafarer_id_in_use(db, seafarer_id):
        raise Conflict(DUPLICATE_SEAFARER)

    user = User(
        seafarer_id=seafarer_id,
        role_id=int(role),
        company_id=company_id,
        ship_id=ship_id,
        **{k: data.get(k) for k in PROFILE_FIELDS},
    )
    try:
        db.add(user)
        issued = await apply_transition(db, user, data.get("status"), engine)
        await crud.flush_or_conflict(db, DUPLICATE_ACCOUNT)
        if ship_id is not None:
            await ship_history.record_ship_change(
                db, user, None, ship_id,
                changed_by_user_id=principal.user_id,
                embarkation_date=user.embarkation_date,
            )
        await crud.commit_or_conflict(db, DUPLICATE_ACCOUNT)
    except Exception:
        await db.rollback()
        raise

    await db.refresh(user)
    logger.info("User %s created by %s (credentials issued: %s)", user.id, principal.user_id, bool(issued))
    return user, issued


async def update_account(
    db: AsyncSession,
    principal: Principal,
    user_id: int,
    data: dict,
    engine: CredentialEngine,
    remove_credentials: bool = False,
) -> tuple[User, IssuedCredentials | None]:
    """Partial update. Omitted or null fields keep their stored values."""
    require_action(principal, Entity.USERS, Action.UPDATE)
    user = await _load_user(db, user_id)

    requested_company = data.get("company_id")
    requested_ship = data.get("ship_id")
    company_id, ship_id = user.company_id, user.ship_id
    if requested_ship is not None:
        company_id, ship_id = await _resolve_tenancy(db, requested_company, requested_ship)
    elif requested_company is not None:
        company_id = requested_company
    enforce(
        principal, Entity.USERS, Action.UPDATE,
        row=user, target=Target(company_id, ship_id),
    )
    if requested_ship is None and requested_company is not None:
        # Moving company only: the current ship must belong to it
        company_id, ship_id = await _resolve_tenancy(db, company_id, ship_id)

    if data.get("role_id") is not None and data["role_id"] != user.role_id:
        ensure_can_assign_role(principal, Role(data["role_id"]))
        user.role_id = int(data["role_id"])

    seafarer_id = data.get("seafarer_id")
    if seafarer_id is not None and seafarer_id != user.seafarer_id:
        if await crud.seafarer_id_in_use(db, seafarer_id):
            raise Conflict(DUPLICATE_SEAFARER)
        user.seafarer_id = seafarer_id

    old_ship_id = user.ship_id
    user.company_id = company_id
    user.ship_id = ship_id

    try:
        crud.apply_updates(user, {k: data.get(k) for k in PROFILE_FIELDS})
        issued = await apply_transition(
            db, user, data.get("status"), engine, remove_credentials=remove_credentials,
        )
        await ship_history.record_ship_change(
            db, user, old_ship_id, user.ship_id,
            changed_by_user_id=principal.user_id,
            embarkation_date=data.get("embarkation_date"),
            disembarkation_date=data.get("disembarkation_date"),
        )
        await crud.commit_or_conflict(db, DUPLICATE_ACCOUNT)
    except Exception:
        await db.rollback()
        raise

    await db.refresh(user)
    return user, issued


async def delete_account(db: AsyncSession, principal: Principal, user_id: int) -> None:
    """Hard delete. The seafarer id is retired and can never be reused."""
    require_action(principal, Entity.USERS, Action.DELETE)
    if user_id == principal.user_id:
        raise ValidationFailed("Cannot delete yourself")
    user = await _load_user(db, user_id)
    enforce(principal, Entity.USERS, Action.DELETE, row=user)

    try:
        await crud.retire_seafarer_id(db, user.seafarer_id)
        await revoke_all_sessions(db, user.id, commit=False)
        await db.delete(user)
        await crud.commit_or_conflict(db, "User is still referenced")
    except Exception:
        await db.rollback()
        raise
    logger.info("User %s deleted by %s", user_id, principal.user_id)


async def signup(db: AsyncSession, data: dict, engine: CredentialEngine) -> User:
    """Self-service crew signup. The account waits for an administrator to onboard it."""
    password = data["password"]
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationFailed(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    company_id, ship_id = await _resolve_tenancy(db, data.get("company_id"), data.get("ship_id"))
    if company_id is None or await crud.get_company(db, company_id) is None:
        raise NotFound("Company not found")

    username = str(data["username"]).strip().lower()
    if await crud.username_taken(db, username):
        raise Conflict("Username already taken")
    seafarer_id = str(data["seafarer_id"]).strip()
    if await crud.seafarer_id_in_use(db, seafarer_id):
        raise Conflict(DUPLICATE_SEAFARER)

    password_hash, password_enc = engine.seal(password)
    user = User(
        seafarer_id=seafarer_id,
        full_name=data["full_name"],
        rank=data.get("rank"),
        email=data.get("email"),
        status=SIGNUP_STATUS,
        role_id=int(Role.CREW),
        company_id=company_id,
        ship_id=ship_id,
    )
    user.set_credentials(username, password_hash, password_enc)
    db.add(user)
    await crud.commit_or_conflict(db, DUPLICATE_ACCOUNT)
    await db.refresh(user)
    return user


# ── Admin credential recovery ────────────────────────────

async def _load_for_credential_admin(db: AsyncSession, principal: Principal, user_id: int) -> User:
    ensure_credential_access(principal)
    user = await _load_user(db, user_id)
    enforce(principal, Entity.USERS, Action.UPDATE, row=user)
    ensure_credential_access(principal, user)
    return user


async def view_password(
    db: AsyncSession, principal: Principal, user_id: int, engine: CredentialEngine
) -> dict:
    user = await _load_for_credential_admin(db, principal, user_id)
    password = engine.recover(user.password_enc)
    logger.info(
        "Password recovery for user %s by %s (available: %s)",
        user.id, principal.user_id, password is not None,
    )
    return {"user_id": user.id, "username": user.username, "password": password}


async def set_password(
    db: AsyncSession,
    principal: Principal,
    user_id: int,
    engine: CredentialEngine,
    new_password: str | None = None,
) -> dict:
    """Set (or generate) a password for an account that already has credentials."""
    user = await _load_for_credential_admin(db, principal, user_id)
    if not user.username:
        raise ValidationFailed("Account has no credentials")
    if new_password is not None and len(new_password) < MIN_PASSWORD_LENGTH:
        raise ValidationFailed(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    password = new_password or generate_password(engine.password_length)
    try:
        user.password_hash, user.password_enc = engine.seal(password)
        user.reset_token_hash = None
        user.reset_token_expires_at = None
        await revoke_all_sessions(db, user.id, commit=False)
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    logger.info("Password set for user %s by %s", user.id, principal.user_id)
    return {"username": user.username, "password": password}
