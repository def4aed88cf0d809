"""Bootstrap a new company together with its admin login account."""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from crewdesk.db import crud
from crewdesk.errors import Conflict, NotFound, ValidationFailed
from crewdesk.models import Company, Ship, User
from crewdesk.models.enums import Role
from crewdesk.services.auth import MIN_PASSWORD_LENGTH, revoke_all_sessions
from crewdesk.services.authorization import Action, enforce, require_action
from crewdesk.services.credentials import CredentialEngine, make_unique_username
from crewdesk.services.principal import Principal
from crewdesk.services.scope import Entity

logger = logging.getLogger(__name__)

ADMIN_STATUS = "Onboard"

COMPANY_FIELDS = (
    "company_name", "code", "email_domain", "is_active", "metadata_json",
    "ships_count", "type", "regional_address", "ism_address",
    "contact_person_name", "phone_no", "email",
)


def admin_seafarer_id(company_id: str) -> str:
    return f"COMPANY:{company_id}"


def admin_full_name(company_name: str) -> str:
    return f"{company_name} Admin"


def _check_password(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationFailed(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


async def create_company(
    db: AsyncSession,
    principal: Principal,
    data: dict,
    admin_username: str,
    admin_password: str,
    engine: CredentialEngine,
) -> tuple[Company, User]:
    """Create a company and its admin account (role Admin, no ship) atomically.

    Returns (company, admin_user).
    """
    require_action(principal, Entity.COMPANIES, Action.CREATE)
    if not data.get("company_name"):
        raise ValidationFailed("company_name is required")
    _check_password(admin_password)

    try:
        username = await make_unique_username(
            admin_username, lambda name: crud.username_taken(db, name)
        )
        password_hash, password_enc = engine.seal(admin_password)

        company = Company(**{k: data.get(k) for k in COMPANY_FIELDS if data.get(k) is not None})
        db.add(company)
        await db.flush()

        admin = User(
            seafarer_id=admin_seafarer_id(company.id),
            full_name=admin_full_name(company.company_name),
            email=data.get("email"),
            role_id=int(Role.ADMIN),
            company_id=company.id,
            ship_id=None,
            status=ADMIN_STATUS,
        )
        admin.set_credentials(username, password_hash, password_enc)
        db.add(admin)
        await crud.commit_or_conflict(db, "Company admin username already exists")
    except Exception:
        await db.rollback()
        raise

    await db.refresh(company)
    await db.refresh(admin)
    logger.info("Company %s created with admin account %s", company.id, admin.id)
    return company, admin


async def update_company(
    db: AsyncSession,
    principal: Principal,
    company_id: str,
    data: dict,
    engine: CredentialEngine,
    admin_username: str | None = None,
    admin_password: str | None = None,
) -> tuple[Company, str | None]:
    """COALESCE-style update, synced onto the company admin account.

    Returns (company, new_admin_username or None).
    """
    require_action(principal, Entity.COMPANIES, Action.UPDATE)
    company = await crud.get_company(db, company_id)
    if not company:
        raise NotFound("Company not found")
    enforce(principal, Entity.COMPANIES, Action.UPDATE, row=company)
    if admin_password is not None:
        _check_password(admin_password)

    new_username = None
    try:
        crud.apply_updates(company, {k: data.get(k) for k in COMPANY_FIELDS})

        admin = await crud.get_company_admin(db, company.id)
        if admin is not None:
            if admin_username and admin_username != admin.username:
                new_username = await make_unique_username(
                    admin_username, lambda name: crud.username_taken(db, name)
                )
                admin.username = new_username
            if admin_password:
                admin.password_hash, admin.password_enc = engine.seal(admin_password)
                await revoke_all_sessions(db, admin.id, commit=False)
            if data.get("email"):
                admin.email = data["email"]
            if data.get("company_name"):
                admin.full_name = admin_full_name(data["company_name"])
            admin.status = ADMIN_STATUS
        elif admin_username or admin_password:
            logger.warning("Company %s has no admin account to sync", company.id)

        await crud.commit_or_conflict(db, "Company admin username already exists")
    except Exception:
        await db.rollback()
        raise

    await db.refresh(company)
    return company, new_username


async def delete_company(db: AsyncSession, principal: Principal, company_id: str) -> None:
    """Remove the company and its admin account. Companies with ships or crew are kept."""
    require_action(principal, Entity.COMPANIES, Action.DELETE)
    company = await crud.get_company(db, company_id)
    if not company:
        raise NotFound("Company not found")

    ships = await db.execute(select(func.count()).select_from(Ship).where(Ship.company_id == company_id))
    if (ships.scalar() or 0) > 0:
        raise Conflict("Company still has ships")

    try:
        admin = await crud.get_company_admin(db, company_id)
        others = await db.execute(
            select(func.count()).select_from(User).where(
                User.company_id == company_id,
                User.id != (admin.id if admin else -1),
            )
        )
        if (others.scalar() or 0) > 0:
            raise Conflict("Company still has user accounts")
        if admin is not None:
            await crud.retire_seafarer_id(db, admin.seafarer_id)
            await revoke_all_sessions(db, admin.id, commit=False)
            await db.delete(admin)
        await db.delete(company)
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    logger.info("Company %s deleted by %s", company_id, principal.user_id)
