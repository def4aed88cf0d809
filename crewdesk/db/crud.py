"""Generic row storage helpers shared by the API handlers and services."""

from __future__ import annotations

import logging
from typing import Any, Iterable

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from crewdesk.errors import Conflict
from crewdesk.models import User, RetiredSeafarerId, Ship, Company, Role
from crewdesk.services.scope import Predicate, compile_predicate

logger = logging.getLogger(__name__)


async def list_scoped(
    db: AsyncSession,
    model,
    predicate: Predicate,
    *extra,
    order_by: Iterable = (),
    limit: int | None = None,
) -> list:
    stmt = select(model).where(compile_predicate(predicate, model), *extra)
    order = list(order_by)
    if order:
        stmt = stmt.order_by(*order)
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_row(db: AsyncSession, model, row_id: Any):
    return await db.get(model, row_id)


def apply_updates(obj, values: dict) -> None:
    """COALESCE-style partial update: None never overwrites a stored value."""
    for k, v in values.items():
        if v is not None:
            setattr(obj, k, v)


async def commit_or_conflict(db: AsyncSession, detail: str = "Duplicate record") -> None:
    """Commit, translating a uniqueness violation into Conflict."""
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        logger.info("Uniqueness violation: %s", e.orig)
        raise Conflict(detail) from e


async def flush_or_conflict(db: AsyncSession, detail: str = "Duplicate record") -> None:
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        logger.info("Uniqueness violation: %s", e.orig)
        raise Conflict(detail) from e


# ── Users ────────────────────────────────────────────────

async def get_user_by_username(db: AsyncSession, username: str) -> User | None:
    result = await db.execute(select(User).where(User.username == username).limit(1))
    return result.scalars().first()


async def username_taken(db: AsyncSession, username: str) -> bool:
    result = await db.execute(select(func.count()).select_from(User).where(User.username == username))
    return (result.scalar() or 0) > 0


async def seafarer_id_in_use(db: AsyncSession, seafarer_id: str) -> bool:
    """True when the id belongs to a live account or was retired by a deletion."""
    live = await db.execute(select(func.count()).select_from(User).where(User.seafarer_id == seafarer_id))
    if (live.scalar() or 0) > 0:
        return True
    retired = await db.get(RetiredSeafarerId, seafarer_id)
    return retired is not None


async def retire_seafarer_id(db: AsyncSession, seafarer_id: str) -> None:
    if await db.get(RetiredSeafarerId, seafarer_id) is None:
        db.add(RetiredSeafarerId(seafarer_id=seafarer_id))


async def lock_users(db: AsyncSession, user_ids: list[int]) -> dict[int, User]:
    """Read and row-lock the given accounts (SELECT ... FOR UPDATE), ordered by id."""
    if not user_ids:
        return {}
    result = await db.execute(
        select(User).where(User.id.in_(user_ids)).order_by(User.id).with_for_update()
    )
    return {u.id: u for u in result.scalars().all()}


async def get_company_admin(db: AsyncSession, company_id: str) -> User | None:
    """The per-company admin account (role Admin, no ship)."""
    result = await db.execute(
        select(User).where(
            User.company_id == company_id,
            User.role_id == int(Role.ADMIN),
            User.ship_id.is_(None),
        ).limit(1)
    )
    return result.scalars().first()


# ── Ships / companies ────────────────────────────────────

async def get_ship(db: AsyncSession, ship_id: int) -> Ship | None:
    return await db.get(Ship, ship_id)


async def get_company(db: AsyncSession, company_id: str) -> Company | None:
    return await db.get(Company, company_id)
