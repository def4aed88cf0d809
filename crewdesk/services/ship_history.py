"""Embarkation history kept whenever an account moves between ships."""

from __future__ import annotations

from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from crewdesk.models import User, UserShipHistory


async def record_ship_change(
    db: AsyncSession,
    user: User,
    old_ship_id: int | None,
    new_ship_id: int | None,
    changed_by_user_id: int | None = None,
    embarkation_date: date | None = None,
    disembarkation_date: date | None = None,
    embarkation_port: str | None = None,
    disembarkation_port: str | None = None,
    notes: str | None = None,
) -> UserShipHistory | None:
    """Close the open row for the old ship and open one for the new ship. Does not commit."""
    if old_ship_id == new_ship_id:
        return None

    if old_ship_id is not None:
        result = await db.execute(
            select(UserShipHistory).where(
                UserShipHistory.user_id == user.id,
                UserShipHistory.ship_id == old_ship_id,
                UserShipHistory.disembarkation_date.is_(None),
            )
        )
        for row in result.scalars().all():
            row.disembarkation_date = disembarkation_date or date.today()
            if disembarkation_port is not None:
                row.disembarkation_port = disembarkation_port

    if new_ship_id is None:
        return None

    entry = UserShipHistory(
        user_id=user.id,
        company_id=user.company_id,
        ship_id=new_ship_id,
        embarkation_date=embarkation_date or date.today(),
        embarkation_port=embarkation_port,
        changed_by_user_id=changed_by_user_id,
        notes=notes,
    )
    db.add(entry)
    return entry


async def list_history(db: AsyncSession, user_id: int) -> list[UserShipHistory]:
    result = await db.execute(
        select(UserShipHistory)
        .where(UserShipHistory.user_id == user_id)
        .order_by(UserShipHistory.created_at, UserShipHistory.id)
    )
    return list(result.scalars().all())
