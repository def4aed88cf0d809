"""Training activity reported by the simulator client."""

from __future__ import annotations

import logging
import re
import secrets
from datetime import datetime, timezone
from typing import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from crewdesk.db import crud
from crewdesk.errors import Unauthorized, ValidationFailed
from crewdesk.models import ActivityLog
from crewdesk.services.principal import Principal
from crewdesk.services.scope import Entity, resolve_scope

logger = logging.getLogger(__name__)

DEFAULT_ACTIVITY_TYPE = "training"
_TIMESTAMP = re.compile(r"^(\d{4})-(\d{2})-(\d{2})-(\d{2}):(\d{2})$")


def parse_tracker_timestamp(raw: str | None) -> datetime | None:
    """Parse ``YYYY-MM-DD-HH:mm`` as UTC; None for anything else."""
    if not raw:
        return None
    m = _TIMESTAMP.match(str(raw))
    if not m:
        return None
    year, month, day, hour, minute = (int(g) for g in m.groups())
    try:
        return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)
    except ValueError:
        return None


def check_activity_key(expected: str, provided: str | None) -> None:
    """No configured key means the tracker endpoint is open."""
    if not expected:
        return
    if not secrets.compare_digest(str(provided or ""), expected):
        logger.warning("Rejected activity report with a bad key")
        raise Unauthorized("Invalid activity key")


async def track_activity(
    db: AsyncSession,
    payload: dict,
    clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
) -> ActivityLog:
    username = payload.get("username")
    if not username:
        raise ValidationFailed("username is required")

    occurred_at = parse_tracker_timestamp(payload.get("timestamp")) or clock()
    user = await crud.get_user_by_username(db, str(username))

    log = ActivityLog(
        user_id=user.id if user else None,
        username=str(username),
        company_id=user.company_id if user else None,
        ship_id=user.ship_id if user else None,
        activity_type=str(payload.get("activityType") or DEFAULT_ACTIVITY_TYPE),
        training_type=payload.get("trainingType"),
        payload_json=dict(payload),
        occurred_at=occurred_at,
    )
    db.add(log)
    await db.commit()
    await db.refresh(log)
    return log


def clamp_limit(limit: int | None, default: int, maximum: int) -> int:
    if not limit or limit < 1:
        return default
    return min(limit, maximum)


async def list_activity(
    db: AsyncSession,
    principal: Principal,
    limit: int,
    company_id: str | None = None,
    ship_id: int | None = None,
    username: str | None = None,
) -> list[ActivityLog]:
    """Newest first. Filters are honoured for SuperAdmin only."""
    filters = []
    if principal.is_superadmin:
        if company_id:
            filters.append(ActivityLog.company_id == company_id)
        if ship_id is not None:
            filters.append(ActivityLog.ship_id == ship_id)
        if username:
            filters.append(ActivityLog.username == username)

    return await crud.list_scoped(
        db, ActivityLog, resolve_scope(principal, Entity.ACTIVITY_LOGS), *filters,
        order_by=(ActivityLog.occurred_at.desc(), ActivityLog.id.desc()),
        limit=limit,
    )
