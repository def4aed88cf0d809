from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Header, Query
from sqlalchemy.ext.asyncio import AsyncSession

from crewdesk.config import Settings
from crewdesk.db.engine import get_db
from crewdesk.dependencies import get_settings_dep, require_auth
from crewdesk.schemas import ActivityLogRead
from crewdesk.services import activity
from crewdesk.services.principal import Principal

router = APIRouter(prefix="/api/activity", tags=["activity"])


@router.post("/track", response_model=ActivityLogRead, status_code=201)
async def track(
    payload: dict[str, Any] = Body(...),
    x_activity_key: str | None = Header(default=None),
    settings: Settings = Depends(get_settings_dep),
    db: AsyncSession = Depends(get_db),
):
    """Called by the training simulator, authenticated by a shared key instead of a login."""
    activity.check_activity_key(settings.security.activity_api_key, x_activity_key)
    return await activity.track_activity(db, payload)


@router.get("", response_model=list[ActivityLogRead])
async def list_activity(
    company_id: str | None = None,
    ship_id: int | None = None,
    username: str | None = None,
    limit: int | None = Query(default=None),
    principal: Principal = Depends(require_auth),
    settings: Settings = Depends(get_settings_dep),
    db: AsyncSession = Depends(get_db),
):
    cfg = settings.activity
    return await activity.list_activity(
        db, principal,
        limit=activity.clamp_limit(limit, cfg.default_limit, cfg.max_limit),
        company_id=company_id,
        ship_id=ship_id,
        username=username,
    )
