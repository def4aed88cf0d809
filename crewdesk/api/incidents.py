"""Incident reports. Deletion is soft; deleted reports are invisible to every read."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from crewdesk.db import crud
from crewdesk.db.engine import get_db
from crewdesk.dependencies import require_auth
from crewdesk.errors import NotFound, ValidationFailed
from crewdesk.models import Incident
from crewdesk.schemas import IncidentCreate, IncidentRead, IncidentUpdate
from crewdesk.services.authorization import (
    Action, Target, enforce, ensure_visible, require_action,
)
from crewdesk.services.principal import Principal
from crewdesk.services.scope import Entity, resolve_scope

router = APIRouter(prefix="/api/incidents", tags=["incidents"])

DEFAULT_STATUS = "Reported"


async def _load(db: AsyncSession, incident_id: str) -> Incident:
    incident = await crud.get_row(db, Incident, incident_id)
    if not incident or incident.is_deleted:
        raise NotFound("Incident not found")
    return incident


async def _ship_company(db: AsyncSession, ship_id: int, company_id: str | None) -> str:
    ship = await crud.get_ship(db, ship_id)
    if not ship:
        raise NotFound("Ship not found")
    if company_id is not None and str(company_id) != str(ship.company_id):
        raise ValidationFailed("company_id mismatch with ship.company_id")
    return ship.company_id


@router.get("", response_model=list[IncidentRead])
async def list_incidents(
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return await crud.list_scoped(
        db, Incident, resolve_scope(principal, Entity.INCIDENTS),
        Incident.is_deleted.is_not(True),
        order_by=(Incident.reported_at.desc(),),
    )


@router.get("/{incident_id}", response_model=IncidentRead)
async def get_incident(
    incident_id: str,
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    incident = await _load(db, incident_id)
    ensure_visible(principal, Entity.INCIDENTS, incident)
    return incident


@router.post("", response_model=IncidentRead, status_code=201)
async def create_incident(
    body: IncidentCreate,
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    require_action(principal, Entity.INCIDENTS, Action.CREATE)
    company_id = await _ship_company(db, body.ship_id, body.company_id)
    enforce(
        principal, Entity.INCIDENTS, Action.CREATE,
        target=Target(company_id=company_id, ship_id=body.ship_id),
    )

    reporter = principal.user_id
    if principal.is_superadmin and body.reported_by_user_id is not None:
        reporter = body.reported_by_user_id

    incident = Incident(
        **body.model_dump(exclude={"company_id", "reported_by_user_id", "status"}),
        company_id=company_id,
        reported_by_user_id=reporter,
        status=body.status or DEFAULT_STATUS,
    )
    db.add(incident)
    await crud.commit_or_conflict(db)
    await db.refresh(incident)
    return incident


@router.put("/{incident_id}", response_model=IncidentRead)
async def update_incident(
    incident_id: str,
    body: IncidentUpdate,
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    require_action(principal, Entity.INCIDENTS, Action.UPDATE)
    incident = await _load(db, incident_id)

    moved = body.ship_id is not None and body.ship_id != incident.ship_id
    company_id = body.company_id or incident.company_id
    if moved:
        company_id = await _ship_company(db, body.ship_id, body.company_id)
    # Boundary is checked on the resolved destination
    enforce(
        principal, Entity.INCIDENTS, Action.UPDATE,
        row=incident, target=Target(company_id=company_id, ship_id=body.ship_id),
    )
    if not moved and str(company_id) != str(incident.company_id):
        raise ValidationFailed("company_id mismatch with ship.company_id")

    values = body.model_dump()
    values["company_id"] = company_id
    crud.apply_updates(incident, values)
    await crud.commit_or_conflict(db)
    await db.refresh(incident)
    return incident


@router.delete("/{incident_id}")
async def delete_incident(
    incident_id: str,
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    require_action(principal, Entity.INCIDENTS, Action.DELETE)
    incident = await _load(db, incident_id)
    enforce(principal, Entity.INCIDENTS, Action.DELETE, row=incident)
    incident.is_deleted = True
    await db.commit()
    return {"ok": True}
