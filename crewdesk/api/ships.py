from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from crewdesk.db import crud
from crewdesk.db.engine import get_db
from crewdesk.dependencies import require_auth
from crewdesk.errors import NotFound, ValidationFailed
from crewdesk.models import Ship
from crewdesk.schemas import ShipCreate, ShipRead, ShipUpdate
from crewdesk.services.authorization import (
    Action, Target, enforce, ensure_visible, require_action,
)
from crewdesk.services.principal import Principal
from crewdesk.services.scope import Entity, resolve_scope

router = APIRouter(prefix="/api/ships", tags=["ships"])


async def _load(db: AsyncSession, ship_id: int) -> Ship:
    ship = await crud.get_ship(db, ship_id)
    if not ship:
        raise NotFound("Ship not found")
    return ship


@router.get("", response_model=list[ShipRead])
async def list_ships(
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return await crud.list_scoped(
        db, Ship, resolve_scope(principal, Entity.SHIPS), order_by=(Ship.id,),
    )


@router.get("/{ship_id}", response_model=ShipRead)
async def get_ship(
    ship_id: int,
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    ship = await _load(db, ship_id)
    ensure_visible(principal, Entity.SHIPS, ship)
    return ship


@router.post("", response_model=ShipRead, status_code=201)
async def create_ship(
    body: ShipCreate,
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    require_action(principal, Entity.SHIPS, Action.CREATE)
    company_id = body.company_id or principal.company_id
    if not company_id:
        raise ValidationFailed("company_id is required")
    enforce(principal, Entity.SHIPS, Action.CREATE, target=Target(company_id=company_id))
    if await crud.get_company(db, company_id) is None:
        raise NotFound("Company not found")

    ship = Ship(**body.model_dump(exclude={"company_id"}), company_id=company_id)
    db.add(ship)
    await crud.commit_or_conflict(db)
    await db.refresh(ship)
    return ship


@router.put("/{ship_id}", response_model=ShipRead)
async def update_ship(
    ship_id: int,
    body: ShipUpdate,
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    require_action(principal, Entity.SHIPS, Action.UPDATE)
    ship = await _load(db, ship_id)
    enforce(
        principal, Entity.SHIPS, Action.UPDATE,
        row=ship, target=Target(company_id=body.company_id),
    )
    if body.company_id is not None and await crud.get_company(db, body.company_id) is None:
        raise NotFound("Company not found")

    crud.apply_updates(ship, body.model_dump())
    await crud.commit_or_conflict(db)
    await db.refresh(ship)
    return ship


@router.delete("/{ship_id}")
async def delete_ship(
    ship_id: int,
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    require_action(principal, Entity.SHIPS, Action.DELETE)
    ship = await _load(db, ship_id)
    enforce(principal, Entity.SHIPS, Action.DELETE, row=ship)
    await db.delete(ship)
    await crud.commit_or_conflict(db, "Ship is still referenced")
    return {"ok": True}
