"""Account API. Generated credentials appear in a response exactly once."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from crewdesk.db import crud
from crewdesk.db.engine import get_db
from crewdesk.dependencies import get_credential_engine, require_auth
from crewdesk.errors import NotFound
from crewdesk.models import User
from crewdesk.schemas import (
    BulkStatusRequest, BulkStatusResponse, PasswordView, SetPasswordRequest,
    ShipHistoryRead, UserCreate, UserRead, UserUpdate, UserWriteResult,
)
from crewdesk.schemas.user import BulkRowRead
from crewdesk.services import accounts, ship_history
from crewdesk.services.authorization import ensure_visible
from crewdesk.services.credentials import CredentialEngine
from crewdesk.services.lifecycle import bulk_update_status
from crewdesk.services.principal import Principal
from crewdesk.services.scope import Entity, resolve_scope

router = APIRouter(prefix="/api/users", tags=["users"])


async def _visible_user(db: AsyncSession, principal: Principal, user_id: int) -> User:
    user = await crud.get_row(db, User, user_id)
    if not user:
        raise NotFound("User not found")
    ensure_visible(principal, Entity.USERS, user)
    return user


@router.get("", response_model=list[UserRead])
async def list_users(
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return await crud.list_scoped(
        db, User, resolve_scope(principal, Entity.USERS), order_by=(User.id,),
    )


@router.get("/{user_id}", response_model=UserRead)
async def get_user(
    user_id: int,
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return await _visible_user(db, principal, user_id)


@router.get("/{user_id}/ship-history", response_model=list[ShipHistoryRead])
async def get_ship_history(
    user_id: int,
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    await _visible_user(db, principal, user_id)
    return await ship_history.list_history(db, user_id)


@router.post("", response_model=UserWriteResult, status_code=201)
async def create_user(
    body: UserCreate,
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
    engine: CredentialEngine = Depends(get_credential_engine),
):
    user, issued = await accounts.create_account(db, principal, body.model_dump(), engine)
    return UserWriteResult(
        user=UserRead.model_validate(user),
        credentials=issued.public() if issued else None,
    )


@router.post("/bulk-status", response_model=BulkStatusResponse)
async def bulk_status(
    body: BulkStatusRequest,
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
    engine: CredentialEngine = Depends(get_credential_engine),
):
    result = await bulk_update_status(
        db, principal, body.user_ids, body.status, engine,
        remove_credentials=body.remove_credentials,
    )
    return BulkStatusResponse(
        status=result.status,
        updated=result.updated,
        rows=[
            BulkRowRead(
                user_id=r.user_id,
                outcome=r.outcome,
                credentials=r.credentials,
                credentials_cleared=r.credentials_cleared,
                error=r.error,
            )
            for r in result.rows
        ],
    )


@router.put("/{user_id}", response_model=UserWriteResult)
async def update_user(
    user_id: int,
    body: UserUpdate,
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
    engine: CredentialEngine = Depends(get_credential_engine),
):
    user, issued = await accounts.update_account(
        db, principal, user_id,
        body.model_dump(exclude={"remove_credentials"}),
        engine,
        remove_credentials=body.remove_credentials,
    )
    return UserWriteResult(
        user=UserRead.model_validate(user),
        credentials=issued.public() if issued else None,
    )


@router.delete("/{user_id}")
async def delete_user(
    user_id: int,
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    await accounts.delete_account(db, principal, user_id)
    return {"ok": True}


@router.get("/{user_id}/password", response_model=PasswordView)
async def view_password(
    user_id: int,
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
    engine: CredentialEngine = Depends(get_credential_engine),
):
    return await accounts.view_password(db, principal, user_id, engine)


@router.post("/{user_id}/password")
async def set_password(
    user_id: int,
    body: SetPasswordRequest,
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
    engine: CredentialEngine = Depends(get_credential_engine),
):
    return await accounts.set_password(db, principal, user_id, engine, new_password=body.password)
