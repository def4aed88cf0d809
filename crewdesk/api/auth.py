"""Auth API: login, token refresh, logout, signup, password reset and change."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from crewdesk.db.engine import get_db
from crewdesk.dependencies import get_credential_engine, get_token_manager, require_auth
from crewdesk.errors import NotFound
from crewdesk.models import User
from crewdesk.schemas.auth import (
    AccessToken, ChangePasswordRequest, ForgotPasswordRequest, ForgotPasswordResponse,
    LoginRequest, MeResponse, PrincipalRead, RefreshRequest, ResetPasswordRequest, SignupRequest, TokenPair,
)
from crewdesk.schemas.user import UserRead
from crewdesk.services import accounts
from crewdesk.services import auth as auth_service
from crewdesk.services.auth import TokenManager
from crewdesk.services.credentials import CredentialEngine
from crewdesk.services.principal import Principal

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=TokenPair)
async def login(
    body: LoginRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    tokens: TokenManager = Depends(get_token_manager),
):
    ip = request.client.host if request.client else ""
    result = await auth_service.login(db, body.username.strip(), body.password, tokens, ip_address=ip)
    p = result.principal
    return TokenPair(
        access_token=result.access_token,
        refresh_token=result.refresh_token,
        principal=PrincipalRead(
            user_id=p.user_id, role_id=int(p.role), company_id=p.company_id,
            ship_id=p.ship_id, username=p.username, full_name=p.full_name,
        ),
    )


@router.post("/refresh", response_model=AccessToken)
async def refresh(
    body: RefreshRequest,
    db: AsyncSession = Depends(get_db),
    tokens: TokenManager = Depends(get_token_manager),
):
    return AccessToken(access_token=await auth_service.refresh(db, body.refresh_token, tokens))


@router.post("/logout")
async def logout(
    body: RefreshRequest,
    db: AsyncSession = Depends(get_db),
    tokens: TokenManager = Depends(get_token_manager),
):
    await auth_service.logout(db, body.refresh_token, tokens)
    return {"ok": True}


@router.post("/signup", response_model=UserRead, status_code=201)
async def signup(
    body: SignupRequest,
    db: AsyncSession = Depends(get_db),
    engine: CredentialEngine = Depends(get_credential_engine),
):
    return await accounts.signup(db, body.model_dump(), engine)


@router.post("/forgot-password", response_model=ForgotPasswordResponse)
async def forgot_password(
    body: ForgotPasswordRequest,
    db: AsyncSession = Depends(get_db),
    tokens: TokenManager = Depends(get_token_manager),
):
    token = await auth_service.issue_reset_token(db, body.username.strip(), tokens)
    return ForgotPasswordResponse(reset_token=token)


@router.post("/reset-password")
async def reset_password(
    body: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db),
    engine: CredentialEngine = Depends(get_credential_engine),
    tokens: TokenManager = Depends(get_token_manager),
):
    await auth_service.reset_password(db, body.token, body.new_password, engine, tokens)
    return {"ok": True}


@router.post("/change-password")
async def change_password(
    body: ChangePasswordRequest,
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
    engine: CredentialEngine = Depends(get_credential_engine),
    tokens: TokenManager = Depends(get_token_manager),
):
    await auth_service.change_password(
        db, principal, body.current_password, body.new_password, engine, tokens,
    )
    return {"ok": True}


@router.get("/me", response_model=MeResponse)
async def me(
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    user = await db.get(User, principal.user_id)
    if not user:
        raise NotFound("User not found")
    return MeResponse(
        user_id=user.id,
        role_id=user.role_id,
        username=user.username,
        full_name=user.full_name,
        company_id=user.company_id,
        ship_id=user.ship_id,
        status=user.status,
        rank=user.rank,
        embarkation_date=user.embarkation_date,
    )
