from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from crewdesk.db import crud
from crewdesk.db.engine import get_db
from crewdesk.dependencies import get_credential_engine, require_auth
from crewdesk.errors import NotFound
from crewdesk.models import Company
from crewdesk.schemas import CompanyCreate, CompanyCreated, CompanyRead, CompanyUpdate
from crewdesk.services import company_bootstrap
from crewdesk.services.authorization import ensure_visible
from crewdesk.services.credentials import CredentialEngine
from crewdesk.services.principal import Principal
from crewdesk.services.scope import Entity, resolve_scope

router = APIRouter(prefix="/api/companies", tags=["companies"])

_ADMIN_LOGIN_FIELDS = {"username", "password"}


@router.get("", response_model=list[CompanyRead])
async def list_companies(
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return await crud.list_scoped(
        db, Company, resolve_scope(principal, Entity.COMPANIES), order_by=(Company.created_at,),
    )


@router.get("/{company_id}", response_model=CompanyRead)
async def get_company(
    company_id: str,
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    company = await crud.get_company(db, company_id)
    if not company:
        raise NotFound("Company not found")
    ensure_visible(principal, Entity.COMPANIES, company)
    return company


@router.post("", response_model=CompanyCreated, status_code=201)
async def create_company(
    body: CompanyCreate,
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
    engine: CredentialEngine = Depends(get_credential_engine),
):
    company, admin = await company_bootstrap.create_company(
        db, principal,
        body.model_dump(exclude=_ADMIN_LOGIN_FIELDS),
        body.username, body.password, engine,
    )
    return CompanyCreated(
        **CompanyRead.model_validate(company).model_dump(),
        admin_user_id=admin.id,
        admin_username=admin.username,
    )


@router.put("/{company_id}", response_model=CompanyRead)
async def update_company(
    company_id: str,
    body: CompanyUpdate,
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
    engine: CredentialEngine = Depends(get_credential_engine),
):
    company, _ = await company_bootstrap.update_company(
        db, principal, company_id,
        body.model_dump(exclude=_ADMIN_LOGIN_FIELDS),
        engine,
        admin_username=body.username,
        admin_password=body.password,
    )
    return company


@router.delete("/{company_id}")
async def delete_company(
    company_id: str,
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    await company_bootstrap.delete_company(db, principal, company_id)
    return {"ok": True}
