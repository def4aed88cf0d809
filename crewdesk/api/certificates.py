from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from crewdesk.db import crud
from crewdesk.db.engine import get_db
from crewdesk.dependencies import require_auth
from crewdesk.errors import NotFound, ValidationFailed
from crewdesk.models import CERTIFICATE_STATUSES, Certificate, User
from crewdesk.schemas import CertificateCreate, CertificateRead, CertificateUpdate
from crewdesk.services.authorization import (
    Action, Target, enforce, ensure_visible, require_action,
)
from crewdesk.services.principal import Principal
from crewdesk.services.scope import Entity, resolve_scope

router = APIRouter(prefix="/api/certificates", tags=["certificates"])


def _check_status(status: str | None) -> None:
    if status is not None and status not in CERTIFICATE_STATUSES:
        raise ValidationFailed(f"Invalid status. Allowed values: {', '.join(CERTIFICATE_STATUSES)}")


async def _load(db: AsyncSession, certificate_id: int) -> Certificate:
    cert = await crud.get_row(db, Certificate, certificate_id)
    if not cert:
        raise NotFound("Certificate not found")
    return cert


@router.get("", response_model=list[CertificateRead])
async def list_certificates(
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return await crud.list_scoped(
        db, Certificate, resolve_scope(principal, Entity.CERTIFICATES),
        order_by=(Certificate.created_at.desc(), Certificate.id.desc()),
    )


@router.get("/{certificate_id}", response_model=CertificateRead)
async def get_certificate(
    certificate_id: int,
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    cert = await _load(db, certificate_id)
    ensure_visible(principal, Entity.CERTIFICATES, cert)
    return cert


@router.post("", response_model=CertificateRead, status_code=201)
async def create_certificate(
    body: CertificateCreate,
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    """Issue a certificate to an account; tenancy is copied from the holder."""
    require_action(principal, Entity.CERTIFICATES, Action.CREATE)
    _check_status(body.status)

    holder = await crud.get_row(db, User, body.user_id)
    if not holder:
        raise NotFound("User not found")
    if holder.company_id is None:
        raise ValidationFailed("Certificate holder has no company")
    enforce(
        principal, Entity.CERTIFICATES, Action.CREATE,
        target=Target(company_id=holder.company_id, ship_id=holder.ship_id),
    )
    ensure_visible(principal, Entity.USERS, holder)

    company = await crud.get_company(db, holder.company_id)
    cert = Certificate(
        **body.model_dump(),
        company_id=holder.company_id,
        ship_id=holder.ship_id,
        full_name=holder.full_name,
        company_name=company.company_name if company else None,
    )
    db.add(cert)
    await crud.commit_or_conflict(db)
    await db.refresh(cert)
    return cert


@router.put("/{certificate_id}", response_model=CertificateRead)
async def update_certificate(
    certificate_id: int,
    body: CertificateUpdate,
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    require_action(principal, Entity.CERTIFICATES, Action.UPDATE)
    cert = await _load(db, certificate_id)
    enforce(principal, Entity.CERTIFICATES, Action.UPDATE, row=cert)
    _check_status(body.status)

    crud.apply_updates(cert, body.model_dump())
    await crud.commit_or_conflict(db)
    await db.refresh(cert)
    return cert


@router.delete("/{certificate_id}")
async def delete_certificate(
    certificate_id: int,
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    require_action(principal, Entity.CERTIFICATES, Action.DELETE)
    cert = await _load(db, certificate_id)
    enforce(principal, Entity.CERTIFICATES, Action.DELETE, row=cert)
    await db.delete(cert)
    await db.commit()
    return {"ok": True}
