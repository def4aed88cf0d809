"""Assessments with nested questions and options.

Sending ``questions`` on update replaces the whole tree.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from crewdesk.db import crud
from crewdesk.db.engine import get_db
from crewdesk.dependencies import require_auth
from crewdesk.errors import NotFound, ValidationFailed
from crewdesk.models import Assessment, AssessmentOption, AssessmentQuestion
from crewdesk.models.enums import Role
from crewdesk.schemas import AssessmentCreate, AssessmentRead, AssessmentUpdate
from crewdesk.schemas.assessment import QuestionItem
from crewdesk.services.authorization import (
    Action, Target, enforce, ensure_visible, require_action,
)
from crewdesk.services.principal import Principal
from crewdesk.services.scope import Entity, resolve_scope

router = APIRouter(prefix="/api/assessments", tags=["assessments"])


def _build_questions(items: list[QuestionItem]) -> list[AssessmentQuestion]:
    questions = []
    for i, item in enumerate(items):
        q = AssessmentQuestion(
            **item.model_dump(exclude={"options"}),
            options=[
                AssessmentOption(**opt.model_dump())
                for opt in item.options
            ],
        )
        if q.question_order is None:
            q.question_order = i + 1
        for j, opt in enumerate(q.options):
            if opt.option_order is None:
                opt.option_order = j + 1
        questions.append(q)
    return questions


async def _load(db: AsyncSession, assessment_id: str) -> Assessment:
    assessment = await crud.get_row(db, Assessment, assessment_id)
    if not assessment:
        raise NotFound("Assessment not found")
    return assessment


async def _check_ship(db: AsyncSession, ship_id: int | None, company_id: str) -> None:
    if ship_id is None:
        return
    ship = await crud.get_ship(db, ship_id)
    if not ship:
        raise NotFound("Ship not found")
    if str(ship.company_id) != str(company_id):
        raise ValidationFailed("company_id mismatch with ship.company_id")


@router.get("", response_model=list[AssessmentRead])
async def list_assessments(
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return await crud.list_scoped(
        db, Assessment, resolve_scope(principal, Entity.ASSESSMENTS),
        order_by=(Assessment.created_at.desc(),),
    )


@router.get("/{assessment_id}", response_model=AssessmentRead)
async def get_assessment(
    assessment_id: str,
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    assessment = await _load(db, assessment_id)
    ensure_visible(principal, Entity.ASSESSMENTS, assessment)
    return assessment


@router.post("", response_model=AssessmentRead, status_code=201)
async def create_assessment(
    body: AssessmentCreate,
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    require_action(principal, Entity.ASSESSMENTS, Action.CREATE)
    company_id = body.company_id or principal.company_id
    if not company_id:
        raise ValidationFailed("company_id is required")
    ship_id = body.ship_id
    if ship_id is None and principal.role is Role.SUBADMIN:
        ship_id = principal.ship_id
    enforce(
        principal, Entity.ASSESSMENTS, Action.CREATE,
        target=Target(company_id=company_id, ship_id=ship_id),
    )
    if await crud.get_company(db, company_id) is None:
        raise NotFound("Company not found")
    await _check_ship(db, ship_id, company_id)

    assessment = Assessment(
        company_id=company_id,
        ship_id=ship_id,
        created_by_user_id=principal.user_id,
        title=body.title,
        description=body.description,
        status=body.status,
        metadata_json=body.metadata_json,
        questions=_build_questions(body.questions),
    )
    db.add(assessment)
    await crud.commit_or_conflict(db)
    await db.refresh(assessment)
    return assessment


@router.put("/{assessment_id}", response_model=AssessmentRead)
async def update_assessment(
    assessment_id: str,
    body: AssessmentUpdate,
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    require_action(principal, Entity.ASSESSMENTS, Action.UPDATE)
    assessment = await _load(db, assessment_id)
    enforce(
        principal, Entity.ASSESSMENTS, Action.UPDATE,
        row=assessment, target=Target(ship_id=body.ship_id),
    )
    await _check_ship(db, body.ship_id, assessment.company_id)

    try:
        crud.apply_updates(assessment, body.model_dump(exclude={"questions"}))
        if body.questions is not None:
            assessment.questions = _build_questions(body.questions)
        await crud.commit_or_conflict(db)
    except Exception:
        await db.rollback()
        raise
    await db.refresh(assessment)
    return assessment


@router.delete("/{assessment_id}")
async def delete_assessment(
    assessment_id: str,
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    require_action(principal, Entity.ASSESSMENTS, Action.DELETE)
    assessment = await _load(db, assessment_id)
    enforce(principal, Entity.ASSESSMENTS, Action.DELETE, row=assessment)
    await db.delete(assessment)
    await db.commit()
    return {"ok": True}
