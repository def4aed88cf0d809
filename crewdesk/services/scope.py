"""Row-level scope resolution.

``resolve_scope`` maps a principal and an entity kind to a predicate tree.
The same tree compiles to a parameterised SQLAlchemy clause for list queries
(``compile_predicate``) and evaluates against a loaded row for single-row
checks (``matches``), so both paths always agree.

Logical field names (``company_id``, ``ship_id``, ``owner_user_id``,
``visible_to_ship_only``, ``status``) are mapped to model attributes through
each model's ``__scope_fields__``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Callable

from sqlalchemy import and_, or_, true, false
from sqlalchemy.sql.elements import ColumnElement

from crewdesk.models.enums import Role
from crewdesk.services.principal import Principal


class Entity(str, enum.Enum):
    COMPANIES = "companies"
    SHIPS = "ships"
    USERS = "users"
    CERTIFICATES = "certificates"
    INCIDENTS = "incidents"
    ASSESSMENTS = "assessments"
    ACTIVITY_LOGS = "activity_logs"


# ── Predicate tree ───────────────────────────────────────

class Predicate:
    pass


@dataclass(frozen=True)
class Everything(Predicate):
    pass


@dataclass(frozen=True)
class Nothing(Predicate):
    pass


@dataclass(frozen=True)
class Eq(Predicate):
    field: str
    value: Any


@dataclass(frozen=True)
class IsNull(Predicate):
    field: str


@dataclass(frozen=True)
class IsTrue(Predicate):
    field: str


@dataclass(frozen=True)
class NotTrue(Predicate):
    """False or NULL."""

    field: str


@dataclass(frozen=True)
class And(Predicate):
    parts: tuple[Predicate, ...]

    def __init__(self, *parts: Predicate):
        object.__setattr__(self, "parts", tuple(parts))


@dataclass(frozen=True)
class Or(Predicate):
    parts: tuple[Predicate, ...]

    def __init__(self, *parts: Predicate):
        object.__setattr__(self, "parts", tuple(parts))


def _attr_name(model, field: str) -> str:
    mapping = getattr(model, "__scope_fields__", {}) or {}
    try:
        return mapping[field]
    except KeyError:
        raise ValueError(f"{getattr(model, '__name__', model)!r} has no scope field {field!r}") from None


def compile_predicate(pred: Predicate, model) -> ColumnElement:
    """Compile a predicate into a SQLAlchemy boolean clause for ``model``."""
    if isinstance(pred, Everything):
        return true()
    if isinstance(pred, Nothing):
        return false()
    if isinstance(pred, Eq):
        # A missing claim never matches anything
        if pred.value is None:
            return false()
        return getattr(model, _attr_name(model, pred.field)) == pred.value
    if isinstance(pred, IsNull):
        return getattr(model, _attr_name(model, pred.field)).is_(None)
    if isinstance(pred, IsTrue):
        return getattr(model, _attr_name(model, pred.field)).is_(True)
    if isinstance(pred, NotTrue):
        return getattr(model, _attr_name(model, pred.field)).is_not(True)
    if isinstance(pred, And):
        return and_(true(), *(compile_predicate(p, model) for p in pred.parts))
    if isinstance(pred, Or):
        return or_(false(), *(compile_predicate(p, model) for p in pred.parts))
    raise TypeError(f"Unknown predicate {pred!r}")


def matches(pred: Predicate, row) -> bool:
    """Evaluate a predicate against a loaded ORM row."""
    model = type(row)

    def value(field: str):
        return getattr(row, _attr_name(model, field))

    if isinstance(pred, Everything):
        return True
    if isinstance(pred, Nothing):
        return False
    if isinstance(pred, Eq):
        if pred.value is None:
            return False
        current = value(pred.field)
        return current is not None and str(current) == str(pred.value)
    if isinstance(pred, IsNull):
        return value(pred.field) is None
    if isinstance(pred, IsTrue):
        return value(pred.field) is True
    if isinstance(pred, NotTrue):
        return value(pred.field) is not True
    if isinstance(pred, And):
        return all(matches(p, row) for p in pred.parts)
    if isinstance(pred, Or):
        return any(matches(p, row) for p in pred.parts)
    raise TypeError(f"Unknown predicate {pred!r}")


# ── Rule table ───────────────────────────────────────────

def _company(p: Principal) -> Predicate:
    return Eq("company_id", p.company_id)


def _company_and_ship(p: Principal) -> Predicate:
    return And(Eq("company_id", p.company_id), Eq("ship_id", p.ship_id))


def _own_rows(p: Principal) -> Predicate:
    return Eq("owner_user_id", p.user_id)


def _published_for_crew(p: Principal) -> Predicate:
    return And(
        Eq("status", "published"),
        Eq("company_id", p.company_id),
        Or(IsNull("ship_id"), Eq("ship_id", p.ship_id)),
    )


def _incidents_for_crew(p: Principal) -> Predicate:
    return Or(
        Eq("owner_user_id", p.user_id),
        And(Eq("ship_id", p.ship_id), IsTrue("visible_to_ship_only")),
        And(Eq("company_id", p.company_id), NotTrue("visible_to_ship_only")),
    )


def _everything(p: Principal) -> Predicate:
    return Everything()


ScopeRule = Callable[[Principal], Predicate]

SCOPE_RULES: dict[tuple[Role, Entity], ScopeRule] = {}

for _entity in Entity:
    SCOPE_RULES[(Role.SUPERADMIN, _entity)] = _everything
    SCOPE_RULES[(Role.ADMIN, _entity)] = _company
    SCOPE_RULES[(Role.SUBADMIN, _entity)] = _company_and_ship

SCOPE_RULES.update({
    (Role.SUBADMIN, Entity.COMPANIES): _company,
    (Role.CREW, Entity.COMPANIES): _company,
    (Role.CREW, Entity.SHIPS): _company_and_ship,
    (Role.CREW, Entity.USERS): _own_rows,
    (Role.CREW, Entity.CERTIFICATES): _own_rows,
    (Role.CREW, Entity.ASSESSMENTS): _published_for_crew,
    (Role.CREW, Entity.INCIDENTS): _incidents_for_crew,
    (Role.CREW, Entity.ACTIVITY_LOGS): _company_and_ship,
})


def resolve_scope(principal: Principal, entity: Entity) -> Predicate:
    rule = SCOPE_RULES.get((principal.role, entity))
    if rule is None:
        return Nothing()
    return rule(principal)
