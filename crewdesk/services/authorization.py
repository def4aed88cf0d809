"""Authorization decisions for reads and writes.

Role gates, owner-only restrictions and boundary fields are tables keyed by
role and action; adding a role or entity is a table edit.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from crewdesk.errors import Forbidden
from crewdesk.models.enums import Role
from crewdesk.services.principal import Principal
from crewdesk.services.scope import Entity, matches, resolve_scope

logger = logging.getLogger(__name__)


class Action(str, enum.Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


ALL_ROLES = frozenset(Role)
STAFF = frozenset({Role.SUPERADMIN, Role.ADMIN, Role.SUBADMIN})
COMPANY_STAFF = frozenset({Role.SUPERADMIN, Role.ADMIN})
SUPERADMIN_ONLY = frozenset({Role.SUPERADMIN})

ROLE_GATES: dict[tuple[Entity, Action], frozenset[Role]] = {
    (Entity.COMPANIES, Action.CREATE): SUPERADMIN_ONLY,
    (Entity.COMPANIES, Action.UPDATE): COMPANY_STAFF,
    (Entity.COMPANIES, Action.DELETE): SUPERADMIN_ONLY,
    (Entity.SHIPS, Action.CREATE): COMPANY_STAFF,
    (Entity.SHIPS, Action.UPDATE): COMPANY_STAFF,
    (Entity.SHIPS, Action.DELETE): COMPANY_STAFF,
    (Entity.USERS, Action.CREATE): STAFF,
    (Entity.USERS, Action.UPDATE): STAFF,
    (Entity.USERS, Action.DELETE): STAFF,
    (Entity.CERTIFICATES, Action.CREATE): STAFF,
    (Entity.CERTIFICATES, Action.UPDATE): STAFF,
    (Entity.CERTIFICATES, Action.DELETE): STAFF,
    (Entity.INCIDENTS, Action.CREATE): ALL_ROLES,
    (Entity.INCIDENTS, Action.UPDATE): ALL_ROLES,
    (Entity.INCIDENTS, Action.DELETE): ALL_ROLES,
    (Entity.ASSESSMENTS, Action.CREATE): STAFF,
    (Entity.ASSESSMENTS, Action.UPDATE): STAFF,
    (Entity.ASSESSMENTS, Action.DELETE): STAFF,
    # Activity logs are written by the tracker endpoint, never through the API
}

# Roles that may only touch rows they own for the given action
OWNER_ONLY: dict[tuple[Entity, Action], frozenset[Role]] = {
    (Entity.INCIDENTS, Action.UPDATE): frozenset({Role.CREW}),
    (Entity.INCIDENTS, Action.DELETE): frozenset({Role.CREW}),
}

# Tenancy fields a write payload may not move outside the principal's own
BOUNDARY_FIELDS: dict[Role, tuple[str, ...]] = {
    Role.SUPERADMIN: (),
    Role.ADMIN: ("company_id",),
    Role.SUBADMIN: ("company_id", "ship_id"),
    Role.CREW: ("company_id", "ship_id"),
}

# Password recovery and reset by an administrator
CREDENTIAL_ADMINS = STAFF


@dataclass(frozen=True)
class Target:
    """Requested tenancy of a write, taken from the payload."""

    company_id: str | None = None
    ship_id: int | None = None


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str = ""

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision(True)


def check_role(principal: Principal, entity: Entity, action: Action) -> Decision:
    if action is Action.READ:
        return ALLOW
    allowed = ROLE_GATES.get((entity, action), frozenset())
    if principal.role not in allowed:
        return Decision(False, f"role {principal.role.name} may not {action.value} {entity.value}")
    return ALLOW


def check_scope(principal: Principal, entity: Entity, row) -> Decision:
    if not matches(resolve_scope(principal, entity), row):
        return Decision(False, f"{entity.value} row outside scope")
    return ALLOW


def check_owner(principal: Principal, entity: Entity, action: Action, row) -> Decision:
    if principal.role not in OWNER_ONLY.get((entity, action), frozenset()):
        return ALLOW
    owner_attr = type(row).__scope_fields__["owner_user_id"]
    if getattr(row, owner_attr) != principal.user_id:
        return Decision(False, f"{entity.value} row not owned by caller")
    return ALLOW


def check_boundary(principal: Principal, target: Target) -> Decision:
    for field in BOUNDARY_FIELDS.get(principal.role, ()):
        requested = getattr(target, field)
        if requested is None:
            continue
        own = getattr(principal, field)
        if own is None or str(requested) != str(own):
            return Decision(False, f"cannot assign {field} outside own scope")
    return ALLOW


def check_role_assignment(principal: Principal, role: Role) -> Decision:
    """Accounts may only be given a role below the caller's own."""
    if principal.is_superadmin or role > principal.role:
        return ALLOW
    return Decision(False, f"role {principal.role.name} may not assign {role.name}")


def check_credential_access(principal: Principal, account=None) -> Decision:
    """Password recovery and reset by an administrator.

    Without ``account`` only the role is checked. With it, the account must
    rank below the caller unless it is the caller's own; SuperAdmin is
    unrestricted.
    """
    if principal.role not in CREDENTIAL_ADMINS:
        return Decision(False, f"role {principal.role.name} may not manage credentials")
    if account is None or principal.is_superadmin or account.id == principal.user_id:
        return ALLOW
    if account.role <= principal.role:
        return Decision(False, f"role {principal.role.name} may not manage credentials of {account.role.name}")
    return ALLOW


def authorize(
    principal: Principal,
    entity: Entity,
    action: Action,
    row=None,
    target: Target | None = None,
) -> Decision:
    """Combine role gate, scope, ownership and boundary checks."""
    decision = check_role(principal, entity, action)
    if not decision:
        return decision
    if row is not None:
        decision = check_scope(principal, entity, row)
        if not decision:
            return decision
        decision = check_owner(principal, entity, action, row)
        if not decision:
            return decision
    if target is not None:
        decision = check_boundary(principal, target)
        if not decision:
            return decision
    return ALLOW


def deny(principal: Principal, decision: Decision) -> Forbidden:
    logger.info("Denied user %s (%s): %s", principal.user_id, principal.role.name, decision.reason)
    return Forbidden()


def enforce(
    principal: Principal,
    entity: Entity,
    action: Action,
    row=None,
    target: Target | None = None,
) -> None:
    decision = authorize(principal, entity, action, row=row, target=target)
    if not decision:
        raise deny(principal, decision)


def require_action(principal: Principal, entity: Entity, action: Action) -> None:
    """Role gate alone; runs before the target row is looked up."""
    decision = check_role(principal, entity, action)
    if not decision:
        raise deny(principal, decision)


def ensure_visible(principal: Principal, entity: Entity, row) -> None:
    decision = check_scope(principal, entity, row)
    if not decision:
        raise deny(principal, decision)


def ensure_can_assign_role(principal: Principal, role: Role) -> None:
    decision = check_role_assignment(principal, role)
    if not decision:
        raise deny(principal, decision)


def ensure_credential_access(principal: Principal, account=None) -> None:
    decision = check_credential_access(principal, account)
    if not decision:
        raise deny(principal, decision)
