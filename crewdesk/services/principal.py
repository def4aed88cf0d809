from __future__ import annotations

from dataclasses import dataclass

from crewdesk.models.enums import Role


@dataclass(frozen=True)
class Principal:
    """The authenticated caller's identity and tenancy claims."""

    user_id: int
    role: Role
    company_id: str | None = None
    ship_id: int | None = None
    username: str | None = None
    full_name: str | None = None

    @classmethod
    def from_user(cls, user) -> "Principal":
        return cls(
            user_id=user.id,
            role=Role(user.role_id),
            company_id=user.company_id,
            ship_id=user.ship_id,
            username=user.username,
            full_name=user.full_name,
        )

    @property
    def is_superadmin(self) -> bool:
        return self.role is Role.SUPERADMIN
