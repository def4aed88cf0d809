from __future__ import annotations

import enum


class Role(enum.IntEnum):
    SUPERADMIN = 1
    ADMIN = 2
    SUBADMIN = 3
    CREW = 4


class AccountStatus(enum.Enum):
    ONBOARD = "onboard"
    OFFBOARD = "offboard"
    OTHER = "other"


def normalize_status(raw: str | None) -> AccountStatus:
    """Map free-text status onto the values the credential lifecycle cares about."""
    value = (raw or "").strip().lower()
    if value == AccountStatus.ONBOARD.value:
        return AccountStatus.ONBOARD
    if value == AccountStatus.OFFBOARD.value:
        return AccountStatus.OFFBOARD
    return AccountStatus.OTHER


def is_onboard(raw: str | None) -> bool:
    return normalize_status(raw) is AccountStatus.ONBOARD
