"""Account schemas. Hashes, recovery tokens and reset tokens are never serialised."""

from __future__ import annotations
from datetime import date, datetime
from pydantic import BaseModel, Field


class UserCreate(BaseModel):
    seafarer_id: str = Field(min_length=1)
    full_name: str = Field(min_length=1)
    rank: str | None = None
    trip: str | None = None
    embarkation_date: date | None = None
    disembarkation_date: date | None = None
    status: str | None = None
    email: str | None = None
    role_id: int = Field(default=4, ge=1, le=4)
    company_id: str | None = None
    ship_id: int | None = None


class UserUpdate(BaseModel):
    seafarer_id: str | None = None
    full_name: str | None = None
    rank: str | None = None
    trip: str | None = None
    embarkation_date: date | None = None
    disembarkation_date: date | None = None
    status: str | None = None
    email: str | None = None
    role_id: int | None = Field(default=None, ge=1, le=4)
    company_id: str | None = None
    ship_id: int | None = None
    remove_credentials: bool = False


class UserRead(BaseModel):
    id: int
    seafarer_id: str
    full_name: str
    rank: str | None = None
    trip: str | None = None
    embarkation_date: date | None = None
    disembarkation_date: date | None = None
    status: str | None = None
    email: str | None = None
    role_id: int
    company_id: str | None = None
    ship_id: int | None = None
    username: str | None = None
    last_login_at: datetime | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class IssuedCredentialsRead(BaseModel):
    username: str
    password: str


class UserWriteResult(BaseModel):
    """Write response; ``credentials`` is present only when they were just generated."""

    user: UserRead
    credentials: IssuedCredentialsRead | None = None


class BulkStatusRequest(BaseModel):
    user_ids: list[int] = Field(min_length=1)
    status: str = Field(min_length=1)
    remove_credentials: bool = False


class BulkRowRead(BaseModel):
    user_id: int
    outcome: str
    credentials: IssuedCredentialsRead | None = None
    credentials_cleared: bool = False
    error: str | None = None


class BulkStatusResponse(BaseModel):
    status: str
    updated: int
    rows: list[BulkRowRead]


class PasswordView(BaseModel):
    user_id: int
    username: str | None = None
    password: str | None = None


class SetPasswordRequest(BaseModel):
    password: str | None = None


class ShipHistoryRead(BaseModel):
    id: int
    user_id: int
    company_id: str | None = None
    ship_id: int
    embarkation_date: date | None = None
    embarkation_port: str | None = None
    disembarkation_date: date | None = None
    disembarkation_port: str | None = None
    changed_by_user_id: int | None = None
    notes: str | None = None

    model_config = {"from_attributes": True}
