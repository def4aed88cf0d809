from __future__ import annotations
from datetime import date
from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class PrincipalRead(BaseModel):
    user_id: int
    role_id: int
    company_id: str | None = None
    ship_id: int | None = None
    username: str | None = None
    full_name: str | None = None


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    principal: PrincipalRead


class RefreshRequest(BaseModel):
    refresh_token: str = Field(min_length=1)


class AccessToken(BaseModel):
    access_token: str
    token_type: str = "bearer"


class SignupRequest(BaseModel):
    seafarer_id: str = Field(min_length=1)
    full_name: str = Field(min_length=1)
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    company_id: str | None = None
    ship_id: int | None = None
    rank: str | None = None
    email: str | None = None


class ForgotPasswordRequest(BaseModel):
    username: str = Field(min_length=1)


class ForgotPasswordResponse(BaseModel):
    message: str = "If the account exists, a reset token has been issued"
    # No mail delivery: the token is handed back to the caller
    reset_token: str | None = None


class ResetPasswordRequest(BaseModel):
    token: str = Field(min_length=1)
    new_password: str = Field(min_length=1)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=1)


class MeResponse(BaseModel):
    user_id: int
    role_id: int
    username: str | None = None
    full_name: str | None = None
    company_id: str | None = None
    ship_id: int | None = None
    status: str | None = None
    rank: str | None = None
    embarkation_date: date | None = None
