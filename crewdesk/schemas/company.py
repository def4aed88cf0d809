from __future__ import annotations
from datetime import datetime
from typing import Any
from pydantic import BaseModel, Field


class CompanyCreate(BaseModel):
    company_name: str = Field(min_length=1)
    code: str | None = None
    email_domain: str | None = None
    is_active: bool | None = None
    metadata_json: dict[str, Any] | None = None
    ships_count: int | None = None
    type: str | None = None
    regional_address: str | None = None
    ism_address: str | None = None
    contact_person_name: str | None = None
    phone_no: str | None = None
    email: str | None = None
    # Login of the company admin account
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class CompanyUpdate(BaseModel):
    company_name: str | None = None
    code: str | None = None
    email_domain: str | None = None
    is_active: bool | None = None
    metadata_json: dict[str, Any] | None = None
    ships_count: int | None = None
    type: str | None = None
    regional_address: str | None = None
    ism_address: str | None = None
    contact_person_name: str | None = None
    phone_no: str | None = None
    email: str | None = None
    username: str | None = None
    password: str | None = None


class CompanyRead(BaseModel):
    id: str
    company_name: str
    code: str | None = None
    email_domain: str | None = None
    is_active: bool = True
    metadata_json: dict[str, Any] | None = None
    ships_count: int | None = None
    type: str | None = None
    regional_address: str | None = None
    ism_address: str | None = None
    contact_person_name: str | None = None
    phone_no: str | None = None
    email: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CompanyCreated(CompanyRead):
    admin_user_id: int
    admin_username: str
