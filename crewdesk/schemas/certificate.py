from __future__ import annotations
from datetime import date, datetime
from pydantic import BaseModel


class CertificateCreate(BaseModel):
    user_id: int
    title: str | None = None
    certificate_name: str | None = None
    certificate_number: str | None = None
    issued_by: str | None = None
    grade: str | None = None
    issue_date: date | None = None
    expiry_date: date | None = None
    status: str | None = None  # valid | expired | expiring_soon
    file_url: str | None = None


class CertificateUpdate(BaseModel):
    title: str | None = None
    certificate_name: str | None = None
    certificate_number: str | None = None
    issued_by: str | None = None
    grade: str | None = None
    issue_date: date | None = None
    expiry_date: date | None = None
    status: str | None = None  # valid | expired | expiring_soon
    file_url: str | None = None


class CertificateRead(BaseModel):
    id: int
    user_id: int
    company_id: str
    ship_id: int | None = None
    full_name: str | None = None
    company_name: str | None = None
    title: str | None = None
    certificate_name: str | None = None
    certificate_number: str | None = None
    issued_by: str | None = None
    grade: str | None = None
    issue_date: date | None = None
    expiry_date: date | None = None
    status: str | None = None
    file_url: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}
