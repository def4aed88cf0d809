"""Pydantic request/response schemas."""

from crewdesk.schemas.company import CompanyCreate, CompanyCreated, CompanyRead, CompanyUpdate
from crewdesk.schemas.ship import ShipCreate, ShipRead, ShipUpdate
from crewdesk.schemas.user import (
    BulkStatusRequest, BulkStatusResponse, PasswordView, SetPasswordRequest,
    ShipHistoryRead, UserCreate, UserRead, UserUpdate, UserWriteResult,
)
from crewdesk.schemas.certificate import CertificateCreate, CertificateRead, CertificateUpdate
from crewdesk.schemas.incident import IncidentCreate, IncidentRead, IncidentUpdate
from crewdesk.schemas.assessment import AssessmentCreate, AssessmentRead, AssessmentUpdate
from crewdesk.schemas.activity import ActivityLogRead

__all__ = [
    "CompanyCreate", "CompanyCreated", "CompanyRead", "CompanyUpdate",
    "ShipCreate", "ShipRead", "ShipUpdate",
    "UserCreate", "UserRead", "UserUpdate", "UserWriteResult",
    "BulkStatusRequest", "BulkStatusResponse", "PasswordView", "SetPasswordRequest",
    "ShipHistoryRead",
    "CertificateCreate", "CertificateRead", "CertificateUpdate",
    "IncidentCreate", "IncidentRead", "IncidentUpdate",
    "AssessmentCreate", "AssessmentRead", "AssessmentUpdate",
    "ActivityLogRead",
]
