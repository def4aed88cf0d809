"""SQLAlchemy ORM models."""

from crewdesk.models.base import Base
from crewdesk.models.enums import Role, AccountStatus
from crewdesk.models.company import Company
from crewdesk.models.ship import Ship
from crewdesk.models.user import User, RetiredSeafarerId
from crewdesk.models.refresh_session import RefreshSession
from crewdesk.models.ship_history import UserShipHistory
from crewdesk.models.certificate import Certificate, CERTIFICATE_STATUSES
from crewdesk.models.incident import Incident
from crewdesk.models.assessment import Assessment, AssessmentQuestion, AssessmentOption
from crewdesk.models.activity_log import ActivityLog

__all__ = [
    "Base", "Role", "AccountStatus",
    "Company", "Ship", "User", "RetiredSeafarerId", "RefreshSession",
    "UserShipHistory", "Certificate", "CERTIFICATE_STATUSES", "Incident",
    "Assessment", "AssessmentQuestion", "AssessmentOption", "ActivityLog",
]
