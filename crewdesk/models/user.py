"""Account rows: crew members, sub-admins and the per-company admin account.

The credential bundle (username, password_hash, password_enc) is either
fully present or fully absent.
"""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import String, Integer, Date, DateTime, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column

from crewdesk.models.base import Base, IntPKMixin, utc_now
from crewdesk.models.enums import Role


class User(Base, IntPKMixin):
    __tablename__ = "users"
    __scope_fields__ = {"company_id": "company_id", "ship_id": "ship_id", "owner_user_id": "id"}

    seafarer_id: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    full_name: Mapped[str] = mapped_column(String(255))
    rank: Mapped[str | None] = mapped_column(String(100), nullable=True)
    trip: Mapped[str | None] = mapped_column(String(100), nullable=True)
    embarkation_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    disembarkation_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str | None] = mapped_column(String(50), nullable=True)  # free text; "Onboard" matters
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role_id: Mapped[int] = mapped_column(Integer, default=int(Role.CREW))
    company_id: Mapped[str | None] = mapped_column(String(26), ForeignKey("companies.id"), nullable=True, index=True)
    ship_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("ships.id"), nullable=True, index=True)

    username: Mapped[str | None] = mapped_column(String(100), unique=True, index=True, nullable=True)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    password_enc: Mapped[str | None] = mapped_column(Text, nullable=True)

    reset_token_hash: Mapped[str | None] = mapped_column(String(64), unique=True, nullable=True)
    reset_token_expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    @property
    def role(self) -> Role:
        return Role(self.role_id)

    @property
    def has_credentials(self) -> bool:
        return bool(self.username and self.password_hash)

    def set_credentials(self, username: str, password_hash: str, password_enc: str) -> None:
        self.username = username
        self.password_hash = password_hash
        self.password_enc = password_enc

    def clear_credentials(self) -> None:
        self.username = None
        self.password_hash = None
        self.password_enc = None


class RetiredSeafarerId(Base):
    """Seafarer ids of deleted accounts; never handed out again."""

    __tablename__ = "retired_seafarer_ids"

    seafarer_id: Mapped[str] = mapped_column(String(100), primary_key=True)
    retired_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
