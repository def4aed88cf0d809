from __future__ import annotations

from datetime import date

from sqlalchemy import String, Integer, Date, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from crewdesk.models.base import Base, IntPKMixin

CERTIFICATE_STATUSES = ("valid", "expired", "expiring_soon")


class Certificate(Base, IntPKMixin):
    __tablename__ = "certificates"
    __scope_fields__ = {"company_id": "company_id", "ship_id": "ship_id", "owner_user_id": "user_id"}

    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True)
    company_id: Mapped[str] = mapped_column(String(26), ForeignKey("companies.id"), index=True)
    ship_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("ships.id"), nullable=True)
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    company_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    certificate_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    certificate_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    issued_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    grade: Mapped[str | None] = mapped_column(String(50), nullable=True)
    issue_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    expiry_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str | None] = mapped_column(String(20), nullable=True)  # valid | expired | expiring_soon
    file_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
