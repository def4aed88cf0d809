"""Incident reports. Deletion is soft (is_deleted)."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import String, Integer, Boolean, DateTime, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column

from crewdesk.models.base import Base, ULIDMixin, utc_now


class Incident(Base, ULIDMixin):
    __tablename__ = "incident_reports"
    __scope_fields__ = {
        "company_id": "company_id",
        "ship_id": "ship_id",
        "owner_user_id": "reported_by_user_id",
        "visible_to_ship_only": "visible_to_ship_only",
    }

    ship_id: Mapped[int] = mapped_column(Integer, ForeignKey("ships.id"), index=True)
    company_id: Mapped[str] = mapped_column(String(26), ForeignKey("companies.id"), index=True)
    reported_by_user_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id"), nullable=True)
    visible_to_ship_only: Mapped[bool] = mapped_column(Boolean, default=False)
    title: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    incident_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    severity: Mapped[str | None] = mapped_column(String(50), nullable=True)
    location_on_ship: Mapped[str | None] = mapped_column(String(255), nullable=True)
    root_cause: Mapped[str | None] = mapped_column(Text, nullable=True)
    corrective_action: Mapped[str | None] = mapped_column(Text, nullable=True)
    preventive_action: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(50), default="Reported")
    occurred_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    reported_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    closed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    reference_code: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False)
