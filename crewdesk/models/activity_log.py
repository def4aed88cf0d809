from __future__ import annotations

from datetime import datetime

from sqlalchemy import String, Integer, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from crewdesk.models.base import Base, IntPKMixin, utc_now


class ActivityLog(Base, IntPKMixin):
    __tablename__ = "activity_logs"
    __scope_fields__ = {"company_id": "company_id", "ship_id": "ship_id", "owner_user_id": "user_id"}

    # Identity columns are nullable: the tracker may report unknown usernames
    user_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    username: Mapped[str] = mapped_column(String(100), index=True)
    company_id: Mapped[str | None] = mapped_column(String(26), nullable=True, index=True)
    ship_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    activity_type: Mapped[str] = mapped_column(String(50), default="training")
    training_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    payload_json: Mapped[dict] = mapped_column(JSON, default=dict)
    occurred_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, index=True)
