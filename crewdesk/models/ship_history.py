from __future__ import annotations

from datetime import date

from sqlalchemy import String, Integer, Date, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column

from crewdesk.models.base import Base, IntPKMixin


class UserShipHistory(Base, IntPKMixin):
    __tablename__ = "user_ship_history"
    __scope_fields__ = {"company_id": "company_id", "ship_id": "ship_id", "owner_user_id": "user_id"}

    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True)
    company_id: Mapped[str | None] = mapped_column(String(26), nullable=True)
    ship_id: Mapped[int] = mapped_column(Integer)
    embarkation_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    embarkation_port: Mapped[str | None] = mapped_column(String(255), nullable=True)
    disembarkation_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    disembarkation_port: Mapped[str | None] = mapped_column(String(255), nullable=True)
    changed_by_user_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
