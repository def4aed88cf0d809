from __future__ import annotations

from datetime import date

from sqlalchemy import String, Integer, Date, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from crewdesk.models.base import Base, IntPKMixin


class Ship(Base, IntPKMixin):
    __tablename__ = "ships"
    __scope_fields__ = {"company_id": "company_id", "ship_id": "id"}

    company_id: Mapped[str] = mapped_column(String(26), ForeignKey("companies.id"), index=True)
    ship_name: Mapped[str] = mapped_column(String(255))
    imo_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    flag: Mapped[str | None] = mapped_column(String(50), nullable=True)
    ship_class: Mapped[str | None] = mapped_column("class", String(50), nullable=True)
    owner: Mapped[str | None] = mapped_column(String(255), nullable=True)
    validity: Mapped[date | None] = mapped_column(Date, nullable=True)
    ship_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    capacity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    powered_by: Mapped[str | None] = mapped_column(String(100), nullable=True)

    company = relationship("Company", back_populates="ships")
