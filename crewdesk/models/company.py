from __future__ import annotations

from sqlalchemy import String, Boolean, Integer, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship

from crewdesk.models.base import Base, ULIDMixin


class Company(Base, ULIDMixin):
    __tablename__ = "companies"
    __scope_fields__ = {"company_id": "id"}

    company_name: Mapped[str] = mapped_column(String(255))
    code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    email_domain: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    metadata_json: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    ships_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    regional_address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    ism_address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    contact_person_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone_no: Mapped[str | None] = mapped_column(String(50), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    ships = relationship("Ship", back_populates="company", passive_deletes=True)
