from __future__ import annotations
from datetime import date, datetime
from pydantic import BaseModel, Field


class ShipCreate(BaseModel):
    ship_name: str = Field(min_length=1)
    company_id: str | None = None  # defaults to the caller's company
    imo_number: str | None = None
    flag: str | None = None
    ship_class: str | None = None
    owner: str | None = None
    validity: date | None = None
    ship_type: str | None = None
    capacity: int | None = None
    powered_by: str | None = None


class ShipUpdate(BaseModel):
    ship_name: str | None = None
    company_id: str | None = None
    imo_number: str | None = None
    flag: str | None = None
    ship_class: str | None = None
    owner: str | None = None
    validity: date | None = None
    ship_type: str | None = None
    capacity: int | None = None
    powered_by: str | None = None


class ShipRead(BaseModel):
    id: int
    company_id: str
    ship_name: str
    imo_number: str | None = None
    flag: str | None = None
    ship_class: str | None = None
    owner: str | None = None
    validity: date | None = None
    ship_type: str | None = None
    capacity: int | None = None
    powered_by: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}
