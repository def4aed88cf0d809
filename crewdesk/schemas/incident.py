from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel, Field


class IncidentCreate(BaseModel):
    ship_id: int
    company_id: str | None = None  # defaults to the ship's company
    reported_by_user_id: int | None = None  # honoured for SuperAdmin only
    visible_to_ship_only: bool = False
    title: str = Field(min_length=1)
    description: str | None = None
    incident_type: str | None = None
    severity: str | None = None
    location_on_ship: str | None = None
    root_cause: str | None = None
    corrective_action: str | None = None
    preventive_action: str | None = None
    status: str | None = None
    occurred_at: datetime | None = None
    reference_code: str | None = None


class IncidentUpdate(BaseModel):
    ship_id: int | None = None
    company_id: str | None = None
    visible_to_ship_only: bool | None = None
    title: str | None = None
    description: str | None = None
    incident_type: str | None = None
    severity: str | None = None
    location_on_ship: str | None = None
    root_cause: str | None = None
    corrective_action: str | None = None
    preventive_action: str | None = None
    status: str | None = None
    occurred_at: datetime | None = None
    closed_at: datetime | None = None
    reference_code: str | None = None


class IncidentRead(BaseModel):
    id: str
    ship_id: int
    company_id: str
    reported_by_user_id: int | None = None
    visible_to_ship_only: bool
    title: str
    description: str | None = None
    incident_type: str | None = None
    severity: str | None = None
    location_on_ship: str | None = None
    root_cause: str | None = None
    corrective_action: str | None = None
    preventive_action: str | None = None
    status: str
    occurred_at: datetime | None = None
    reported_at: datetime
    closed_at: datetime | None = None
    reference_code: str | None = None

    model_config = {"from_attributes": True}
