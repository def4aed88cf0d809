from __future__ import annotations
from datetime import datetime
from typing import Any
from pydantic import BaseModel


class ActivityLogRead(BaseModel):
    id: int
    user_id: int | None = None
    username: str
    company_id: str | None = None
    ship_id: int | None = None
    activity_type: str
    training_type: str | None = None
    payload_json: dict[str, Any] = {}
    occurred_at: datetime

    model_config = {"from_attributes": True}
