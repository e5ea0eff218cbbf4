"""
Weather report schemas (API contract).
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class ReportOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    city: str
    time: str
    effective_until: str
    type: str
    clouds: str | None = None
    moisture: str
    act_kind: str
    damage_classification: str
    photo_url: str | None = None
    title: str
    created_at: datetime
    author_name: str | None = None


class ReportCreated(BaseModel):
    success: bool = True
    id: str
