"""
Pydantic models for weather reports.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Report(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    city: str
    time: str
    effective_until: str
    type: str
    clouds: Optional[str] = None
    moisture: str
    act_kind: str
    damage_classification: str
    photo_url: Optional[str] = None
    title: str
    created_at: datetime
    author_name: Optional[str] = None
