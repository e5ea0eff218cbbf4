"""
Pydantic models for accounts (linked Minecraft identities).
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Account(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    external_id: str
    display_name: str
    avatar_url: Optional[str] = None
    verification_code: Optional[str] = None
    verification_expires_at: Optional[datetime] = None
    verified: bool = False
    created_at: datetime


def normalize_external_id(value: str) -> str:
    """Canonical Minecraft UUID form: no dashes, lower-case hex."""
    return value.strip().replace("-", "").lower()
