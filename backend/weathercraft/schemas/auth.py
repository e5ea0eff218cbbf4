"""
Verification and session Pydantic schemas (code issuance, webhook, status polling).
"""

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class InitVerificationRequest(BaseModel):
    """Request body to start verification for a Minecraft player name."""

    model_config = ConfigDict(
        json_schema_extra={"examples": [{"display_name": "Notch"}]}
    )

    display_name: str = Field(
        default="",
        validation_alias=AliasChoices("display_name", "username"),
        description="Minecraft player name as typed by the user",
    )


class InitVerificationResponse(BaseModel):
    """Issued code; the player types `/verify <code>` on the game server."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "account_id": "550e8400-e29b-41d4-a716-446655440000",
                    "external_id": "069a79f444e94726a5befca90e38aaf5",
                    "display_name": "Notch",
                    "avatar_url": "https://crafatar.com/avatars/069a79f444e94726a5befca90e38aaf5?size=100&overlay",
                    "code": "AB12CD",
                    "expires_in_seconds": 600,
                }
            ]
        }
    )

    account_id: str
    external_id: str
    display_name: str
    avatar_url: Optional[str] = None
    code: str
    expires_in_seconds: int


class VerifyWebhookRequest(BaseModel):
    """
    Body posted by the game server plugin. Accepts the plugin's legacy
    field names (`uuid`, `nick`) as well.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "external_id": "069a79f4-44e9-4726-a5be-fca90e38aaf5",
                    "code": "AB12CD",
                    "caller_display_name": "Notch",
                }
            ]
        }
    )

    external_id: str = Field(default="", validation_alias=AliasChoices("external_id", "uuid"))
    code: str = ""
    caller_display_name: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("caller_display_name", "nick")
    )


class VerifyWebhookResponse(BaseModel):
    success: bool = True
    message: str = "Verified"
    account_id: str


class AccountProfile(BaseModel):
    """Public view of an account. Never includes the verification code."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    external_id: str
    display_name: str
    avatar_url: Optional[str] = None
    verified: bool
    created_at: datetime


class StatusResponse(BaseModel):
    """Polling result. Session fields are present only once verified."""

    verified: bool
    account: Optional[AccountProfile] = None
    access_token: Optional[str] = None
    token_type: Optional[str] = None
    expires_in: Optional[int] = None


class MeResponse(BaseModel):
    user: Optional[AccountProfile] = None
