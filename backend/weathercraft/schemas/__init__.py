# Pydantic request/response schemas (API contract).

from weathercraft.schemas.common import ErrorResponse, MessageResponse
from weathercraft.schemas.auth import (
    AccountProfile,
    InitVerificationRequest,
    InitVerificationResponse,
    MeResponse,
    StatusResponse,
    VerifyWebhookRequest,
    VerifyWebhookResponse,
)
from weathercraft.schemas.report import ReportCreated, ReportOut

__all__ = [
    "ErrorResponse",
    "MessageResponse",
    "AccountProfile",
    "InitVerificationRequest",
    "InitVerificationResponse",
    "MeResponse",
    "StatusResponse",
    "VerifyWebhookRequest",
    "VerifyWebhookResponse",
    "ReportCreated",
    "ReportOut",
]
