"""
Webhook called by the Minecraft server plugin when a player runs /verify <code>.
"""

import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header

from weathercraft.core.config import get_settings
from weathercraft.core.exceptions import Unauthorized
from weathercraft.schemas.auth import VerifyWebhookRequest, VerifyWebhookResponse
from weathercraft.schemas.common import ErrorResponse
from weathercraft.services.verification_service import (
    VerificationService,
    get_verification_service,
)

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Verification"])


def require_webhook_secret(x_webhook_secret: Optional[str] = Header(default=None)) -> None:
    """Dependency: enforce the shared secret when VERIFY_WEBHOOK_SECRET is configured."""
    expected = get_settings().VERIFY_WEBHOOK_SECRET
    if not expected:
        return
    if not x_webhook_secret or not hmac.compare_digest(x_webhook_secret, expected):
        logger.warning("Rejected verify webhook with missing or wrong secret")
        raise Unauthorized("Invalid webhook secret")


@router.post(
    "/verify",
    response_model=VerifyWebhookResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing fields or expired code"},
        401: {"model": ErrorResponse, "description": "Invalid webhook secret"},
        403: {"model": ErrorResponse, "description": "Code belongs to another player"},
        404: {"model": ErrorResponse, "description": "Unknown or already used code"},
    },
    dependencies=[Depends(require_webhook_secret)],
)
def verify_webhook(
    request: VerifyWebhookRequest,
    verification: VerificationService = Depends(get_verification_service),
):
    """
    Redeem a verification code.

    - **external_id**: Player UUID, dashed or undashed (also accepted as `uuid`)
    - **code**: Code the player typed
    - **caller_display_name**: Player name as seen by the server (also `nick`)
    """
    logger.info("Received verify webhook from %r", request.caller_display_name)
    account = verification.redeem(
        request.external_id,
        request.code,
        caller_display_name=request.caller_display_name,
    )
    return VerifyWebhookResponse(account_id=account.id)
