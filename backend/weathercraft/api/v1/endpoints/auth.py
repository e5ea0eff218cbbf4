"""
Auth API: start Minecraft verification, poll verification status, me, logout.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Response

from weathercraft.core.config import get_settings
from weathercraft.core.security import get_current_account_optional
from weathercraft.models import Account
from weathercraft.schemas.auth import (
    AccountProfile,
    InitVerificationRequest,
    InitVerificationResponse,
    MeResponse,
    StatusResponse,
)
from weathercraft.schemas.common import ErrorResponse, MessageResponse
from weathercraft.services.verification_service import (
    VerificationService,
    get_verification_service,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post(
    "/init",
    response_model=InitVerificationResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid or unknown player name"},
        502: {"model": ErrorResponse, "description": "Player directory unreachable"},
    },
)
def init_verification(
    request: InitVerificationRequest,
    verification: VerificationService = Depends(get_verification_service),
):
    """
    Issue a one-time verification code for a Minecraft player.

    - **display_name**: Player name (also accepted as `username`)

    Re-issuing replaces any previous code for the same player.
    """
    issued = verification.issue(request.display_name)
    return InitVerificationResponse(
        account_id=issued.account_id,
        external_id=issued.external_id,
        display_name=issued.display_name,
        avatar_url=issued.avatar_url,
        code=issued.code,
        expires_in_seconds=issued.expires_in_seconds,
    )


@router.get(
    "/status/{external_id}",
    response_model=StatusResponse,
    responses={404: {"model": ErrorResponse, "description": "Account not found"}},
)
def verification_status(
    external_id: str,
    response: Response,
    verification: VerificationService = Depends(get_verification_service),
):
    """
    Poll whether the player has typed the code in game.
    Once verified, sets the session cookie and returns the session token.
    """
    result = verification.check_status(external_id)
    if not result.verified or result.session is None:
        return StatusResponse(verified=False)

    settings = get_settings()
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=result.session.access_token,
        max_age=result.session.expires_in,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite=settings.SESSION_COOKIE_SAMESITE,
    )
    return StatusResponse(
        verified=True,
        account=AccountProfile.model_validate(result.account),
        access_token=result.session.access_token,
        token_type=result.session.token_type,
        expires_in=result.session.expires_in,
    )


@router.get("/me", response_model=MeResponse)
def get_me(account: Optional[Account] = Depends(get_current_account_optional)):
    """Current account, or null when not signed in."""
    if account is None:
        return MeResponse(user=None)
    return MeResponse(user=AccountProfile.model_validate(account))


@router.post("/logout", response_model=MessageResponse)
def logout(response: Response):
    """Clear the session cookie."""
    settings = get_settings()
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite=settings.SESSION_COOKIE_SAMESITE,
    )
    return MessageResponse(message="Signed out")
