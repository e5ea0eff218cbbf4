"""
Out-of-band Minecraft account verification.

Three independent entry points share state only through the account store:

- issue: the web client asks for a one-time code for a player name.
- redeem: the game server plugin reports that a player typed the code.
- check_status: the web client polls until the code has been redeemed and
  then receives a session credential.
"""

import logging
import re
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Protocol

from fastapi import Depends

from weathercraft.core.config import get_settings
from weathercraft.core.exceptions import (
    AccountNotFound,
    CodeExpired,
    CodeNotFound,
    DuplicateCodeError,
    IdentityMismatch,
    StorageError,
    ValidationError,
)
from weathercraft.core.security import SessionToken, create_session_token
from weathercraft.models import Account, normalize_external_id
from weathercraft.services.mojang_service import PlayerProfile, get_mojang_service
from weathercraft.services.storage import AccountStore, get_account_store

logger = logging.getLogger(__name__)

PLAYER_NAME_RE = re.compile(r"^[A-Za-z0-9_]{1,16}$")
MAX_CODE_ATTEMPTS = 5


class PlayerDirectory(Protocol):
    def lookup(self, name: str) -> PlayerProfile:
        ...


def generate_code() -> str:
    """Six upper-case hex characters (2^24 possibilities)."""
    return secrets.token_hex(3).upper()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class IssuedCode:
    account_id: str
    external_id: str
    display_name: str
    avatar_url: Optional[str]
    code: str
    expires_in_seconds: int


@dataclass
class StatusResult:
    verified: bool
    account: Account
    session: Optional[SessionToken] = None


class VerificationService:
    def __init__(
        self,
        store: AccountStore,
        directory: PlayerDirectory,
        *,
        code_ttl: Optional[timedelta] = None,
        avatar_url_template: Optional[str] = None,
        clock: Callable[[], datetime] = utc_now,
        code_factory: Callable[[], str] = generate_code,
        session_factory: Callable[[str], SessionToken] = create_session_token,
    ) -> None:
        settings = get_settings()
        self._store = store
        self._directory = directory
        self._code_ttl = code_ttl or timedelta(seconds=settings.CODE_TTL_SECONDS)
        self._avatar_url_template = avatar_url_template or settings.AVATAR_URL_TEMPLATE
        self._clock = clock
        self._code_factory = code_factory
        self._session_factory = session_factory

    def issue(self, display_name_claim: str) -> IssuedCode:
        """Issue (or re-issue) a verification code for a player name."""
        name = (display_name_claim or "").strip()
        if not name:
            raise ValidationError("Username required")
        if not PLAYER_NAME_RE.match(name):
            raise ValidationError("Not a valid Minecraft username")

        profile = self._directory.lookup(name)
        now = self._clock()

        for attempt in range(1, MAX_CODE_ATTEMPTS + 1):
            candidate = Account(
                id=str(uuid.uuid4()),
                external_id=profile.external_id,
                display_name=profile.display_name,
                avatar_url=self._avatar_url_template.format(external_id=profile.external_id),
                verification_code=self._code_factory(),
                verification_expires_at=now + self._code_ttl,
                verified=False,
                created_at=now,
            )
            try:
                account = self._store.upsert_pending(candidate)
            except DuplicateCodeError:
                logger.warning("Verification code collision (attempt %d), regenerating", attempt)
                continue
            logger.info(
                "Issued verification code for %s (%s)", account.display_name, account.external_id
            )
            return IssuedCode(
                account_id=account.id,
                external_id=account.external_id,
                display_name=account.display_name,
                avatar_url=account.avatar_url,
                code=candidate.verification_code,
                expires_in_seconds=int(self._code_ttl.total_seconds()),
            )
        raise StorageError("Could not allocate a unique verification code")

    def redeem(
        self,
        claimed_external_id: str,
        code: str,
        caller_display_name: Optional[str] = None,
    ) -> Account:
        """Mark the account holding `code` verified, exactly once."""
        code = (code or "").strip().upper()
        claimed = normalize_external_id(claimed_external_id or "")
        if not code or not claimed:
            raise ValidationError("Missing code or uuid")

        matches = self._store.find_by_code(code)
        if not matches:
            raise CodeNotFound()
        if len(matches) > 1:
            logger.error("Verification code matched %d accounts, rejecting", len(matches))
            raise IdentityMismatch()
        account = matches[0]

        if account.verification_expires_at is None or self._clock() > account.verification_expires_at:
            raise CodeExpired()

        if account.external_id != claimed:
            logger.warning(
                "Verification identity mismatch for account %s (caller %r)",
                account.id,
                caller_display_name,
            )
            raise IdentityMismatch()

        if not self._store.consume_code(account.id, code):
            # Another redemption (or a re-issue) changed the code after our read.
            raise CodeNotFound()

        logger.info("Player %s verified account %s", caller_display_name or account.display_name, account.id)
        return account.model_copy(update={"verified": True, "verification_code": None})

    def check_status(self, external_id: str) -> StatusResult:
        """Report verification state; mint a fresh session once verified."""
        account = self._store.get_by_external_id(normalize_external_id(external_id or ""))
        if account is None:
            raise AccountNotFound("User not found")
        if not account.verified:
            return StatusResult(verified=False, account=account)
        return StatusResult(verified=True, account=account, session=self._session_factory(account.id))


def get_verification_service(
    store: AccountStore = Depends(get_account_store),
    directory: PlayerDirectory = Depends(get_mojang_service),
) -> VerificationService:
    """Dependency for FastAPI."""
    return VerificationService(store, directory)
