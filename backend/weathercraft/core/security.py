"""
Session credentials: JWT minting/validation and the FastAPI dependencies that
gate protected endpoints.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from weathercraft.core.config import get_settings
from weathercraft.core.exceptions import Unauthorized
from weathercraft.models import Account
from weathercraft.services.storage import AccountStore, get_account_store

security = HTTPBearer(auto_error=False)


@dataclass
class SessionToken:
    access_token: str
    expires_in: int
    token_type: str = "bearer"


def create_session_token(account_id: str, expires_delta: Optional[timedelta] = None) -> SessionToken:
    settings = get_settings()
    ttl = expires_delta or timedelta(days=settings.SESSION_TTL_DAYS)
    now = datetime.now(timezone.utc)
    claims = {"sub": account_id, "iat": now, "exp": now + ttl}
    token = jwt.encode(claims, settings.SESSION_SECRET_KEY, algorithm=settings.SESSION_ALGORITHM)
    return SessionToken(access_token=token, expires_in=int(ttl.total_seconds()))


def decode_session_token(token: str) -> Optional[dict[str, Any]]:
    settings = get_settings()
    try:
        return jwt.decode(token, settings.SESSION_SECRET_KEY, algorithms=[settings.SESSION_ALGORITHM])
    except JWTError:
        return None


def _extract_tokens(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> List[str]:
    """Bearer header (API clients) first, then the session cookie (browser flow)."""
    tokens = []
    if credentials and credentials.credentials:
        tokens.append(credentials.credentials)
    cookie = request.cookies.get(get_settings().SESSION_COOKIE_NAME)
    if cookie and cookie not in tokens:
        tokens.append(cookie)
    return tokens


def resolve_account(token: Optional[str], store: AccountStore) -> Account:
    """Return the account a session token refers to, or raise Unauthorized."""
    if not token:
        raise Unauthorized("Not authenticated")
    payload = decode_session_token(token)
    if not payload or not payload.get("sub"):
        raise Unauthorized("Invalid or expired session")
    account = store.get_by_id(payload["sub"])
    if account is None:
        raise Unauthorized("Account not found")
    return account


def resolve_any(tokens: List[str], store: AccountStore) -> Account:
    """Return the account for the first presented token that resolves.

    Raises the last failure when none of them does.
    """
    if not tokens:
        raise Unauthorized("Not authenticated")
    failure: Optional[Unauthorized] = None
    for token in tokens:
        try:
            return resolve_account(token, store)
        except Unauthorized as e:
            failure = e
    raise failure


def get_current_account(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    store: AccountStore = Depends(get_account_store),
) -> Account:
    """Dependency: require a valid session. Raises 401 if missing or invalid."""
    return resolve_any(_extract_tokens(request, credentials), store)


def get_current_account_optional(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    store: AccountStore = Depends(get_account_store),
) -> Optional[Account]:
    """Dependency: optional auth. Returns the account if the session is valid, else None."""
    try:
        return resolve_any(_extract_tokens(request, credentials), store)
    except Unauthorized:
        return None
