"""
Python client for the Weathercraft Reports API.
Uses requests with timeouts; keeps the session token once verification completes.
"""

import logging
from dataclasses import dataclass
from typing import Any, BinaryIO, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10


class WeathercraftClientError(Exception):
    """Raised when an API call fails. `status_code` is None for transport errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        kind: str | None = None,
        detail: Any = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.kind = kind
        self.detail = detail
        super().__init__(message)

    @property
    def is_transient(self) -> bool:
        """Connection failures, timeouts and 5xx responses are worth retrying."""
        return self.status_code is None or self.status_code >= 500


@dataclass
class VerificationStatus:
    verified: bool
    account: Optional[dict[str, Any]] = None
    access_token: Optional[str] = None
    expires_in: Optional[int] = None


class WeathercraftClient:
    def __init__(self, base_url: str, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = requests.Session()
        self._access_token: Optional[str] = None

    @property
    def access_token(self) -> Optional[str]:
        return self._access_token

    def adopt_session(self, access_token: str) -> None:
        """Use `access_token` as Bearer credential for subsequent calls."""
        self._access_token = access_token
        self._session.headers["Authorization"] = f"Bearer {access_token}"

    def _handle_error(self, response: requests.Response) -> None:
        try:
            body = response.json()
        except ValueError:
            body = response.text or None
        kind = None
        msg = f"API error: {response.status_code}"
        if isinstance(body, dict):
            kind = body.get("error")
            if body.get("message"):
                msg += f" - {body['message']}"
        elif isinstance(body, str) and body:
            msg += f" - {body[:500]}"
        raise WeathercraftClientError(msg, status_code=response.status_code, kind=kind, detail=body)

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self._base_url}/{path.lstrip('/')}"
        try:
            resp = self._session.request(method, url, timeout=self._timeout, **kwargs)
        except requests.RequestException as e:
            raise WeathercraftClientError(f"Request to {url} failed: {e}") from e
        if not resp.ok:
            self._handle_error(resp)
        return resp.json() if resp.content else {}

    def init_verification(self, display_name: str) -> dict[str, Any]:
        return self._request("POST", "/api/v1/auth/init", json={"display_name": display_name})

    def check_status(self, external_id: str) -> VerificationStatus:
        data = self._request("GET", f"/api/v1/auth/status/{external_id}")
        return VerificationStatus(
            verified=bool(data.get("verified")),
            account=data.get("account"),
            access_token=data.get("access_token"),
            expires_in=data.get("expires_in"),
        )

    def me(self) -> Optional[dict[str, Any]]:
        return self._request("GET", "/api/v1/auth/me").get("user")

    def list_reports(self) -> list[dict[str, Any]]:
        return self._request("GET", "/api/v1/reports")

    def submit_report(self, fields: dict[str, str], photo: Optional[BinaryIO] = None) -> str:
        files = {"photo": photo} if photo is not None else None
        return self._request("POST", "/api/v1/reports", data=fields, files=files)["id"]
