"""
Mojang profile API client: resolves a Minecraft player name to its UUID and
canonical spelling. Uses the requests library with a bounded timeout.
"""

import logging
from dataclasses import dataclass
from urllib.parse import quote

import requests

from weathercraft.core.config import get_settings
from weathercraft.core.exceptions import ExternalLookupFailed
from weathercraft.models import normalize_external_id

logger = logging.getLogger(__name__)


@dataclass
class PlayerProfile:
    external_id: str
    display_name: str


class MojangService:
    """Name -> identity directory backed by api.mojang.com."""

    def __init__(self, base_url: str | None = None, timeout: float | None = None) -> None:
        settings = get_settings()
        self._base_url = (base_url or settings.MOJANG_API_URL).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.LOOKUP_TIMEOUT_SECONDS
        self._session = requests.Session()

    def lookup(self, name: str) -> PlayerProfile:
        """
        Resolve `name` to a profile.

        Raises ExternalLookupFailed with status 400 when Mojang does not know
        the name, and 502 when the API is unreachable or misbehaves.
        """
        url = f"{self._base_url}/users/profiles/minecraft/{quote(name, safe='')}"
        try:
            resp = self._session.get(url, timeout=self._timeout)
        except requests.RequestException as e:
            logger.warning("Mojang lookup for %r failed: %s", name, e)
            raise ExternalLookupFailed("Player directory is unreachable, try again") from e

        # Mojang answers 204 (older API) or 404 for unknown names.
        if resp.status_code in (204, 404):
            raise ExternalLookupFailed(f"Unknown Minecraft player: {name}", status_code=400)
        if not resp.ok:
            logger.warning("Mojang lookup for %r returned %s", name, resp.status_code)
            raise ExternalLookupFailed(
                f"Player directory error: {resp.status_code}",
                detail=resp.text[:500] or None,
            )

        try:
            body = resp.json()
            return PlayerProfile(
                external_id=normalize_external_id(body["id"]),
                display_name=body["name"],
            )
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning("Unexpected Mojang response for %r: %s", name, e)
            raise ExternalLookupFailed("Player directory returned an invalid response") from e


def get_mojang_service() -> MojangService:
    """Dependency: return a MojangService instance."""
    return MojangService()
