# Python client: API wrapper and verification poll loop.

from weathercraft.client.api_client import (
    VerificationStatus,
    WeathercraftClient,
    WeathercraftClientError,
)
from weathercraft.client.poller import VerificationPoller, VerificationTimeout

__all__ = [
    "VerificationStatus",
    "WeathercraftClient",
    "WeathercraftClientError",
    "VerificationPoller",
    "VerificationTimeout",
]
