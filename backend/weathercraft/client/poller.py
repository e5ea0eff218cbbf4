"""
Client-side verification poll loop.

Runs as a single asyncio task per poller: restarting cancels the previous
loop, transport failures back off exponentially, and the loop gives up with
VerificationTimeout once `max_wait` would be exceeded.
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional, Protocol

from weathercraft.client.api_client import VerificationStatus, WeathercraftClientError

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 3.0
DEFAULT_MAX_BACKOFF = 30.0
DEFAULT_MAX_WAIT = 600.0


class StatusClient(Protocol):
    def check_status(self, external_id: str) -> VerificationStatus:
        ...

    def adopt_session(self, access_token: str) -> None:
        ...


class VerificationTimeout(Exception):
    """The account was not verified within the poller's max wait."""


class VerificationPoller:
    def __init__(
        self,
        client: StatusClient,
        *,
        interval: float = DEFAULT_INTERVAL,
        max_backoff: float = DEFAULT_MAX_BACKOFF,
        max_wait: float = DEFAULT_MAX_WAIT,
        on_verified: Optional[Callable[[VerificationStatus], None]] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client = client
        self._interval = interval
        self._max_backoff = max_backoff
        self._max_wait = max_wait
        self._on_verified = on_verified
        self._sleep = sleep
        self._clock = clock
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, external_id: str) -> asyncio.Task:
        """Start polling for `external_id`, cancelling any loop already running."""
        if self.running:
            logger.debug("Restarting verification poller")
            self._task.cancel()
        self._task = asyncio.get_running_loop().create_task(self._run(external_id))
        return self._task

    async def stop(self) -> None:
        """Cancel the loop (e.g. the user left the verification screen)."""
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def wait(self) -> VerificationStatus:
        """Wait for the running loop's outcome."""
        if self._task is None:
            raise RuntimeError("Poller has not been started")
        return await self._task

    def _backoff(self, failures: int) -> float:
        return min(self._interval * 2 ** failures, self._max_backoff)

    async def _run(self, external_id: str) -> VerificationStatus:
        deadline = self._clock() + self._max_wait
        failures = 0
        while True:
            try:
                status = await asyncio.to_thread(self._client.check_status, external_id)
            except WeathercraftClientError as e:
                if not e.is_transient:
                    raise
                failures += 1
                delay = self._backoff(failures)
                logger.warning(
                    "Status poll failed (%d in a row), retrying in %.1fs: %s",
                    failures,
                    delay,
                    e.message,
                )
            else:
                if status.verified:
                    if status.access_token:
                        self._client.adopt_session(status.access_token)
                    if self._on_verified is not None:
                        self._on_verified(status)
                    return status
                failures = 0
                delay = self._interval

            if self._clock() + delay > deadline:
                raise VerificationTimeout(f"Not verified within {self._max_wait:.0f}s")
            await self._sleep(delay)
