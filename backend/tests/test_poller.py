"""Tests for the client-side verification poll loop."""

import asyncio

import pytest

from weathercraft.client.api_client import VerificationStatus, WeathercraftClientError
from weathercraft.client.poller import VerificationPoller, VerificationTimeout


class FakeTime:
    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def clock(self):
        return self.now

    async def sleep(self, delay):
        self.sleeps.append(delay)
        self.now += delay
        await asyncio.sleep(0)


class ScriptedClient:
    """Returns (or raises) scripted outcomes in order, repeating the last one."""

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = 0
        self.adopted = None

    def check_status(self, external_id):
        index = min(self.calls, len(self.outcomes) - 1)
        self.calls += 1
        outcome = self.outcomes[index]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def adopt_session(self, access_token):
        self.adopted = access_token


PENDING = VerificationStatus(verified=False)
VERIFIED = VerificationStatus(verified=True, account={"id": "a1"}, access_token="tok", expires_in=60)
TRANSPORT = WeathercraftClientError("connection refused")


def make_poller(client, fake_time, **kwargs):
    kwargs.setdefault("interval", 3.0)
    return VerificationPoller(client, sleep=fake_time.sleep, clock=fake_time.clock, **kwargs)


def test_polls_until_verified_and_adopts_session():
    fake_time = FakeTime()
    client = ScriptedClient([PENDING, PENDING, VERIFIED])
    seen = []

    async def run():
        poller = make_poller(client, fake_time, on_verified=seen.append)
        poller.start("e1")
        return await poller.wait()

    status = asyncio.run(run())
    assert status.verified is True
    assert client.adopted == "tok"
    assert seen == [VERIFIED]
    assert fake_time.sleeps == [3.0, 3.0]


def test_transport_errors_back_off_and_reset():
    fake_time = FakeTime()
    client = ScriptedClient([TRANSPORT, TRANSPORT, TRANSPORT, PENDING, VERIFIED])

    async def run():
        poller = make_poller(client, fake_time, max_backoff=20.0)
        poller.start("e1")
        return await poller.wait()

    asyncio.run(run())
    assert fake_time.sleeps == [6.0, 12.0, 20.0, 3.0]


def test_server_errors_are_retried():
    fake_time = FakeTime()
    client = ScriptedClient([WeathercraftClientError("boom", status_code=503), VERIFIED])

    async def run():
        poller = make_poller(client, fake_time)
        poller.start("e1")
        return await poller.wait()

    assert asyncio.run(run()).verified is True


def test_client_errors_end_the_loop():
    fake_time = FakeTime()
    not_found = WeathercraftClientError("nope", status_code=404, kind="account_not_found")
    client = ScriptedClient([not_found])

    async def run():
        poller = make_poller(client, fake_time)
        poller.start("e1")
        return await poller.wait()

    with pytest.raises(WeathercraftClientError) as exc:
        asyncio.run(run())
    assert exc.value.kind == "account_not_found"
    assert client.calls == 1


def test_gives_up_after_max_wait():
    fake_time = FakeTime()
    client = ScriptedClient([PENDING])

    async def run():
        poller = make_poller(client, fake_time, max_wait=10.0)
        poller.start("e1")
        return await poller.wait()

    with pytest.raises(VerificationTimeout):
        asyncio.run(run())
    assert fake_time.now <= 10.0
    assert client.calls == 4


def test_restart_cancels_previous_loop():
    async def run():
        client = ScriptedClient([PENDING])
        poller = VerificationPoller(client, interval=3600.0)
        first = poller.start("e1")
        await asyncio.sleep(0)
        second = poller.start("e1")
        with pytest.raises(asyncio.CancelledError):
            await first
        assert first.cancelled()
        assert poller.running
        await poller.stop()
        assert second.cancelled()
        assert not poller.running

    asyncio.run(run())


def test_stop_is_safe_when_not_started():
    async def run():
        poller = VerificationPoller(ScriptedClient([PENDING]))
        await poller.stop()
        assert not poller.running

    asyncio.run(run())
