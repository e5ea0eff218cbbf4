"""Tests for the requests-based API client (HTTP mocked)."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from weathercraft.client.api_client import WeathercraftClient, WeathercraftClientError


def _response(status_code, body):
    resp = MagicMock(spec=requests.Response)
    resp.status_code = status_code
    resp.ok = 200 <= status_code < 400
    resp.content = b"{}"
    resp.json.return_value = body
    resp.text = ""
    return resp


def test_check_status_parses_verified_payload():
    client = WeathercraftClient("https://weather.example/")
    body = {"verified": True, "account": {"id": "a1"}, "access_token": "tok", "expires_in": 60}
    with patch.object(client._session, "request", return_value=_response(200, body)) as request:
        status = client.check_status("e1")

    assert status.verified is True
    assert status.access_token == "tok"
    assert request.call_args.args == ("GET", "https://weather.example/api/v1/auth/status/e1")


def test_error_body_is_exposed():
    client = WeathercraftClient("https://weather.example")
    body = {"error": "account_not_found", "message": "User not found"}
    with patch.object(client._session, "request", return_value=_response(404, body)):
        with pytest.raises(WeathercraftClientError) as exc:
            client.check_status("e1")

    assert exc.value.kind == "account_not_found"
    assert exc.value.status_code == 404
    assert not exc.value.is_transient


def test_transport_failure_is_transient():
    client = WeathercraftClient("https://weather.example")
    with patch.object(client._session, "request", side_effect=requests.ConnectionError("refused")):
        with pytest.raises(WeathercraftClientError) as exc:
            client.check_status("e1")
    assert exc.value.status_code is None
    assert exc.value.is_transient


def test_adopt_session_sets_bearer_header():
    client = WeathercraftClient("https://weather.example")
    client.adopt_session("tok")
    assert client.access_token == "tok"
    assert client._session.headers["Authorization"] == "Bearer tok"
