"""Tests for the Mojang name lookup (HTTP mocked)."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from weathercraft.core.exceptions import ExternalLookupFailed
from weathercraft.services.mojang_service import MojangService


def _response(status_code, json_body=None, text=""):
    resp = MagicMock(spec=requests.Response)
    resp.status_code = status_code
    resp.ok = 200 <= status_code < 400
    resp.text = text
    if json_body is None:
        resp.json.side_effect = ValueError("no json")
    else:
        resp.json.return_value = json_body
    return resp


@pytest.fixture
def mojang():
    return MojangService(base_url="https://api.mojang.test/", timeout=2.5)


def test_lookup_returns_canonical_profile(mojang):
    body = {"id": "069A79F444E94726A5BEFCA90E38AAF5", "name": "Notch"}
    with patch.object(mojang._session, "get", return_value=_response(200, body)) as get:
        profile = mojang.lookup("notch")

    assert profile.external_id == "069a79f444e94726a5befca90e38aaf5"
    assert profile.display_name == "Notch"
    get.assert_called_once_with(
        "https://api.mojang.test/users/profiles/minecraft/notch", timeout=2.5
    )


@pytest.mark.parametrize("status_code", [204, 404])
def test_unknown_player_is_client_error(mojang, status_code):
    with patch.object(mojang._session, "get", return_value=_response(status_code)):
        with pytest.raises(ExternalLookupFailed) as exc:
            mojang.lookup("NobodyHere")
    assert exc.value.status_code == 400


def test_upstream_error_status(mojang):
    with patch.object(mojang._session, "get", return_value=_response(503, text="down")):
        with pytest.raises(ExternalLookupFailed) as exc:
            mojang.lookup("Notch")
    assert exc.value.status_code == 502


def test_timeout_is_surfaced_not_hung(mojang):
    with patch.object(mojang._session, "get", side_effect=requests.Timeout("slow")):
        with pytest.raises(ExternalLookupFailed) as exc:
            mojang.lookup("Notch")
    assert exc.value.status_code == 502


def test_malformed_body(mojang):
    with patch.object(mojang._session, "get", return_value=_response(200, {"unexpected": True})):
        with pytest.raises(ExternalLookupFailed):
            mojang.lookup("Notch")
