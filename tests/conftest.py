"""Shared fixtures: canned responses and a patched requests.Session."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import requests
from requests.structures import CaseInsensitiveDict


def _make_response(body="", status=200, reason="OK", headers=None, url="https://api.zotero.org/", raw=None):
    r = requests.Response()
    r.status_code = status
    r.reason = reason
    r.headers = CaseInsensitiveDict(headers or {})
    r.url = url
    r.encoding = "utf-8"
    r._content = body.encode("utf-8")
    r._content_consumed = True
    r.raw = raw
    return r


@pytest.fixture
def make_response():
    return _make_response


@pytest.fixture
def session():
    """Every TransportHandle built during the test gets this session."""
    mock_session = MagicMock(spec=requests.Session)
    mock_session.headers = {}
    with patch("zotero_api_client.core.transport.requests.Session", return_value=mock_session):
        yield mock_session


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    # setenv first so anything load_dotenv writes is undone at teardown
    for name in ("ZOTERO_API_KEY", "ZOTERO_TIMEOUT"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
