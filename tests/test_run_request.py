"""Tests for the run_request job script."""

from __future__ import annotations

import requests

from zotero_api_client.jobs import run_request


class TestRunRequest:
    def test_prints_headers_and_body(self, session, make_response, capsys, monkeypatch):
        monkeypatch.setattr(run_request, "ENV_FILE", "/nonexistent/.env")
        session.get.return_value = make_response('{"userID": 123}', headers={"Content-Type": "application/json"})

        assert run_request.main(["/keys/current"]) == 0
        out = capsys.readouterr().out
        assert out.startswith("HTTP/1.1 200 OK\r\n")
        assert '{"userID": 123}' in out
        assert session.get.call_args.args[0] == "https://api.zotero.org/keys/current"

    def test_uses_api_key_from_env(self, session, make_response, monkeypatch):
        monkeypatch.setattr(run_request, "ENV_FILE", "/nonexistent/.env")
        monkeypatch.setenv("ZOTERO_API_KEY", "envkey")
        session.get.return_value = make_response("[]")

        run_request.main(["/users/1/items"])
        assert session.get.call_args.kwargs["headers"]["Zotero-API-Key"] == "envkey"

    def test_transfer_failure(self, session, capsys, monkeypatch):
        monkeypatch.setattr(run_request, "ENV_FILE", "/nonexistent/.env")
        session.get.side_effect = requests.ConnectionError("unreachable")

        assert run_request.main(["/users/1/items"]) == 1
        assert "unreachable" in capsys.readouterr().err
        session.close.assert_called_once()

    def test_bad_path(self, session, capsys, monkeypatch):
        monkeypatch.setattr(run_request, "ENV_FILE", "/nonexistent/.env")
        assert run_request.main(["users/1/items"]) == 2
        session.get.assert_not_called()

    def test_usage(self, capsys):
        assert run_request.main([]) == 2
        assert "usage" in capsys.readouterr().err
