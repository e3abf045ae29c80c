"""Tests for Upwork OAuth2 token handling."""

from unittest.mock import MagicMock
from urllib.parse import parse_qs, urlparse

import pytest
import requests
from dotenv import dotenv_values

from job_watch.config import UpworkConfig
from job_watch.jobs.auth import TOKEN_URL, AuthError, TokenManager


def token_response(payload=None, status=200):
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = payload or {}
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status} error", response=resp)
    return resp


@pytest.fixture
def env_file(tmp_path):
    path = tmp_path / ".env"
    path.write_text(
        "UPWORK_API_KEY=key\nUPWORK_ACCESS_TOKEN=old-access\nUPWORK_REFRESH_TOKEN=old-refresh\n",
        encoding="utf-8",
    )
    return path


def make_manager(env_file, session, **overrides):
    settings = dict(
        client_id="key",
        client_secret="secret",
        access_token="old-access",
        refresh_token="old-refresh",
        env_file=str(env_file),
    )
    settings.update(overrides)
    return TokenManager(UpworkConfig(**settings), session=session)


class TestTokenManager:
    def test_access_token_required(self, env_file):
        tokens = make_manager(env_file, MagicMock(), access_token="")
        with pytest.raises(AuthError):
            tokens.access_token

    def test_ensure_authenticated(self, env_file):
        make_manager(env_file, MagicMock()).ensure_authenticated()
        with pytest.raises(AuthError):
            make_manager(env_file, MagicMock(), refresh_token="").ensure_authenticated()

    def test_authorization_url(self, env_file):
        url = make_manager(env_file, MagicMock()).authorization_url()
        query = parse_qs(urlparse(url).query)
        assert query["response_type"] == ["code"]
        assert query["client_id"] == ["key"]
        assert query["redirect_uri"] == ["http://localhost:3000/callback"]


class TestRefresh:
    def test_refresh_updates_tokens_and_env(self, env_file):
        session = MagicMock()
        session.post.return_value = token_response({"access_token": "new-access", "refresh_token": "new-refresh"})
        tokens = make_manager(env_file, session)

        assert tokens.refresh() == "new-access"
        assert tokens.access_token == "new-access"
        assert tokens.refresh_token == "new-refresh"

        call = session.post.call_args
        assert call.args[0] == TOKEN_URL
        assert call.kwargs["data"]["grant_type"] == "refresh_token"
        assert call.kwargs["data"]["refresh_token"] == "old-refresh"

        saved = dotenv_values(env_file)
        assert saved["UPWORK_ACCESS_TOKEN"] == "new-access"
        assert saved["UPWORK_REFRESH_TOKEN"] == "new-refresh"
        assert saved["UPWORK_API_KEY"] == "key"

    def test_refresh_keeps_old_refresh_token_when_not_rotated(self, env_file):
        session = MagicMock()
        session.post.return_value = token_response({"access_token": "new-access"})
        tokens = make_manager(env_file, session)

        tokens.refresh()
        assert tokens.refresh_token == "old-refresh"

    def test_no_env_file_keeps_tokens_in_memory(self, tmp_path):
        session = MagicMock()
        session.post.return_value = token_response({"access_token": "new-access"})
        tokens = make_manager(tmp_path / "missing.env", session)

        tokens.refresh()
        assert tokens.access_token == "new-access"
        assert not (tmp_path / "missing.env").exists()

    def test_no_refresh_token(self, env_file):
        session = MagicMock()
        tokens = make_manager(env_file, session, refresh_token="")
        with pytest.raises(AuthError):
            tokens.refresh()
        session.post.assert_not_called()

    def test_rejected_refresh(self, env_file):
        session = MagicMock()
        session.post.return_value = token_response(status=400)
        with pytest.raises(AuthError):
            make_manager(env_file, session).refresh()

    def test_response_without_access_token(self, env_file):
        session = MagicMock()
        session.post.return_value = token_response({"error": "invalid_grant"})
        with pytest.raises(AuthError):
            make_manager(env_file, session).refresh()

    def test_network_failure(self, env_file):
        session = MagicMock()
        session.post.side_effect = requests.ConnectionError("down")
        with pytest.raises(AuthError):
            make_manager(env_file, session).refresh()


class TestExchangeCode:
    def test_exchange_code(self, env_file):
        session = MagicMock()
        session.post.return_value = token_response(
            {"access_token": "a1", "refresh_token": "r1", "expires_in": 86400}
        )
        tokens = make_manager(env_file, session, access_token="", refresh_token="")

        assert tokens.exchange_code("abc123") == "a1"
        form = session.post.call_args.kwargs["data"]
        assert form["grant_type"] == "authorization_code"
        assert form["code"] == "abc123"
        assert form["client_secret"] == "secret"
        assert dotenv_values(env_file)["UPWORK_REFRESH_TOKEN"] == "r1"
