"""Upwork OAuth2 tokens: bearer access, refresh and one-time code exchange."""

import logging
import threading
from pathlib import Path
from typing import Optional
from urllib.parse import urlencode

import requests
from dotenv import set_key

from job_watch.config import UpworkConfig
from job_watch.utils.http_client import create_session, describe_http_error

logger = logging.getLogger("job_watch.auth")

AUTHORIZE_URL = "https://www.upwork.com/ab/account-security/oauth2/authorize"
TOKEN_URL = "https://www.upwork.com/api/v3/oauth2/token"


class AuthError(Exception):
    """No usable token, or the token endpoint refused us."""


class TokenManager:
    """Holds the current access/refresh token pair for the Upwork API."""

    def __init__(self, config: UpworkConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session or create_session()
        self._access_token = config.access_token
        self._refresh_token = config.refresh_token
        # Serializes refreshes and .env writes across search threads
        self._lock = threading.Lock()

    @property
    def access_token(self) -> str:
        if not self._access_token:
            raise AuthError("No access token available. Run: job-watch --auth")
        return self._access_token

    def ensure_authenticated(self) -> None:
        """Raise AuthError unless both tokens are present."""
        if not self._access_token or not self._refresh_token:
            raise AuthError("Missing Upwork tokens. Run: job-watch --auth")

    @property
    def refresh_token(self) -> str:
        return self._refresh_token

    def authorization_url(self) -> str:
        params = {
            "response_type": "code",
            "client_id": self.config.client_id,
            "redirect_uri": self.config.redirect_uri,
        }
        return f"{AUTHORIZE_URL}?{urlencode(params)}"

    def refresh(self, stale_token: Optional[str] = None) -> str:
        """Trade the refresh token for a new token pair. Returns the new access token.

        ``stale_token`` is the access token the caller saw rejected. If another
        thread has already replaced it, the current token is returned without
        calling the token endpoint; Upwork rotates refresh tokens, so a second
        refresh with the old one would fail.
        """
        with self._lock:
            if stale_token is not None and self._access_token and self._access_token != stale_token:
                logger.debug("Access token already refreshed by another request")
                return self._access_token

            if not self._refresh_token:
                raise AuthError("No refresh token available. Run: job-watch --auth")

            logger.info("Refreshing access token...")
            data = self._request_tokens({
                "grant_type": "refresh_token",
                "refresh_token": self._refresh_token,
            })
            logger.info("Access token refreshed")
            return data["access_token"]

    def exchange_code(self, code: str) -> str:
        """Trade an authorization code (from the redirect) for a token pair."""
        with self._lock:
            data = self._request_tokens({
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self.config.redirect_uri,
            })
        expires_in = data.get("expires_in")
        if expires_in:
            logger.info("Access token obtained, expires in %s seconds", expires_in)
        return data["access_token"]

    def _request_tokens(self, params: dict) -> dict:
        form = {
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
            **params,
        }
        try:
            response = self.session.post(
                TOKEN_URL,
                data=form,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                timeout=30,
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            logger.error("Token request failed: %s", describe_http_error(e))
            raise AuthError("Token request failed. You may need to re-authenticate: job-watch --auth") from e
        except ValueError as e:
            raise AuthError("Token endpoint returned invalid JSON") from e

        if not data.get("access_token"):
            raise AuthError("Token endpoint response carried no access_token")

        self._store(data["access_token"], data.get("refresh_token") or self._refresh_token)
        return data

    def _store(self, access_token: str, refresh_token: str) -> None:
        self._access_token = access_token
        self._refresh_token = refresh_token

        env_path = Path(self.config.env_file)
        if not env_path.exists():
            logger.warning("%s not found - new tokens kept in memory only", env_path)
            return
        set_key(str(env_path), "UPWORK_ACCESS_TOKEN", access_token, quote_mode="never")
        set_key(str(env_path), "UPWORK_REFRESH_TOKEN", refresh_token, quote_mode="never")
        logger.info("Tokens saved to %s", env_path)
