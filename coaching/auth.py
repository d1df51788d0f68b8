"""Google OAuth consent flow for the spreadsheet scope.

The session object replaces ambient client handles: whoever builds it owns it,
opens it before use and closes it when done.
"""

from __future__ import annotations

import base64
import hashlib
import json
import logging
import secrets
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import requests

from .config import DEFAULT_HTTP_TIMEOUT_S, GOOGLE_AUTH_URL, GOOGLE_TOKEN_URL, SHEETS_SCOPE
from .errors import AuthenticationError, ConfigurationError

logger = logging.getLogger(__name__)

# Refresh a little before Google's expiry so a request never races it.
_EXPIRY_SKEW_S = 60


@dataclass
class OAuthToken:
    access_token: str
    expires_at: float
    client_id: str
    refresh_token: Optional[str] = None

    @property
    def expired(self) -> bool:
        return time.time() >= self.expires_at - _EXPIRY_SKEW_S


def _pkce_pair() -> tuple[str, str]:
    verifier = secrets.token_urlsafe(64)
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    challenge = base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")
    return verifier, challenge


class GoogleAuthSession:
    def __init__(
        self,
        client_id: str,
        redirect_uri: str,
        client_secret: Optional[str] = None,
        token_path: Optional[Path] = None,
        timeout_s: int = DEFAULT_HTTP_TIMEOUT_S,
    ) -> None:
        self.client_id = client_id
        self.redirect_uri = redirect_uri
        self.client_secret = client_secret
        self.token_path = token_path
        self.timeout_s = timeout_s
        self.token: Optional[OAuthToken] = None
        self.http: Optional[requests.Session] = None
        self._pending: Dict[str, str] = {}

    # -- lifecycle ----------------------------------------------------------

    def open(self) -> "GoogleAuthSession":
        if self.http is None:
            self.http = requests.Session()
        self._load_token()
        return self

    def close(self) -> None:
        if self.http is not None:
            self.http.close()
            self.http = None
        self._pending.clear()

    def __enter__(self) -> "GoogleAuthSession":
        return self.open()

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # -- state --------------------------------------------------------------

    @property
    def is_authenticated(self) -> bool:
        return (
            self.token is not None
            and self.token.client_id == self.client_id
            and (not self.token.expired or bool(self.token.refresh_token))
        )

    def reconfigure(self, client_id: str) -> None:
        """Switch client identity; the old grant does not carry over."""
        if client_id == self.client_id:
            return
        logger.info("OAuth client id changed, dropping the current token")
        self.client_id = client_id
        self.logout()

    def logout(self) -> None:
        self.token = None
        self._pending.clear()
        if self.token_path and self.token_path.exists():
            self.token_path.unlink()

    # -- consent flow -------------------------------------------------------

    def consent_url(self) -> str:
        if not self.client_id:
            raise ConfigurationError("Set the Google client id in the settings first.")
        state = secrets.token_urlsafe(16)
        verifier, challenge = _pkce_pair()
        self._pending[state] = verifier
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": SHEETS_SCOPE,
            "state": state,
            "code_challenge": challenge,
            "code_challenge_method": "S256",
            "access_type": "offline",
        }
        # Ask for consent only the first time; later logins reuse the grant.
        if self.token is None:
            params["prompt"] = "consent"
        return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"

    def exchange_code(self, code: str, state: str) -> OAuthToken:
        verifier = self._pending.pop(state, None)
        if verifier is None:
            raise AuthenticationError("Login expired or was not started here. Start the login again.")
        data = {
            "client_id": self.client_id,
            "code": code,
            "code_verifier": verifier,
            "grant_type": "authorization_code",
            "redirect_uri": self.redirect_uri,
        }
        self.token = self._token_request(data)
        self._save_token()
        logger.info("Signed in to Google")
        return self.token

    def access_token(self) -> str:
        if not self.is_authenticated or self.token is None:
            raise AuthenticationError()
        if self.token.expired:
            self._refresh()
        return self.token.access_token

    def authorization_header(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.access_token()}"}

    # -- internals ----------------------------------------------------------

    def _refresh(self) -> None:
        assert self.token is not None
        data = {
            "client_id": self.client_id,
            "grant_type": "refresh_token",
            "refresh_token": self.token.refresh_token or "",
        }
        refresh_token = self.token.refresh_token
        self.token = self._token_request(data)
        if not self.token.refresh_token:
            self.token.refresh_token = refresh_token
        self._save_token()

    def _token_request(self, data: Dict[str, str]) -> OAuthToken:
        if self.client_secret:
            data = dict(data, client_secret=self.client_secret)
        http = self.http or self.open().http
        assert http is not None
        try:
            resp = http.post(GOOGLE_TOKEN_URL, data=data, timeout=self.timeout_s)
        except requests.RequestException as exc:
            raise AuthenticationError(f"Could not reach Google sign-in: {exc}") from exc
        if resp.status_code != 200:
            logger.error("Token endpoint returned %s: %s", resp.status_code, resp.text)
            self.token = None
            raise AuthenticationError("Google sign-in was rejected. Log in again.")
        body = resp.json()
        return OAuthToken(
            access_token=body["access_token"],
            expires_at=time.time() + float(body.get("expires_in") or 3600),
            client_id=self.client_id,
            refresh_token=body.get("refresh_token"),
        )

    def _load_token(self) -> None:
        if not self.token_path or not self.token_path.exists():
            return
        try:
            raw = json.loads(self.token_path.read_text(encoding="utf-8"))
            token = OAuthToken(**raw)
        except (json.JSONDecodeError, TypeError) as exc:
            logger.warning("Ignoring unreadable token file %s: %s", self.token_path, exc)
            return
        if token.client_id == self.client_id:
            self.token = token

    def _save_token(self) -> None:
        if not self.token_path or self.token is None:
            return
        self.token_path.parent.mkdir(parents=True, exist_ok=True)
        with self.token_path.open("w", encoding="utf-8") as f:
            json.dump(asdict(self.token), f)
