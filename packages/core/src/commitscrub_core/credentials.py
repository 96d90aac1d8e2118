"""Access-token providers.

The remote adapter asks its provider for a token on every call instead of
holding one, so an expired token is replaced before it can fail
authorization halfway through a rewrite.

Two sources are supported:
  - StaticTokenProvider: a personal access token (GITHUB_TOKEN, gh CLI).
  - ConnectorTokenProvider: an OAuth token handed out by the hosting
    environment's connector service, cached per instance until it expires.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable

import httpx

from commitscrub_core.errors import AuthRequiredError

logger = logging.getLogger(__name__)

_CONNECTOR_TIMEOUT = 10.0


class TokenProvider(ABC):
    @abstractmethod
    def get_access_token(self) -> str:
        """Return a currently valid token or raise AuthRequiredError."""


class StaticTokenProvider(TokenProvider):
    def __init__(self, token: str | None):
        self._token = token

    def get_access_token(self) -> str:
        if not self._token:
            raise AuthRequiredError("No GitHub token configured. Set GITHUB_TOKEN or run `gh auth login`.")
        return self._token


def _parse_expiry(value) -> datetime | None:
    if not value:
        return None
    try:
        expires = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        logger.debug("Ignoring unparseable connector expiry %r", value)
        return None
    if expires.tzinfo is None:
        expires = expires.replace(tzinfo=timezone.utc)
    return expires


class ConnectorTokenProvider(TokenProvider):
    """Fetch the GitHub OAuth token from the environment's connector service.

    ``identity`` is the full header value (``"repl <id>"`` or ``"depl <id>"``).
    A cached token is reused only while its advertised ``expires_at`` is in
    the future; tokens without an expiry are fetched again on every call.
    """

    def __init__(
        self,
        hostname: str | None,
        identity: str | None,
        http_client: httpx.Client | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._hostname = hostname
        self._identity = identity
        self._http = http_client
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._token: str | None = None
        self._expires_at: datetime | None = None

    def get_access_token(self) -> str:
        if self._token and self._expires_at and self._expires_at > self._clock():
            return self._token

        self._token = None
        self._expires_at = None
        settings = self._fetch_settings()

        token = settings.get("access_token") or ((settings.get("oauth") or {}).get("credentials") or {}).get(
            "access_token"
        )
        if not token:
            raise AuthRequiredError("GitHub not connected: the connector returned no access token.")

        self._token = token
        self._expires_at = _parse_expiry(settings.get("expires_at"))
        return token

    def _fetch_settings(self) -> dict:
        if not self._identity:
            raise AuthRequiredError("No connector identity available (REPL_IDENTITY / WEB_REPL_RENEWAL unset).")
        if not self._hostname:
            raise AuthRequiredError("No connector hostname available (REPLIT_CONNECTORS_HOSTNAME unset).")

        url = f"https://{self._hostname}/api/v2/connection"
        params = {"include_secrets": "true", "connector_names": "github"}
        headers = {"Accept": "application/json", "X_REPLIT_TOKEN": self._identity}
        client = self._http or httpx.Client(timeout=_CONNECTOR_TIMEOUT)
        try:
            response = client.get(url, params=params, headers=headers)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise AuthRequiredError(f"GitHub not connected: connector request failed ({type(e).__name__}).") from e
        finally:
            if self._http is None:
                client.close()

        items = (payload.get("items") or []) if isinstance(payload, dict) else []
        if not items:
            raise AuthRequiredError("GitHub not connected: no GitHub connection found.")
        logger.debug("Fetched GitHub token from connector service.")
        return items[0].get("settings") or {}
