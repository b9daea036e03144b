"""Access token providers for MCP session authentication.

The session manager only needs ``await provider.get_access_token()``.
Two providers ship here: a static token, and an OAuth2
client-credentials provider that caches the issued token until shortly
before it expires and then fetches a new one. A new token value is what
triggers the session manager to rebuild its transport.

Example:
    provider = OAuth2ClientCredentialsProvider(
        OAuth2Config(token_url="https://auth.example.com/token",
                     client_id="X", client_secret="Y", scopes=["records"]),
    )
    token = await provider.get_access_token()
"""

import asyncio
import logging
import time
from typing import Protocol, runtime_checkable

import httpx

from src.errors.domain import TokenFetchError
from src.services.connection_types import OAuth2Config
from src.utils.redaction import scrub_credentials

logger = logging.getLogger(__name__)

# Refresh this many seconds before the issuer's expiry.
EXPIRY_SKEW_SECONDS = 60.0
DEFAULT_EXPIRES_IN = 3600.0


@runtime_checkable
class AccessTokenProvider(Protocol):
    """Supplies the current bearer credential."""

    async def get_access_token(self) -> str:
        """Return the current access token, fetching or refreshing as needed."""
        ...


class StaticTokenProvider:
    """Provider that always returns the same token."""

    def __init__(self, token: str) -> None:
        self._token = token

    async def get_access_token(self) -> str:
        return self._token


class OAuth2ClientCredentialsProvider:
    """OAuth2 client-credentials token provider with expiry-aware caching.

    Attributes:
        _config: Token endpoint and client credentials.
        _http_client: Optional shared httpx client (tests inject one with a
            mock transport). When None, a short-lived client is opened per fetch.
        _token: Cached access token.
        _expires_at: Monotonic deadline after which the token is refetched.
    """

    def __init__(
        self,
        config: OAuth2Config,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 15.0,
    ) -> None:
        self._config = config
        self._http_client = http_client
        self._timeout = timeout
        self._token: str | None = None
        self._expires_at = 0.0
        self._lock = asyncio.Lock()
        self._fetch_count = 0

    @property
    def fetch_count(self) -> int:
        """Number of token endpoint round trips performed."""
        return self._fetch_count

    def invalidate(self) -> None:
        """Drop the cached token so the next call fetches a fresh one."""
        self._token = None
        self._expires_at = 0.0

    async def get_access_token(self) -> str:
        """Return a valid access token.

        Raises:
            TokenFetchError: Token endpoint unreachable, rejected the client,
                or returned no ``access_token``.
        """
        async with self._lock:
            if self._token is not None and time.monotonic() < self._expires_at:
                return self._token

            payload = await self._fetch_token()
            self._token = payload["access_token"]
            expires_in = float(payload.get("expires_in") or DEFAULT_EXPIRES_IN)
            self._expires_at = time.monotonic() + max(expires_in - EXPIRY_SKEW_SECONDS, 0.0)
            logger.info(
                "Fetched OAuth2 access token from %s (expires_in=%ss)",
                self._config.token_url, int(expires_in),
            )
            return self._token

    async def _fetch_token(self) -> dict:
        data = {
            "grant_type": "client_credentials",
            "client_id": self._config.client_id,
            "client_secret": self._config.client_secret,
        }
        if self._config.scopes:
            data["scope"] = " ".join(self._config.scopes)

        self._fetch_count += 1
        try:
            if self._http_client is not None:
                response = await self._http_client.post(self._config.token_url, data=data)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(self._config.token_url, data=data)
        except httpx.HTTPError as e:
            raise TokenFetchError(self._config.token_url, str(e) or type(e).__name__) from e

        if response.status_code != 200:
            raise TokenFetchError(
                self._config.token_url,
                f"HTTP {response.status_code}: "
                f"{scrub_credentials(response.text, limit=200)}",
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise TokenFetchError(self._config.token_url, "response is not JSON") from e

        if not isinstance(payload, dict) or not payload.get("access_token"):
            raise TokenFetchError(self._config.token_url, "response has no access_token")
        return payload
