"""Long-lived authenticated MCP session with credential-rotation reconnect.

Owns the one connected MCPClient shared by every datastore call. The
session is opened lazily on the first ``ensure_connected()`` and, when an
access-token provider is configured, rebuilt whenever the provider hands
back a different token than the one the current client was built with.

Connect paths by credential source:
- direct token: connect once, never reconnect for that token.
- OAuth2 / token provider: fetch the token on every call; a changed
  token closes the old client and opens exactly one new one.
- API key or nothing: connect once with the optional ``x-api-key`` header.

On every path a held client whose session has ended is rebuilt, and
``discard()`` drops a client after a transport failure mid-call.

All ``ensure_connected()`` executions run under one asyncio.Lock so two
concurrent calls during a rotation cannot both rebuild the session.
Failures surface as MCPConnectionError; retry policy belongs to callers.

Example:
    async with MCPSessionManager(config) as session:
        client = await session.ensure_connected()
"""

import asyncio
import logging
from typing import Any

import mcp.types as types

from src.errors.domain import MCPConnectionError
from src.services.connection_types import ConnectionConfig, CredentialSource
from src.services.mcp_client import MCPClient
from src.services.oauth2 import AccessTokenProvider, OAuth2ClientCredentialsProvider

logger = logging.getLogger(__name__)


class MCPSessionManager:
    """Owner of the shared MCP session state.

    Attributes:
        _config: Immutable connection configuration.
        _token_provider: Access-token capability; None for static credentials.
        _client: Connected client, or None while disconnected.
        _last_access_token: Token the current client was built with.
        _lock: Serializes every connect/reconnect.
    """

    def __init__(
        self,
        config: ConnectionConfig,
        token_provider: AccessTokenProvider | None = None,
    ) -> None:
        """Initialize the session manager.

        Args:
            config: Connection configuration.
            token_provider: Optional access-token provider. When omitted and
                ``config.oauth2`` is set, an OAuth2ClientCredentialsProvider
                is built from it. Ignored when a direct token is configured.

        Raises:
            ValueError: ``token_provider`` given together with
                ``credentials.api_key``. A provider session sends only the
                bearer token, so the key would never reach the endpoint.
        """
        if token_provider is not None and config.credentials.api_key:
            raise ValueError(
                "token_provider cannot be combined with credentials.api_key"
            )
        self._config = config
        if token_provider is None and config.oauth2 is not None:
            token_provider = OAuth2ClientCredentialsProvider(config.oauth2)
        self._token_provider = token_provider
        self._client: MCPClient | None = None
        self._last_access_token: str | None = None
        self._lock = asyncio.Lock()
        self._connect_count = 0
        self._reconnect_count = 0

    @property
    def config(self) -> ConnectionConfig:
        return self._config

    @property
    def is_connected(self) -> bool:
        """Whether a connected client is currently held."""
        return self._client is not None and self._client.is_connected

    @property
    def connect_count(self) -> int:
        """Number of successful connects performed."""
        return self._connect_count

    @property
    def reconnect_count(self) -> int:
        """Number of session rebuilds caused by a changed access token."""
        return self._reconnect_count

    async def __aenter__(self) -> "MCPSessionManager":
        await self.ensure_connected()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def ensure_connected(self) -> MCPClient:
        """Return a live client, connecting or reconnecting first if needed.

        Idempotent; safe to call before every remote operation.

        Returns:
            Connected MCPClient.

        Raises:
            MCPConnectionError: Token fetch or connect failed.
        """
        async with self._lock:
            if self._client is not None and not self._client.is_connected:
                logger.info(
                    "MCP session to '%s' is no longer live; reconnecting",
                    self._config.connection.url,
                )
                await self._close_client()

            source = self._config.credential_source

            if source is CredentialSource.DIRECT_TOKEN:
                if self._client is None:
                    await self._open(access_token=self._config.credentials.oauth_token)
                return self._client

            if self._token_provider is not None:
                access_token = await self._fetch_access_token()
                if self._client is None or self._last_access_token != access_token:
                    if self._client is not None:
                        logger.info(
                            "Access token changed; rebuilding MCP session to '%s'",
                            self._config.connection.url,
                        )
                        await self._close_client()
                        self._reconnect_count += 1
                    await self._open(access_token=access_token)
                    self._last_access_token = access_token
                return self._client

            if self._client is None:
                await self._open(api_key=self._config.credentials.api_key)
            return self._client

    async def list_remote_tools(self) -> list[types.Tool]:
        """List tools registered on the endpoint, connecting if needed."""
        client = await self.ensure_connected()
        return await client.list_tools()

    async def close(self) -> None:
        """Close the held client and forget the recorded token."""
        async with self._lock:
            await self._close_client()

    async def discard(self, client: MCPClient) -> None:
        """Drop ``client`` after a transport failure, if it is still held.

        A client already replaced by a concurrent rebuild is left alone, so
        a late failure report never tears down a fresh session.
        """
        async with self._lock:
            if self._client is not client:
                return
            logger.info(
                "Discarding MCP session to '%s' after transport failure",
                client.url,
            )
            await self._close_client()

    async def _fetch_access_token(self) -> str:
        try:
            return await self._token_provider.get_access_token()
        except MCPConnectionError:
            raise
        except Exception as e:
            raise MCPConnectionError(
                url=self._config.connection.url,
                reason=f"access token unavailable: {e}",
            ) from e

    async def _open(self, access_token: str | None = None, api_key: str | None = None) -> None:
        client = MCPClient(
            self._config.connection,
            client_info=self._config.client,
            access_token=access_token,
            api_key=api_key,
        )
        await client.connect()
        self._client = client
        self._connect_count += 1

    async def _close_client(self) -> None:
        client, self._client = self._client, None
        self._last_access_token = None
        if client is not None:
            await client.disconnect()
            logger.info("MCP client for '%s' closed", client.url)
