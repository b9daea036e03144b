"""Async MCP client over streamable HTTP or SSE with fixed auth headers.

One MCPClient owns one transport and one ClientSession. Both are entered
and exited by a single owner task, since the SDK's anyio cancel scopes must
be closed by the task that opened them. Credentials are
injected as HTTP headers when the transport is built and never change
afterwards: a rotated credential means a new MCPClient. Connection
failures surface as MCPConnectionError; tool calls are single round trips
with no retry at this layer.

Example:
    client = MCPClient(
        ConnectionSettings(type="http", url="https://tools.example.com/mcp"),
        access_token="abc",
    )
    await client.connect()
    result = await client.call_tool(
        CallEnvelope(id="1", name="acct_widgets_retrieve", arguments={"id": "w1"})
    )
"""

import asyncio
import logging
from contextlib import AsyncExitStack
from typing import Any

import httpx
import mcp.types as types
from mcp import ClientSession
from mcp.client.sse import sse_client
from mcp.client.streamable_http import streamablehttp_client

from src.errors.domain import MCPConnectionError
from src.models.schema import CallEnvelope
from src.services.connection_types import (
    ClientIdentity,
    ConnectionSettings,
    TransportKind,
)

logger = logging.getLogger(__name__)


def build_auth_headers(
    access_token: str | None = None,
    api_key: str | None = None,
) -> dict[str, str]:
    """Build the auth headers injected into a transport at construction.

    Args:
        access_token: Bearer token (direct or OAuth2-issued).
        api_key: Static API key sent as ``x-api-key``.

    Returns:
        Header dict; empty when no credential is given.
    """
    headers: dict[str, str] = {}
    if access_token:
        headers["Authorization"] = f"Bearer {access_token}"
    if api_key:
        headers["x-api-key"] = api_key
    return headers


def create_transport(connection: ConnectionSettings, headers: dict[str, str]) -> Any:
    """Create the (unentered) transport context for the configured kind.

    Raises:
        MCPConnectionError: Unsupported transport kind.
    """
    if connection.type == TransportKind.HTTP:
        return streamablehttp_client(connection.url, headers=dict(headers))
    if connection.type == TransportKind.SSE:
        return sse_client(connection.url, headers=dict(headers))
    raise MCPConnectionError(
        connection.url, f"Unsupported connection type: {connection.type}"
    )


_TRANSPORT_ERROR_NAMES = frozenset({
    "ClosedResourceError", "BrokenResourceError", "EndOfStream",
})
_TRANSPORT_ERROR_PATTERNS = (
    "broken pipe",
    "connection reset",
    "connection closed",
    "closed resource",
    "broken resource",
    "end of stream",
    "session not initialized",
    "session terminated",
    "transport",
)


def _root_cause(error: BaseException) -> BaseException:
    """Unwrap single-member exception groups raised by anyio task groups."""
    while isinstance(error, BaseExceptionGroup) and len(error.exceptions) == 1:
        error = error.exceptions[0]
    return error


def describe_error(error: BaseException) -> str:
    """Short description of an error, unwrapping task-group wrappers."""
    cause = _root_cause(error)
    return str(cause) or type(cause).__name__


def is_transport_error(error: BaseException) -> bool:
    """Classify transport/session failures after which the session is unusable."""
    cause = _root_cause(error)
    if isinstance(cause, (httpx.TransportError, ConnectionError)):
        return True
    if type(cause).__name__ in _TRANSPORT_ERROR_NAMES:
        return True
    text = str(cause).lower()
    return any(p in text for p in _TRANSPORT_ERROR_PATTERNS)


class MCPClient:
    """Async MCP client bound to one endpoint and one credential.

    Attributes:
        _connection: Endpoint URL and transport kind.
        _client_info: Name/version announced during initialization.
        _headers: Auth headers fixed at construction.
    """

    def __init__(
        self,
        connection: ConnectionSettings,
        client_info: ClientIdentity | None = None,
        access_token: str | None = None,
        api_key: str | None = None,
    ) -> None:
        """Initialize MCP client.

        Args:
            connection: Endpoint settings (``http`` or ``sse`` plus URL).
            client_info: Client identity. Defaults to ``mcp-datastore`` 1.0.0.
            access_token: Optional bearer token.
            api_key: Optional API key.
        """
        self._connection = connection
        self._client_info = client_info or ClientIdentity()
        self._headers = build_auth_headers(access_token=access_token, api_key=api_key)
        self._session: ClientSession | None = None
        self._owner_task: asyncio.Task | None = None
        self._shutdown: asyncio.Event | None = None

    @property
    def url(self) -> str:
        """Endpoint URL."""
        return self._connection.url

    @property
    def headers(self) -> dict[str, str]:
        """Copy of the auth headers this client was built with."""
        return dict(self._headers)

    @property
    def is_connected(self) -> bool:
        """Whether the session is initialized and its owner task is alive."""
        return (
            self._session is not None
            and self._owner_task is not None
            and not self._owner_task.done()
        )

    async def check_health(self) -> bool:
        """Lightweight health check that pings the endpoint.

        Returns False on any failure rather than raising, making it safe
        for monitoring paths.
        """
        if not self.is_connected:
            return False
        try:
            await self._session.send_ping()
            return True
        except Exception as e:
            logger.debug("MCP health check against %s failed: %s", self.url, e)
            return False

    async def __aenter__(self) -> "MCPClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.disconnect()

    async def connect(self) -> None:
        """Start the owner task and wait until the session is initialized.

        Raises:
            MCPConnectionError: If the transport or handshake fails.
        """
        if self.is_connected:
            return

        # Ensure a dead owner task from a previous session is reaped.
        await self._cleanup()
        ready: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._shutdown = asyncio.Event()
        self._owner_task = asyncio.create_task(
            self._run_session(ready, self._shutdown),
            name=f"mcp-session:{self.url}",
        )
        try:
            await ready
        except Exception as e:
            await self._cleanup()
            if isinstance(e, MCPConnectionError):
                raise
            raise MCPConnectionError(url=self.url, reason=describe_error(e)) from e

        logger.info(
            "MCP client connected to '%s' (%s)",
            self.url, self._connection.type.value,
        )

    async def disconnect(self) -> None:
        """Close the session and its transport from the owner task."""
        await self._cleanup()

    async def _run_session(
        self, ready: asyncio.Future[None], shutdown: asyncio.Event
    ) -> None:
        """Own the transport and session contexts for their whole lifetime."""
        try:
            async with AsyncExitStack() as stack:
                streams = await stack.enter_async_context(
                    create_transport(self._connection, self._headers)
                )
                session = await stack.enter_async_context(
                    ClientSession(
                        streams[0],
                        streams[1],
                        client_info=types.Implementation(
                            name=self._client_info.name,
                            version=self._client_info.version,
                        ),
                    )
                )
                await session.initialize()
                self._session = session
                ready.set_result(None)
                await shutdown.wait()
        except Exception as e:
            if not ready.done():
                ready.set_exception(e)
            else:
                logger.warning(
                    "MCP session for %s ended with error: %s",
                    self.url, describe_error(e),
                )
        finally:
            self._session = None
            if not ready.done():
                ready.set_exception(
                    MCPConnectionError(url=self.url, reason="session task cancelled")
                )

    async def _cleanup(self) -> None:
        """Signal the owner task to exit its contexts and wait for it."""
        task, self._owner_task = self._owner_task, None
        if task is None:
            return
        if self._shutdown is not None:
            self._shutdown.set()
        outcome = (await asyncio.gather(task, return_exceptions=True))[0]
        if isinstance(outcome, BaseException):
            logger.warning("MCP session task for %s failed: %s", self.url, outcome)
        self._session = None

    async def call_tool(self, envelope: CallEnvelope) -> types.CallToolResult:
        """Send one call envelope and return the raw tool result.

        Raises:
            MCPConnectionError: Session not initialized.
        """
        if self._session is None:
            raise MCPConnectionError(
                url=self.url,
                reason="Session not initialized. Call connect() first.",
            )
        logger.debug("Calling MCP tool '%s' (call_id=%s)", envelope.name, envelope.id)
        return await self._session.call_tool(envelope.name, envelope.arguments)

    async def list_tools(self) -> list[types.Tool]:
        """List the tools registered on the endpoint.

        Raises:
            MCPConnectionError: Session not initialized.
        """
        if self._session is None:
            raise MCPConnectionError(
                url=self.url,
                reason="Session not initialized. Call connect() first.",
            )
        result = await self._session.list_tools()
        return list(result.tools)
