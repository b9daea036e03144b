"""Datastore adapter that delegates every storage operation to MCP tools.

One async method per operation: save, retrieve, delete, search,
bulk_insert and bulk_delete. Each call compiles the tool descriptor for
(model, operation), makes sure the shared session is connected, sends a
call envelope and unwraps the first text content entry as JSON.

Nothing is cached and nothing is evaluated locally: search queries are
forwarded untouched and filtering happens on the endpoint.

Example:
    session = MCPSessionManager(config)
    datastore = DatastoreProvider(session)
    widget = await datastore.retrieve(widgets_model, "w1")
"""

import asyncio
import json
import logging
import uuid
from typing import Any, Iterable

import mcp.types as types

from src.errors.domain import (
    MalformedResponseError,
    MCPConnectionError,
    ToolInvocationError,
)
from src.models.descriptors import ModelDescriptor, ModelInstance, ModelOperation
from src.models.schema import CallEnvelope, ToolDescriptor
from src.schema.compiler import ToolNameStrategy, compile_tool_descriptor, returns_null
from src.services.mcp_client import describe_error, is_transport_error
from src.services.session_manager import MCPSessionManager
from src.utils.redaction import scrub_credentials

logger = logging.getLogger(__name__)


def extract_error_payload(result: types.CallToolResult) -> Any:
    """Return the remote error payload of an ``isError`` result.

    Prefers an explicit ``error`` field and falls back to the text of the
    first content entry.
    """
    error = getattr(result, "error", None)
    if error is not None:
        return error
    for item in result.content or []:
        text = getattr(item, "text", None)
        if isinstance(text, str):
            return text
    return "unknown error"


def parse_tool_result(
    tool_name: str,
    result: types.CallToolResult,
    allow_empty: bool = False,
) -> Any:
    """Parse the JSON text of the first content entry.

    Args:
        tool_name: Name of the tool (for error messages).
        result: Successful CallToolResult.
        allow_empty: Return None instead of failing when there is no
            content (tools whose output contract is null).

    Returns:
        Parsed JSON value.

    Raises:
        MalformedResponseError: No content, non-text first entry, or invalid JSON.
    """
    content = result.content or []
    if not content:
        if allow_empty:
            return None
        raise MalformedResponseError(tool_name, "response has no content")

    text = getattr(content[0], "text", None)
    if not isinstance(text, str):
        raise MalformedResponseError(tool_name, "first content entry has no text")
    if allow_empty and not text.strip():
        return None

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedResponseError(tool_name, f"invalid JSON: {e}") from e


class DatastoreProvider:
    """Operation dispatcher over a shared MCP session.

    Attributes:
        _session: Session manager owning the connected client.
        _name_strategy: Optional tool naming override.
    """

    def __init__(
        self,
        session: MCPSessionManager,
        name_strategy: ToolNameStrategy | None = None,
    ) -> None:
        self._session = session
        self._name_strategy = name_strategy

    def tool_for(self, model: ModelDescriptor, operation: ModelOperation) -> ToolDescriptor:
        """Compile the descriptor the provider would call for (model, operation)."""
        return compile_tool_descriptor(model, operation, self._name_strategy)

    async def execute_tool(
        self,
        tool: ToolDescriptor,
        arguments: dict[str, Any],
        call_id: str | None = None,
    ) -> Any:
        """Invoke a tool through the session and unwrap its result.

        Args:
            tool: Compiled tool descriptor.
            arguments: The operation's input payload.
            call_id: Correlation id; a fresh UUID4 when omitted.

        Returns:
            Parsed JSON result (None for empty results of null-output tools).

        Raises:
            MCPConnectionError: Session could not be established or was lost
                mid-call. The held client is dropped; the call is not retried.
            ToolInvocationError: Endpoint returned ``isError``.
            MalformedResponseError: Success response had no parseable text.
        """
        envelope = CallEnvelope(
            id=call_id or str(uuid.uuid4()),
            name=tool.name,
            arguments=arguments,
        )
        client = await self._session.ensure_connected()
        try:
            result = await client.call_tool(envelope)
        except MCPConnectionError:
            await self._session.discard(client)
            raise
        except Exception as e:
            if not is_transport_error(e):
                raise
            # The session is unusable; the next call reconnects.
            await self._session.discard(client)
            logger.warning(
                "MCP session to '%s' lost during '%s' (call_id=%s): %s",
                client.url, tool.name, envelope.id, describe_error(e),
            )
            raise MCPConnectionError(
                url=client.url,
                reason=f"session lost during '{tool.name}': {describe_error(e)}",
            ) from e

        if result.isError:
            payload = extract_error_payload(result)
            logger.warning(
                "MCP tool '%s' reported an error (call_id=%s): %s",
                tool.name, envelope.id, scrub_credentials(str(payload), limit=200),
            )
            raise ToolInvocationError(tool.name, payload, call_id=envelope.id)

        return parse_tool_result(tool.name, result, allow_empty=returns_null(tool))

    async def save(self, instance: ModelInstance, call_id: str | None = None) -> Any:
        """Create or update one record; returns the stored record."""
        tool = self.tool_for(instance.get_model(), ModelOperation.SAVE)
        data = await instance.to_obj()
        return await self.execute_tool(tool, data, call_id)

    async def retrieve(
        self, model: ModelDescriptor, id: str, call_id: str | None = None
    ) -> Any:
        """Fetch one record by id; None when the endpoint has none."""
        tool = self.tool_for(model, ModelOperation.RETRIEVE)
        return await self.execute_tool(tool, {"id": id}, call_id)

    async def delete(
        self, model: ModelDescriptor, id: str, call_id: str | None = None
    ) -> None:
        tool = self.tool_for(model, ModelOperation.DELETE)
        await self.execute_tool(tool, {"id": id}, call_id)

    async def search(
        self, model: ModelDescriptor, query: dict[str, Any], call_id: str | None = None
    ) -> Any:
        """Run a search; ``query`` is forwarded to the endpoint unchanged."""
        tool = self.tool_for(model, ModelOperation.SEARCH)
        return await self.execute_tool(tool, query, call_id)

    async def bulk_insert(
        self,
        model: ModelDescriptor,
        instances: Iterable[ModelInstance],
        call_id: str | None = None,
    ) -> None:
        tool = self.tool_for(model, ModelOperation.BULK_INSERT)
        items = await asyncio.gather(*(instance.to_obj() for instance in instances))
        await self.execute_tool(tool, {"items": list(items)}, call_id)

    async def bulk_delete(
        self,
        model: ModelDescriptor,
        ids: Iterable[str],
        call_id: str | None = None,
    ) -> None:
        tool = self.tool_for(model, ModelOperation.BULK_DELETE)
        await self.execute_tool(tool, {"ids": list(ids)}, call_id)
