"""Typed domain exceptions for the datastore core.

Every failure the core surfaces is a DatastoreError carrying a tagged
ErrorKind, a registry code and structured details. Callers catch the
specific subclass they care about; nothing here retries.

Usage:
    try:
        record = await provider.retrieve(model, "w1")
    except ToolInvocationError as e:
        logger.warning("Remote refused %s: %s", e.tool_name, e.payload)
"""

from typing import Any

from src.errors.registry import ErrorKind, get_error


class DatastoreError(Exception):
    """Base exception for all datastore errors."""

    kind: ErrorKind = ErrorKind.CONNECTION
    code: str = ""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def remediation(self) -> str:
        """Remediation text from the error registry."""
        error_def = get_error(self.code)
        return error_def.remediation if error_def else ""


class UnsupportedPropertyKindError(DatastoreError):
    """A model property kind has no structural schema mapping."""

    kind = ErrorKind.UNSUPPORTED_PROPERTY_KIND
    code = "E-1001"

    def __init__(self, property_name: str, property_kind: Any) -> None:
        super().__init__(
            f"Unsupported property type: {property_kind} (property '{property_name}')",
            details={"property": property_name, "property_kind": str(property_kind)},
        )
        self.property_name = property_name
        self.property_kind = property_kind


class UnknownOperationError(DatastoreError):
    """The requested operation is not one of the six datastore operations."""

    kind = ErrorKind.UNKNOWN_OPERATION
    code = "E-1002"

    def __init__(self, operation: Any) -> None:
        super().__init__(
            f"Unknown operation: {operation}", details={"operation": str(operation)}
        )
        self.operation = operation


class MCPConnectionError(DatastoreError, ConnectionError):
    """Failed to establish the MCP session.

    Attributes:
        url: Endpoint the session was being opened against.
        reason: Description of why the connection failed.
    """

    kind = ErrorKind.CONNECTION
    code = "E-2001"

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(
            f"Failed to connect to MCP endpoint '{url}': {reason}",
            details={"url": url, "reason": reason},
        )
        self.url = url
        self.reason = reason


class TokenFetchError(MCPConnectionError):
    """The OAuth2 token endpoint did not issue an access token."""

    kind = ErrorKind.TOKEN_FETCH
    code = "E-2002"

    def __init__(self, token_url: str, reason: str) -> None:
        DatastoreError.__init__(
            self,
            f"Failed to obtain access token from '{token_url}': {reason}",
            details={"token_url": token_url, "reason": reason},
        )
        self.url = token_url
        self.token_url = token_url
        self.reason = reason


class ToolInvocationError(DatastoreError):
    """Remote endpoint reported isError for a well-formed call.

    Attributes:
        tool_name: Name of the MCP tool that failed.
        payload: Remote error payload as received.
        call_id: Correlation id of the failed call.
    """

    kind = ErrorKind.TOOL_INVOCATION
    code = "E-3001"

    def __init__(self, tool_name: str, payload: Any, call_id: str | None = None) -> None:
        super().__init__(
            f"MCP call failed: {payload}",
            details={"tool_name": tool_name, "error": payload, "call_id": call_id},
        )
        self.tool_name = tool_name
        self.payload = payload
        self.call_id = call_id


class MalformedResponseError(DatastoreError):
    """Successful response lacked the expected content/text shape."""

    kind = ErrorKind.MALFORMED_RESPONSE
    code = "E-4001"

    def __init__(self, tool_name: str, reason: str) -> None:
        super().__init__(
            f"MCP tool '{tool_name}' returned a malformed response: {reason}",
            details={"tool_name": tool_name, "reason": reason},
        )
        self.tool_name = tool_name
        self.reason = reason
