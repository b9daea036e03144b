"""Error code registry with E-XXXX format codes.

This module defines the error code system for mcp-datastore, organizing
errors by kind:
- E-1xxx: Schema compilation errors
- E-2xxx: Session / connection errors
- E-3xxx: Remote tool errors
- E-4xxx: Response parsing errors

Each error includes a code, title, message template, and remediation steps.
"""

from dataclasses import dataclass
from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of failure kinds surfaced by the datastore core."""

    UNSUPPORTED_PROPERTY_KIND = "unsupported_property_kind"
    UNKNOWN_OPERATION = "unknown_operation"
    CONNECTION = "connection"
    TOKEN_FETCH = "token_fetch"
    TOOL_INVOCATION = "tool_invocation"
    MALFORMED_RESPONSE = "malformed_response"


@dataclass(frozen=True)
class ErrorCode:
    """Definition of an error code with metadata.

    Attributes:
        code: Error code in E-XXXX format.
        kind: Failure kind for grouping.
        title: Short title for display.
        message_template: Message with {placeholders} for context.
        remediation: Action the caller should take to resolve.
    """

    code: str
    kind: ErrorKind
    title: str
    message_template: str
    remediation: str


ERROR_REGISTRY: dict[str, ErrorCode] = {
    # Schema errors (E-1xxx)
    "E-1001": ErrorCode(
        code="E-1001",
        kind=ErrorKind.UNSUPPORTED_PROPERTY_KIND,
        title="Unsupported Property Kind",
        message_template="Property '{property}' has unsupported kind '{property_kind}'.",
        remediation="Use one of the supported property kinds or remove the property from the model.",
    ),
    "E-1002": ErrorCode(
        code="E-1002",
        kind=ErrorKind.UNKNOWN_OPERATION,
        title="Unknown Operation",
        message_template="Unknown datastore operation '{operation}'.",
        remediation="Use save, retrieve, delete, search, bulkInsert or bulkDelete.",
    ),
    # Connection errors (E-2xxx)
    "E-2001": ErrorCode(
        code="E-2001",
        kind=ErrorKind.CONNECTION,
        title="MCP Connection Failed",
        message_template="Failed to connect to MCP endpoint '{url}': {reason}",
        remediation="Check the endpoint URL, network reachability and credentials, then retry.",
    ),
    "E-2002": ErrorCode(
        code="E-2002",
        kind=ErrorKind.TOKEN_FETCH,
        title="Access Token Fetch Failed",
        message_template="Failed to obtain access token from '{token_url}': {reason}",
        remediation="Verify the OAuth2 client id, client secret, scopes and token URL.",
    ),
    # Remote tool errors (E-3xxx)
    "E-3001": ErrorCode(
        code="E-3001",
        kind=ErrorKind.TOOL_INVOCATION,
        title="Tool Invocation Failed",
        message_template="MCP tool '{tool_name}' failed: {error}",
        remediation="Inspect the remote error payload; the request reached the endpoint.",
    ),
    # Response errors (E-4xxx)
    "E-4001": ErrorCode(
        code="E-4001",
        kind=ErrorKind.MALFORMED_RESPONSE,
        title="Malformed Tool Response",
        message_template="MCP tool '{tool_name}' returned a malformed response: {reason}",
        remediation="The endpoint must return a JSON string in the first text content entry.",
    ),
}


def get_error(code: str) -> ErrorCode | None:
    """Get error definition by code.

    Args:
        code: Error code in E-XXXX format.

    Returns:
        ErrorCode if found, None otherwise.
    """
    return ERROR_REGISTRY.get(code)


def get_errors_by_kind(kind: ErrorKind) -> list[ErrorCode]:
    """Get all error codes of a given kind.

    Args:
        kind: The failure kind to filter by.

    Returns:
        List of ErrorCode objects of that kind.
    """
    return [e for e in ERROR_REGISTRY.values() if e.kind == kind]
