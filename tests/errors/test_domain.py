"""Tests for typed datastore exceptions."""

import pytest

from src.errors.domain import (
    DatastoreError,
    MalformedResponseError,
    MCPConnectionError,
    TokenFetchError,
    ToolInvocationError,
    UnknownOperationError,
    UnsupportedPropertyKindError,
)
from src.errors.registry import ErrorKind


class TestErrorKinds:

    @pytest.mark.parametrize(
        "error,kind,code",
        [
            (UnsupportedPropertyKindError("p", "Geo"), ErrorKind.UNSUPPORTED_PROPERTY_KIND, "E-1001"),
            (UnknownOperationError("update"), ErrorKind.UNKNOWN_OPERATION, "E-1002"),
            (MCPConnectionError("https://x", "refused"), ErrorKind.CONNECTION, "E-2001"),
            (TokenFetchError("https://auth", "HTTP 401"), ErrorKind.TOKEN_FETCH, "E-2002"),
            (ToolInvocationError("t", "boom"), ErrorKind.TOOL_INVOCATION, "E-3001"),
            (MalformedResponseError("t", "no content"), ErrorKind.MALFORMED_RESPONSE, "E-4001"),
        ],
    )
    def test_kind_and_code(self, error, kind, code):
        assert isinstance(error, DatastoreError)
        assert error.kind is kind
        assert error.code == code
        assert error.remediation


class TestConnectionErrors:

    def test_connection_error_is_builtin_connection_error(self):
        error = MCPConnectionError("https://x", "refused")
        assert isinstance(error, ConnectionError)
        assert error.url == "https://x"
        assert error.reason == "refused"
        assert "refused" in str(error)

    def test_token_fetch_is_connection_error(self):
        error = TokenFetchError("https://auth/token", "HTTP 401: denied")
        assert isinstance(error, MCPConnectionError)
        assert error.token_url == "https://auth/token"
        assert error.details["reason"] == "HTTP 401: denied"
        assert str(error).startswith("Failed to obtain access token")


class TestToolInvocationError:

    def test_message_carries_payload(self):
        error = ToolInvocationError("acct_widgets_retrieve", "not found", call_id="c-1")
        assert str(error) == "MCP call failed: not found"
        assert error.payload == "not found"
        assert error.call_id == "c-1"
        assert error.details["tool_name"] == "acct_widgets_retrieve"

    def test_structured_payload_preserved(self):
        payload = {"code": 404, "message": "missing"}
        error = ToolInvocationError("t", payload)
        assert error.payload is payload
