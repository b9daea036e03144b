"""Test helper utilities for datastore provider testing."""

from tests.helpers.mock_datastore_mcp import (
    MockDatastoreEndpoint,
    MockSession,
    ToolCall,
    make_call_result,
    make_text_content,
)

__all__ = [
    "MockDatastoreEndpoint",
    "MockSession",
    "ToolCall",
    "make_call_result",
    "make_text_content",
]
