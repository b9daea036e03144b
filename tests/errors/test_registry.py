"""Unit tests for src/errors/registry.py.

Tests verify:
- Every error kind has exactly one registered code
- Codes are registered with correct kinds and titles
"""

import pytest

from src.errors.registry import ERROR_REGISTRY, ErrorKind, get_error, get_errors_by_kind


@pytest.mark.parametrize(
    "code,kind,title",
    [
        ("E-1001", ErrorKind.UNSUPPORTED_PROPERTY_KIND, "Unsupported Property Kind"),
        ("E-1002", ErrorKind.UNKNOWN_OPERATION, "Unknown Operation"),
        ("E-2001", ErrorKind.CONNECTION, "MCP Connection Failed"),
        ("E-2002", ErrorKind.TOKEN_FETCH, "Access Token Fetch Failed"),
        ("E-3001", ErrorKind.TOOL_INVOCATION, "Tool Invocation Failed"),
        ("E-4001", ErrorKind.MALFORMED_RESPONSE, "Malformed Tool Response"),
    ],
)
def test_error_codes_registered(code, kind, title):
    """All datastore error codes must be registered."""
    error = get_error(code)
    assert error is not None, f"{code} not found in registry"
    assert error.kind == kind
    assert error.title == title
    assert error.remediation


def test_every_kind_has_one_code():
    for kind in ErrorKind:
        assert len(get_errors_by_kind(kind)) == 1, kind


def test_registry_keys_match_codes():
    for key, error in ERROR_REGISTRY.items():
        assert key == error.code


def test_unknown_code_returns_none():
    assert get_error("E-9999") is None
