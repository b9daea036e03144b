"""Error handling framework for mcp-datastore.

This package provides:
- Error code registry with E-XXXX format codes
- Typed domain exceptions tagged with an ErrorKind
- Error formatting utilities

Error codes:
- E-1xxx: Schema compilation errors
- E-2xxx: Session / connection errors
- E-3xxx: Remote tool errors
- E-4xxx: Response parsing errors
"""

from src.errors.domain import (
    DatastoreError,
    MalformedResponseError,
    MCPConnectionError,
    TokenFetchError,
    ToolInvocationError,
    UnknownOperationError,
    UnsupportedPropertyKindError,
)
from src.errors.formatter import format_error, format_error_summary
from src.errors.registry import (
    ERROR_REGISTRY,
    ErrorCode,
    ErrorKind,
    get_error,
    get_errors_by_kind,
)

__all__ = [
    # Registry
    "ErrorCode",
    "ErrorKind",
    "ERROR_REGISTRY",
    "get_error",
    "get_errors_by_kind",
    # Exceptions
    "DatastoreError",
    "UnsupportedPropertyKindError",
    "UnknownOperationError",
    "MCPConnectionError",
    "TokenFetchError",
    "ToolInvocationError",
    "MalformedResponseError",
    # Formatter
    "format_error",
    "format_error_summary",
]
