"""Schema compilation for model-backed MCP tools.

Exports the compiler entry points, the search query grammar and the
local instance validator.
"""

from src.schema.compiler import (
    PROPERTY_TYPE_MAP,
    ToolNameStrategy,
    compile_model_schema,
    compile_tool_descriptor,
    compile_tools_for_model,
    default_tool_name,
    map_property,
)
from src.schema.query_grammar import search_query_schema
from src.schema.validator import ValidationResult, validate_instance

__all__ = [
    "PROPERTY_TYPE_MAP",
    "ToolNameStrategy",
    "compile_model_schema",
    "compile_tool_descriptor",
    "compile_tools_for_model",
    "default_tool_name",
    "map_property",
    "search_query_schema",
    "ValidationResult",
    "validate_instance",
]
