"""Structural schema tree and tool descriptor models.

StructuralSchema is a typed, immutable JSON-Schema-like tree. It is the
single representation used for tool input/output contracts, for
publishing tools as ``mcp.types.Tool`` and for local instance
validation. Wire keyword names (``oneOf``, ``$ref``) are kept as aliases.
"""

from __future__ import annotations

from typing import Any

import mcp.types as types
from pydantic import BaseModel, ConfigDict, Field, model_validator


class StructuralSchema(BaseModel):
    """A node of a JSON-Schema-like tree.

    Unset keywords are dropped on serialization, so ``StructuralSchema()``
    is the "any value" schema ``{}``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: str | None = None
    description: str | None = None
    format: str | None = None
    properties: dict[str, StructuralSchema] | None = None
    required: tuple[str, ...] | None = None
    enum: tuple[str, ...] | None = None
    items: StructuralSchema | None = None
    one_of: tuple[StructuralSchema, ...] | None = Field(default=None, alias="oneOf")
    nullable: bool | None = None
    ref: str | None = Field(default=None, alias="$ref")

    @model_validator(mode="after")
    def required_fields_are_declared(self) -> StructuralSchema:
        """Every required name must be a key of ``properties``."""
        if self.required:
            declared = self.properties or {}
            missing = [name for name in self.required if name not in declared]
            if missing:
                raise ValueError(
                    f"Required fields not declared in properties: {missing}"
                )
        return self

    def to_json_schema(self) -> dict[str, Any]:
        """Serialize to a plain dict with wire keyword names."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class ToolDescriptor(BaseModel):
    """Named remote operation with its request/response contract.

    Attributes:
        name: Tool name registered on the remote endpoint.
        description: Human-readable summary.
        input_schema: Contract for the call arguments.
        output_schema: Contract for the parsed result.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    description: str
    input_schema: StructuralSchema = Field(alias="inputSchema")
    output_schema: StructuralSchema = Field(alias="outputSchema")

    def to_dict(self) -> dict[str, Any]:
        """Serialize with MCP field names (``inputSchema``/``outputSchema``)."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema.to_json_schema(),
            "outputSchema": self.output_schema.to_json_schema(),
        }

    def to_mcp_tool(self) -> types.Tool:
        """Publish as an MCP ``Tool`` for a tool registry."""
        return types.Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.input_schema.to_json_schema(),
            outputSchema=self.output_schema.to_json_schema(),
        )


class CallEnvelope(BaseModel):
    """Request payload for one tool invocation.

    ``id`` exists for correlation and tracing only.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)
