"""Tool schema compiler: deterministic model-to-tool descriptor generation.

Compiles a ModelDescriptor into one ToolDescriptor per datastore operation.
Guarantees: identical model + identical operation + identical naming
strategy -> identical descriptor. Nothing is cached; descriptors always
reflect the model shape passed in.
"""

from __future__ import annotations

import re
from typing import Callable

from src.errors.domain import UnknownOperationError, UnsupportedPropertyKindError
from src.models.descriptors import (
    ModelDescriptor,
    ModelOperation,
    PropertyDescriptor,
    PropertyKind,
)
from src.models.schema import StructuralSchema, ToolDescriptor
from src.schema.query_grammar import search_query_schema

ToolNameStrategy = Callable[[ModelDescriptor, str], str]

# Total mapping from property kind to structural primitive.
PROPERTY_TYPE_MAP: dict[PropertyKind, str] = {
    PropertyKind.ARRAY: "array",
    PropertyKind.BIG_TEXT: "string",
    PropertyKind.BOOLEAN: "boolean",
    PropertyKind.DATE: "string",
    PropertyKind.DATETIME: "string",
    PropertyKind.EMAIL: "string",
    PropertyKind.INTEGER: "integer",
    PropertyKind.MODEL_REFERENCE: "string",
    PropertyKind.NUMBER: "number",
    PropertyKind.OBJECT: "object",
    PropertyKind.TEXT: "string",
    PropertyKind.UNIQUE_ID: "string",
}

_NON_ALNUM = re.compile(r"[^a-z0-9]+", re.IGNORECASE)

_NULL_SCHEMA = StructuralSchema(type="null")


def default_tool_name(model: ModelDescriptor, operation: str) -> str:
    """``namespace_pluralname_operation`` in lower case.

    Every run of non-alphanumeric characters collapses to one underscore.
    """
    raw = f"{model.namespace}_{model.plural_name}_{operation}"
    return _NON_ALNUM.sub("_", raw).lower()


def map_property(name: str, prop: PropertyDescriptor) -> StructuralSchema:
    """Map one property to its structural schema entry.

    Raises:
        UnsupportedPropertyKindError: ``prop.kind`` has no mapping.
    """
    try:
        schema_type = PROPERTY_TYPE_MAP[PropertyKind(prop.kind)]
    except ValueError as e:
        raise UnsupportedPropertyKindError(name, prop.kind) from e

    return StructuralSchema(
        type=schema_type,
        description=prop.description or None,
        enum=tuple(f"{choice}" for choice in prop.choices) or None,
        nullable=None if prop.required else True,
    )


def compile_model_schema(model: ModelDescriptor) -> StructuralSchema:
    """Compile the full object schema of a model.

    Every property is present; the ones not required are nullable.
    """
    properties = {
        name: map_property(name, prop) for name, prop in model.properties.items()
    }
    required = tuple(model.required_properties())
    return StructuralSchema(
        type="object",
        properties=properties,
        required=required or None,
    )


def id_schema() -> StructuralSchema:
    return StructuralSchema(
        type="object",
        properties={"id": StructuralSchema(type="string")},
        required=("id",),
    )


def id_array_schema() -> StructuralSchema:
    return StructuralSchema(
        type="object",
        properties={
            "ids": StructuralSchema(type="array", items=StructuralSchema(type="string")),
        },
        required=("ids",),
    )


def search_result_schema() -> StructuralSchema:
    return StructuralSchema(
        type="object",
        properties={
            "instances": StructuralSchema(type="array"),
            "page": StructuralSchema(type="object"),
        },
        required=("instances",),
    )


def _resolve_operation(operation: ModelOperation | str) -> ModelOperation:
    try:
        return ModelOperation(operation)
    except ValueError as e:
        raise UnknownOperationError(operation) from e


def compile_tool_descriptor(
    model: ModelDescriptor,
    operation: ModelOperation | str,
    name_strategy: ToolNameStrategy | None = None,
) -> ToolDescriptor:
    """Compile the tool descriptor for one (model, operation) pair.

    Args:
        model: Model to compile.
        operation: One of the six datastore operations.
        name_strategy: Optional pure ``(model, operation) -> name`` override.
            Defaults to ``default_tool_name``.

    Returns:
        Immutable ToolDescriptor.

    Raises:
        UnknownOperationError: ``operation`` is not a datastore operation.
        UnsupportedPropertyKindError: A property kind cannot be mapped.
    """
    op = _resolve_operation(operation)
    name_for = name_strategy or default_tool_name
    name = name_for(model, op.value)
    plural = model.plural_name

    if op is ModelOperation.SAVE:
        full = compile_model_schema(model)
        return ToolDescriptor(
            name=name,
            description=f"Save (create or update) a {plural} record",
            input_schema=full,
            output_schema=full,
        )
    if op is ModelOperation.RETRIEVE:
        return ToolDescriptor(
            name=name,
            description=f"Retrieve a {plural} record by ID",
            input_schema=id_schema(),
            output_schema=StructuralSchema(oneOf=(compile_model_schema(model), _NULL_SCHEMA)),
        )
    if op is ModelOperation.DELETE:
        return ToolDescriptor(
            name=name,
            description=f"Delete a {plural} record by ID",
            input_schema=id_schema(),
            output_schema=_NULL_SCHEMA,
        )
    if op is ModelOperation.SEARCH:
        return ToolDescriptor(
            name=name,
            description=f"Search for {plural} records",
            input_schema=search_query_schema(),
            output_schema=search_result_schema(),
        )
    if op is ModelOperation.BULK_INSERT:
        return ToolDescriptor(
            name=name,
            description=f"Bulk insert {plural} records",
            input_schema=StructuralSchema(
                type="object",
                properties={
                    "items": StructuralSchema(type="array", items=compile_model_schema(model)),
                },
                required=("items",),
            ),
            output_schema=_NULL_SCHEMA,
        )
    # BULK_DELETE
    return ToolDescriptor(
        name=name,
        description=f"Bulk delete {plural} records by IDs",
        input_schema=id_array_schema(),
        output_schema=_NULL_SCHEMA,
    )


def compile_tools_for_model(
    model: ModelDescriptor,
    name_strategy: ToolNameStrategy | None = None,
) -> list[ToolDescriptor]:
    """Compile descriptors for all six operations, in ModelOperation order."""
    return [compile_tool_descriptor(model, op, name_strategy) for op in ModelOperation]


def returns_null(descriptor: ToolDescriptor) -> bool:
    """Whether the tool's output contract is ``null``."""
    return descriptor.output_schema.type == "null"
