"""Instance validation against compiled structural schemas.

Validates projected model instances (or search queries) against a
StructuralSchema, collecting ALL errors with the failing path, what was
expected and what was received. Compiled schemas mark optional
properties with the OpenAPI ``nullable`` keyword; it is rewritten into a
``null`` type union before handing the schema to jsonschema.
"""

from typing import Any

import jsonschema
from jsonschema import Draft7Validator
from pydantic import BaseModel

from src.models.schema import StructuralSchema


class ValidationError(BaseModel):
    """A single validation error with full context.

    Attributes:
        path: Dot-separated path to the failing field (e.g., "items.0.name").
        message: Human-readable error description.
        expected: What was expected (type, enum, etc.).
        actual: What was received.
        schema_rule: Which schema rule was violated (e.g., "required", "type").
    """

    path: str
    message: str
    expected: str
    actual: Any
    schema_rule: str


class ValidationResult(BaseModel):
    """Validation outcome with all errors.

    Attributes:
        valid: Whether the instance passed validation.
        errors: List of validation errors found.
    """

    valid: bool
    errors: list[ValidationError] = []


def to_validation_schema(node: Any) -> Any:
    """Rewrite ``nullable: true`` into JSON-Schema null unions, recursively."""
    if isinstance(node, list):
        return [to_validation_schema(item) for item in node]
    if not isinstance(node, dict):
        return node

    result = {
        key: to_validation_schema(value)
        for key, value in node.items()
        if key != "nullable"
    }
    if node.get("nullable") is True:
        if "type" in result:
            result["type"] = [result["type"], "null"]
        if "enum" in result:
            result["enum"] = [*result["enum"], None]
    return result


def _extract_expected(error: jsonschema.ValidationError) -> str:
    validator = error.validator
    validator_value = error.validator_value

    if validator == "required":
        return f"required field (missing: {validator_value})"
    elif validator == "type":
        return f"type '{validator_value}'"
    elif validator == "enum":
        return f"one of: {', '.join(repr(v) for v in validator_value)}"
    elif validator == "oneOf":
        return "value matching exactly one of the allowed schemas"
    return str(validator_value)


def _format_path(error: jsonschema.ValidationError) -> str:
    path_parts = list(error.absolute_path)
    if not path_parts:
        return "(root)"
    return ".".join(str(part) for part in path_parts)


def _convert_jsonschema_error(error: jsonschema.ValidationError) -> ValidationError:
    actual = error.instance
    if isinstance(actual, dict):
        actual = f"object with keys: {list(actual.keys())}"
    elif isinstance(actual, list):
        actual = f"array with {len(actual)} items"

    return ValidationError(
        path=_format_path(error),
        message=error.message,
        expected=_extract_expected(error),
        actual=actual,
        schema_rule=str(error.validator),
    )


def validate_instance(
    schema: StructuralSchema | dict[str, Any],
    instance: Any,
) -> ValidationResult:
    """Validate an instance object against a compiled schema.

    Args:
        schema: Compiled StructuralSchema (or its JSON form).
        instance: Projected instance, e.g. the result of ``to_obj()``.

    Returns:
        ValidationResult with all errors collected.

    Examples:
        >>> from src.models.schema import StructuralSchema
        >>> schema = StructuralSchema(
        ...     type="object",
        ...     properties={"name": StructuralSchema(type="string")},
        ...     required=("name",),
        ... )
        >>> validate_instance(schema, {"name": "Foo"}).valid
        True
        >>> validate_instance(schema, {}).valid
        False
    """
    raw = schema.to_json_schema() if isinstance(schema, StructuralSchema) else schema
    validator = Draft7Validator(to_validation_schema(raw))

    errors: list[ValidationError] = []
    for error in validator.iter_errors(instance):
        errors.append(_convert_jsonschema_error(error))

    return ValidationResult(valid=len(errors) == 0, errors=errors)
