"""Model descriptor types consumed from the data-model layer.

The datastore core never owns model definitions. It reads a
ModelDescriptor (namespace, plural name, property descriptors) and asks
instances to project themselves to plain objects before sending them.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class PropertyKind(str, Enum):
    """Property kinds understood by the schema compiler (exhaustive)."""

    ARRAY = "Array"
    TEXT = "Text"
    BIG_TEXT = "BigText"
    BOOLEAN = "Boolean"
    DATE = "Date"
    DATETIME = "Datetime"
    EMAIL = "Email"
    INTEGER = "Integer"
    MODEL_REFERENCE = "ModelReference"
    NUMBER = "Number"
    OBJECT = "Object"
    UNIQUE_ID = "UniqueId"


class ModelOperation(str, Enum):
    """Storage operations delegated to the remote endpoint."""

    SAVE = "save"
    RETRIEVE = "retrieve"
    DELETE = "delete"
    SEARCH = "search"
    BULK_INSERT = "bulkInsert"
    BULK_DELETE = "bulkDelete"


# ---------------------------------------------------------------------------
# Descriptors
# ---------------------------------------------------------------------------

class PropertyDescriptor(BaseModel):
    """One property of a model definition.

    ``kind`` falls back to a plain string when the data-model layer hands
    over something outside PropertyKind; compilation rejects it later.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: PropertyKind | str = Field(union_mode="left_to_right")
    required: bool = False
    description: str | None = None
    choices: tuple[Any, ...] = Field(default=(), alias="enumValues")


class ModelDescriptor(BaseModel):
    """Read-only view of a model definition."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    namespace: str
    plural_name: str = Field(alias="pluralName")
    properties: dict[str, PropertyDescriptor] = Field(default_factory=dict)

    @property
    def key(self) -> str:
        """``namespace/PluralName`` label used by the CLI."""
        return f"{self.namespace}/{self.plural_name}"

    def required_properties(self) -> list[str]:
        """Names of required properties in declaration order."""
        return [name for name, prop in self.properties.items() if prop.required]


@runtime_checkable
class ModelInstance(Protocol):
    """An instance the data-model layer can project to a plain object."""

    def get_model(self) -> ModelDescriptor:
        """Return the descriptor of the model this instance belongs to."""
        ...

    async def to_obj(self) -> dict[str, Any]:
        """Project the instance to a JSON-compatible dict."""
        ...
