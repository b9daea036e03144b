"""Pydantic models for mcp-datastore.

This module exports the model descriptors read from the data-model layer
and the structural schema / tool descriptor types produced by the schema
compiler.
"""

from src.models.descriptors import (
    ModelDescriptor,
    ModelInstance,
    ModelOperation,
    PropertyDescriptor,
    PropertyKind,
)
from src.models.schema import CallEnvelope, StructuralSchema, ToolDescriptor

__all__ = [
    "CallEnvelope",
    "ModelDescriptor",
    "ModelInstance",
    "ModelOperation",
    "PropertyDescriptor",
    "PropertyKind",
    "StructuralSchema",
    "ToolDescriptor",
]
