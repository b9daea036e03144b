"""Tests for the tool schema compiler.

Tests verify:
- Every property kind maps to its structural primitive
- Required properties are listed; optional ones are nullable
- Descriptor shape for each of the six operations
- Naming (default and custom strategy) and determinism
- Unsupported kinds and unknown operations fail with typed errors
"""

import pytest

from src.errors.domain import UnknownOperationError, UnsupportedPropertyKindError
from src.errors.registry import ErrorKind
from src.models.descriptors import (
    ModelDescriptor,
    ModelOperation,
    PropertyDescriptor,
    PropertyKind,
)
from src.schema.compiler import (
    PROPERTY_TYPE_MAP,
    compile_model_schema,
    compile_tool_descriptor,
    compile_tools_for_model,
    default_tool_name,
    map_property,
    returns_null,
)
from src.schema.query_grammar import search_query_schema


class TestPropertyMapping:
    """Tests for per-property schema mapping."""

    def test_mapping_is_total(self):
        assert set(PROPERTY_TYPE_MAP) == set(PropertyKind)

    @pytest.mark.parametrize(
        "kind,expected",
        [
            ("Array", "array"),
            ("Text", "string"),
            ("BigText", "string"),
            ("Boolean", "boolean"),
            ("Date", "string"),
            ("Datetime", "string"),
            ("Email", "string"),
            ("Integer", "integer"),
            ("ModelReference", "string"),
            ("Number", "number"),
            ("Object", "object"),
            ("UniqueId", "string"),
        ],
    )
    def test_kind_maps_to_primitive(self, kind, expected):
        schema = map_property("p", PropertyDescriptor(kind=kind, required=True))
        assert schema.type == expected

    def test_optional_property_is_nullable(self):
        schema = map_property("p", PropertyDescriptor(kind="Text"))
        assert schema.nullable is True

    def test_required_property_not_nullable(self):
        schema = map_property("p", PropertyDescriptor(kind="Text", required=True))
        assert "nullable" not in schema.to_json_schema()

    def test_description_and_choices_carried(self):
        prop = PropertyDescriptor(
            kind="Integer", required=True, description="Size", enumValues=[1, 2]
        )
        assert map_property("size", prop).to_json_schema() == {
            "type": "integer",
            "description": "Size",
            "enum": ["1", "2"],
        }

    def test_unsupported_kind_raises(self):
        with pytest.raises(UnsupportedPropertyKindError) as exc_info:
            map_property("location", PropertyDescriptor(kind="Geo"))
        assert exc_info.value.kind is ErrorKind.UNSUPPORTED_PROPERTY_KIND
        assert exc_info.value.property_name == "location"
        assert "Geo" in str(exc_info.value)


class TestModelSchema:
    """Tests for full model schema compilation."""

    def test_widgets_schema(self, widgets_model):
        assert compile_model_schema(widgets_model).to_json_schema() == {
            "type": "object",
            "properties": {
                "name": {"type": "string"},
                "qty": {"type": "integer", "nullable": True},
            },
            "required": ["name"],
        }

    def test_no_required_omits_required(self, all_kinds_model):
        schema = compile_model_schema(all_kinds_model).to_json_schema()
        assert "required" not in schema
        assert len(schema["properties"]) == len(PropertyKind)

    def test_empty_model(self):
        model = ModelDescriptor(namespace="n", plural_name="Empty")
        assert compile_model_schema(model).to_json_schema() == {
            "type": "object",
            "properties": {},
        }

    def test_unsupported_kind_fails_whole_model(self):
        model = ModelDescriptor(
            namespace="n",
            plural_name="Places",
            properties={
                "name": PropertyDescriptor(kind="Text"),
                "where": PropertyDescriptor(kind="Geo"),
            },
        )
        with pytest.raises(UnsupportedPropertyKindError):
            compile_model_schema(model)


class TestToolDescriptors:
    """Tests for per-operation descriptor shapes."""

    def test_retrieve_descriptor(self, widgets_model):
        tool = compile_tool_descriptor(widgets_model, "retrieve")
        assert tool.name == "acct_widgets_retrieve"
        assert tool.description == "Retrieve a Widgets record by ID"
        assert tool.input_schema.to_json_schema() == {
            "type": "object",
            "properties": {"id": {"type": "string"}},
            "required": ["id"],
        }
        output = tool.output_schema.to_json_schema()
        assert output["oneOf"][0] == compile_model_schema(widgets_model).to_json_schema()
        assert output["oneOf"][1] == {"type": "null"}

    def test_save_uses_full_schema_both_ways(self, widgets_model):
        tool = compile_tool_descriptor(widgets_model, ModelOperation.SAVE)
        full = compile_model_schema(widgets_model)
        assert tool.name == "acct_widgets_save"
        assert tool.input_schema == full
        assert tool.output_schema == full

    def test_delete_descriptor(self, widgets_model):
        tool = compile_tool_descriptor(widgets_model, "delete")
        assert tool.input_schema.to_json_schema()["required"] == ["id"]
        assert returns_null(tool)

    def test_search_descriptor(self, widgets_model):
        tool = compile_tool_descriptor(widgets_model, "search")
        assert tool.input_schema == search_query_schema()
        output = tool.output_schema.to_json_schema()
        assert output["required"] == ["instances"]
        assert set(output["properties"]) == {"instances", "page"}
        assert not returns_null(tool)

    def test_bulk_insert_descriptor(self, widgets_model):
        tool = compile_tool_descriptor(widgets_model, "bulkInsert")
        assert tool.name == "acct_widgets_bulkinsert"
        schema = tool.input_schema.to_json_schema()
        assert schema["required"] == ["items"]
        assert schema["properties"]["items"]["items"] == (
            compile_model_schema(widgets_model).to_json_schema()
        )
        assert returns_null(tool)

    def test_bulk_delete_descriptor(self, widgets_model):
        tool = compile_tool_descriptor(widgets_model, "bulkDelete")
        assert tool.input_schema.to_json_schema() == {
            "type": "object",
            "properties": {"ids": {"type": "array", "items": {"type": "string"}}},
            "required": ["ids"],
        }
        assert returns_null(tool)

    def test_unknown_operation_raises(self, widgets_model):
        with pytest.raises(UnknownOperationError) as exc_info:
            compile_tool_descriptor(widgets_model, "update")
        assert exc_info.value.kind is ErrorKind.UNKNOWN_OPERATION

    def test_compile_tools_for_model_covers_all_operations(self, widgets_model):
        names = [tool.name for tool in compile_tools_for_model(widgets_model)]
        assert names == [
            "acct_widgets_save",
            "acct_widgets_retrieve",
            "acct_widgets_delete",
            "acct_widgets_search",
            "acct_widgets_bulkinsert",
            "acct_widgets_bulkdelete",
        ]


class TestNaming:
    """Tests for tool naming."""

    def test_non_alphanumeric_runs_collapse(self):
        model = ModelDescriptor(namespace="my-app", plural_name="Line Items")
        assert default_tool_name(model, "save") == "my_app_line_items_save"

    def test_custom_strategy(self, widgets_model):
        def strategy(model, operation):
            return f"{model.plural_name}.{operation}"

        tool = compile_tool_descriptor(widgets_model, "retrieve", strategy)
        assert tool.name == "Widgets.retrieve"


class TestDeterminism:

    def test_same_input_same_descriptor(self, all_kinds_model):
        first = [t.to_dict() for t in compile_tools_for_model(all_kinds_model)]
        second = [t.to_dict() for t in compile_tools_for_model(all_kinds_model)]
        assert first == second

    def test_reflects_model_changes(self, widgets_model):
        """Nothing is cached: a changed model yields a changed descriptor."""
        before = compile_tool_descriptor(widgets_model, "save")
        changed = widgets_model.model_copy(
            update={
                "properties": {
                    **widgets_model.properties,
                    "color": PropertyDescriptor(kind="Text"),
                }
            }
        )
        after = compile_tool_descriptor(changed, "save")
        assert "color" not in before.input_schema.properties
        assert "color" in after.input_schema.properties
