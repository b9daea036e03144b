"""Tests for instance validation against compiled schemas."""

import pytest

from src.schema.compiler import compile_model_schema
from src.schema.query_grammar import search_query_schema
from src.schema.validator import to_validation_schema, validate_instance


class TestToValidationSchema:
    """Tests for nullable rewriting."""

    def test_nullable_becomes_type_union(self):
        assert to_validation_schema({"type": "string", "nullable": True}) == {
            "type": ["string", "null"],
        }

    def test_nullable_enum_accepts_none(self):
        result = to_validation_schema({"type": "string", "enum": ["a"], "nullable": True})
        assert result["enum"] == ["a", None]

    def test_nested_properties_rewritten(self):
        result = to_validation_schema(
            {"type": "object", "properties": {"x": {"type": "integer", "nullable": True}}}
        )
        assert result["properties"]["x"]["type"] == ["integer", "null"]

    def test_non_nullable_untouched(self):
        schema = {"type": "object", "required": ["a"], "properties": {"a": {"type": "string"}}}
        assert to_validation_schema(schema) == schema


class TestModelValidation:
    """Tests for validating projected instances."""

    def test_valid_instance(self, widgets_model):
        result = validate_instance(compile_model_schema(widgets_model), {"name": "A", "qty": 3})
        assert result.valid
        assert result.errors == []

    def test_optional_may_be_null_or_absent(self, widgets_model):
        schema = compile_model_schema(widgets_model)
        assert validate_instance(schema, {"name": "A", "qty": None}).valid
        assert validate_instance(schema, {"name": "A"}).valid

    def test_missing_required_fails(self, widgets_model):
        result = validate_instance(compile_model_schema(widgets_model), {"qty": 1})
        assert not result.valid
        assert result.errors[0].schema_rule == "required"
        assert result.errors[0].path == "(root)"

    def test_wrong_type_reports_path(self, widgets_model):
        result = validate_instance(
            compile_model_schema(widgets_model), {"name": "A", "qty": "many"}
        )
        assert not result.valid
        assert result.errors[0].path == "qty"
        assert result.errors[0].schema_rule == "type"

    def test_collects_all_errors(self, widgets_model):
        result = validate_instance(compile_model_schema(widgets_model), {"qty": "x"})
        assert len(result.errors) == 2

    def test_accepts_raw_dict_schema(self):
        schema = {"type": "object", "required": ["id"], "properties": {"id": {"type": "string"}}}
        assert validate_instance(schema, {"id": "w1"}).valid


class TestSearchQueryValidation:
    """Tests for validating search inputs against the query grammar."""

    @pytest.fixture
    def schema(self):
        return search_query_schema()

    def test_property_token(self, schema):
        query = {
            "take": 10,
            "sort": {"key": "name", "order": "asc"},
            "query": [
                {
                    "type": "property",
                    "key": "name",
                    "value": "A",
                    "valueType": "string",
                    "equalitySymbol": "=",
                },
            ],
        }
        assert validate_instance(schema, query).valid

    def test_nested_group_with_boolean_links(self, schema):
        query = {
            "query": [
                {"type": "datesAfter", "key": "created", "date": "2024-01-01T00:00:00Z",
                 "valueType": "date"},
                "AND",
                [
                    {"type": "property", "key": "qty", "value": 5,
                     "valueType": "number", "equalitySymbol": ">="},
                    "OR",
                    {"type": "property", "key": "qty", "value": 0,
                     "valueType": "number", "equalitySymbol": "="},
                ],
            ],
        }
        result = validate_instance(schema, query)
        assert result.valid, result.errors

    def test_missing_query_fails(self, schema):
        assert not validate_instance(schema, {"take": 5}).valid

    def test_unknown_link_fails(self, schema):
        assert not validate_instance(schema, {"query": ["XOR"]}).valid

    def test_bad_sort_order_fails(self, schema):
        result = validate_instance(
            schema, {"query": [], "sort": {"key": "name", "order": "desc"}}
        )
        assert not result.valid
        assert result.errors[0].path == "sort.order"
