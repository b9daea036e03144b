"""Structural schema of the search query language.

The grammar is closed: a query token is a boolean link (``AND``/``OR``),
a property comparison, a ``datesAfter`` or ``datesBefore`` predicate, or a
nested array of tokens. Remote endpoints implement search against this
contract, so adding a token kind is a breaking change.
"""

from src.models.schema import StructuralSchema

BOOLEAN_LINKS: tuple[str, ...] = ("AND", "OR")
EQUALITY_SYMBOLS: tuple[str, ...] = ("=", "<", "<=", ">", ">=")
VALUE_TYPES: tuple[str, ...] = ("string", "number", "date", "object", "boolean")
SORT_ORDERS: tuple[str, ...] = ("asc", "dsc")

# Nested groups point back at the token definition inside the search input.
NESTED_TOKEN_REF = "#/properties/query/items"


def _token_type(name: str) -> StructuralSchema:
    return StructuralSchema(type="string", enum=(name,), description=name)


def _value_type() -> StructuralSchema:
    return StructuralSchema(type="string", enum=VALUE_TYPES)


def _flag_options(*flags: str) -> StructuralSchema:
    return StructuralSchema(
        type="object",
        properties={flag: StructuralSchema(type="boolean") for flag in flags},
    )


def boolean_token_schema() -> StructuralSchema:
    return StructuralSchema(
        type="string", enum=BOOLEAN_LINKS, description="Boolean query"
    )


def property_token_schema() -> StructuralSchema:
    """Comparison of one property against a value."""
    return StructuralSchema(
        type="object",
        properties={
            "type": _token_type("property"),
            "key": StructuralSchema(type="string"),
            "value": StructuralSchema(),
            "valueType": _value_type(),
            "equalitySymbol": StructuralSchema(type="string", enum=EQUALITY_SYMBOLS),
            "options": _flag_options("caseSensitive", "startsWith", "endsWith"),
        },
        required=("type", "key", "value", "valueType", "equalitySymbol"),
    )


def date_token_schema(direction: str) -> StructuralSchema:
    """Date-range predicate; ``direction`` is ``After`` or ``Before``."""
    return StructuralSchema(
        type="object",
        properties={
            "type": _token_type(f"dates{direction}"),
            "key": StructuralSchema(type="string"),
            "date": StructuralSchema(type="string", format="date-time"),
            "valueType": _value_type(),
            "options": _flag_options(f"equalToAnd{direction}"),
        },
        required=("type", "key", "date", "valueType"),
    )


def query_token_schema() -> StructuralSchema:
    """One element of a query token list."""
    return StructuralSchema(
        oneOf=(
            boolean_token_schema(),
            property_token_schema(),
            date_token_schema("After"),
            date_token_schema("Before"),
            StructuralSchema(
                type="array",
                items=StructuralSchema(ref=NESTED_TOKEN_REF),
                description="Nested QueryTokens",
            ),
        )
    )


def search_query_schema() -> StructuralSchema:
    """Input contract of every ``search`` tool."""
    return StructuralSchema(
        type="object",
        properties={
            "take": StructuralSchema(type="integer", description="Max records to return"),
            "sort": StructuralSchema(
                type="object",
                properties={
                    "key": StructuralSchema(type="string", description="Property key/column"),
                    "order": StructuralSchema(
                        type="string",
                        enum=SORT_ORDERS,
                        description="Sort order (asc or dsc)",
                    ),
                },
                required=("key", "order"),
                description="Sorting statement",
            ),
            "page": StructuralSchema(
                type="object", description="Pagination information (any shape)"
            ),
            "query": StructuralSchema(
                type="array",
                description="Query tokens",
                items=query_token_schema(),
            ),
        },
        required=("query",),
    )
