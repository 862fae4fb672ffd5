# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Validator behaviour: type checks, constraints, defaults and error paths."""

from __future__ import annotations

import pytest

from maintainer_toolkit.errors import ValidationError
from maintainer_toolkit.schema import (
    AnyValue,
    Array,
    Boolean,
    Enum,
    Number,
    Object,
    String,
    to_json_schema,
    validate,
)


def _error(schema, value) -> ValidationError:
    with pytest.raises(ValidationError) as excinfo:
        validate(schema, value)
    return excinfo.value


def test_number_rejects_strings_and_booleans() -> None:
    schema = Object(fields={"a": Number(), "b": Number()})

    assert validate(schema, {"a": 2, "b": 3.5}) == {"a": 2, "b": 3.5}
    assert _error(schema, {"a": "x", "b": 3}).field == "a"
    assert _error(schema, {"a": 1, "b": True}).field == "b"


def test_first_violation_follows_declaration_order() -> None:
    schema = Object(fields={"first": String(), "second": Number()})

    error = _error(schema, {"second": "nope", "first": 7})

    assert error.path == ("first",)
    assert error.actual == 7


def test_missing_required_field_reports_its_name() -> None:
    error = _error(Object(fields={"message": String()}), {})

    assert error.field == "message"
    assert error.actual is None
    assert "required" in error.expected


def test_null_optional_field_is_treated_as_absent() -> None:
    schema = Object(fields={"note": String(optional=True), "count": Number(default=3)})

    assert validate(schema, {"note": None, "count": None}) == {"count": 3}


def test_defaults_are_copied_not_shared() -> None:
    schema = Object(fields={"tags": Array(items=String(), default=[])})

    first = validate(schema, {})
    first["tags"].append("x")

    assert validate(schema, {}) == {"tags": []}


def test_unknown_keys_are_dropped() -> None:
    schema = Object(fields={"a": Number()})

    assert validate(schema, {"a": 1, "extra": "ignored"}) == {"a": 1}


def test_integer_accepts_integral_floats_only() -> None:
    schema = Object(fields={"n": Number(integer=True)})

    assert validate(schema, {"n": 4.0}) == {"n": 4}
    assert isinstance(validate(schema, {"n": 4.0})["n"], int)
    assert _error(schema, {"n": 3.14}).expected == "integer"


def test_number_bounds_and_positive() -> None:
    schema = Object(fields={"q": Number(minimum=1), "p": Number(positive=True)})

    assert _error(schema, {"q": 0, "p": 1}).field == "q"
    assert _error(schema, {"q": 1, "p": -5}).field == "p"
    assert _error(schema, {"q": 1, "p": 0}).expected == "positive number"


def test_string_constraints() -> None:
    schema = Object(
        fields={
            "short": String(min_length=5, max_length=20),
            "email": String(format="email"),
            "url": String(format="url"),
            "date": String(pattern=r"^\d{4}-\d{2}-\d{2}$"),
        }
    )
    good = {"short": "hello", "email": "dev@example.com", "url": "https://example.com/x", "date": "2025-01-31"}

    assert validate(schema, good) == good
    assert _error(schema, {**good, "short": "hey"}).field == "short"
    assert _error(schema, {**good, "email": "not-an-email"}).field == "email"
    assert _error(schema, {**good, "url": "not a url"}).field == "url"
    assert _error(schema, {**good, "date": "31/01/2025"}).field == "date"


def test_enum_matches_type_and_value() -> None:
    schema = Object(fields={"mode": Enum(values=("json", "yaml"))})

    assert validate(schema, {"mode": "yaml"}) == {"mode": "yaml"}
    error = _error(schema, {"mode": "xml"})
    assert error.expected == "one of 'json', 'yaml'"


def test_boolean_is_strict() -> None:
    schema = Object(fields={"flag": Boolean()})

    assert _error(schema, {"flag": 1}).field == "flag"
    assert _error(schema, {"flag": "yes"}).field == "flag"


def test_nested_paths_use_indices() -> None:
    item = Object(fields={"name": String(), "quantity": Number(minimum=1)})
    schema = Object(fields={"items": Array(items=item, min_items=1)})

    error = _error(schema, {"items": [{"name": "a", "quantity": 1}, {"name": "b", "quantity": 0}]})

    assert error.path == ("items", 1, "quantity")
    assert error.field == "items[1].quantity"


def test_array_length_and_type() -> None:
    schema = Object(fields={"items": Array(items=Number(), min_items=1, max_items=2)})

    assert _error(schema, {"items": []}).field == "items"
    assert _error(schema, {"items": [1, 2, 3]}).field == "items"
    assert _error(schema, {"items": "12"}).field == "items"


def test_any_value_accepts_absent_and_anything() -> None:
    schema = Object(fields={"data": AnyValue()})

    assert validate(schema, {}) == {}
    assert validate(schema, {"data": [1, {"a": None}]}) == {"data": [1, {"a": None}]}


def test_root_must_be_an_object() -> None:
    error = _error(Object(fields={}), [1, 2])

    assert error.path == ()
    assert str(error).startswith("<root>:")


def test_json_schema_rendering() -> None:
    schema = Object(
        description="Sum",
        fields={
            "a": Number(description="First number"),
            "mode": Enum(values=("json", "table"), default="json"),
            "note": String(optional=True),
        },
    )

    rendered = to_json_schema(schema)

    assert rendered["type"] == "object"
    assert rendered["description"] == "Sum"
    assert list(rendered["properties"]) == ["a", "mode", "note"]
    assert rendered["properties"]["a"] == {"type": "number", "description": "First number"}
    assert rendered["properties"]["mode"] == {"type": "string", "enum": ["json", "table"], "default": "json"}
    assert rendered["required"] == ["a"]
    assert "additionalProperties" not in rendered


def test_huge_integers_are_numbers() -> None:
    schema = Object(fields={"a": Number(), "n": Number(integer=True, maximum=10)})

    assert validate(schema, {"a": 10**400, "n": 3}) == {"a": 10**400, "n": 3}
    assert _error(schema, {"a": 1, "n": 10**400}).expected == "number <= 10"
    assert _error(schema, {"a": float("inf"), "n": 1}).expected == "finite number"
