# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Declarative input schemas and a recursive-descent validator.

Capabilities describe their arguments as a tree of schema nodes::

    Object({
        "a": Number(description="First number"),
        "b": Number(description="Second number"),
    })

:func:`validate` walks the tree in declared field order (then array index
order) and raises :class:`~maintainer_toolkit.errors.ValidationError` for the
first offending value, so the failing field is deterministic.  The same tree
renders to JSON Schema through :func:`to_json_schema` for listing responses.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping, Sequence
from dataclasses import KW_ONLY, dataclass, field
import math
import re
from typing import Any, ClassVar, Literal

from pydantic import AnyUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError


__all__ = [
    "MISSING",
    "SchemaNode",
    "String",
    "Number",
    "Boolean",
    "Enum",
    "Array",
    "Object",
    "AnyValue",
    "validate",
    "to_json_schema",
]


class _Missing:
    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()
"""Sentinel for "no default declared"."""

Path = tuple[str | int, ...]

_EMAIL_PATTERN = re.compile(
    r"^(?!\.)(?!.*\.\.)[A-Za-z0-9_'+\-.]*[A-Za-z0-9_+\-]@([A-Za-z0-9][A-Za-z0-9\-]*\.)+[A-Za-z]{2,}$"
)
_URL_ADAPTER: TypeAdapter[AnyUrl] = TypeAdapter(AnyUrl)


@dataclass(frozen=True, slots=True)
class SchemaNode:
    """Base node.  A node with a ``default`` is implicitly optional."""

    _: KW_ONLY
    description: str | None = None
    optional: bool = False
    default: Any = MISSING

    label: ClassVar[str] = "value"

    @property
    def required(self) -> bool:
        return not self.optional and self.default is MISSING

    def check(self, value: Any, path: Path) -> Any:
        raise NotImplementedError

    def render(self) -> dict[str, Any]:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class String(SchemaNode):
    min_length: int | None = None
    max_length: int | None = None
    format: Literal["email", "url"] | None = None
    pattern: str | None = None

    label: ClassVar[str] = "string"

    def check(self, value: Any, path: Path) -> Any:
        if not isinstance(value, str):
            raise ValidationError(path, self.label, value)
        if self.min_length is not None and len(value) < self.min_length:
            raise ValidationError(path, f"string of at least {self.min_length} characters", value)
        if self.max_length is not None and len(value) > self.max_length:
            raise ValidationError(path, f"string of at most {self.max_length} characters", value)
        if self.format == "email" and not _EMAIL_PATTERN.match(value):
            raise ValidationError(path, "email address", value)
        if self.format == "url":
            try:
                _URL_ADAPTER.validate_python(value)
            except PydanticValidationError:
                raise ValidationError(path, "URL", value) from None
        if self.pattern is not None and re.search(self.pattern, value) is None:
            raise ValidationError(path, f"string matching {self.pattern}", value)
        return value

    def render(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": "string"}
        if self.min_length is not None:
            schema["minLength"] = self.min_length
        if self.max_length is not None:
            schema["maxLength"] = self.max_length
        if self.format is not None:
            schema["format"] = "uri" if self.format == "url" else self.format
        if self.pattern is not None:
            schema["pattern"] = self.pattern
        return schema


@dataclass(frozen=True, slots=True)
class Number(SchemaNode):
    minimum: float | None = None
    maximum: float | None = None
    integer: bool = False
    positive: bool = False

    label: ClassVar[str] = "number"

    def check(self, value: Any, path: Path) -> Any:
        # bool is an int subclass; JSON true/false is never a number.
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationError(path, "integer" if self.integer else self.label, value)
        if isinstance(value, float) and not math.isfinite(value):
            raise ValidationError(path, "finite number", value)
        if self.integer:
            if isinstance(value, float) and not value.is_integer():
                raise ValidationError(path, "integer", value)
            value = int(value)
        if self.positive and value <= 0:
            raise ValidationError(path, "positive number", value)
        if self.minimum is not None and value < self.minimum:
            raise ValidationError(path, f"number >= {self.minimum}", value)
        if self.maximum is not None and value > self.maximum:
            raise ValidationError(path, f"number <= {self.maximum}", value)
        return value

    def render(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": "integer" if self.integer else "number"}
        if self.positive:
            schema["exclusiveMinimum"] = 0
        if self.minimum is not None:
            schema["minimum"] = self.minimum
        if self.maximum is not None:
            schema["maximum"] = self.maximum
        return schema


@dataclass(frozen=True, slots=True)
class Boolean(SchemaNode):
    label: ClassVar[str] = "boolean"

    def check(self, value: Any, path: Path) -> Any:
        if not isinstance(value, bool):
            raise ValidationError(path, self.label, value)
        return value

    def render(self) -> dict[str, Any]:
        return {"type": "boolean"}


@dataclass(frozen=True, slots=True)
class Enum(SchemaNode):
    values: tuple[Any, ...] = ()

    label: ClassVar[str] = "enum"

    def check(self, value: Any, path: Path) -> Any:
        for candidate in self.values:
            if type(candidate) is type(value) and candidate == value:
                return value
        allowed = ", ".join(repr(candidate) for candidate in self.values)
        raise ValidationError(path, f"one of {allowed}", value)

    def render(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"enum": list(self.values)}
        if self.values and all(isinstance(candidate, str) for candidate in self.values):
            schema = {"type": "string", **schema}
        return schema


@dataclass(frozen=True, slots=True)
class Array(SchemaNode):
    items: SchemaNode = field(default_factory=lambda: AnyValue())
    min_items: int | None = None
    max_items: int | None = None

    label: ClassVar[str] = "array"

    def check(self, value: Any, path: Path) -> Any:
        if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
            raise ValidationError(path, self.label, value)
        if self.min_items is not None and len(value) < self.min_items:
            raise ValidationError(path, f"array with at least {self.min_items} items", value)
        if self.max_items is not None and len(value) > self.max_items:
            raise ValidationError(path, f"array with at most {self.max_items} items", value)
        return [_check_present(self.items, item, (*path, index)) for index, item in enumerate(value)]

    def render(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": "array", "items": to_json_schema(self.items)}
        if self.min_items is not None:
            schema["minItems"] = self.min_items
        if self.max_items is not None:
            schema["maxItems"] = self.max_items
        return schema


@dataclass(frozen=True, slots=True, eq=False)
class Object(SchemaNode):
    """Object node; ``fields`` keeps declaration order, which drives traversal."""

    fields: Mapping[str, SchemaNode] = field(default_factory=dict)

    label: ClassVar[str] = "object"

    def check(self, value: Any, path: Path) -> Any:
        if not isinstance(value, Mapping):
            raise ValidationError(path, self.label, value)

        result: dict[str, Any] = {}
        for name, node in self.fields.items():
            supplied = value.get(name)
            location = (*path, name)
            if supplied is None and (name not in value or not node.required):
                if node.default is not MISSING:
                    result[name] = copy.deepcopy(node.default)
                elif node.required:
                    raise ValidationError(location, f"{node.label} (required)", None)
                continue
            result[name] = node.check(supplied, location)
        return result

    def render(self) -> dict[str, Any]:
        properties = {name: to_json_schema(node) for name, node in self.fields.items()}
        schema: dict[str, Any] = {"type": "object", "properties": properties}
        required = [name for name, node in self.fields.items() if node.required]
        if required:
            schema["required"] = required
        return schema


@dataclass(frozen=True, slots=True)
class AnyValue(SchemaNode):
    """Accepts any value, including an absent one."""

    label: ClassVar[str] = "any value"

    @property
    def required(self) -> bool:
        return False

    def check(self, value: Any, path: Path) -> Any:
        return value

    def render(self) -> dict[str, Any]:
        return {}


def _check_present(node: SchemaNode, value: Any, path: Path) -> Any:
    if value is None and isinstance(node, AnyValue):
        return None
    return node.check(value, path)


def validate(schema: SchemaNode, value: Any) -> Any:
    """Validate ``value`` against ``schema`` and return the validated copy.

    Defaults are filled in for absent fields and unknown object keys are
    dropped.  Raises :class:`ValidationError` for the first violation.
    """

    return _check_present(schema, value, ())


def to_json_schema(schema: SchemaNode) -> dict[str, Any]:
    """Render ``schema`` as a JSON Schema mapping."""

    rendered = schema.render()
    if schema.description is not None:
        rendered["description"] = schema.description
    if schema.default is not MISSING:
        rendered["default"] = copy.deepcopy(schema.default)
    return rendered
